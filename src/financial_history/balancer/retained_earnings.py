# src/financial_history/balancer/retained_earnings.py
"""
Retained Earnings Audit

Month over month, the change in retained earnings should equal net income.
Mismatches are reported as warnings; they never fail a run because
dividends and other equity movements legitimately break the link.
"""

import logging
from datetime import date
from typing import List, Mapping, Optional

from ..models.dense_series import DenseSeries
from .classification import AccountClassifier

logger = logging.getLogger(__name__)

RETAINED_EARNINGS_TOLERANCE = 1.0


def find_retained_earnings(dense: Mapping[str, DenseSeries]) -> Optional[str]:
    for name in dense:
        if "retained earnings" in name.lower():
            return name
    return None


def net_income_on(
    dense: Mapping[str, DenseSeries],
    classifier: AccountClassifier,
    d: date
) -> float:
    """Income minus every expense type, over income statement series on one date."""
    total = 0.0
    for name, series in dense.items():
        account_type = classifier.account_type(name)
        if account_type is None or not account_type.is_income_statement:
            continue
        total += account_type.net_income_sign * series.value_at(d, 0.0)
    return total


def audit_retained_earnings(
    dense: Mapping[str, DenseSeries],
    classifier: AccountClassifier,
    tolerance: float = RETAINED_EARNINGS_TOLERANCE
) -> List[str]:
    """
    Compare retained earnings roll-forward against net income.

    Args:
        dense: Balanced series
        classifier: Resolves series names to account types
        tolerance: Allowed absolute gap per month

    Returns:
        Warning messages, empty when consistent or no retained earnings
        account exists
    """
    name = find_retained_earnings(dense)
    if name is None:
        return []

    series = dense[name]
    dates = series.dates()
    warnings = []

    for prev, curr in zip(dates, dates[1:]):
        change = series[curr].value - series[prev].value
        net_income = net_income_on(dense, classifier, curr)
        if abs(change - net_income) > tolerance:
            message = (
                f"{name} changed by {change:,.2f} on {curr.isoformat()} "
                f"but net income was {net_income:,.2f} "
                f"(difference {change - net_income:,.2f})"
            )
            logger.warning(message)
            warnings.append(message)

    return warnings
