# src/financial_history/balancer/selection.py
"""
Balancing Account Selection

The plug account is picked by walking an ordered list of tiers; the first
tier that yields an account wins:

1. Explicit       account flagged is_balancing_account
2. NamedEquity    Equity account named like "retained" or "adjustment"
3. AnyEquity      first Equity account in input order
4. EquitySeries   first produced series whose name contains "equity"
5. Synthesized    a new Equity series, "Balancing Equity Adjustment" by default
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Mapping, Optional, Tuple

from ..models.dense_series import DenseSeries
from ..models.schema import AccountType, SparseFinancialHistory

DEFAULT_BALANCING_ACCOUNT = "Balancing Equity Adjustment"


class SelectionTier(Enum):
    EXPLICIT = "Explicit"
    NAMED_EQUITY = "NamedEquity"
    ANY_EQUITY = "AnyEquity"
    EQUITY_SERIES = "EquitySeries"
    SYNTHESIZED = "Synthesized"


@dataclass(frozen=True)
class BalancingSelection:
    name: str
    tier: SelectionTier

    @property
    def is_synthesized(self) -> bool:
        return self.tier is SelectionTier.SYNTHESIZED


TierRule = Callable[[SparseFinancialHistory, Mapping[str, DenseSeries]], Optional[str]]


def _explicit(history, dense):
    for account in history.accounts:
        if account.is_balancing_account:
            return account.name
    return None


def _named_equity(history, dense):
    for account in history.accounts:
        lowered = account.name.lower()
        if account.account_type is AccountType.EQUITY and (
            "retained" in lowered or "adjustment" in lowered
        ):
            return account.name
    return None


def _any_equity(history, dense):
    for account in history.accounts:
        if account.account_type is AccountType.EQUITY:
            return account.name
    return None


def _equity_series(history, dense):
    for name in dense:
        if "equity" in name.lower():
            return name
    return None


SELECTION_TIERS: Tuple[Tuple[SelectionTier, TierRule], ...] = (
    (SelectionTier.EXPLICIT, _explicit),
    (SelectionTier.NAMED_EQUITY, _named_equity),
    (SelectionTier.ANY_EQUITY, _any_equity),
    (SelectionTier.EQUITY_SERIES, _equity_series),
)


def select_balancing_account(
    history: SparseFinancialHistory,
    dense: Mapping[str, DenseSeries],
    fallback_name: str = DEFAULT_BALANCING_ACCOUNT
) -> BalancingSelection:
    """
    Pick the account that absorbs balance sheet discrepancies.

    Args:
        history: Sparse input, consulted for flags and declared types
        dense: Series produced so far, consulted by name only
        fallback_name: Name of the synthesized account when no tier matches

    Returns:
        BalancingSelection naming the account and the tier that chose it
    """
    for tier, rule in SELECTION_TIERS:
        name = rule(history, dense)
        if name is not None:
            return BalancingSelection(name, tier)
    return BalancingSelection(fallback_name, SelectionTier.SYNTHESIZED)
