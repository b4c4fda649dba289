# src/financial_history/balancer/accounting_balancer.py
"""
Accounting Balancer

Forces Assets = Liabilities + Equity at every month-end by overwriting one
balancing account with a computed plug, and verifies the identity
afterwards.

    plug = L + E - A   when the plug account is an Asset
    plug = A - L - E   otherwise (Liability or Equity side)
"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Dict, Iterable, List, Mapping, Optional

from ..core.exceptions import AccountingEquationViolation
from ..models.dense_series import DensePoint, DenseSeries, PointOrigin
from ..models.schema import AccountType
from .classification import AccountClassifier

logger = logging.getLogger(__name__)

BALANCE_TOLERANCE = 0.01


def plug_account_type(classifier: AccountClassifier, name: str) -> AccountType:
    """
    Side of the equation the plug sits on.

    Declared or inferred balance sheet types are kept; anything else, an
    unknown synthesized name included, is summed as Equity.
    """
    account_type = classifier.account_type(name)
    if account_type is not None and account_type.is_balance_sheet:
        return account_type
    return AccountType.EQUITY


@dataclass(frozen=True)
class BalanceTotals:
    """Balance sheet sums for one date."""
    date: date
    assets: float = 0.0
    liabilities: float = 0.0
    equity: float = 0.0

    @property
    def difference(self) -> float:
        """Assets - (Liabilities + Equity)"""
        return self.assets - (self.liabilities + self.equity)

    def is_balanced(self, tolerance: float = BALANCE_TOLERANCE) -> bool:
        return abs(self.difference) <= tolerance

    def to_violation(self) -> AccountingEquationViolation:
        return AccountingEquationViolation(
            self.date, self.assets, self.liabilities, self.equity, self.difference
        )


class AccountingBalancer:
    """
    Plug computation and balance sheet verification.

    Usage:
        balancer = AccountingBalancer(AccountClassifier(history)).for_plug("Retained Earnings")
        balanced = balancer.enforce(dense, "Retained Earnings")
        balancer.verify(balanced)
    """

    def __init__(self, classifier: AccountClassifier, tolerance: float = BALANCE_TOLERANCE):
        self.classifier = classifier
        self.tolerance = tolerance

    def for_plug(self, balancing_account: str) -> "AccountingBalancer":
        """Balancer whose classifier also counts `balancing_account` on its plug side."""
        classifier = self.classifier.with_declared(
            balancing_account, plug_account_type(self.classifier, balancing_account)
        )
        return AccountingBalancer(classifier, self.tolerance)

    @staticmethod
    def union_dates(dense: Mapping[str, DenseSeries]) -> List[date]:
        dates = set()
        for series in dense.values():
            dates.update(series.dates())
        return sorted(dates)

    def totals_on(
        self,
        dense: Mapping[str, DenseSeries],
        d: date,
        exclude: Optional[Iterable[str]] = None
    ) -> BalanceTotals:
        """Sum every classified balance sheet series on one date."""
        skip = set(exclude or ())
        assets = liabilities = equity = 0.0

        for name, series in dense.items():
            if name in skip:
                continue
            value = series.value_at(d)
            if value is None:
                continue

            account_type = self.classifier.account_type(name)
            if account_type is AccountType.ASSET:
                assets += value
            elif account_type is AccountType.LIABILITY:
                liabilities += value
            elif account_type is AccountType.EQUITY:
                equity += value

        return BalanceTotals(d, assets, liabilities, equity)

    def compute_totals(
        self,
        dense: Mapping[str, DenseSeries],
        exclude: Optional[Iterable[str]] = None
    ) -> List[BalanceTotals]:
        exclude = list(exclude or ())
        return [self.totals_on(dense, d, exclude) for d in self.union_dates(dense)]

    # ================================================================
    # PLUG
    # ================================================================

    def enforce(
        self,
        dense: Mapping[str, DenseSeries],
        balancing_account: str
    ) -> Dict[str, DenseSeries]:
        """
        Replace `balancing_account` with the plug that closes the equation.

        Args:
            dense: Densified series, not modified
            balancing_account: Name of the plug account; created if absent

        Returns:
            New dict of series with the plug series in place. The classifier is
            not changed; verify through `for_plug(balancing_account)`.
        """
        plug_type = plug_account_type(self.classifier, balancing_account)

        points: Dict[date, DensePoint] = {}
        for totals in self.compute_totals(dense, exclude=[balancing_account]):
            if plug_type is AccountType.ASSET:
                plug = totals.liabilities + totals.equity - totals.assets
            else:
                plug = totals.assets - totals.liabilities - totals.equity

            points[totals.date] = DensePoint(
                float(plug),
                PointOrigin.BALANCING_PLUG,
                note=(
                    f"assets={totals.assets:.2f} liabilities={totals.liabilities:.2f} "
                    f"equity={totals.equity:.2f}"
                )
            )

        balanced = dict(dense)
        balanced[balancing_account] = DenseSeries(points)
        logger.debug(
            f"Plug {balancing_account} ({plug_type.value}) computed for {len(points)} dates"
        )
        return balanced

    # ================================================================
    # VERIFICATION
    # ================================================================

    def check(
        self,
        dense: Mapping[str, DenseSeries],
        tolerance: Optional[float] = None,
        exclude: Optional[Iterable[str]] = None
    ) -> List[BalanceTotals]:
        """Every date where |A - (L + E)| exceeds tolerance, without raising."""
        tolerance = self.tolerance if tolerance is None else tolerance
        return [
            totals for totals in self.compute_totals(dense, exclude)
            if not totals.is_balanced(tolerance)
        ]

    def verify(
        self,
        dense: Mapping[str, DenseSeries],
        tolerance: Optional[float] = None,
        exclude: Optional[Iterable[str]] = None
    ) -> None:
        """
        Raise on the first date where the accounting equation does not hold.

        Raises:
            AccountingEquationViolation
        """
        violations = self.check(dense, tolerance, exclude)
        if violations:
            raise violations[0].to_violation()
