# src/financial_history/models/schema.py
"""
Sparse input data model.

These records are produced by the extraction layer and consumed by the
densifier and the balancer. They are never mutated by the engine.
"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import List, Optional

from ..core.exceptions import DateError
from ..core.fiscal_calendar import parse_period
from ..core.seasonality import SeasonalityProfile, SeasonalityProfileId


class AccountType(Enum):
    """Account classification."""
    # Income Statement
    REVENUE = "Revenue"
    COST_OF_SALES = "CostOfSales"
    OPERATING_EXPENSE = "OperatingExpense"
    OTHER_INCOME = "OtherIncome"
    INTEREST = "Interest"
    DEPRECIATION = "Depreciation"
    SHAREHOLDER_SALARIES = "ShareholderSalaries"
    INCOME_TAX = "IncomeTax"

    # Balance Sheet
    ASSET = "Asset"
    LIABILITY = "Liability"
    EQUITY = "Equity"

    @property
    def is_balance_sheet(self) -> bool:
        return self in (AccountType.ASSET, AccountType.LIABILITY, AccountType.EQUITY)

    @property
    def is_income_statement(self) -> bool:
        return not self.is_balance_sheet

    @property
    def net_income_sign(self) -> int:
        """
        Contribution sign to net income.

        +1 for credit-balance income (Revenue, OtherIncome), -1 for every
        expense type, 0 for balance sheet types.
        """
        if self in (AccountType.REVENUE, AccountType.OTHER_INCOME):
            return 1
        if self.is_balance_sheet:
            return 0
        return -1


class AccountBehavior(Enum):
    """How values accumulate over time."""
    STOCK = "Stock"  # point-in-time balance
    FLOW = "Flow"    # period total


class AnchorType(Enum):
    """Meaning of a flow anchor's value."""
    CUMULATIVE = "Cumulative"  # running total since fiscal year start
    PERIOD = "Period"          # value for the anchor's month only


class InterpolationMethod(Enum):
    """How gaps between anchors are filled."""
    LINEAR = "Linear"
    STEP = "Step"
    CURVE = "Curve"
    SEASONAL = "Seasonal"


@dataclass(frozen=True)
class SourceMetadata:
    """Where a literal number came from."""
    document: str
    text: Optional[str] = None


@dataclass(frozen=True)
class AnchorPoint:
    """
    A known data point.

    For stock accounts this is a balance snapshot and anchor_type is
    ignored. For flow accounts anchor_type says whether the value is a
    year-to-date total or a single-month value.
    """
    date: date
    value: float
    anchor_type: AnchorType = AnchorType.CUMULATIVE
    source: Optional[SourceMetadata] = None


@dataclass(frozen=True)
class PeriodConstraint:
    """Known total for a flow account over an inclusive month range."""
    start_date: date
    end_date: date
    value: float
    source: Optional[SourceMetadata] = None

    def __post_init__(self):
        if self.end_date < self.start_date:
            raise DateError(
                f"Constraint end {self.end_date} is before start {self.start_date}"
            )

    @classmethod
    def from_period(
        cls,
        period: str,
        value: float,
        source: Optional[SourceMetadata] = None
    ) -> 'PeriodConstraint':
        """
        Build a constraint from "YYYY-MM" or "YYYY-MM:YYYY-MM".

        Examples:
            >>> PeriodConstraint.from_period("2023-01:2023-03", 25_000.0)
        """
        start, end = parse_period(period)
        return cls(start_date=start, end_date=end, value=value, source=source)

    @property
    def span_days(self) -> int:
        return (self.end_date - self.start_date).days


@dataclass
class SparseAccount:
    """One account with its sparse anchors or period constraints."""
    name: str
    account_type: AccountType
    behavior: AccountBehavior
    interpolation: InterpolationMethod = InterpolationMethod.LINEAR
    seasonality: SeasonalityProfile = SeasonalityProfileId.FLAT
    noise_factor: float = 0.0
    anchors: List[AnchorPoint] = field(default_factory=list)
    constraints: List[PeriodConstraint] = field(default_factory=list)
    is_balancing_account: bool = False
    category: Optional[str] = None

    @property
    def is_stock(self) -> bool:
        return self.behavior is AccountBehavior.STOCK

    @property
    def is_flow(self) -> bool:
        return self.behavior is AccountBehavior.FLOW

    @property
    def has_data(self) -> bool:
        return bool(self.anchors) or bool(self.constraints)


@dataclass
class SparseFinancialHistory:
    """The complete sparse input for one organization."""
    organization_name: str
    fiscal_year_end_month: int
    accounts: List[SparseAccount] = field(default_factory=list)

    @property
    def balance_sheet_accounts(self) -> List[SparseAccount]:
        return [a for a in self.accounts if a.account_type.is_balance_sheet]

    @property
    def income_statement_accounts(self) -> List[SparseAccount]:
        return [a for a in self.accounts if a.account_type.is_income_statement]

    def get_account(self, name: str) -> Optional[SparseAccount]:
        for account in self.accounts:
            if account.name == name:
                return account
        return None
