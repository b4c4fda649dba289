# src/financial_history/balancer/classification.py
"""
Account Classification

Maps every dense series name to an AccountType. Names come from two places:
accounts in the sparse history (their declared type is authoritative) and
series the engine created itself, such as a synthesized plug account.
"""

import copy
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional

from ..models.schema import AccountType, SparseFinancialHistory

EQUITY_NAME_HINTS = ("equity", "capital", "retained", "adjustment")


class ClassificationTier(Enum):
    """How confidently an account's type was determined."""
    EXACT = "Exact"          # declared in the sparse history
    HEURISTIC = "Heuristic"  # inferred from the series name
    UNKNOWN = "Unknown"      # excluded from balance sheet sums


@dataclass(frozen=True)
class Classification:
    account_type: Optional[AccountType]
    tier: ClassificationTier

    @property
    def is_known(self) -> bool:
        return self.tier is not ClassificationTier.UNKNOWN


class AccountClassifier:
    """
    Two-tier lookup of account types.

    Usage:
        classifier = AccountClassifier(history)
        classifier.classify("Cash").account_type   # AccountType.ASSET
    """

    def __init__(self, history: SparseFinancialHistory):
        self._declared: Dict[str, AccountType] = {
            account.name: account.account_type for account in history.accounts
        }

    def classify(self, name: str) -> Classification:
        declared = self._declared.get(name)
        if declared is not None:
            return Classification(declared, ClassificationTier.EXACT)

        lowered = name.lower()
        if any(hint in lowered for hint in EQUITY_NAME_HINTS):
            return Classification(AccountType.EQUITY, ClassificationTier.HEURISTIC)

        return Classification(None, ClassificationTier.UNKNOWN)

    def account_type(self, name: str) -> Optional[AccountType]:
        return self.classify(name).account_type

    def with_declared(self, name: str, account_type: AccountType) -> "AccountClassifier":
        """Copy of this classifier that also declares an engine-created series."""
        extended = copy.copy(self)
        extended._declared = {**self._declared, name: account_type}
        return extended
