# src/financial_history/balancer/__init__.py
"""
Balancer

Classifies accounts, picks the plug account, closes the accounting
equation and audits retained earnings.
"""

from .classification import AccountClassifier, Classification, ClassificationTier
from .selection import BalancingSelection, SelectionTier, select_balancing_account
from .accounting_balancer import AccountingBalancer, BalanceTotals, plug_account_type
from .retained_earnings import audit_retained_earnings

__all__ = [
    'AccountClassifier',
    'Classification',
    'ClassificationTier',
    'BalancingSelection',
    'SelectionTier',
    'select_balancing_account',
    'AccountingBalancer',
    'BalanceTotals',
    'plug_account_type',
    'audit_retained_earnings'
]
