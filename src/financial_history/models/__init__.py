# src/financial_history/models/__init__.py
"""
Data Models

Sparse input records and the dense, lineage-carrying output.
"""

from .schema import (
    AccountType,
    AccountBehavior,
    AnchorType,
    InterpolationMethod,
    SourceMetadata,
    AnchorPoint,
    PeriodConstraint,
    SparseAccount,
    SparseFinancialHistory
)
from .dense_series import PointOrigin, DensePoint, DenseSeries, DenseFinancialHistory

__all__ = [
    'AccountType',
    'AccountBehavior',
    'AnchorType',
    'InterpolationMethod',
    'SourceMetadata',
    'AnchorPoint',
    'PeriodConstraint',
    'SparseAccount',
    'SparseFinancialHistory',
    'PointOrigin',
    'DensePoint',
    'DenseSeries',
    'DenseFinancialHistory'
]
