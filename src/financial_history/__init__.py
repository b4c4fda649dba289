"""
Financial History Builder

Turns sparse, document-extracted financial data points into a complete,
balanced, month-by-month financial history.

Main Components:
- Fiscal calendar and seasonality profiles
- Densifier (stock curves, flow distribution, period-constraint resolution)
- Accounting balancer (plug, verification, retained earnings audit)
- Processor orchestrating a full run
"""

__version__ = "1.0.0"

from financial_history.config import EngineConfig
from financial_history.processor import (
    FinancialHistoryProcessor,
    process_financial_history,
    process_with_verification
)

from financial_history.core.exceptions import (
    FinancialHistoryError,
    ConfigurationError,
    AccountingEquationViolation
)
from financial_history.core.seasonality import SeasonalityProfileId, CustomProfile

from financial_history.models.schema import (
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
from financial_history.models.dense_series import (
    PointOrigin,
    DensePoint,
    DenseSeries,
    DenseFinancialHistory
)

__all__ = [
    # Entry points
    'FinancialHistoryProcessor',
    'process_financial_history',
    'process_with_verification',
    'EngineConfig',

    # Errors
    'FinancialHistoryError',
    'ConfigurationError',
    'AccountingEquationViolation',

    # Input model
    'AccountType',
    'AccountBehavior',
    'AnchorType',
    'InterpolationMethod',
    'SeasonalityProfileId',
    'CustomProfile',
    'SourceMetadata',
    'AnchorPoint',
    'PeriodConstraint',
    'SparseAccount',
    'SparseFinancialHistory',

    # Output model
    'PointOrigin',
    'DensePoint',
    'DenseSeries',
    'DenseFinancialHistory',
]
