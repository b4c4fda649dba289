# src/financial_history/core/__init__.py
"""
Core Building Blocks

Error taxonomy, fiscal calendar arithmetic and seasonality profiles shared
by the densifier and the balancer.
"""

from .exceptions import (
    FinancialHistoryError,
    ConfigurationError,
    NoAnchorsError,
    InvalidNoiseFactorError,
    InvalidFiscalYearEndMonthError,
    DateError,
    InvalidSeasonalityWeightsError,
    InvalidAnchorError,
    AccountingEquationViolation
)
from .fiscal_calendar import (
    validate_fiscal_year_end_month,
    last_day_of_month,
    to_month_end,
    fiscal_year_start,
    fiscal_year_end_date,
    fiscal_year_end_for_date,
    fiscal_month_index,
    month_ends_in_period,
    months_between,
    parse_period
)
from .seasonality import (
    SeasonalityProfileId,
    CustomProfile,
    SeasonalityProfile,
    get_profile_weights,
    rotate_weights_for_fiscal_year,
    validate_custom_weights
)

__all__ = [
    'FinancialHistoryError',
    'ConfigurationError',
    'NoAnchorsError',
    'InvalidNoiseFactorError',
    'InvalidFiscalYearEndMonthError',
    'DateError',
    'InvalidSeasonalityWeightsError',
    'InvalidAnchorError',
    'AccountingEquationViolation',
    'validate_fiscal_year_end_month',
    'last_day_of_month',
    'to_month_end',
    'fiscal_year_start',
    'fiscal_year_end_date',
    'fiscal_year_end_for_date',
    'fiscal_month_index',
    'month_ends_in_period',
    'months_between',
    'parse_period',
    'SeasonalityProfileId',
    'CustomProfile',
    'SeasonalityProfile',
    'get_profile_weights',
    'rotate_weights_for_fiscal_year',
    'validate_custom_weights'
]
