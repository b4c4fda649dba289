# src/financial_history/core/exceptions.py
"""
Custom exceptions for the financial history builder.

All library errors inherit from FinancialHistoryError so callers can catch
one type. Configuration-shape errors are also ValueErrors.
"""

from datetime import date
from typing import Optional


class FinancialHistoryError(Exception):
    """Base exception for all financial history errors."""

    def __init__(self, message: str, code: str = None):
        super().__init__(message)
        self.message = message
        self.code = code


class ConfigurationError(FinancialHistoryError, ValueError):
    """Sparse input or engine configuration is malformed."""

    def __init__(self, message: str, code: str = "CONFIG_ERROR"):
        super().__init__(message, code)


class NoAnchorsError(ConfigurationError):
    """Raised when an account has neither anchors nor constraints."""

    def __init__(self, account_name: str, code: str = "NO_ANCHORS"):
        super().__init__(f"No anchors provided for account: {account_name}", code)
        self.account_name = account_name


class InvalidNoiseFactorError(ConfigurationError):
    """Raised when a noise factor falls outside [0, 1]."""

    def __init__(
        self,
        noise_factor: float,
        account_name: Optional[str] = None,
        code: str = "INVALID_NOISE_FACTOR"
    ):
        message = f"Invalid noise factor {noise_factor}: must be between 0.0 and 1.0"
        if account_name:
            message += f" (account: {account_name})"
        super().__init__(message, code)
        self.noise_factor = noise_factor
        self.account_name = account_name


class InvalidFiscalYearEndMonthError(ConfigurationError):
    """Raised when the fiscal year end month is not in 1..12."""

    def __init__(self, month: int, code: str = "INVALID_FY_END_MONTH"):
        super().__init__(
            f"Invalid fiscal year end month {month}: must be between 1 and 12", code
        )
        self.month = month


class DateError(ConfigurationError):
    """Malformed period strings and impossible date ranges."""

    def __init__(self, message: str, code: str = "DATE_ERROR"):
        super().__init__(message, code)


class InvalidSeasonalityWeightsError(ConfigurationError):
    """Raised when a custom seasonality profile fails validation."""

    def __init__(self, message: str, code: str = "INVALID_SEASONALITY_WEIGHTS"):
        super().__init__(f"Custom seasonality profile has invalid weights: {message}", code)


class InvalidAnchorError(ConfigurationError):
    """Raised when anchors contradict each other."""

    def __init__(self, message: str, code: str = "INVALID_ANCHOR"):
        super().__init__(f"Invalid anchor point: {message}", code)


class AccountingEquationViolation(FinancialHistoryError):
    """Raised when Assets != Liabilities + Equity beyond tolerance."""

    def __init__(
        self,
        date: date,
        assets: float,
        liabilities: float,
        equity: float,
        difference: float,
        code: str = "EQUATION_VIOLATION"
    ):
        super().__init__(
            f"Accounting equation violation on {date.isoformat()}: "
            f"Assets ({assets:.2f}) != Liabilities ({liabilities:.2f}) + "
            f"Equity ({equity:.2f}), difference {difference:.2f}",
            code
        )
        self.date = date
        self.assets = assets
        self.liabilities = liabilities
        self.equity = equity
        self.difference = difference
