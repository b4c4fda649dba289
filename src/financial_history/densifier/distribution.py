# src/financial_history/densifier/distribution.py
"""
Period Distribution

Spreads a known period total across month-end dates, either by
seasonality weights or by an even split, then optionally perturbs the
monthly values with Gaussian noise while preserving the total exactly.

Randomness always comes from an explicit numpy Generator so runs can be
seeded and repeated.
"""

from datetime import date
from typing import Optional, Sequence

import numpy as np

from ..core.exceptions import InvalidNoiseFactorError
from ..core.fiscal_calendar import fiscal_month_index
from ..core.seasonality import SeasonalityProfile, fiscal_weights
from ..models.schema import InterpolationMethod


def validate_noise_factor(noise_factor: float, account_name: Optional[str] = None) -> float:
    """Return the noise factor as float, or raise if outside [0, 1]."""
    if noise_factor is None:
        return 0.0
    noise = float(noise_factor)
    if np.isnan(noise) or not 0.0 <= noise <= 1.0:
        raise InvalidNoiseFactorError(noise_factor, account_name)
    return noise


def ensure_rng(rng: Optional[np.random.Generator] = None) -> np.random.Generator:
    return rng if rng is not None else np.random.default_rng()


def distribution_weights(
    dates: Sequence[date],
    fiscal_year_end_month: int,
    interpolation: InterpolationMethod,
    profile: SeasonalityProfile
) -> np.ndarray:
    """
    Relative weights (summing to 1) for each target month.

    Seasonal accounts look up the rotated profile weight of each month's
    fiscal index and renormalize over the covered subset; with all twelve
    fiscal months covered this is the full-year curve. Every other method
    splits evenly. An all-zero seasonal subset falls back to an even split.
    """
    n = len(dates)
    if n == 0:
        return np.zeros(0)

    even = np.full(n, 1.0 / n)
    if interpolation is not InterpolationMethod.SEASONAL:
        return even

    fy_weights = fiscal_weights(profile, fiscal_year_end_month)
    subset = np.array([
        fy_weights[fiscal_month_index(d.month, fiscal_year_end_month)] for d in dates
    ])
    total = subset.sum()
    if total <= 0:
        return even
    return subset / total


def apply_noise_preserving_total(
    values: np.ndarray,
    total: float,
    noise_factor: float,
    rng: Optional[np.random.Generator] = None
) -> np.ndarray:
    """
    Multiply each value by (1 + N(0, noise_factor)) then rescale to `total`.

    No random numbers are drawn when noise_factor is 0. If the noised
    values happen to sum to exactly zero the un-noised values are returned.
    """
    values = np.asarray(values, dtype=float)
    if noise_factor == 0 or values.size == 0:
        return values

    rng = ensure_rng(rng)
    raw = values * (1.0 + rng.normal(0.0, noise_factor, size=values.size))
    raw_sum = raw.sum()
    if raw_sum == 0:
        return values
    return raw * (total / raw_sum)


def distribute_value(
    total: float,
    dates: Sequence[date],
    fiscal_year_end_month: int,
    interpolation: InterpolationMethod,
    profile: SeasonalityProfile,
    noise_factor: float = 0.0,
    rng: Optional[np.random.Generator] = None
) -> np.ndarray:
    """
    Spread `total` across `dates`.

    Args:
        total: Exact amount the returned values must sum to
        dates: Target month-end dates
        fiscal_year_end_month: Fiscal year end month (1-12)
        interpolation: Account interpolation method; only SEASONAL uses weights
        profile: Seasonality profile used when interpolation is SEASONAL
        noise_factor: Standard deviation of the per-month noise percentage
        rng: Random generator; only consulted when noise_factor > 0

    Returns:
        numpy array aligned with `dates`
    """
    weights = distribution_weights(dates, fiscal_year_end_month, interpolation, profile)
    values = total * weights
    return apply_noise_preserving_total(values, total, noise_factor, rng)
