# src/financial_history/core/seasonality.py
"""
Seasonality Profiles

Named monthly-weight curves used to spread period totals across months.
Profiles are authored in CALENDAR order (index 0 = January) and rotated
into fiscal order only at the point of use.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Sequence, Tuple, Union

import numpy as np

from .fiscal_calendar import validate_fiscal_year_end_month
from .exceptions import InvalidSeasonalityWeightsError

WEIGHT_SUM_TOLERANCE = 0.01


class SeasonalityProfileId(Enum):
    """Built-in seasonality curves."""
    FLAT = "Flat"
    RETAIL_PEAK = "RetailPeak"
    SUMMER_HIGH = "SummerHigh"
    SAAS_GROWTH = "SaasGrowth"


@dataclass(frozen=True)
class CustomProfile:
    """User-supplied 12-month weight curve, calendar ordered."""
    weights: Tuple[float, ...]

    def __post_init__(self):
        object.__setattr__(self, 'weights', tuple(float(w) for w in self.weights))


SeasonalityProfile = Union[SeasonalityProfileId, CustomProfile]


_RETAIL_PEAK = [
    0.045, 0.045, 0.045, 0.055, 0.055, 0.060,
    0.065, 0.070, 0.075, 0.080, 0.105, 0.300,
]

_SUMMER_HIGH = [
    0.05, 0.05, 0.05, 0.12, 0.12, 0.12,
    0.12, 0.12, 0.07, 0.07, 0.07, 0.04,
]


def normalize_weights(weights: Sequence[float]) -> np.ndarray:
    """Scale weights to sum to 1. An all-zero vector is returned unchanged."""
    arr = np.asarray(weights, dtype=float)
    total = arr.sum()
    if total == 0:
        return arr
    return arr / total


def validate_custom_weights(weights: Sequence[float]) -> None:
    """
    Check a custom weight curve.

    Raises:
        InvalidSeasonalityWeightsError: not exactly 12 entries, a negative
            entry, or a sum further than 0.01 from 1.0
    """
    if len(weights) != 12:
        raise InvalidSeasonalityWeightsError(f"Expected 12 weights, got {len(weights)}")

    if any(w < 0 for w in weights):
        raise InvalidSeasonalityWeightsError("All weights must be non-negative")

    total = float(sum(weights))
    if abs(total - 1.0) > WEIGHT_SUM_TOLERANCE:
        raise InvalidSeasonalityWeightsError(f"Weights must sum to 1.0 (got {total})")


def get_profile_weights(profile: SeasonalityProfile) -> np.ndarray:
    """
    Twelve calendar-ordered weights for a profile, summing to ~1.0.

    Args:
        profile: A SeasonalityProfileId or a CustomProfile

    Returns:
        numpy array of length 12
    """
    if isinstance(profile, CustomProfile):
        validate_custom_weights(profile.weights)
        return np.array(profile.weights, dtype=float)

    if profile is SeasonalityProfileId.FLAT:
        return np.full(12, 1.0 / 12.0)

    if profile is SeasonalityProfileId.RETAIL_PEAK:
        return np.array(_RETAIL_PEAK)

    if profile is SeasonalityProfileId.SUMMER_HIGH:
        return np.array(_SUMMER_HIGH)

    if profile is SeasonalityProfileId.SAAS_GROWTH:
        # 6% in month one, +0.04/11 each month up to 10%
        ramp = 0.06 + np.arange(12) * (0.04 / 11.0)
        return normalize_weights(ramp)

    raise InvalidSeasonalityWeightsError(f"Unknown seasonality profile: {profile!r}")


def rotate_weights_for_fiscal_year(
    weights: Sequence[float],
    fiscal_year_end_month: int
) -> np.ndarray:
    """
    Rotate calendar-ordered weights so index 0 is the first fiscal month.

    Cyclic left rotation by `fiscal_year_end_month`; identity for a
    December year end.

    Examples:
        With fiscal_year_end_month=6, index 0 holds July's weight and
        index 5 holds December's.
    """
    validate_fiscal_year_end_month(fiscal_year_end_month)
    arr = np.asarray(weights, dtype=float)
    if fiscal_year_end_month == 12:
        return arr.copy()
    return np.roll(arr, -fiscal_year_end_month)


def fiscal_weights(profile: SeasonalityProfile, fiscal_year_end_month: int) -> np.ndarray:
    """Profile weights in fiscal order (index 0 = first fiscal month)."""
    return rotate_weights_for_fiscal_year(get_profile_weights(profile), fiscal_year_end_month)
