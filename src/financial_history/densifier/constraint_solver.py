# src/financial_history/densifier/constraint_solver.py
"""
Hierarchical Period-Constraint Resolution

Income statement accounts may carry overlapping period totals: a month, the
quarter containing it, the full year. They are reconciled most-specific
first:

1. Sort constraints by span length (ties by start date).
2. For each constraint, subtract the months already assigned by shorter
   constraints from its total.
3. Spread the residual over the months still unassigned, using the
   account's seasonal or even weighting restricted to that subset.
4. Mark those months assigned.

Example:
    Jan = 10,000, Feb = 0, Q1 = 25,000  =>  Mar = 25,000 - 10,000 - 0 = 15,000
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Optional, Sequence

import numpy as np

from ..core.fiscal_calendar import month_ends_in_period
from ..core.seasonality import SeasonalityProfile
from ..models.schema import InterpolationMethod, PeriodConstraint, SourceMetadata
from .distribution import distribute_value

logger = logging.getLogger(__name__)

CONSTRAINT_TOLERANCE = 0.01


@dataclass
class ConstraintResolution:
    """Monthly values solved from a set of period constraints."""
    values: Dict[date, float] = field(default_factory=dict)
    sources: Dict[date, Optional[SourceMetadata]] = field(default_factory=dict)
    conflicts: List[str] = field(default_factory=list)

    @property
    def assigned_dates(self) -> List[date]:
        return sorted(self.values)


def sort_constraints(constraints: Sequence[PeriodConstraint]) -> List[PeriodConstraint]:
    """Shortest span first, ties broken by start date."""
    return sorted(constraints, key=lambda c: (c.span_days, c.start_date))


def resolve_constraints(
    constraints: Sequence[PeriodConstraint],
    fiscal_year_end_month: int,
    interpolation: InterpolationMethod,
    profile: SeasonalityProfile,
    noise_factor: float = 0.0,
    rng: Optional[np.random.Generator] = None,
    tolerance: float = CONSTRAINT_TOLERANCE,
    account_name: str = ""
) -> ConstraintResolution:
    """
    Solve overlapping period constraints into one value per month.

    A constraint whose months were all assigned by shorter constraints adds
    nothing; if its total disagrees with those months by more than
    `tolerance` a conflict message is recorded instead of failing.

    Returns:
        ConstraintResolution with values for every month covered by at
        least one constraint
    """
    result = ConstraintResolution()

    for constraint in sort_constraints(constraints):
        months = month_ends_in_period(constraint.start_date, constraint.end_date)
        if not months:
            continue

        assigned_sum = sum(result.values[d] for d in months if d in result.values)
        residual = constraint.value - assigned_sum
        open_months = [d for d in months if d not in result.values]

        if not open_months:
            if abs(residual) > tolerance:
                message = (
                    f"{account_name}: constraint {constraint.start_date:%Y-%m}:"
                    f"{constraint.end_date:%Y-%m} = {constraint.value:,.2f} conflicts with "
                    f"more specific constraints summing to {assigned_sum:,.2f}"
                )
                logger.warning(message)
                result.conflicts.append(message)
            continue

        allocated = distribute_value(
            residual,
            open_months,
            fiscal_year_end_month,
            interpolation,
            profile,
            noise_factor,
            rng
        )
        for d, value in zip(open_months, allocated):
            result.values[d] = float(value)
            result.sources[d] = constraint.source

    return result
