# src/financial_history/densifier/flow.py
"""
Flow Densifier

Income statement accounts are period totals. Two input shapes are
supported:

- Period constraints: resolved hierarchically (constraint_solver.py).
- Anchors (Cumulative YTD or single-month Period values): grouped by the
  fiscal year each anchor belongs to, and each group is distributed by a
  small state machine:

    NO_DATA         nothing to distribute
    SINGLE_POINT    one anchor; Cumulative spans fiscal year start..date,
                    Period covers only its own month
    SEQUENTIAL_YTD  several anchors processed in date order, each one
                    distributing its increment over the months since the
                    previous anchor

Every distribution preserves its total exactly, noise or not.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np

from ..core.exceptions import ConfigurationError, NoAnchorsError
from ..core.fiscal_calendar import (
    fiscal_year_end_for_date,
    fiscal_year_start,
    month_ends_in_period,
    next_month_end,
    to_month_end,
)
from ..models.dense_series import DensePoint, DenseSeries, PointOrigin
from ..models.schema import AnchorPoint, AnchorType, SourceMetadata, SparseAccount
from .constraint_solver import ConstraintResolution, resolve_constraints
from .distribution import distribute_value, validate_noise_factor

logger = logging.getLogger(__name__)


class GroupState(Enum):
    """Distribution strategy for one fiscal-year bucket of anchors."""
    NO_DATA = "NoData"
    SINGLE_POINT = "SinglePoint"
    SEQUENTIAL_YTD = "SequentialYTD"

    @classmethod
    def for_points(cls, points: Sequence[AnchorPoint]) -> 'GroupState':
        if not points:
            return cls.NO_DATA
        if len(points) == 1:
            return cls.SINGLE_POINT
        return cls.SEQUENTIAL_YTD


@dataclass
class _Allocation:
    """Running monthly totals for one account."""
    values: Dict[date, float] = field(default_factory=dict)
    sources: Dict[date, Optional[SourceMetadata]] = field(default_factory=dict)

    def add(self, months: List[date], amounts: np.ndarray, source: Optional[SourceMetadata]):
        for d, amount in zip(months, amounts):
            self.values[d] = self.values.get(d, 0.0) + float(amount)
            self.sources[d] = source


class FlowDensifier:
    """
    Expands one flow account into a monthly series.

    Usage:
        densifier = FlowDensifier(fiscal_year_end_month=12)
        series = densifier.densify(account)
    """

    def __init__(
        self,
        fiscal_year_end_month: int,
        rng: Optional[np.random.Generator] = None,
        constraint_tolerance: float = 0.01
    ):
        self.fiscal_year_end_month = fiscal_year_end_month
        self.rng = rng
        self.constraint_tolerance = constraint_tolerance
        self.conflicts: List[str] = []

    # ================================================================
    # ENTRY POINT
    # ================================================================

    def densify(self, account: SparseAccount) -> DenseSeries:
        """
        Densify a flow account from its anchors or its constraints.

        Raises:
            InvalidNoiseFactorError: noise outside [0, 1], checked first
            NoAnchorsError: neither anchors nor constraints
            ConfigurationError: both anchors and constraints supplied
        """
        noise = validate_noise_factor(account.noise_factor, account.name)

        if account.anchors and account.constraints:
            raise ConfigurationError(
                f"Flow account {account.name} mixes anchors and period constraints; "
                f"supply one or the other"
            )

        if account.constraints:
            resolution = self._densify_constraints(account, noise)
            self.conflicts.extend(resolution.conflicts)
            values, sources = resolution.values, resolution.sources
        elif account.anchors:
            allocation = self._densify_anchors(account, noise)
            values, sources = allocation.values, allocation.sources
        else:
            raise NoAnchorsError(account.name)

        series = self._to_series(values, sources)
        logger.debug(f"{account.name}: {len(series)} months, total {series.total():,.2f}")
        return series

    # ================================================================
    # PERIOD CONSTRAINTS
    # ================================================================

    def _densify_constraints(self, account: SparseAccount, noise: float) -> ConstraintResolution:
        return resolve_constraints(
            account.constraints,
            self.fiscal_year_end_month,
            account.interpolation,
            account.seasonality,
            noise_factor=noise,
            rng=self.rng,
            tolerance=self.constraint_tolerance,
            account_name=account.name
        )

    # ================================================================
    # ANCHORS, GROUPED BY FISCAL YEAR
    # ================================================================

    def group_by_fiscal_year(
        self,
        anchors: Sequence[AnchorPoint]
    ) -> List[Tuple[date, List[AnchorPoint]]]:
        """Anchors snapped to month-end, bucketed by fiscal year end, both in order."""
        groups: Dict[date, List[AnchorPoint]] = defaultdict(list)
        for anchor in anchors:
            snapped = AnchorPoint(
                date=to_month_end(anchor.date),
                value=anchor.value,
                anchor_type=anchor.anchor_type,
                source=anchor.source
            )
            fy_end = fiscal_year_end_for_date(snapped.date, self.fiscal_year_end_month)
            groups[fy_end].append(snapped)

        return [
            (fy_end, sorted(points, key=lambda p: p.date))
            for fy_end, points in sorted(groups.items())
        ]

    def _densify_anchors(self, account: SparseAccount, noise: float) -> _Allocation:
        allocation = _Allocation()

        for fy_end, points in self.group_by_fiscal_year(account.anchors):
            state = GroupState.for_points(points)

            if state is GroupState.SINGLE_POINT:
                self._single_point(account, fy_end, points[0], noise, allocation)
            elif state is GroupState.SEQUENTIAL_YTD:
                self._sequential_ytd(account, fy_end, points, noise, allocation)

        return allocation

    def _single_point(
        self,
        account: SparseAccount,
        fy_end: date,
        point: AnchorPoint,
        noise: float,
        allocation: _Allocation
    ) -> None:
        if point.anchor_type is AnchorType.CUMULATIVE:
            months = month_ends_in_period(fiscal_year_start(fy_end), point.date)
        else:
            months = [point.date]

        amounts = self._distribute(account, point.value, months, noise)
        allocation.add(months, amounts, point.source)

    def _sequential_ytd(
        self,
        account: SparseAccount,
        fy_end: date,
        points: List[AnchorPoint],
        noise: float,
        allocation: _Allocation
    ) -> None:
        running = 0.0
        populated = set()
        previous: Optional[AnchorPoint] = None

        for point in points:
            if point.anchor_type is AnchorType.CUMULATIVE:
                increment = point.value - running
                running = point.value
            else:
                increment = point.value
                running += point.value

            months = self._target_months(fy_end, point, previous, populated)
            amounts = self._distribute(account, increment, months, noise)
            allocation.add(months, amounts, point.source)

            populated.update(months)
            previous = point

    def _target_months(
        self,
        fy_end: date,
        point: AnchorPoint,
        previous: Optional[AnchorPoint],
        populated: set
    ) -> List[date]:
        """
        Months one anchor's increment is spread across.

        The first anchor of a year starts at fiscal year start, unless it is
        Period-typed, in which case it covers only its own month. Later
        anchors start the month after the previous anchor and skip months
        already populated, falling back to the full span if that leaves
        nothing.
        """
        if previous is None:
            if point.anchor_type is AnchorType.PERIOD:
                return [point.date]
            start = fiscal_year_start(fy_end)
        else:
            start = next_month_end(previous.date)

        span = month_ends_in_period(start, point.date)
        if not span:
            return [point.date]

        remaining = [d for d in span if d not in populated]
        return remaining or span

    def _distribute(
        self,
        account: SparseAccount,
        total: float,
        months: List[date],
        noise: float
    ) -> np.ndarray:
        return distribute_value(
            total,
            months,
            self.fiscal_year_end_month,
            account.interpolation,
            account.seasonality,
            noise,
            self.rng
        )

    # ================================================================
    # OUTPUT
    # ================================================================

    @staticmethod
    def _to_series(
        values: Dict[date, float],
        sources: Dict[date, Optional[SourceMetadata]]
    ) -> DenseSeries:
        """Allocated points plus zero-valued fillers for any gap months."""
        if not values:
            return DenseSeries()

        dates = sorted(values)
        points = {}
        for d in month_ends_in_period(dates[0], dates[-1]):
            if d in values:
                points[d] = DensePoint(values[d], PointOrigin.ALLOCATED, sources.get(d))
            else:
                points[d] = DensePoint(0.0, PointOrigin.INTERPOLATED, note="no data for month")
        return DenseSeries(points)


def densify_flow(
    account: SparseAccount,
    fiscal_year_end_month: int,
    rng: Optional[np.random.Generator] = None
) -> DenseSeries:
    """Functional wrapper around FlowDensifier.densify."""
    return FlowDensifier(fiscal_year_end_month, rng).densify(account)
