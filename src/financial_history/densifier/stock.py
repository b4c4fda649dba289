# src/financial_history/densifier/stock.py
"""
Stock Densifier

Balance sheet accounts are point-in-time balances. Known snapshots are
joined by a curve sampled at every month-end between the first and last
snapshot. Snapshot dates always keep their exact literal value.
"""

import logging
from datetime import date
from typing import Callable, Dict, List, Optional

import numpy as np
from scipy.interpolate import CubicSpline

from ..core.exceptions import InvalidAnchorError, NoAnchorsError
from ..core.fiscal_calendar import month_ends_in_period, to_month_end
from ..models.dense_series import DensePoint, DenseSeries, PointOrigin
from ..models.schema import AnchorPoint, InterpolationMethod, SparseAccount
from .distribution import ensure_rng, validate_noise_factor

logger = logging.getLogger(__name__)


def snap_anchors(anchors: List[AnchorPoint], account_name: str) -> Dict[date, AnchorPoint]:
    """
    Move anchors onto their month-end and sort them by date.

    Raises:
        InvalidAnchorError: two anchors in the same month with different values
    """
    snapped: Dict[date, AnchorPoint] = {}
    for anchor in sorted(anchors, key=lambda a: a.date):
        month_end = to_month_end(anchor.date)
        existing = snapped.get(month_end)
        if existing is not None and existing.value != anchor.value:
            raise InvalidAnchorError(
                f"{account_name} has conflicting snapshots for {month_end.isoformat()}: "
                f"{existing.value} and {anchor.value}"
            )
        if existing is None:
            snapped[month_end] = anchor
    return snapped


def build_curve(
    x: np.ndarray,
    y: np.ndarray,
    method: InterpolationMethod
) -> Callable[[np.ndarray], np.ndarray]:
    """
    Curve through (x, y) for the given interpolation method.

    Step holds the previous anchor's value. Curve is a natural cubic spline
    when there are at least three anchors, linear otherwise. Seasonal has
    no meaning for balances and is treated as Linear.
    """
    if method is InterpolationMethod.STEP:
        def step(t):
            idx = np.searchsorted(x, t, side='right') - 1
            return y[np.clip(idx, 0, len(y) - 1)]
        return step

    if method is InterpolationMethod.CURVE and len(x) >= 3:
        spline = CubicSpline(x, y, bc_type='natural')
        return lambda t: spline(t)

    return lambda t: np.interp(t, x, y)


def densify_stock(
    account: SparseAccount,
    rng: Optional[np.random.Generator] = None
) -> DenseSeries:
    """
    Expand a stock account's snapshots into a monthly series.

    Args:
        account: Stock account with at least one anchor
        rng: Random generator for noise on interpolated months

    Returns:
        DenseSeries covering first..last anchor month-end

    Raises:
        InvalidNoiseFactorError, NoAnchorsError, InvalidAnchorError
    """
    noise = validate_noise_factor(account.noise_factor, account.name)
    if not account.anchors:
        raise NoAnchorsError(account.name)

    anchors = snap_anchors(account.anchors, account.name)
    anchor_dates = list(anchors)

    if len(anchor_dates) == 1:
        only = anchors[anchor_dates[0]]
        return DenseSeries({
            anchor_dates[0]: DensePoint(float(only.value), PointOrigin.ANCHOR, only.source)
        })

    method = account.interpolation
    if method is InterpolationMethod.SEASONAL:
        logger.debug(f"{account.name}: seasonal interpolation on a stock account, using linear")
        method = InterpolationMethod.LINEAR

    x = np.array([d.toordinal() for d in anchor_dates], dtype=float)
    y = np.array([anchors[d].value for d in anchor_dates], dtype=float)
    curve = build_curve(x, y, method)

    dates = month_ends_in_period(anchor_dates[0], anchor_dates[-1])
    sampled = np.asarray(curve(np.array([d.toordinal() for d in dates], dtype=float)), dtype=float)

    if noise > 0:
        rng = ensure_rng(rng)

    points = {}
    for d, value in zip(dates, sampled):
        anchor = anchors.get(d)
        if anchor is not None:
            points[d] = DensePoint(float(anchor.value), PointOrigin.ANCHOR, anchor.source)
            continue

        if noise > 0:
            value *= 1.0 + rng.normal(0.0, noise)
        points[d] = DensePoint(float(value), PointOrigin.INTERPOLATED)

    logger.debug(
        f"{account.name}: {len(anchors)} snapshots -> {len(points)} months ({method.value})"
    )
    return DenseSeries(points)
