# src/financial_history/models/dense_series.py
"""
Dense output data model.

A DenseSeries holds exactly one DensePoint per month-end date. Every point
records its origin (and source where it came from a literal number) so
reporting layers can show per-cell lineage.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

import pandas as pd

from .schema import SourceMetadata


class PointOrigin(Enum):
    """How a dense value was produced."""
    ANCHOR = "Anchor"
    INTERPOLATED = "Interpolated"
    ALLOCATED = "Allocated"
    BALANCING_PLUG = "BalancingPlug"


@dataclass(frozen=True)
class DensePoint:
    value: float
    origin: PointOrigin
    source: Optional[SourceMetadata] = None
    note: Optional[str] = None


class DenseSeries(Mapping):
    """
    Date-ordered, read-only mapping of month-end date -> DensePoint.

    Build one with DenseSeries(points) or DenseSeries.from_values(...).
    """

    def __init__(self, points: Optional[Dict[date, DensePoint]] = None):
        self._points: Dict[date, DensePoint] = dict(sorted((points or {}).items()))

    @classmethod
    def from_values(
        cls,
        values: Dict[date, float],
        origin: PointOrigin,
        source: Optional[SourceMetadata] = None
    ) -> 'DenseSeries':
        """Wrap plain floats that all share one origin."""
        return cls({d: DensePoint(float(v), origin, source) for d, v in values.items()})

    # Mapping protocol
    def __getitem__(self, key: date) -> DensePoint:
        return self._points[key]

    def __iter__(self) -> Iterator[date]:
        return iter(self._points)

    def __len__(self) -> int:
        return len(self._points)

    def __repr__(self) -> str:
        if not self._points:
            return "DenseSeries([])"
        return (
            f"DenseSeries({len(self)} points, "
            f"{self.first_date.isoformat()}..{self.last_date.isoformat()})"
        )

    @property
    def first_date(self) -> Optional[date]:
        return next(iter(self._points), None)

    @property
    def last_date(self) -> Optional[date]:
        return next(reversed(self._points), None) if self._points else None

    def dates(self) -> List[date]:
        return list(self._points)

    def amounts(self) -> List[float]:
        """Plain float values in date order."""
        return [p.value for p in self._points.values()]

    def points(self) -> List[DensePoint]:
        return list(self._points.values())

    def value_at(self, d: date, default: Optional[float] = None) -> Optional[float]:
        point = self._points.get(d)
        return point.value if point is not None else default

    def total(self, start: Optional[date] = None, end: Optional[date] = None) -> float:
        """Sum of values with start <= date <= end (bounds optional)."""
        return float(sum(
            p.value for d, p in self._points.items()
            if (start is None or d >= start) and (end is None or d <= end)
        ))

    def to_series(self, name: Optional[str] = None) -> pd.Series:
        """Values as a pandas Series indexed by date."""
        return pd.Series(
            self.amounts(),
            index=pd.DatetimeIndex(pd.to_datetime(self.dates()), name='date'),
            name=name,
            dtype=float
        )

    def to_frame(self) -> pd.DataFrame:
        """
        One row per date with value, origin and lineage columns.

        Returns:
            DataFrame indexed by date with columns
            value, origin, source_document, source_text, note
        """
        rows = []
        for d, p in self._points.items():
            rows.append({
                'date': pd.Timestamp(d),
                'value': p.value,
                'origin': p.origin.value,
                'source_document': p.source.document if p.source else None,
                'source_text': p.source.text if p.source else None,
                'note': p.note,
            })
        columns = ['date', 'value', 'origin', 'source_document', 'source_text', 'note']
        return pd.DataFrame(rows, columns=columns).set_index('date')


@dataclass
class DenseFinancialHistory:
    """Result of a processing run: one DenseSeries per account."""
    organization_name: str
    fiscal_year_end_month: int
    series: Dict[str, DenseSeries] = field(default_factory=dict)
    balancing_account: Optional[str] = None
    warnings: List[str] = field(default_factory=list)

    def __getitem__(self, account_name: str) -> DenseSeries:
        return self.series[account_name]

    def __contains__(self, account_name: str) -> bool:
        return account_name in self.series

    def account_names(self) -> List[str]:
        return sorted(self.series)

    def items(self) -> Iterable[Tuple[str, DenseSeries]]:
        return self.series.items()

    def all_dates(self) -> List[date]:
        dates = set()
        for s in self.series.values():
            dates.update(s.dates())
        return sorted(dates)

    def to_dataframe(self) -> pd.DataFrame:
        """
        Wide table: one row per month-end date, one column per account.

        Dates an account does not cover are 0.0.
        """
        if not self.series:
            return pd.DataFrame()

        frame = pd.concat(
            [self.series[name].to_series(name) for name in self.account_names()],
            axis=1
        )
        return frame.sort_index().fillna(0.0)
