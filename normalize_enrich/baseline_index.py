from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

import pandas as pd

from common.schemas import TimeSeriesPoint
from shared.datetime_utils import DateLike, parse_date

from .event_schema import BASELINE_COUNT_FIELDS, BASELINE_DATE_FIELDS

_LOG = logging.getLogger(__name__)


def _first_present(record: Mapping[str, Any], fields: Sequence[str]) -> Any:
    for f in fields:
        if f in record:
            return record[f]
    return None


class BaselineIndex:
    """
    Dense date -> count view over the raw ADIZ series.

    Storage is sparse; any date not in the series reads as 0. Built once per
    load and never mutated afterwards.
    """

    def __init__(self, series: pd.Series, warnings: Optional[List[str]] = None) -> None:
        self._series = series.sort_index()
        self._lookup: Dict[date, int] = {d: int(c) for d, c in self._series.items()}
        self.warnings: List[str] = list(warnings or [])

    @classmethod
    def from_records(cls, records: Iterable[Mapping[str, Any]]) -> "BaselineIndex":
        dates: List[date] = []
        raw_counts: List[Any] = []
        warnings: List[str] = []

        for i, rec in enumerate(records):
            if not isinstance(rec, Mapping):
                warnings.append(f"baseline[{i}]: not an object")
                continue
            try:
                d = parse_date(_first_present(rec, BASELINE_DATE_FIELDS))
            except ValueError as e:
                warnings.append(f"baseline[{i}]: date {e}")
                continue
            dates.append(d)
            raw_counts.append(_first_present(rec, BASELINE_COUNT_FIELDS))

        if dates:
            frame = pd.DataFrame({"date": dates, "count": pd.Series(raw_counts, dtype=object)})
            # Non-numeric / missing counts coerce to 0; counts are never negative
            frame["count"] = (
                pd.to_numeric(frame["count"], errors="coerce")
                .astype("float64")
                .fillna(0)
                .clip(lower=0)
                .round()
                .astype("int64")
            )
            # Last write wins on duplicate dates
            frame = frame.drop_duplicates(subset="date", keep="last")
            series = pd.Series(frame["count"].to_numpy(), index=pd.Index(frame["date"], dtype=object), dtype="int64")
        else:
            series = pd.Series([], index=pd.Index([], dtype=object), dtype="int64")

        if warnings:
            preview = "; ".join(warnings[:10])
            more = "" if len(warnings) <= 10 else f" (+{len(warnings) - 10} more)"
            _LOG.warning("Baseline: dropped %d record(s): %s%s", len(warnings), preview, more)
        _LOG.info("Baseline loaded: %d distinct dates", len(series))
        return cls(series, warnings)

    def __len__(self) -> int:
        return len(self._lookup)

    def __contains__(self, value: object) -> bool:
        try:
            return parse_date(value) in self._lookup  # type: ignore[arg-type]
        except ValueError:
            return False

    @property
    def first_date(self) -> Optional[date]:
        return self._series.index[0] if len(self._series) else None

    @property
    def last_date(self) -> Optional[date]:
        return self._series.index[-1] if len(self._series) else None

    def count(self, value: DateLike) -> int:
        """Count for one date; 0 when the date is absent."""
        return self._lookup.get(parse_date(value), 0)

    def counts(self, dates: Sequence[date]) -> List[int]:
        """Counts for a sequence of dates, zero-filled, in the given order."""
        if not dates:
            return []
        filled = self._series.reindex(pd.Index(list(dates), dtype=object), fill_value=0)
        return [int(c) for c in filled.to_numpy()]

    def span(self, start: DateLike, end: DateLike) -> List[TimeSeriesPoint]:
        """Dense inclusive range of points; empty when end precedes start."""
        s, e = parse_date(start), parse_date(end)
        if e < s:
            return []
        dates = [s + timedelta(days=i) for i in range((e - s).days + 1)]
        return [TimeSeriesPoint(date=d, count=c) for d, c in zip(dates, self.counts(dates))]

    def years(self) -> List[str]:
        return sorted({str(d.year) for d in self._lookup})


__all__ = ["BaselineIndex"]
