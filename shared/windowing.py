from __future__ import annotations

from datetime import date, timedelta
from typing import List, Protocol, Sequence

from common.schemas import BaselineStats, WindowPoint
from shared import stats
from shared.datetime_utils import DateLike, date_window, parse_date

__all__ = ["CountSource", "window_data", "baseline_stats"]


class CountSource(Protocol):
    """Anything that yields zero-filled counts for a list of dates."""

    def counts(self, dates: Sequence[date]) -> List[int]: ...


def window_data(anchor: DateLike, radius: int, source: CountSource) -> List[WindowPoint]:
    """
    One WindowPoint per calendar day from -radius to +radius around anchor.
    Never sparse: missing days come back with count 0.
    """
    center = parse_date(anchor)
    dates = date_window(center, radius)
    return [
        WindowPoint(offset=(d - center).days, date=d, count=c)
        for d, c in zip(dates, source.counts(dates))
    ]


def baseline_stats(anchor: DateLike, lookback_days: int, source: CountSource) -> BaselineStats:
    """
    Statistics over the lookback_days calendar days ending the day before
    anchor. The anchor day itself is excluded; missing days count as 0.
    """
    end = parse_date(anchor) - timedelta(days=1)
    dates = [end - timedelta(days=i) for i in range(lookback_days - 1, -1, -1)]
    values = source.counts(dates)
    return BaselineStats(
        mean=stats.mean(values),
        std_dev=stats.std_dev(values),
        max=stats.max_value(values),
        min=stats.min_value(values),
        sample_count=len(values),
    )
