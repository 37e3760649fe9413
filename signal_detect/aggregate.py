"""
Aggregate response across a group of events.

Every event in the group is windowed the same way; the group summary is an
average response curve (mean +/- one std-dev per day offset), the day after
the event with the highest average count, and peak / 7-day / baseline
statistics across events.
"""
from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence, Tuple

from common.errors import EmptyResultError
from common.schemas import CurvePoint, Event, EventFilter, EventResponse, GroupAnalysis, GroupStats
from normalize_enrich.normalizer import LoadedDataset, ensure_loaded
from shared import stats
from shared.windowing import baseline_stats, window_data

_LOG = logging.getLogger(__name__)

DEFAULT_WINDOW_DAYS = 14
DEFAULT_BASELINE_DAYS = 30
POST_EVENT_DAYS = 7
TOP_N = 5


def event_response(
    dataset: LoadedDataset,
    event: Event,
    window_radius: int = DEFAULT_WINDOW_DAYS,
    baseline_days: int = DEFAULT_BASELINE_DAYS,
) -> EventResponse:
    window = window_data(event.date, window_radius, dataset.baseline)
    base = baseline_stats(event.date, baseline_days, dataset.baseline)

    post = [p.count for p in window if 0 < p.offset <= POST_EVENT_DAYS]
    avg_7day = stats.mean(post)
    ttp = stats.time_to_peak(window)

    return EventResponse(
        event=event,
        window=window,
        baseline=base,
        peak=stats.max_value([p.count for p in window]),
        time_to_peak=ttp.offset if ttp else None,
        avg_7day_spike=avg_7day,
        delta=avg_7day - base.mean,
    )


def _values_at(offset_maps: Sequence[Dict[int, int]], offset: int) -> List[int]:
    # Events without a point at this offset are left out, not zero-filled
    return [m[offset] for m in offset_maps if offset in m]


def _offset_maps(responses: Sequence[EventResponse]) -> List[Dict[int, int]]:
    return [{p.offset: p.count for p in r.window} for r in responses]


def response_curve(responses: Sequence[EventResponse], window_radius: int) -> List[CurvePoint]:
    maps = _offset_maps(responses)
    curve: List[CurvePoint] = []
    for offset in range(-window_radius, window_radius + 1):
        values = _values_at(maps, offset)
        if not values:
            continue
        m = stats.mean(values)
        sd = stats.std_dev(values)
        curve.append(CurvePoint(
            offset=offset,
            mean=m,
            std_dev=sd,
            upper_bound=m + sd,
            lower_bound=max(0.0, m - sd),
            count=len(values),
        ))
    return curve


def peak_day(responses: Sequence[EventResponse], window_radius: int) -> Tuple[int, float]:
    """
    Post-event offset (1..radius) with the highest cross-event average.
    Ties keep the smallest offset; (0, 0.0) when no day rises above zero.
    """
    maps = _offset_maps(responses)
    best_day, best_value = 0, 0.0
    for offset in range(1, window_radius + 1):
        values = _values_at(maps, offset)
        if not values:
            continue
        avg = stats.mean(values)
        if avg > best_value:
            best_day, best_value = offset, avg
    return best_day, best_value


def summarize(responses: Sequence[EventResponse], window_radius: int) -> GroupStats:
    peaks = [r.peak for r in responses]
    spikes = [r.avg_7day_spike for r in responses]
    ttps = [r.time_to_peak for r in responses if r.time_to_peak is not None]

    avg_baseline = stats.mean([r.baseline.mean for r in responses])
    day, day_value = peak_day(responses, window_radius)

    return GroupStats(
        avg_peak=stats.mean(peaks),
        avg_peak_std_dev=stats.std_dev(peaks),
        median_peak=stats.median(peaks),
        max_peak=stats.max_value(peaks),
        min_peak=stats.min_value(peaks),
        avg_7day_spike=stats.mean(spikes),
        avg_delta=stats.mean([r.delta for r in responses]),
        avg_time_to_peak=stats.mean(ttps) if ttps else None,
        peak_day=day,
        peak_day_value=day_value,
        avg_baseline=avg_baseline,
        avg_increase=stats.mean(spikes) - avg_baseline,
    )


def analyze_group(
    dataset: Optional[LoadedDataset],
    events: Sequence[Event],
    window_radius: int = DEFAULT_WINDOW_DAYS,
    baseline_days: int = DEFAULT_BASELINE_DAYS,
    *,
    flt: Optional[EventFilter] = None,
    name: Optional[str] = None,
) -> GroupAnalysis:
    ds = ensure_loaded(dataset)
    if not events:
        raise EmptyResultError(
            "No events match these filters. Try different filter combination.",
            filters=flt, group=name,
        )

    responses = [event_response(ds, e, window_radius, baseline_days) for e in events]
    by_peak = sorted(responses, key=lambda r: r.peak, reverse=True)

    return GroupAnalysis(
        name=name,
        filter=flt or EventFilter(),
        event_count=len(responses),
        window_radius=window_radius,
        curve=response_curve(responses, window_radius),
        responses=responses,
        stats=summarize(responses, window_radius),
        top_events=by_peak[:TOP_N],
        bottom_events=list(reversed(by_peak[-TOP_N:])),
    )


def analyze_category(
    dataset: Optional[LoadedDataset],
    flt: EventFilter,
    window_radius: int = DEFAULT_WINDOW_DAYS,
    baseline_days: int = DEFAULT_BASELINE_DAYS,
) -> GroupAnalysis:
    ds = ensure_loaded(dataset)
    events = ds.catalog.query(flt)
    _LOG.info("Category analysis: %d event(s) match %s", len(events), flt.model_dump(exclude_none=True))
    return analyze_group(ds, events, window_radius, baseline_days, flt=flt)


__all__ = [
    "event_response",
    "response_curve",
    "peak_day",
    "summarize",
    "analyze_group",
    "analyze_category",
    "DEFAULT_WINDOW_DAYS",
    "POST_EVENT_DAYS",
]
