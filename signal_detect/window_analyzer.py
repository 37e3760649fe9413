"""
Single-event window analysis.

For one event: the +/- radius window of daily counts, the trailing baseline,
post-event statistics, time to peak, persistence above baseline + 1 sigma,
and the other catalog events that fall inside the same window.
"""
from __future__ import annotations

import logging
from typing import Optional

from common.schemas import Event, EventAnalysis, Impact, WindowStats
from normalize_enrich.normalizer import LoadedDataset, ensure_loaded
from shared import stats
from shared.windowing import baseline_stats, window_data

_LOG = logging.getLogger(__name__)

DEFAULT_WINDOW_DAYS = 7
DEFAULT_BASELINE_DAYS = 30


def analyze_event(
    dataset: Optional[LoadedDataset],
    event: Event,
    window_radius: int = DEFAULT_WINDOW_DAYS,
    baseline_days: int = DEFAULT_BASELINE_DAYS,
) -> EventAnalysis:
    ds = ensure_loaded(dataset)

    window = window_data(event.date, window_radius, ds.baseline)
    base = baseline_stats(event.date, baseline_days, ds.baseline)

    post_values = [p.count for p in window if p.offset >= 0]
    wstats = WindowStats(
        mean=stats.mean(post_values),
        max=stats.max_value(post_values),
        min=stats.min_value(post_values),
        std_dev=stats.std_dev(post_values),
    )

    mean_delta = wstats.mean - base.mean
    mean_delta_percent = mean_delta / base.mean * 100 if base.mean > 0 else None

    threshold = base.mean + base.std_dev
    impact = Impact(
        mean_delta=mean_delta,
        mean_delta_percent=mean_delta_percent,
        time_to_peak=stats.time_to_peak(window),
        persistence=stats.persistence(window, threshold),
        threshold=threshold,
    )

    # Same date alone is not enough to be "the same event"
    confounders = [e for e in ds.catalog.events_in_window(event.date, window_radius) if not e.same_as(event)]

    _LOG.debug(
        "Event %s (%s): delta=%.1f persistence=%d confounders=%d",
        event.label, event.date, mean_delta, impact.persistence, len(confounders),
    )
    return EventAnalysis(
        event=event,
        window_radius=window_radius,
        baseline_days=baseline_days,
        window=window,
        baseline=base,
        window_stats=wstats,
        impact=impact,
        confounders=confounders,
    )


__all__ = ["analyze_event", "DEFAULT_WINDOW_DAYS", "DEFAULT_BASELINE_DAYS"]
