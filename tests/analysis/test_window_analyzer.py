from datetime import date

import pytest

from common.errors import NoDataLoadedError
from signal_detect.window_analyzer import analyze_event

ANCHOR = date(2024, 3, 15)


def _event(ds, label):
    return next(e for e in ds.catalog.query() if e.label == label)


def test_single_event_metrics(builder):
    builder.shape(ANCHOR, {0: 30, 1: 40, 2: 12, 3: 5})
    builder.diplomatic(ANCHOR, "Speaker visit")
    ds = builder.load()

    a = analyze_event(ds, _event(ds, "Speaker visit"))

    assert a.window_radius == 7 and a.baseline_days == 30
    assert [p.offset for p in a.window] == list(range(-7, 8))
    assert a.baseline.mean == 10.0 and a.baseline.sample_count == 30
    # post-event: 30, 40, 12, 5, 10, 10, 10, 10
    assert a.window_stats.mean == pytest.approx(15.875)
    assert a.window_stats.max == 40 and a.window_stats.min == 5
    assert a.impact.mean_delta == pytest.approx(5.875)
    assert a.impact.mean_delta_percent == pytest.approx(58.75)
    assert a.impact.threshold == 10.0
    assert a.impact.time_to_peak.offset == 1
    assert a.impact.time_to_peak.count == 40
    assert a.impact.persistence == 3


def test_confounders_exclude_only_the_event_itself(builder):
    builder.diplomatic(ANCHOR, "Speaker visit")
    builder.diplomatic(ANCHOR, "Trade talks")
    builder.arms(date(2024, 3, 20), "Javelin missiles")
    builder.arms(date(2024, 3, 30), "Outside the window")
    ds = builder.load()

    a = analyze_event(ds, _event(ds, "Speaker visit"))
    assert [e.label for e in a.confounders] == ["Trade talks", "Javelin missiles"]


def test_zero_baseline_has_no_percent(make_builder):
    b = make_builder(level=0)
    b.shape(ANCHOR, {1: 8})
    b.diplomatic(ANCHOR, "Quiet period")
    ds = b.load()

    a = analyze_event(ds, _event(ds, "Quiet period"), window_radius=3)
    assert a.baseline.mean == 0.0
    assert a.impact.mean_delta_percent is None
    assert a.impact.mean_delta == pytest.approx(2.0)


def test_baseline_before_series_start_does_not_fail(builder):
    builder.diplomatic(date(2024, 1, 2), "Day two")
    ds = builder.load()

    a = analyze_event(ds, _event(ds, "Day two"), baseline_days=30)
    # only 2024-01-01 exists in the lookback; the rest reads as 0
    assert a.baseline.sample_count == 30
    assert a.baseline.mean == pytest.approx(10 / 30)
    assert a.window[0].count == 0


def test_persistence_monotonic_in_threshold(builder):
    from shared.stats import persistence

    builder.shape(ANCHOR, {0: 14, 1: 22, 2: 18, 3: 11, 4: 9})
    builder.diplomatic(ANCHOR, "Speaker visit")
    ds = builder.load()
    a = analyze_event(ds, _event(ds, "Speaker visit"))

    counts = [persistence(a.window, t) for t in range(30, -1, -1)]
    assert counts == sorted(counts)


def test_no_data_loaded(builder):
    ev = builder.diplomatic(ANCHOR, "x").load().catalog.query()[0]
    with pytest.raises(NoDataLoadedError):
        analyze_event(None, ev)
