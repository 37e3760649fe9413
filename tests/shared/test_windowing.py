from datetime import date, timedelta

from shared.windowing import baseline_stats, window_data


class DictSource:
    def __init__(self, counts):
        self._counts = counts

    def counts(self, dates):
        return [self._counts.get(d, 0) for d in dates]


def test_window_is_dense_with_zero_fill():
    anchor = date(2024, 3, 1)
    src = DictSource({anchor: 30, anchor + timedelta(days=2): 12})
    pts = window_data(anchor, 3, src)

    assert [p.offset for p in pts] == [-3, -2, -1, 0, 1, 2, 3]
    assert [p.count for p in pts] == [0, 0, 0, 30, 0, 12, 0]
    assert pts[3].date == anchor
    assert pts[0].date == date(2024, 2, 27)


def test_window_accepts_string_anchor():
    pts = window_data("2024-03-01", 0, DictSource({}))
    assert len(pts) == 1 and pts[0].offset == 0


def test_baseline_excludes_anchor_day():
    anchor = date(2024, 3, 10)
    counts = {anchor - timedelta(days=i): 10 for i in range(1, 6)}
    counts[anchor] = 1000
    b = baseline_stats(anchor, 5, DictSource(counts))

    assert b.sample_count == 5
    assert b.mean == 10.0
    assert b.std_dev == 0.0
    assert b.max == 10.0 and b.min == 10.0


def test_baseline_zero_fills_missing_days():
    anchor = date(2024, 3, 10)
    b = baseline_stats(anchor, 4, DictSource({anchor - timedelta(days=1): 8}))
    assert b.sample_count == 4
    assert b.mean == 2.0
    assert b.min == 0.0
    assert b.max == 8.0


def test_baseline_zero_lookback():
    b = baseline_stats(date(2024, 3, 10), 0, DictSource({}))
    assert b.sample_count == 0
    assert b.mean == 0.0
