from datetime import date

import pytest

from common.errors import EmptyResultError
from common.schemas import EventFilter
from signal_detect.ab_compare import compare_groups, severity_label

ARMS = EventFilter(category="arms")
DIPLOMATIC = EventFilter(category="diplomatic")


def _dataset(make_builder, level=10, b_spike=20):
    b = make_builder(days=400, level=level)
    for d in (date(2024, 2, 1), date(2024, 3, 12)):
        b.shape(d, {1: 40, 2: 40, 3: 40})
        b.arms(d, f"Sale {d.isoformat()}")
    for d in (date(2024, 5, 1), date(2024, 6, 10)):
        if b_spike is not None:
            b.shape(d, {1: b_spike})
        b.diplomatic(d, f"Visit {d.isoformat()}")
    return b.load()


def test_compare_groups(make_builder):
    cmp = compare_groups(_dataset(make_builder), ARMS, DIPLOMATIC)
    a, b = cmp.group_a.stats, cmp.group_b.stats

    assert cmp.group_a.name == "A" and cmp.group_b.name == "B"
    assert cmp.window_radius == 14
    assert a.avg_increase == pytest.approx(120 / 7 + 40 / 7 - 10)
    assert b.avg_increase == pytest.approx(80 / 7 - 10)

    c = cmp.comparison
    assert c.more_inflammatory == "A"
    assert c.peak_ratio == pytest.approx(2.0)
    assert c.inflammatory_margin == pytest.approx(100.0)
    assert c.increase_ratio == pytest.approx(9.0)
    assert c.peak_diff == pytest.approx(20.0)
    assert c.recommendation.severity == "significantly more"
    assert c.recommendation.less_inflammatory == "Group B"
    assert c.recommendation.summary == "Group A triggers significantly more inflammatory (9.0x stronger average increase)."
    assert "Group A causes +12.9 aircraft increase on average" in c.recommendation.details


def test_swapped_groups_flip_winner(make_builder):
    cmp = compare_groups(_dataset(make_builder), DIPLOMATIC, ARMS)
    assert cmp.comparison.more_inflammatory == "B"
    assert cmp.comparison.recommendation.less_inflammatory == "Group A"
    assert cmp.comparison.peak_ratio == pytest.approx(0.5)


def test_zero_increase_denominator_is_not_applicable(make_builder):
    cmp = compare_groups(_dataset(make_builder, b_spike=None), ARMS, DIPLOMATIC)
    c = cmp.comparison
    assert cmp.group_b.stats.avg_increase == 0.0
    assert c.increase_ratio is None
    assert c.recommendation.severity == "not measurably more"
    assert "not applicable" in c.recommendation.summary
    # peaks are still comparable
    assert c.peak_ratio == pytest.approx(4.0)


def test_negative_increase_denominator_is_not_applicable(make_builder):
    b = make_builder(days=400)
    b.shape(date(2024, 2, 1), {1: 40, 2: 40, 3: 40}).arms(date(2024, 2, 1), "Sale")
    b.shape(date(2024, 5, 1), {off: 5 for off in range(1, 8)}).diplomatic(date(2024, 5, 1), "Visit")
    cmp = compare_groups(b.load(), ARMS, DIPLOMATIC)
    c = cmp.comparison

    assert cmp.group_b.stats.avg_increase == pytest.approx(-5.0)
    assert c.more_inflammatory == "A"
    assert c.recommendation.severity == "not measurably more"
    assert "not applicable" in c.recommendation.summary
    assert "x stronger" not in c.recommendation.summary
    assert "Group B causes -5.0 aircraft increase on average" in c.recommendation.details


def test_zero_peak_denominator(make_builder):
    cmp = compare_groups(_dataset(make_builder, level=0, b_spike=None), ARMS, DIPLOMATIC)
    c = cmp.comparison
    assert c.peak_ratio is None
    assert c.inflammatory_margin is None
    assert c.spike_ratio is None
    assert c.more_inflammatory == "A"


def test_empty_group_raises(make_builder):
    ds = _dataset(make_builder)
    with pytest.raises(EmptyResultError) as exc:
        compare_groups(ds, ARMS, EventFilter(category="ships"))
    assert exc.value.group == "B"
    with pytest.raises(EmptyResultError) as exc:
        compare_groups(ds, EventFilter(year="1999"), ARMS)
    assert exc.value.group == "A"


@pytest.mark.parametrize("ratio,label", [
    (3.5, "significantly more"),
    (3.0, "much more"),
    (2.1, "much more"),
    (1.6, "moderately more"),
    (1.5, "somewhat more"),
    (0.4, "somewhat more"),
    (None, "not measurably more"),
])
def test_severity_label(ratio, label):
    assert severity_label(ratio) == label
