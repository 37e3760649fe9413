"""
A/B comparison of two independently aggregated event groups.

Ratios use safe_ratio: a zero (or near-zero) denominator yields None
("not applicable") instead of inf/NaN. The recommendation's severity ratio is
also None when the less inflammatory group shows no positive increase.
"""
from __future__ import annotations

import logging
from typing import Optional

from common.errors import EmptyResultError
from common.schemas import ComparisonMetrics, EventFilter, GroupAnalysis, GroupComparison, Recommendation
from normalize_enrich.normalizer import LoadedDataset, ensure_loaded
from shared.stats import safe_ratio

from .aggregate import DEFAULT_BASELINE_DAYS, DEFAULT_WINDOW_DAYS, analyze_group

_LOG = logging.getLogger(__name__)

# (minimum ratio, label); checked top-down, strictly greater than
SEVERITY_LEVELS = (
    (3.0, "significantly more"),
    (2.0, "much more"),
    (1.5, "moderately more"),
)
DEFAULT_SEVERITY = "somewhat more"
UNDETERMINED_SEVERITY = "not measurably more"


def severity_label(ratio: Optional[float]) -> str:
    if ratio is None:
        return UNDETERMINED_SEVERITY
    for floor, label in SEVERITY_LEVELS:
        if ratio > floor:
            return label
    return DEFAULT_SEVERITY


def build_recommendation(group_a: GroupAnalysis, group_b: GroupAnalysis, more_inflammatory: str) -> Recommendation:
    if more_inflammatory == "A":
        winner, loser, winner_name, loser_name = group_a, group_b, "Group A", "Group B"
    else:
        winner, loser, winner_name, loser_name = group_b, group_a, "Group B", "Group A"

    # "Nx stronger" only reads as a severity when the loser also rose
    ratio = safe_ratio(winner.stats.avg_increase, loser.stats.avg_increase) if loser.stats.avg_increase > 0 else None
    severity = severity_label(ratio)

    if ratio is None:
        summary = (
            f"{winner_name} triggers a stronger average increase; "
            f"{loser_name} shows no positive average increase, so the ratio is not applicable."
        )
    else:
        summary = f"{winner_name} triggers {severity} inflammatory ({ratio:.1f}x stronger average increase)."

    details = [
        f"{winner_name} causes {winner.stats.avg_increase:+.1f} aircraft increase on average",
        f"{loser_name} causes {loser.stats.avg_increase:+.1f} aircraft increase on average",
        f"Peak responses: {winner_name} = {winner.stats.avg_peak:.1f}, {loser_name} = {loser.stats.avg_peak:.1f}",
        f"Timing: {winner_name} peaks on Day {winner.stats.peak_day}, {loser_name} peaks on Day {loser.stats.peak_day}",
    ]
    return Recommendation(summary=summary, details=details, severity=severity, less_inflammatory=loser_name)


def compare_metrics(group_a: GroupAnalysis, group_b: GroupAnalysis) -> ComparisonMetrics:
    a, b = group_a.stats, group_b.stats

    peak_ratio = safe_ratio(a.avg_peak, b.avg_peak)
    more = "A" if a.avg_increase > b.avg_increase else "B"

    return ComparisonMetrics(
        peak_ratio=peak_ratio,
        increase_ratio=safe_ratio(abs(a.avg_increase), abs(b.avg_increase)),
        spike_ratio=safe_ratio(a.avg_7day_spike, b.avg_7day_spike),
        peak_diff=a.avg_peak - b.avg_peak,
        increase_diff=a.avg_increase - b.avg_increase,
        spike_diff=a.avg_7day_spike - b.avg_7day_spike,
        more_inflammatory=more,
        inflammatory_margin=abs(peak_ratio - 1) * 100 if peak_ratio is not None else None,
        recommendation=build_recommendation(group_a, group_b, more),
    )


def compare_groups(
    dataset: Optional[LoadedDataset],
    filter_a: EventFilter,
    filter_b: EventFilter,
    window_radius: int = DEFAULT_WINDOW_DAYS,
    baseline_days: int = DEFAULT_BASELINE_DAYS,
) -> GroupComparison:
    ds = ensure_loaded(dataset)

    events_a = ds.catalog.query(filter_a)
    events_b = ds.catalog.query(filter_b)
    _LOG.info("A/B comparison: group A=%d event(s), group B=%d event(s)", len(events_a), len(events_b))

    if not events_a or not events_b:
        empty = "A" if not events_a else "B"
        raise EmptyResultError(
            "One or both groups have no events. Adjust your filters.",
            filters=filter_a if empty == "A" else filter_b,
            group=empty,
        )

    group_a = analyze_group(ds, events_a, window_radius, baseline_days, flt=filter_a, name="A")
    group_b = analyze_group(ds, events_b, window_radius, baseline_days, flt=filter_b, name="B")

    return GroupComparison(
        group_a=group_a,
        group_b=group_b,
        comparison=compare_metrics(group_a, group_b),
        window_radius=window_radius,
    )


__all__ = ["compare_groups", "compare_metrics", "build_recommendation", "severity_label"]
