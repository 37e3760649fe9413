"""
Presentation projections for analysis results.

Chart/card builders return plain dicts of lists and preformatted strings so
any front end (Plotly, a table, JSON) can consume them unchanged. The
render_* helpers produce the compact console text the CLI prints.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

from common.schemas import (
    CurvePoint,
    Event,
    EventAnalysis,
    EventResponse,
    GroupAnalysis,
    GroupComparison,
    ReactivityAnalysis,
    TaiwanAction,
)

NA = "N/A"
NEUTRAL_SCORE = 0.5

SIGNAL_LABELS = ["Timing", "Pre-Event\nBuildup", "Magnitude", "Symbolic\nDate", "Pattern"]
BAR_METRICS = ["Avg Peak", "Avg Increase", "7-Day Spike", "Time to Peak"]
ACTION_TEXT_FIELDS = ("description", "action", "Descriptor", "event_name")


def fmt1(value: Optional[float]) -> str:
    return NA if value is None else f"{value:.1f}"


def signed(value: Optional[float]) -> str:
    """One decimal with an explicit '+' on positive values."""
    if value is None:
        return NA
    return f"+{value:.1f}" if value > 0 else f"{value:.1f}"


def fmt_ratio(value: Optional[float]) -> str:
    return NA if value is None else f"{value:.2f}x"


def one_line(event: Event) -> str:
    """Single catalog line: [date] category | label."""
    return f"[{event.date.isoformat()}] {event.category} | {event.label}"


def action_line(action: TaiwanAction) -> str:
    """[date] DIME | first descriptive field of the raw record."""
    head = f"[{action.date.isoformat()}] {action.dime_category or '-'}"
    text = next(
        (str(action.original_fields[f]) for f in ACTION_TEXT_FIELDS if action.original_fields.get(f)),
        "",
    )
    return f"{head} | {text}" if text else head


# ---- Single event ------------------------------------------------------------

def event_chart(analysis: EventAnalysis) -> Dict[str, Any]:
    dates = [p.date.isoformat() for p in analysis.window]
    event_date = analysis.event.date.isoformat()
    return {
        "x": dates,
        "y": [p.count for p in analysis.window],
        "event_date": event_date,
        "event_index": dates.index(event_date) if event_date in dates else -1,
        "threshold": analysis.impact.threshold,
    }


def event_summary_card(analysis: EventAnalysis) -> Dict[str, Any]:
    e = analysis.event
    impact = analysis.impact
    ttp = impact.time_to_peak
    return {
        "event": {
            "label": e.label,
            "date": e.date.isoformat(),
            "category": e.category,
            "description": e.description,
        },
        "metrics": {
            "baseline_mean": fmt1(analysis.baseline.mean),
            "window_mean": fmt1(analysis.window_stats.mean),
            "delta": signed(impact.mean_delta),
            "delta_percent": fmt1(impact.mean_delta_percent),
            "max_spike": analysis.window_stats.max,
            "time_to_peak": f"{ttp.offset} days ({ttp.count})" if ttp else NA,
            "persistence": f"{impact.persistence} days",
            "threshold": fmt1(impact.threshold),
        },
        "confounders": len(analysis.confounders),
    }


def event_confounders(analysis: EventAnalysis) -> List[Event]:
    return list(analysis.confounders)


# ---- Category ----------------------------------------------------------------

def _curve_arrays(curve: Sequence[CurvePoint]) -> Dict[str, List[float]]:
    return {
        "offsets": [c.offset for c in curve],
        "mean": [c.mean for c in curve],
        "upper_bound": [c.upper_bound for c in curve],
        "lower_bound": [c.lower_bound for c in curve],
    }


def category_curve(group: GroupAnalysis) -> Dict[str, Any]:
    data: Dict[str, Any] = _curve_arrays(group.curve)
    data["max_value"] = max((c.upper_bound for c in group.curve), default=0.0)
    return data


def category_overlay(group: GroupAnalysis) -> List[Dict[str, Any]]:
    traces = []
    for r in group.responses:
        points = sorted(r.window, key=lambda p: p.offset)
        traces.append({
            "x": [p.offset for p in points],
            "y": [p.count for p in points],
            "label": r.event.label,
        })
    return traces


def category_summary(group: GroupAnalysis) -> Dict[str, Any]:
    s = group.stats
    return {
        "event_count": group.event_count,
        "avg_peak": fmt1(s.avg_peak),
        "avg_peak_std_dev": fmt1(s.avg_peak_std_dev),
        "avg_7day_spike": fmt1(s.avg_7day_spike),
        "avg_delta": signed(s.avg_delta),
        "median_peak": fmt1(s.median_peak),
        "max_peak": s.max_peak,
        "min_peak": s.min_peak,
        "avg_time_to_peak": fmt1(s.avg_time_to_peak),
        "max_spike_day": s.peak_day,
        "max_spike_value": fmt1(s.peak_day_value),
        "avg_baseline": fmt1(s.avg_baseline),
        "avg_increase": signed(s.avg_increase),
    }


def event_rows(responses: Sequence[EventResponse]) -> List[Dict[str, Any]]:
    return [
        {
            "date": r.event.date.isoformat(),
            "label": r.event.label,
            "peak": r.peak,
            "avg_7day": fmt1(r.avg_7day_spike),
            "delta": signed(r.delta),
        }
        for r in responses
    ]


# ---- A/B comparison ----------------------------------------------------------

def overlaid_curves(comparison: GroupComparison) -> Dict[str, Any]:
    return {
        "group_a": _curve_arrays(comparison.group_a.curve),
        "group_b": _curve_arrays(comparison.group_b.curve),
    }


def _bar_values(group: GroupAnalysis) -> List[float]:
    s = group.stats
    return [s.avg_peak, s.avg_increase, s.avg_7day_spike, s.avg_time_to_peak or 0.0]


def comparison_bars(comparison: GroupComparison) -> Dict[str, Any]:
    return {
        "metrics": list(BAR_METRICS),
        "group_a": _bar_values(comparison.group_a),
        "group_b": _bar_values(comparison.group_b),
    }


# ---- Classifier --------------------------------------------------------------

def signal_breakdown(result: ReactivityAnalysis) -> Dict[str, Any]:
    scores = []
    for _, sig in result.classification.signals.items():
        scores.append(NEUTRAL_SCORE if sig.reactive_score is None else sig.reactive_score)
    return {"labels": list(SIGNAL_LABELS), "reactive_scores": scores}


def pre_event_trend(result: ReactivityAnalysis) -> Dict[str, List[int]]:
    pre = [p for p in result.window if p.offset <= 0]
    return {
        "days": [p.offset for p in pre],
        "adiz": [p.count for p in pre],
    }


# ---- Console text ------------------------------------------------------------

def render_event(analysis: EventAnalysis) -> str:
    card = event_summary_card(analysis)
    m = card["metrics"]
    pct = m["delta_percent"]
    lines = [
        f"{one_line(analysis.event)}",
        f"  baseline={m['baseline_mean']} window={m['window_mean']} "
        f"delta={m['delta']} ({pct if pct == NA else pct + '%'})",
        f"  peak={m['time_to_peak']} persistence={m['persistence']} threshold={m['threshold']}",
        f"  confounders={card['confounders']}",
    ]
    for c in analysis.confounders:
        lines.append(f"    - {one_line(c)}")
    return "\n".join(lines)


def render_group(group: GroupAnalysis) -> str:
    s = category_summary(group)
    title = f"Group {group.name}" if group.name else "Category"
    lines = [
        f"{title}: {s['event_count']} event(s), window=+/-{group.window_radius}d",
        f"  avg_peak={s['avg_peak']} (sd {s['avg_peak_std_dev']}) median={s['median_peak']} "
        f"max={s['max_peak']:.0f} min={s['min_peak']:.0f}",
        f"  avg_7day={s['avg_7day_spike']} avg_baseline={s['avg_baseline']} "
        f"avg_increase={s['avg_increase']} avg_delta={s['avg_delta']}",
        f"  peak_day=+{s['max_spike_day']} ({s['max_spike_value']}) avg_time_to_peak={s['avg_time_to_peak']}",
        "  top:",
    ]
    lines += [f"    {r['date']} {r['label']} peak={r['peak']:.0f} delta={r['delta']}" for r in event_rows(group.top_events)]
    lines.append("  bottom:")
    lines += [f"    {r['date']} {r['label']} peak={r['peak']:.0f} delta={r['delta']}" for r in event_rows(group.bottom_events)]
    return "\n".join(lines)


def render_comparison(comparison: GroupComparison) -> str:
    c = comparison.comparison
    lines = [
        render_group(comparison.group_a),
        render_group(comparison.group_b),
        f"peak_ratio={fmt_ratio(c.peak_ratio)} increase_ratio={fmt_ratio(c.increase_ratio)} "
        f"spike_ratio={fmt_ratio(c.spike_ratio)}",
        f"more_inflammatory=Group {c.more_inflammatory} margin={fmt1(c.inflammatory_margin)}%",
        c.recommendation.summary,
    ]
    lines += [f"  - {d}" for d in c.recommendation.details]
    return "\n".join(lines)


def render_classification(result: ReactivityAnalysis) -> str:
    cls = result.classification
    lines = [one_line(result.event), cls.summary.rstrip("\n"), f"Weights: {cls.weights.name}"]
    for key, sig in cls.signals.items():
        score = NA if sig.reactive_score is None else f"{sig.reactive_score:.2f}"
        lines.append(f"  {key:<10} {score:>4}  {sig.explanation}")
    return "\n".join(lines)


__all__ = [
    "fmt1",
    "signed",
    "one_line",
    "action_line",
    "event_chart",
    "event_summary_card",
    "event_confounders",
    "category_curve",
    "category_overlay",
    "category_summary",
    "event_rows",
    "overlaid_curves",
    "comparison_bars",
    "signal_breakdown",
    "pre_event_trend",
    "render_event",
    "render_group",
    "render_comparison",
    "render_classification",
]
