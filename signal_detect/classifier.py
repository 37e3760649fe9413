"""
Reactive vs pre-planned classifier.

Five independent signals are computed from one event's window:

  temporal   - how soon after the event the post-event peak lands
  buildup    - whether counts were already rising / elevated beforehand
  magnitude  - peak size against other events of the same category
  symbolic   - nearby political events or symbolic calendar dates
  pattern    - curve shape: sharp spike and decay vs sustained plateau

Each yields a reactive score (1 = reactive, 0 = pre-planned, 0.5 = neutral).
Scores are combined with a weight vector chosen from the signals themselves
(see scorer.select_weights) and thresholded into a verdict.
"""
from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import List, Optional, Sequence, Tuple

from common.schemas import (
    BaselineStats,
    BuildupSignal,
    Classification,
    ClassifierSignals,
    Event,
    EventFilter,
    MagnitudeSignal,
    PatternSignal,
    PeakPoint,
    ReactivityAnalysis,
    SymbolicSignal,
    TemporalSignal,
    WindowPoint,
)
from normalize_enrich.normalizer import LoadedDataset, ensure_loaded
from shared import stats
from shared.windowing import baseline_stats, window_data

from .rules_political import UNMATCHED, PoliticalContextClassifier, classify_political_context, context_score
from .scorer import NEUTRAL, combine, select_weights, verdict_for

_LOG = logging.getLogger(__name__)

DEFAULT_WINDOW_DAYS = 21
DEFAULT_BASELINE_DAYS = 30

PRE_EVENT_DAYS = 14
MIN_PRE_EVENT_SAMPLES = 5
RISING_SLOPE = 2.0  # aircraft per day
ELEVATED_FACTOR = 1.2

MIN_COMPARABLE_EVENTS = 3
COMPARABLE_SAMPLE_LIMIT = 20
COMPARABLE_WINDOW_DAYS = 14

POLITICAL_CATEGORY = "political"
POLITICAL_SEARCH_DAYS = 15
SYMBOLIC_TOLERANCE_DAYS = 2

SHARPNESS_THRESHOLD = 2.5
RAPID_DECAY = 0.6
MODERATE_DECAY = 0.4
DECAY_DAYS = 7
SUSTAINED_DAYS = 7
SUSTAINED_MIN_SAMPLES = 5
SUSTAINED_LEVEL = 0.8
SUSTAINED_SHARE = 0.6

# (month, day, name)
SYMBOLIC_DATES: Tuple[Tuple[int, int, str], ...] = (
    (10, 10, "Double Ten Day (ROC National Day)"),
    (1, 1, "New Year's Day"),
    (5, 20, "Taiwan Presidential Inauguration"),
    (7, 1, "CCP Founding Day"),
    (10, 1, "PRC National Day"),
    (12, 10, "Human Rights Day"),
)


# ---- Signal 1: temporal proximity --------------------------------------------

def analyze_temporal(window: Sequence[WindowPoint]) -> TemporalSignal:
    peak = stats.time_to_peak(window)
    if peak is None:
        return TemporalSignal(
            category="unknown",
            reactive_score=0.0,
            explanation="No clear peak detected in window",
        )

    days = peak.offset
    if days <= 2:
        return TemporalSignal(
            category="immediate", response_time=days, reactive_score=0.9,
            explanation=f"Peak occurred {days} day(s) after event - indicates immediate reaction",
        )
    if days <= 9:
        return TemporalSignal(
            category="delayed", response_time=days, reactive_score=0.5,
            explanation=f"Peak occurred {days} days after event - could be either reactive or pre-planned",
        )
    return TemporalSignal(
        category="very_delayed", response_time=days, reactive_score=0.5,
        explanation=f"Peak occurred {days} days after event - likely unrelated to this event",
    )


# ---- Signal 2: pre-event buildup ---------------------------------------------

def analyze_buildup(window: Sequence[WindowPoint], baseline: BaselineStats) -> BuildupSignal:
    pre = sorted(
        (p for p in window if -PRE_EVENT_DAYS <= p.offset < 0),
        key=lambda p: p.offset,
    )
    if len(pre) < MIN_PRE_EVENT_SAMPLES:
        return BuildupSignal(
            trend="insufficient_data",
            reactive_score=NEUTRAL,
            explanation="Insufficient pre-event data to determine buildup",
        )

    values = [p.count for p in pre]
    slope = stats.trend_slope(values)
    avg_pre = stats.mean(values)
    rising = slope > RISING_SLOPE
    elevated = avg_pre > baseline.mean * ELEVATED_FACTOR

    if rising and elevated:
        trend, score = "rising", 0.2
        explanation = f"ADIZ was rising before event (slope: {slope:+.1f}/day), suggests pre-planning"
    elif elevated:
        trend, score = "elevated", 0.4
        explanation = "ADIZ elevated before event but not rising - possible pre-positioning"
    else:
        trend, score = "normal", 0.8
        explanation = "ADIZ normal before event - no evidence of pre-planning"

    return BuildupSignal(
        trend=trend,
        slope=slope,
        avg_pre_event=avg_pre,
        baseline=baseline.mean,
        reactive_score=score,
        explanation=explanation,
    )


# ---- Signal 3: magnitude -----------------------------------------------------

def _post_event_peak(dataset: LoadedDataset, event: Event) -> float:
    points = window_data(event.date, COMPARABLE_WINDOW_DAYS, dataset.baseline)
    return stats.max_value([p.count for p in points if p.offset >= 0])


def analyze_magnitude(dataset: LoadedDataset, event: Event, peak: Optional[PeakPoint]) -> MagnitudeSignal:
    similar = [
        e for e in dataset.catalog.query(EventFilter(category=event.category))
        if not e.same_as(event)
    ]
    if len(similar) < MIN_COMPARABLE_EVENTS:
        return MagnitudeSignal(
            comparison="insufficient_data",
            reactive_score=NEUTRAL,
            explanation="Not enough similar events to compare magnitude",
        )

    similar_peaks = [p for p in (_post_event_peak(dataset, e) for e in similar[:COMPARABLE_SAMPLE_LIMIT]) if p > 0]
    avg_similar = stats.mean(similar_peaks)
    # Same post-event horizon as the comparables
    this_peak = float(_post_event_peak(dataset, event))
    ratio = stats.safe_ratio(this_peak, avg_similar)

    if ratio is None:
        return MagnitudeSignal(
            comparison="insufficient_data",
            this_peak=this_peak,
            avg_similar_peak=avg_similar,
            reactive_score=NEUTRAL,
            explanation=f"No non-zero responses among similar {event.category} events to compare against",
        )

    days = peak.offset if peak else None
    compound = False
    if ratio > 2.5 and days is not None and days <= 3:
        comparison, score, compound = "massive_immediate", 0.95, True
        explanation = (
            f"Massive spike ({ratio:.1f}x typical {event.category} response) within {days} day(s) "
            "- close proximity indicates direct reaction"
        )
    elif ratio > 2.0 and days is not None and days <= 5:
        comparison, score, compound = "large_quick", 0.85, True
        explanation = f"Large spike ({ratio:.1f}x typical) within {days} day(s) - suggests strong reaction"
    elif ratio > 2.5:
        comparison, score = "much_larger", 0.7
        explanation = (
            f"Response {ratio:.1f}x larger than typical {event.category} events "
            "- suggests unusually strong reaction"
        )
    elif ratio > 1.5:
        comparison, score = "larger", 0.6
        explanation = f"Response {ratio:.1f}x larger than typical - suggests strong reaction"
    else:
        comparison, score = "typical", NEUTRAL
        explanation = (
            f"Response size ({this_peak:.0f}) typical for {event.category} events "
            f"(avg: {avg_similar:.1f})"
        )

    return MagnitudeSignal(
        comparison=comparison,
        this_peak=this_peak,
        avg_similar_peak=avg_similar,
        ratio=ratio,
        compound=compound,
        reactive_score=score,
        explanation=explanation,
    )


# ---- Signal 4: symbolic / political timing -----------------------------------

def nearest_political_event(dataset: LoadedDataset, event: Event) -> Optional[Event]:
    lo = event.date - timedelta(days=POLITICAL_SEARCH_DAYS)
    hi = event.date + timedelta(days=POLITICAL_SEARCH_DAYS)
    nearby = [
        e for e in dataset.catalog.query(EventFilter(category=POLITICAL_CATEGORY, start_date=lo, end_date=hi))
        if not e.same_as(event)
    ]
    if not nearby:
        return None
    # min() keeps the first of equally-near events (catalog order)
    return min(nearby, key=lambda e: abs((e.date - event.date).days))


def nearest_symbolic_date(d: date) -> Optional[Tuple[str, int]]:
    """(name, signed days from d) of the first table entry within tolerance."""
    for month, day, name in SYMBOLIC_DATES:
        # Neighbouring years cover the Dec/Jan wrap-around
        for year in (d.year - 1, d.year, d.year + 1):
            delta = (date(year, month, day) - d).days
            if abs(delta) <= SYMBOLIC_TOLERANCE_DAYS:
                return name, delta
    return None


def analyze_symbolic(
    dataset: LoadedDataset,
    event: Event,
    context_classifier: PoliticalContextClassifier = classify_political_context,
) -> SymbolicSignal:
    political = nearest_political_event(dataset, event)
    if political is not None:
        # Description is only consulted when label and category say nothing
        ctx = context_classifier(f"{political.label} {political.category}")
        if ctx == UNMATCHED and political.description:
            ctx = context_classifier(political.description)
        days = (political.date - event.date).days
        return SymbolicSignal(
            is_symbolic=True,
            source="political_event",
            matched_name=political.label,
            context=ctx,
            days_away=days,
            reactive_score=context_score(ctx),
            explanation=f"Political event '{political.label}' {days:+d} day(s) from event ({ctx})",
        )

    match = nearest_symbolic_date(event.date)
    if match is not None:
        name, days = match
        ctx = context_classifier(name)
        return SymbolicSignal(
            is_symbolic=True,
            source="symbolic_date",
            matched_name=name,
            context=ctx,
            days_away=days,
            reactive_score=context_score(ctx),
            explanation=f"Event occurred near {name} - may have symbolic timing",
        )

    return SymbolicSignal(
        is_symbolic=False,
        reactive_score=NEUTRAL,
        explanation="Event not aligned with known symbolic dates or political events",
    )


# ---- Signal 5: pattern shape -------------------------------------------------

def is_sustained(window: Sequence[WindowPoint]) -> bool:
    """Most of the first post-event week stays within 80% of that week's peak."""
    values = [p.count for p in window if 0 < p.offset <= SUSTAINED_DAYS]
    if len(values) < SUSTAINED_MIN_SAMPLES:
        return False
    peak = max(values)
    if peak <= 0:
        return False
    high = sum(1 for v in values if v >= peak * SUSTAINED_LEVEL)
    return high >= len(values) * SUSTAINED_SHARE


def analyze_pattern(window: Sequence[WindowPoint]) -> PatternSignal:
    peak = stats.time_to_peak(window)
    sustained = is_sustained(window)
    if peak is None:
        return PatternSignal(
            pattern="unknown",
            sustained=sustained,
            reactive_score=NEUTRAL,
            explanation="No post-event data to describe the response shape",
        )

    pre_mean = stats.mean([p.count for p in window if p.offset < 0])
    # A silent pre-event period reads as one aircraft/day
    sharpness = stats.safe_ratio(peak.count, pre_mean)
    if sharpness is None:
        sharpness = float(peak.count)

    after = [p.count for p in window if peak.offset < p.offset <= peak.offset + DECAY_DAYS]
    decay = (peak.count - stats.mean(after)) / peak.count if after and peak.count > 0 else 0.0

    sharp = sharpness > SHARPNESS_THRESHOLD
    if sharp and decay > RAPID_DECAY and not sustained:
        pattern, score = "sharp_spike_rapid_decay", 0.95
        explanation = "Sharp spike followed by rapid decay - classic reactive pattern"
    elif sharp and decay > MODERATE_DECAY:
        pattern, score = "sharp_spike", 0.85
        explanation = "Sharp spike with moderate decay - reactive pattern"
    elif sharp:
        pattern, score = "sharp_onset", 0.7
        explanation = "Sharp onset but slow decay - leans reactive"
    elif sustained:
        pattern, score = "sustained", 0.25
        explanation = "Sustained elevated ADIZ - suggests planned exercise/operation"
    else:
        pattern, score = "gradual", NEUTRAL
        explanation = "Gradual buildup pattern - ambiguous signal"

    return PatternSignal(
        pattern=pattern,
        peak=float(peak.count),
        sharpness=sharpness,
        decay_rate=decay,
        sustained=sustained,
        reactive_score=score,
        explanation=explanation,
    )


# ---- Combination -------------------------------------------------------------

def build_summary(verdict: str, confidence: str, score: float, signals: ClassifierSignals) -> str:
    pct = int(round(score * 100))
    lines: List[str] = [
        f"Classification: {verdict.upper()} ({confidence} confidence)",
        "",
        f"Reactive probability: {pct}%",
        f"Pre-planned probability: {100 - pct}%",
        "",
        "Key Evidence:",
    ]
    for _, sig in signals.items():
        if sig.reactive_score is None:
            continue
        if sig.reactive_score > 0.6:
            lines.append(f"✓ {sig.explanation}")
        elif sig.reactive_score < 0.4:
            lines.append(f"✗ {sig.explanation}")
    return "\n".join(lines) + "\n"


def classify_signals(signals: ClassifierSignals) -> Classification:
    weights = select_weights(signals)
    score = combine(signals, weights)
    verdict, confidence = verdict_for(score)
    return Classification(
        verdict=verdict,
        confidence=confidence,
        reactive_score=score,
        preplanned_score=round(1 - score, 4),
        weights=weights,
        signals=signals,
        summary=build_summary(verdict, confidence, score, signals),
    )


def classify(
    dataset: Optional[LoadedDataset],
    event: Event,
    window_radius: int = DEFAULT_WINDOW_DAYS,
    baseline_days: int = DEFAULT_BASELINE_DAYS,
    context_classifier: PoliticalContextClassifier = classify_political_context,
) -> ReactivityAnalysis:
    ds = ensure_loaded(dataset)

    window = window_data(event.date, window_radius, ds.baseline)
    base = baseline_stats(event.date, baseline_days, ds.baseline)
    peak = stats.time_to_peak(window)

    signals = ClassifierSignals(
        temporal=analyze_temporal(window),
        buildup=analyze_buildup(window, base),
        magnitude=analyze_magnitude(ds, event, peak),
        symbolic=analyze_symbolic(ds, event, context_classifier),
        pattern=analyze_pattern(window),
    )
    classification = classify_signals(signals)
    _LOG.info(
        "Classified %s (%s): %s score=%.2f weights=%s",
        event.label, event.date, classification.verdict, classification.reactive_score,
        classification.weights.name,
    )
    return ReactivityAnalysis(
        event=event,
        window_radius=window_radius,
        window=window,
        baseline=base,
        classification=classification,
    )


__all__ = [
    "classify",
    "classify_signals",
    "analyze_temporal",
    "analyze_buildup",
    "analyze_magnitude",
    "analyze_symbolic",
    "analyze_pattern",
    "is_sustained",
    "nearest_political_event",
    "nearest_symbolic_date",
    "build_summary",
    "SYMBOLIC_DATES",
]
