from __future__ import annotations

from typing import Tuple

from common.schemas import ClassifierSignals, Confidence, Verdict, WeightVector

BASE_WEIGHTS = WeightVector(
    name="base", temporal=0.35, buildup=0.25, magnitude=0.20, symbolic=0.10, pattern=0.10,
)
# Sharp spike + rapid decay: lean on magnitude and curve shape
SHARP_DECAY_WEIGHTS = WeightVector(
    name="sharp_decay", temporal=0.30, buildup=0.20, magnitude=0.25, symbolic=0.05, pattern=0.20,
)
# Large spike close to the event: lean on magnitude further
IMMEDIATE_MAGNITUDE_WEIGHTS = WeightVector(
    name="immediate_magnitude", temporal=0.30, buildup=0.20, magnitude=0.30, symbolic=0.10, pattern=0.10,
)

SHARP_DECAY_PATTERN = "sharp_spike_rapid_decay"

REACTIVE_THRESHOLD = 0.65
PREPLANNED_THRESHOLD = 0.35
HIGH_REACTIVE = 0.8
HIGH_PREPLANNED = 0.2
NEUTRAL = 0.5


def is_sharp_decay(signals: ClassifierSignals) -> bool:
    return signals.pattern.pattern == SHARP_DECAY_PATTERN


def is_immediate_magnitude(signals: ClassifierSignals) -> bool:
    return signals.magnitude.compound


def select_weights(signals: ClassifierSignals) -> WeightVector:
    """Pick the weight vector once per classification; first override wins."""
    if is_sharp_decay(signals):
        return SHARP_DECAY_WEIGHTS
    if is_immediate_magnitude(signals):
        return IMMEDIATE_MAGNITUDE_WEIGHTS
    return BASE_WEIGHTS


def combine(signals: ClassifierSignals, weights: WeightVector) -> float:
    """
    Weighted mean over signals with a defined score. Undefined signals drop
    out of numerator and denominator alike. Rounded to 4 places so threshold
    comparisons are not at the mercy of float noise.
    """
    total = 0.0
    used = 0.0
    for key, sig in signals.items():
        if sig.reactive_score is None:
            continue
        w = weights.get(key)
        total += sig.reactive_score * w
        used += w
    if used <= 0:
        return NEUTRAL
    return round(min(1.0, max(0.0, total / used)), 4)


def verdict_for(score: float) -> Tuple[Verdict, Confidence]:
    if score >= REACTIVE_THRESHOLD:
        return "reactive", "high" if score >= HIGH_REACTIVE else "medium"
    if score <= PREPLANNED_THRESHOLD:
        return "pre-planned", "high" if score <= HIGH_PREPLANNED else "medium"
    return "mixed", "low"


__all__ = [
    "BASE_WEIGHTS",
    "SHARP_DECAY_WEIGHTS",
    "IMMEDIATE_MAGNITUDE_WEIGHTS",
    "is_sharp_decay",
    "is_immediate_magnitude",
    "select_weights",
    "combine",
    "verdict_for",
]
