from __future__ import annotations

import datetime as dt
from typing import Any, Dict, Iterator, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field

Verdict = Literal["reactive", "pre-planned", "mixed"]
Confidence = Literal["low", "medium", "high"]

SIGNAL_KEYS: Tuple[str, ...] = ("temporal", "buildup", "magnitude", "symbolic", "pattern")


# ---- Loaded data -------------------------------------------------------------

class TimeSeriesPoint(BaseModel):
    model_config = ConfigDict(frozen=True)

    date: dt.date
    count: int = 0


class Event(BaseModel):
    """One normalized catalog event. Identity is (date, label)."""
    model_config = ConfigDict(frozen=True)

    date: dt.date
    category: str
    label: str
    description: str = ""
    source_dataset: str
    original_fields: Dict[str, Any] = Field(default_factory=dict)

    def same_as(self, other: "Event") -> bool:
        return self.date == other.date and self.label == other.label


class EventFilter(BaseModel):
    """Conjunctive catalog filter; None (or 'all' / 'ALL') disables a clause."""
    category: Optional[str] = None
    start_date: Optional[dt.date] = None
    end_date: Optional[dt.date] = None
    dataset: Optional[str] = None
    year: Optional[Union[int, str]] = None

    def matches(self, event: Event) -> bool:
        if self.category and self.category != "all" and event.category != self.category:
            return False
        if self.start_date and event.date < self.start_date:
            return False
        if self.end_date and event.date > self.end_date:
            return False
        if self.year and self.year != "ALL" and str(event.date.year) != str(self.year):
            return False
        if self.dataset and event.source_dataset != self.dataset:
            return False
        return True


class TaiwanAction(BaseModel):
    """One Taiwan-side action from the taiwan_actions collection, tagged by DIME category."""
    model_config = ConfigDict(frozen=True)

    date: dt.date
    dime_category: str = ""
    original_fields: Dict[str, Any] = Field(default_factory=dict)


class ActionFilter(BaseModel):
    """Conjunctive action filter; dime_category may be one category or a list of them."""
    dime_category: Optional[Union[str, List[str]]] = None
    start_date: Optional[dt.date] = None
    end_date: Optional[dt.date] = None
    year: Optional[Union[int, str]] = None

    def matches(self, action: TaiwanAction) -> bool:
        if self.dime_category:
            wanted = [self.dime_category] if isinstance(self.dime_category, str) else self.dime_category
            if action.dime_category not in wanted:
                return False
        if self.start_date and action.date < self.start_date:
            return False
        if self.end_date and action.date > self.end_date:
            return False
        if self.year and self.year != "ALL" and str(action.date.year) != str(self.year):
            return False
        return True


# ---- Window analysis ---------------------------------------------------------

class WindowPoint(BaseModel):
    model_config = ConfigDict(frozen=True)

    offset: int
    date: dt.date
    count: int


class BaselineStats(BaseModel):
    model_config = ConfigDict(frozen=True)

    mean: float = 0.0
    std_dev: float = 0.0
    max: float = 0.0
    min: float = 0.0
    sample_count: int = 0


class WindowStats(BaseModel):
    mean: float = 0.0
    max: float = 0.0
    min: float = 0.0
    std_dev: float = 0.0


class PeakPoint(BaseModel):
    offset: int
    count: int
    date: dt.date


class Impact(BaseModel):
    mean_delta: float
    mean_delta_percent: Optional[float] = None  # None when the baseline mean is 0
    time_to_peak: Optional[PeakPoint] = None
    persistence: int = 0
    threshold: float = 0.0


class EventAnalysis(BaseModel):
    event: Event
    window_radius: int
    baseline_days: int
    window: List[WindowPoint]
    baseline: BaselineStats
    window_stats: WindowStats
    impact: Impact
    confounders: List[Event] = Field(default_factory=list)


# ---- Aggregate / A-B ---------------------------------------------------------

class EventResponse(BaseModel):
    event: Event
    window: List[WindowPoint]
    baseline: BaselineStats
    peak: float
    time_to_peak: Optional[int] = None
    avg_7day_spike: float
    delta: float


class CurvePoint(BaseModel):
    offset: int
    mean: float
    std_dev: float
    upper_bound: float
    lower_bound: float
    count: int


class GroupStats(BaseModel):
    avg_peak: float
    avg_peak_std_dev: float
    median_peak: float
    max_peak: float
    min_peak: float
    avg_7day_spike: float
    avg_delta: float
    avg_time_to_peak: Optional[float] = None
    peak_day: int
    peak_day_value: float
    avg_baseline: float
    avg_increase: float


class GroupAnalysis(BaseModel):
    name: Optional[str] = None
    filter: EventFilter
    event_count: int
    window_radius: int
    curve: List[CurvePoint]
    responses: List[EventResponse]
    stats: GroupStats
    top_events: List[EventResponse] = Field(default_factory=list)
    bottom_events: List[EventResponse] = Field(default_factory=list)


class Recommendation(BaseModel):
    summary: str
    details: List[str] = Field(default_factory=list)
    severity: str
    less_inflammatory: str


class ComparisonMetrics(BaseModel):
    # Ratios are None when the denominator is (near) zero
    peak_ratio: Optional[float] = None
    increase_ratio: Optional[float] = None
    spike_ratio: Optional[float] = None
    peak_diff: float
    increase_diff: float
    spike_diff: float
    more_inflammatory: Literal["A", "B"]
    inflammatory_margin: Optional[float] = None
    recommendation: Recommendation


class GroupComparison(BaseModel):
    group_a: GroupAnalysis
    group_b: GroupAnalysis
    comparison: ComparisonMetrics
    window_radius: int


# ---- Classifier --------------------------------------------------------------

class Signal(BaseModel):
    """One classifier dimension. 1 = reactive, 0 = pre-planned, 0.5 = neutral."""
    reactive_score: Optional[float] = None
    explanation: str = ""


class TemporalSignal(Signal):
    category: str
    response_time: Optional[int] = None


class BuildupSignal(Signal):
    trend: str
    slope: Optional[float] = None
    avg_pre_event: Optional[float] = None
    baseline: Optional[float] = None


class MagnitudeSignal(Signal):
    comparison: str
    this_peak: Optional[float] = None
    avg_similar_peak: Optional[float] = None
    ratio: Optional[float] = None
    compound: bool = False


class SymbolicSignal(Signal):
    is_symbolic: bool = False
    source: Optional[Literal["political_event", "symbolic_date"]] = None
    matched_name: Optional[str] = None
    context: Optional[str] = None
    days_away: Optional[int] = None


class PatternSignal(Signal):
    pattern: str
    peak: Optional[float] = None
    sharpness: Optional[float] = None
    decay_rate: Optional[float] = None
    sustained: bool = False


class ClassifierSignals(BaseModel):
    temporal: TemporalSignal
    buildup: BuildupSignal
    magnitude: MagnitudeSignal
    symbolic: SymbolicSignal
    pattern: PatternSignal

    def items(self) -> Iterator[Tuple[str, Signal]]:
        for key in SIGNAL_KEYS:
            yield key, getattr(self, key)


class WeightVector(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    temporal: float
    buildup: float
    magnitude: float
    symbolic: float
    pattern: float

    def get(self, key: str) -> float:
        return getattr(self, key)


class Classification(BaseModel):
    verdict: Verdict
    confidence: Confidence
    reactive_score: float
    preplanned_score: float
    weights: WeightVector
    signals: ClassifierSignals
    summary: str


class ReactivityAnalysis(BaseModel):
    event: Event
    window_radius: int
    window: List[WindowPoint]
    baseline: BaselineStats
    classification: Classification
