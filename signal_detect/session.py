"""
Caller-owned analysis state.

AnalysisSession holds the currently loaded dataset and the latest result of
each analysis kind, so chart/card accessors can be called after the fact.
The analysis functions themselves stay pure; nothing here is module-global.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from common.config import AnalysisSettings
from common.schemas import (
    ActionFilter,
    Event,
    EventAnalysis,
    EventFilter,
    GroupAnalysis,
    GroupComparison,
    ReactivityAnalysis,
    TaiwanAction,
)
from data_ingest.dataset_loader import read_dataset_file
from normalize_enrich.normalizer import LoadedDataset, ensure_loaded, load_dataset
from reporting import formatter
from shared.datetime_utils import DateLike, parse_date

from .ab_compare import compare_groups
from .aggregate import analyze_category
from .classifier import classify
from .rules_political import PoliticalContextClassifier, classify_political_context
from .window_analyzer import analyze_event

_LOG = logging.getLogger(__name__)


class AnalysisSession:
    def __init__(
        self,
        settings: Optional[AnalysisSettings] = None,
        context_classifier: PoliticalContextClassifier = classify_political_context,
    ) -> None:
        self.settings = settings or AnalysisSettings.from_env()
        self.context_classifier = context_classifier
        self._dataset: Optional[LoadedDataset] = None
        self._event: Optional[EventAnalysis] = None
        self._category: Optional[GroupAnalysis] = None
        self._comparison: Optional[GroupComparison] = None
        self._classification: Optional[ReactivityAnalysis] = None

    # ---- loading ---------------------------------------------------------

    @property
    def dataset(self) -> Optional[LoadedDataset]:
        return self._dataset

    @property
    def loaded(self) -> bool:
        return self._dataset is not None

    def load(self, raw: Any) -> LoadedDataset:
        """
        Replace the loaded dataset. On validation failure the previous
        dataset (if any) stays in place and the error propagates.
        """
        ds = load_dataset(raw)
        self._dataset = ds
        # Results computed against the old data no longer apply
        self._event = self._category = self._comparison = self._classification = None
        return ds

    def load_file(self, path: Union[str, Path]) -> LoadedDataset:
        _LOG.info("Loading dataset from %s", path)
        return self.load(read_dataset_file(path))

    def find_events(self, on: DateLike, label: Optional[str] = None) -> List[Event]:
        d = parse_date(on)
        ds = ensure_loaded(self._dataset)
        return ds.catalog.query(
            EventFilter(start_date=d, end_date=d),
            predicate=(lambda e: e.label == label) if label else None,
        )

    def taiwan_actions(self, flt: Optional[ActionFilter] = None) -> List[TaiwanAction]:
        return ensure_loaded(self._dataset).taiwan_actions(flt)

    # ---- analyses --------------------------------------------------------

    def analyze_event(
        self, event: Event, window_radius: Optional[int] = None, baseline_days: Optional[int] = None,
    ) -> EventAnalysis:
        self._event = analyze_event(
            self._dataset,
            event,
            window_radius if window_radius is not None else self.settings.event_window_days,
            baseline_days if baseline_days is not None else self.settings.baseline_days,
        )
        return self._event

    def analyze_category(
        self, flt: EventFilter, window_radius: Optional[int] = None, baseline_days: Optional[int] = None,
    ) -> GroupAnalysis:
        self._category = analyze_category(
            self._dataset,
            flt,
            window_radius if window_radius is not None else self.settings.aggregate_window_days,
            baseline_days if baseline_days is not None else self.settings.baseline_days,
        )
        return self._category

    def compare(
        self,
        filter_a: EventFilter,
        filter_b: EventFilter,
        window_radius: Optional[int] = None,
        baseline_days: Optional[int] = None,
    ) -> GroupComparison:
        self._comparison = compare_groups(
            self._dataset,
            filter_a,
            filter_b,
            window_radius if window_radius is not None else self.settings.aggregate_window_days,
            baseline_days if baseline_days is not None else self.settings.baseline_days,
        )
        return self._comparison

    def classify(
        self, event: Event, window_radius: Optional[int] = None, baseline_days: Optional[int] = None,
    ) -> ReactivityAnalysis:
        self._classification = classify(
            self._dataset,
            event,
            window_radius if window_radius is not None else self.settings.classifier_window_days,
            baseline_days if baseline_days is not None else self.settings.baseline_days,
            context_classifier=self.context_classifier,
        )
        return self._classification

    # ---- latest results --------------------------------------------------

    @property
    def last_event(self) -> Optional[EventAnalysis]:
        return self._event

    @property
    def last_category(self) -> Optional[GroupAnalysis]:
        return self._category

    @property
    def last_comparison(self) -> Optional[GroupComparison]:
        return self._comparison

    @property
    def last_classification(self) -> Optional[ReactivityAnalysis]:
        return self._classification

    # ---- projections (None until the matching analysis has run) ----------

    def event_chart(self) -> Optional[Dict[str, Any]]:
        return formatter.event_chart(self._event) if self._event else None

    def event_summary_card(self) -> Optional[Dict[str, Any]]:
        return formatter.event_summary_card(self._event) if self._event else None

    def event_confounders(self) -> Optional[List[Event]]:
        return formatter.event_confounders(self._event) if self._event else None

    def category_curve(self) -> Optional[Dict[str, Any]]:
        return formatter.category_curve(self._category) if self._category else None

    def category_overlay(self) -> Optional[List[Dict[str, Any]]]:
        return formatter.category_overlay(self._category) if self._category else None

    def category_summary(self) -> Optional[Dict[str, Any]]:
        return formatter.category_summary(self._category) if self._category else None

    def top_events(self) -> Optional[List[Dict[str, Any]]]:
        return formatter.event_rows(self._category.top_events) if self._category else None

    def bottom_events(self) -> Optional[List[Dict[str, Any]]]:
        return formatter.event_rows(self._category.bottom_events) if self._category else None

    def overlaid_curves(self) -> Optional[Dict[str, Any]]:
        return formatter.overlaid_curves(self._comparison) if self._comparison else None

    def comparison_bars(self) -> Optional[Dict[str, Any]]:
        return formatter.comparison_bars(self._comparison) if self._comparison else None

    def signal_breakdown(self) -> Optional[Dict[str, Any]]:
        return formatter.signal_breakdown(self._classification) if self._classification else None

    def pre_event_trend(self) -> Optional[Dict[str, List[int]]]:
        return formatter.pre_event_trend(self._classification) if self._classification else None


__all__ = ["AnalysisSession"]
