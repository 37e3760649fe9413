from __future__ import annotations

import logging
from datetime import timedelta
from typing import Any, Callable, Iterable, List, Mapping, Optional

from common.schemas import Event, EventFilter
from shared.datetime_utils import DateLike, parse_date

from .event_schema import EVENT_DATASETS, missing_required, normalize_event

_LOG = logging.getLogger(__name__)

EventPredicate = Callable[[Event], bool]


class EventCatalog:
    """
    Normalized, date-sorted index of every event in a loaded dataset.
    Rebuilt wholesale on reload; never patched in place.
    """

    def __init__(self, events: Iterable[Event], warnings: Optional[List[str]] = None) -> None:
        # sorted() is stable: same-date events keep their source order
        self._events: List[Event] = sorted(events, key=lambda e: e.date)
        self.warnings: List[str] = list(warnings or [])

    @classmethod
    def build(cls, data: Mapping[str, Any]) -> "EventCatalog":
        events: List[Event] = []
        warnings: List[str] = []

        for name in EVENT_DATASETS:
            records = data.get(name)
            if not isinstance(records, list):
                continue
            for i, raw in enumerate(records):
                if not isinstance(raw, Mapping):
                    warnings.append(f"{name}[{i}]: not an object")
                    continue
                try:
                    ev = normalize_event(name, raw)
                except ValueError as e:
                    warnings.append(f"{name}[{i}]: date {e}")
                    continue
                if ev is None:
                    continue
                missing = missing_required(name, raw)
                if missing:
                    warnings.append(f"{name}[{i}]: missing {', '.join(missing)}")
                events.append(ev)

        if warnings:
            preview = "; ".join(warnings[:10])
            more = "" if len(warnings) <= 10 else f" (+{len(warnings) - 10} more)"
            _LOG.warning("Catalog: %d record warning(s): %s%s", len(warnings), preview, more)
        _LOG.info("Catalog built: %d events", len(events))
        return cls(events, warnings)

    def __len__(self) -> int:
        return len(self._events)

    def __iter__(self):
        return iter(list(self._events))

    def query(
        self,
        flt: Optional[EventFilter] = None,
        predicate: Optional[EventPredicate] = None,
    ) -> List[Event]:
        """Snapshot of the events matching every given clause."""
        out = [e for e in self._events if flt is None or flt.matches(e)]
        if predicate is not None:
            out = [e for e in out if predicate(e)]
        return out

    def events_in_window(self, center: DateLike, radius: int) -> List[Event]:
        c = parse_date(center)
        return self.query(EventFilter(start_date=c - timedelta(days=radius), end_date=c + timedelta(days=radius)))

    def categories(self) -> List[str]:
        seen: List[str] = []
        for e in self._events:
            if e.category not in seen:
                seen.append(e.category)
        return seen


__all__ = ["EventCatalog", "EventPredicate"]
