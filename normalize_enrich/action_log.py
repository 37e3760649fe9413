from __future__ import annotations

import logging
from typing import Any, Iterable, List, Mapping, Optional

from common.schemas import ActionFilter, TaiwanAction
from shared.datetime_utils import parse_date

from .event_schema import ACTION_DATE_FIELDS

_LOG = logging.getLogger(__name__)


class ActionLog:
    """
    Taiwan-side actions (taiwan_actions), kept in source order.
    Not part of the event catalog: actions are context, never analysis anchors.
    """

    def __init__(self, actions: Iterable[TaiwanAction] = (), warnings: Optional[List[str]] = None) -> None:
        self._actions: List[TaiwanAction] = list(actions)
        self.warnings: List[str] = list(warnings or [])

    @classmethod
    def from_records(cls, records: Any) -> "ActionLog":
        if not isinstance(records, list):
            return cls()

        actions: List[TaiwanAction] = []
        warnings: List[str] = []
        for i, raw in enumerate(records):
            if not isinstance(raw, Mapping):
                warnings.append(f"taiwan_actions[{i}]: not an object")
                continue
            value = next((raw[f] for f in ACTION_DATE_FIELDS if f in raw), None)
            try:
                d = parse_date(value)
            except ValueError as e:
                warnings.append(f"taiwan_actions[{i}]: date {e}")
                continue
            actions.append(TaiwanAction(
                date=d,
                dime_category=str(raw.get("dime_category") or ""),
                original_fields=dict(raw),
            ))

        if warnings:
            _LOG.warning("Actions: dropped %d record(s): %s", len(warnings), "; ".join(warnings[:10]))
        _LOG.info("Actions loaded: %d", len(actions))
        return cls(actions, warnings)

    def __len__(self) -> int:
        return len(self._actions)

    def query(self, flt: Optional[ActionFilter] = None) -> List[TaiwanAction]:
        return [a for a in self._actions if flt is None or flt.matches(a)]

    def dime_categories(self) -> List[str]:
        seen: List[str] = []
        for a in self._actions:
            if a.dime_category and a.dime_category not in seen:
                seen.append(a.dime_category)
        return seen


__all__ = ["ActionLog"]
