"""
Dataset contract and per-dataset field mapping.

Each event dataset is described by one DatasetSchema entry: which field holds
the date, the category tag it maps to, and how label/description are derived.
Adding a source dataset means adding a row to EVENT_DATASETS; the
normalization code itself does not change.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from string import Formatter
from typing import Any, Dict, List, Mapping, Optional, Tuple

from common.schemas import Event
from shared.datetime_utils import parse_date

BASELINE_DATASET = "adiz_baseline"
BASELINE_DATE_FIELDS: Tuple[str, ...] = ("Date", "date")
BASELINE_COUNT_FIELDS: Tuple[str, ...] = ("ADIZ_count", "count")

ACTIONS_DATASET = "taiwan_actions"
ACTION_DATE_FIELDS: Tuple[str, ...] = ("date", "Date")


@dataclass(frozen=True)
class FieldRule:
    """
    First template whose referenced fields are all present (non-empty) wins.
    Output longer than max_len is cut and suffixed with '...'.
    """
    templates: Tuple[str, ...]
    default: str = ""
    max_len: Optional[int] = None

    def render(self, record: Mapping[str, Any]) -> str:
        for tpl in self.templates:
            names = [name for _, name, _, _ in Formatter().parse(tpl) if name]
            values = {n: record.get(n) for n in names}
            if any(v is None or str(v).strip() == "" for v in values.values()):
                continue
            text = tpl.format(**{k: str(v).strip() for k, v in values.items()})
            if self.max_len is not None and len(text) > self.max_len:
                text = text[: self.max_len] + "..."
            return text
        return self.default


@dataclass(frozen=True)
class DatasetSchema:
    date_field: str
    category: str
    label: FieldRule
    description: FieldRule
    required: Tuple[str, ...] = field(default_factory=tuple)


EVENT_DATASETS: Dict[str, DatasetSchema] = {
    "arms_sales": DatasetSchema(
        date_field="date",
        category="arms",
        label=FieldRule(("{weapon_sale}",), default="Arms Sale", max_len=50),
        description=FieldRule(("{weapon_sale}",)),
        required=("date", "weapon_sale"),
    ),
    "diplomatic": DatasetSchema(
        date_field="Date",
        category="diplomatic",
        label=FieldRule(("{Descriptor}",), default="Diplomatic Event", max_len=50),
        description=FieldRule(("{Descriptor}",)),
        required=("Date", "Descriptor"),
    ),
    "bills": DatasetSchema(
        date_field="Date",
        category="bills",
        label=FieldRule(("{Bill_ID} - {Milestone}",), default="Bill Milestone"),
        description=FieldRule(("{Bill_ID}: {Milestone}",)),
        required=("Date", "Bill_ID", "Milestone"),
    ),
    "ships": DatasetSchema(
        date_field="Date",
        category="ships",
        label=FieldRule(("{Country} - {Ship_Type}",), default="Ship Transit"),
        description=FieldRule(("{Label}", "{Country} {Ship_Type}")),
        required=("Date", "Country", "Ship_Type"),
    ),
    "political_symbolic": DatasetSchema(
        date_field="date",
        category="political",
        label=FieldRule(("{short_label}", "{event_name}"), default="Political Event"),
        description=FieldRule(("{description}", "{event_name}")),
        required=("date", "event_name"),
    ),
}


def normalize_event(dataset_name: str, raw: Mapping[str, Any]) -> Optional[Event]:
    """
    Map one raw record onto the common Event shape.
    Returns None for an unknown dataset.

    Raises ValueError ("missing" / "unparseable" / "out_of_range") when the
    record's date cannot be resolved.
    """
    schema = EVENT_DATASETS.get(dataset_name)
    if schema is None:
        return None

    d = parse_date(raw.get(schema.date_field))
    return Event(
        date=d,
        category=schema.category,
        label=schema.label.render(raw),
        description=schema.description.render(raw),
        source_dataset=dataset_name,
        original_fields=dict(raw),
    )


def missing_required(dataset_name: str, raw: Mapping[str, Any]) -> List[str]:
    schema = EVENT_DATASETS.get(dataset_name)
    if schema is None:
        return []
    return [f for f in schema.required if raw.get(f) in (None, "")]


def validate_dataset(data: Any) -> List[str]:
    """
    Structural checks on a raw dataset object. Returns every problem found;
    an empty list means the dataset can be loaded.
    """
    errors: List[str] = []

    if not isinstance(data, Mapping):
        errors.append("DATA is not an object")
        return errors

    baseline = data.get(BASELINE_DATASET)
    if not isinstance(baseline, list):
        errors.append(f"Missing or invalid {BASELINE_DATASET} array")

    for name in (*EVENT_DATASETS, ACTIONS_DATASET):
        if name in data and data[name] is not None and not isinstance(data[name], list):
            errors.append(f"{name} must be an array")

    return errors


__all__ = [
    "BASELINE_DATASET",
    "BASELINE_DATE_FIELDS",
    "BASELINE_COUNT_FIELDS",
    "ACTIONS_DATASET",
    "ACTION_DATE_FIELDS",
    "FieldRule",
    "DatasetSchema",
    "EVENT_DATASETS",
    "normalize_event",
    "missing_required",
    "validate_dataset",
]
