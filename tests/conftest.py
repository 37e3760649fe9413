# Make the repository root importable during tests
import sys
from datetime import date, timedelta
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import pytest

# tests/ is one level below the repo root
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from normalize_enrich.normalizer import LoadedDataset, load_dataset  # noqa: E402


class DatasetBuilder:
    """
    Synthetic raw dataset: a dense baseline at a flat level plus event rows.
    Counts can be overridden per date or per offset from an anchor date.
    """

    def __init__(self, start: date = date(2024, 1, 1), days: int = 180, level: int = 10) -> None:
        self.counts: Dict[date, int] = {start + timedelta(days=i): level for i in range(days)}
        self.events: Dict[str, List[Dict[str, Any]]] = {}

    def set(self, d: date, value: int) -> "DatasetBuilder":
        self.counts[d] = value
        return self

    def shape(self, anchor: date, by_offset: Mapping[int, int]) -> "DatasetBuilder":
        for off, value in by_offset.items():
            self.counts[anchor + timedelta(days=off)] = value
        return self

    def add(self, dataset: str, **fields: Any) -> "DatasetBuilder":
        row = {k: (v.isoformat() if isinstance(v, date) else v) for k, v in fields.items()}
        self.events.setdefault(dataset, []).append(row)
        return self

    def diplomatic(self, d: date, descriptor: str) -> "DatasetBuilder":
        return self.add("diplomatic", Date=d, Descriptor=descriptor)

    def arms(self, d: date, sale: str) -> "DatasetBuilder":
        return self.add("arms_sales", date=d, weapon_sale=sale)

    def political(self, d: date, name: str, short_label: Optional[str] = None, description: str = "") -> "DatasetBuilder":
        fields: Dict[str, Any] = {"date": d, "event_name": name, "description": description}
        if short_label:
            fields["short_label"] = short_label
        return self.add("political_symbolic", **fields)

    def raw(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "adiz_baseline": [{"Date": d.isoformat(), "ADIZ_count": c} for d, c in sorted(self.counts.items())],
        }
        for name, rows in self.events.items():
            data[name] = list(rows)
        return data

    def load(self) -> LoadedDataset:
        return load_dataset(self.raw())


@pytest.fixture
def builder() -> DatasetBuilder:
    return DatasetBuilder()


@pytest.fixture
def make_builder():
    return DatasetBuilder
