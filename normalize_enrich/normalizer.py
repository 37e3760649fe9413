from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, List, Optional

from common.errors import DatasetValidationError, NoDataLoadedError
from common.schemas import ActionFilter, TaiwanAction

from .action_log import ActionLog
from .baseline_index import BaselineIndex
from .event_catalog import EventCatalog
from .event_schema import ACTIONS_DATASET, BASELINE_DATASET, validate_dataset

_LOG = logging.getLogger(__name__)


@dataclass
class LoadedDataset:
    """Per-load state: the dense baseline plus the normalized event catalog."""
    baseline: BaselineIndex
    catalog: EventCatalog
    warnings: List[str] = field(default_factory=list)
    actions: ActionLog = field(default_factory=ActionLog)

    @property
    def event_count(self) -> int:
        return len(self.catalog)

    def taiwan_actions(self, flt: Optional[ActionFilter] = None) -> List[TaiwanAction]:
        return self.actions.query(flt)


def load_dataset(data: Any) -> LoadedDataset:
    """
    Validate and index a raw dataset object.

    Refuses the whole load (DatasetValidationError listing every problem)
    when the structure is invalid. Individual records with unusable dates
    are dropped and reported in LoadedDataset.warnings instead.
    """
    errors = validate_dataset(data)
    if errors:
        raise DatasetValidationError(errors)

    baseline = BaselineIndex.from_records(data[BASELINE_DATASET])
    catalog = EventCatalog.build(data)
    actions = ActionLog.from_records(data.get(ACTIONS_DATASET))

    loaded = LoadedDataset(
        baseline=baseline,
        catalog=catalog,
        warnings=baseline.warnings + catalog.warnings + actions.warnings,
        actions=actions,
    )
    _LOG.info(
        "Dataset loaded: %d baseline dates, %d events, %d warning(s)",
        len(baseline), loaded.event_count, len(loaded.warnings),
    )
    return loaded


def ensure_loaded(dataset: Any) -> LoadedDataset:
    """Guard for analysis entry points: fail loudly when nothing is loaded."""
    if dataset is None:
        raise NoDataLoadedError()
    return dataset


__all__ = ["LoadedDataset", "load_dataset", "ensure_loaded"]
