from __future__ import annotations

from typing import Any, List, Optional


class DatasetValidationError(ValueError):
    """Raised when a raw dataset fails validation. Carries every problem found."""

    def __init__(self, errors: List[str]) -> None:
        self.errors = list(errors)
        super().__init__("Invalid dataset structure: " + ", ".join(self.errors))


class NoDataLoadedError(RuntimeError):
    """Raised by analysis calls made before a dataset was loaded."""

    def __init__(self, message: str = "Data not loaded") -> None:
        super().__init__(message)


class EmptyResultError(LookupError):
    """Raised when a filter combination matches zero events."""

    def __init__(self, message: str, *, filters: Any = None, group: Optional[str] = None) -> None:
        self.filters = filters
        self.group = group
        super().__init__(message)
