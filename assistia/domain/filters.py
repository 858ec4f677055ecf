from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from .entities import TaskEntity
from .enums import CanonicalStatus
from .status import normalize_status

FILTER_ALL = "all"
FILTER_KEYS = (FILTER_ALL, *(status.value for status in CanonicalStatus))


@dataclass(frozen=True)
class TaskFilters:
    filter_key: str = FILTER_ALL

    def __post_init__(self) -> None:
        if self.filter_key not in FILTER_KEYS:
            raise ValueError(f"Unknown filter {self.filter_key!r}")

    def matches(self, task: TaskEntity) -> bool:
        if self.filter_key == FILTER_ALL:
            return True
        return normalize_status(task.status) == self.filter_key

    def apply(self, tasks: Iterable[TaskEntity]) -> list[TaskEntity]:
        return [task for task in tasks if self.matches(task)]
