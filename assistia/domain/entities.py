from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class TaskEntity:
    id: str
    title: str
    description: str
    status: str
    priority: str
    due_date: Optional[datetime]
    assigned_to: str | None
    created_at: Optional[datetime]


@dataclass(frozen=True)
class TaskDraft:
    status: str
    priority: str
    assigned_to: str
    due_date: Optional[datetime]

    @classmethod
    def from_task(cls, task: TaskEntity) -> TaskDraft:
        return cls(
            status=task.status,
            priority=task.priority,
            assigned_to=task.assigned_to or "",
            due_date=task.due_date,
        )

    def as_update(self) -> dict:
        return {
            "status": self.status,
            "priority": self.priority,
            "assigned_to": self.assigned_to,
            "due_date": self.due_date,
        }
