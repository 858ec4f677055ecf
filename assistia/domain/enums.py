from __future__ import annotations

from enum import StrEnum


class CanonicalStatus(StrEnum):
    TODO = "todo"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"


class StoredStatus(StrEnum):
    NOT_STARTED = "not started"
    PENDING = "pending"
    COMPLETED = "completed"


class Priority(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class ChatAction(StrEnum):
    CREATE = "create"
    UPDATE = "update"
