from __future__ import annotations

import logging
from datetime import date, datetime

from assistia.domain.entities import TaskEntity
from assistia.errors import DataAccessError, RelayError
from assistia.infra.repository import UPDATABLE_COLUMNS, TaskRepository
from assistia.relay.webhook import Relay

logger = logging.getLogger(__name__)


class TaskService:
    def __init__(self, repo: TaskRepository, relay: Relay) -> None:
        self._repo = repo
        self._relay = relay

    def list_tasks(self) -> list[TaskEntity]:
        return self._repo.list_tasks()

    def get_task(self, task_id: str) -> TaskEntity | None:
        return self._repo.get_task(task_id)

    def get_task_title(self, task_id: str) -> str:
        try:
            task = self._repo.get_task(task_id)
        except DataAccessError:
            logger.warning("Could not fetch title for task %s", task_id)
            return ""
        return task.title if task else ""

    def update_task(self, task_id: str, data: dict) -> TaskEntity:
        """Apply the non-null fields of ``data`` and notify the webhook.

        A failed notification is logged and dropped; it never undoes the
        committed update.
        """
        changes = self._normalize_data(data)
        task = self._repo.update_task(task_id, changes)
        self._notify(task_id, changes)
        return task

    def _notify(self, task_id: str, changes: dict) -> None:
        payload = {"taskId": task_id, **{key: _json_value(value) for key, value in changes.items()}}
        try:
            self._relay.relay(payload)
        except RelayError:
            logger.exception("Failed to trigger n8n webhook for task %s", task_id)

    def _normalize_data(self, data: dict) -> dict:
        unknown = set(data) - UPDATABLE_COLUMNS
        if unknown:
            raise ValueError(f"Fields cannot be updated: {', '.join(sorted(unknown))}")
        normalized = {key: value for key, value in data.items() if value is not None}
        for key in ("status", "priority"):
            if key in normalized and hasattr(normalized[key], "value"):
                normalized[key] = normalized[key].value
        return normalized


def _json_value(value):
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return value
