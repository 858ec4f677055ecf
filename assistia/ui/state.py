"""View state for the board, the card editor and the chat window.

These classes hold everything the widgets display and every call the widgets
make, so they can be driven without a running Qt application.
"""
from __future__ import annotations

import json
import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import StrEnum
from itertools import count
from typing import Any, Optional

from assistia.domain.entities import TaskDraft, TaskEntity
from assistia.domain.enums import ChatAction
from assistia.domain.filters import TaskFilters
from assistia.errors import DataAccessError, RelayError
from assistia.relay.webhook import Relay
from assistia.services.task_service import TaskService

logger = logging.getLogger(__name__)

CHAT_ERROR_MESSAGE = "There was an error contacting the assistant. Please try again."
REPLY_FIELDS = ("result", "message", "success")


class LoadState(StrEnum):
    IDLE = "idle"
    LOADING = "loading"
    LOADED = "loaded"
    FAILED = "failed"


class TaskBoardState:
    """List of tasks plus the client-side status filter.

    A failed refresh keeps the last loaded list on screen and records the
    error text alongside it.
    """

    def __init__(self, service: TaskService) -> None:
        self.service = service
        self.state = LoadState.IDLE
        self.tasks: list[TaskEntity] = []
        self.error: str | None = None
        self.filters = TaskFilters()

    @property
    def filter_key(self) -> str:
        return self.filters.filter_key

    @property
    def visible_tasks(self) -> list[TaskEntity]:
        return self.filters.apply(self.tasks)

    def set_filter(self, filter_key: str) -> None:
        self.filters = TaskFilters(filter_key=filter_key)

    def begin_refresh(self) -> None:
        self.state = LoadState.LOADING

    def finish_refresh(
        self,
        tasks: list[TaskEntity] | None = None,
        error: Exception | None = None,
    ) -> LoadState:
        if error is not None:
            logger.error("Failed to load tasks: %s", error)
            self.error = "Failed to load tasks"
            self.state = LoadState.FAILED
            return self.state
        self.tasks = list(tasks or [])
        self.error = None
        self.state = LoadState.LOADED
        return self.state

    def refresh(self) -> LoadState:
        self.begin_refresh()
        try:
            tasks = self.service.list_tasks()
        except DataAccessError as exc:
            return self.finish_refresh(error=exc)
        return self.finish_refresh(tasks)


class TaskEditorState:
    def __init__(
        self,
        service: TaskService,
        task: TaskEntity,
        on_task_updated: Callable[[], None] | None = None,
    ) -> None:
        self.service = service
        self.task = task
        self.draft = TaskDraft.from_task(task)
        self.saving = False
        self._on_task_updated = on_task_updated

    def fetch(self) -> TaskEntity | None:
        return self.service.get_task(self.task.id)

    def apply_loaded(
        self,
        latest: TaskEntity | None = None,
        error: Exception | None = None,
    ) -> TaskEntity:
        if error is not None:
            logger.error("Error fetching task %s: %s", self.task.id, error)
            return self.task
        if latest is None:
            logger.warning("Task %s no longer exists", self.task.id)
            return self.task
        self._replace(latest)
        return self.task

    def load(self) -> TaskEntity:
        try:
            latest = self.fetch()
        except DataAccessError as exc:
            return self.apply_loaded(error=exc)
        return self.apply_loaded(latest)

    def sync(self, task: TaskEntity) -> TaskEntity:
        """Take a newer list snapshot unless a save is in flight."""
        if not self.saving:
            self._replace(task)
        return self.task

    def edit(self, **changes) -> TaskDraft:
        if self.saving:
            return self.draft
        self.draft = replace(self.draft, **changes)
        return self.draft

    def begin_save(self) -> dict | None:
        if self.saving:
            return None
        self.saving = True
        return self.draft.as_update()

    def commit(self, update: dict) -> TaskEntity:
        return self.service.update_task(self.task.id, update)

    def finish_save(
        self,
        updated: TaskEntity | None = None,
        error: Exception | None = None,
    ) -> bool:
        self.saving = False
        if error is not None or updated is None:
            logger.error("Error updating task %s: %s", self.task.id, error)
            return False
        self._replace(updated)
        if self._on_task_updated:
            self._on_task_updated()
        return True

    def save(self) -> bool:
        update = self.begin_save()
        if update is None:
            return False
        try:
            updated = self.commit(update)
        except DataAccessError as exc:
            return self.finish_save(error=exc)
        return self.finish_save(updated)

    def _replace(self, task: TaskEntity) -> None:
        self.task = task
        self.draft = TaskDraft.from_task(task)


@dataclass(frozen=True)
class ChatRoute:
    action: ChatAction | None = None
    task_id: str | None = None

    @classmethod
    def from_params(cls, params: Mapping[str, str]) -> ChatRoute:
        raw_action = (params.get("action") or "").strip().lower()
        action = ChatAction(raw_action) if raw_action in {item.value for item in ChatAction} else None
        task_id = (params.get("taskId") or "").strip() or None
        return cls(action=action, task_id=task_id)


@dataclass(frozen=True)
class ChatMessage:
    id: str
    content: str
    sender: str
    timestamp: datetime = field(default_factory=datetime.now)


def extract_reply(response: Any) -> str:
    """First present ``result``, ``message`` or ``success`` value, else the raw JSON."""
    if isinstance(response, Mapping):
        for key in REPLY_FIELDS:
            value = response.get(key)
            if value:
                return value if isinstance(value, str) else json.dumps(value)
    return json.dumps(response)


class ChatSession:
    def __init__(self, service: TaskService, relay: Relay, route: ChatRoute) -> None:
        self.service = service
        self.relay = relay
        self.route = route
        self.messages: list[ChatMessage] = []
        self.input_text = ""
        self.sending = False
        self._ids = count(1)

    @property
    def title(self) -> str:
        return "Create New Task" if self.route.action == ChatAction.CREATE else "Update Task"

    @property
    def needs_task_title(self) -> bool:
        return self.route.action == ChatAction.UPDATE and bool(self.route.task_id)

    def start(self) -> None:
        if self.needs_task_title:
            self.seed(self.service.get_task_title(self.route.task_id))
        else:
            self.seed()

    def seed(self, task_name: str = "") -> None:
        if self.route.action == ChatAction.CREATE:
            self.input_text = "Create "
            self._append("You are creating a new task. Please provide the details.", "assistant")
        elif self.needs_task_title:
            self.input_text = f"Update {task_name} "
            self._append(
                f"You are updating the task: {task_name}. Please specify what you want to update.",
                "assistant",
            )

    def begin_send(self, text: str | None = None) -> dict | None:
        content = self.input_text if text is None else text
        if self.sending or not content.strip():
            return None

        self.sending = True
        self._append(content, "user")
        self.input_text = ""
        return {
            "action": self.route.action.value if self.route.action else None,
            "taskId": self.route.task_id,
            "message": content,
        }

    def deliver(self, payload: dict) -> Any:
        return self.relay.relay(payload)

    def finish_send(self, response: Any = None, error: Exception | None = None) -> ChatMessage:
        self.sending = False
        if error is not None:
            logger.error("Chat relay failed: %s", error)
            return self._append(CHAT_ERROR_MESSAGE, "assistant")
        return self._append(extract_reply(response), "assistant")

    def send(self, text: str | None = None) -> Optional[ChatMessage]:
        payload = self.begin_send(text)
        if payload is None:
            return None
        try:
            response = self.deliver(payload)
        except RelayError as exc:
            return self.finish_send(error=exc)
        return self.finish_send(response)

    def _append(self, content: str, sender: str) -> ChatMessage:
        message = ChatMessage(id=str(next(self._ids)), content=content, sender=sender)
        self.messages.append(message)
        return message

