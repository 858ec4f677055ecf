from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from assistia.domain.entities import TaskEntity
from assistia.errors import DataAccessError, NotFoundError

from .models import TaskModel

logger = logging.getLogger(__name__)

UPDATABLE_COLUMNS = frozenset({"status", "priority", "assigned_to", "due_date"})


def _to_entity(model: TaskModel) -> TaskEntity:
    return TaskEntity(
        id=model.id,
        title=model.title or "",
        description=model.description or "",
        status=model.status or "",
        priority=model.priority or "",
        due_date=model.due_date,
        assigned_to=model.assigned_to,
        created_at=model.created_at,
    )


class TaskRepository:
    def __init__(self, session_factory: sessionmaker) -> None:
        self._session_factory = session_factory

    def list_tasks(self) -> list[TaskEntity]:
        """Tasks by ascending due date; tasks without one come last."""
        stmt = select(TaskModel).order_by(
            TaskModel.due_date.is_(None),
            TaskModel.due_date.asc(),
            TaskModel.created_at.asc(),
            TaskModel.id.asc(),
        )
        try:
            with self._session_factory() as session:
                return [_to_entity(task) for task in session.scalars(stmt)]
        except SQLAlchemyError as exc:
            logger.exception("Failed to list tasks")
            raise DataAccessError("Failed to load tasks") from exc

    def get_task(self, task_id: str) -> Optional[TaskEntity]:
        try:
            with self._session_factory() as session:
                task = session.get(TaskModel, task_id)
                return _to_entity(task) if task else None
        except SQLAlchemyError as exc:
            logger.exception("Failed to fetch task %s", task_id)
            raise DataAccessError(f"Failed to load task {task_id!r}") from exc

    def update_task(self, task_id: str, data: dict) -> TaskEntity:
        unknown = set(data) - UPDATABLE_COLUMNS
        if unknown:
            raise ValueError(f"Fields cannot be updated: {', '.join(sorted(unknown))}")

        with self._session_factory() as session:
            try:
                task = session.get(TaskModel, task_id)
                if not task:
                    raise NotFoundError(task_id)
                for key, value in data.items():
                    setattr(task, key, value)
                session.commit()
                session.refresh(task)
                return _to_entity(task)
            except SQLAlchemyError as exc:
                session.rollback()
                logger.exception("Failed to update task %s", task_id)
                raise DataAccessError(f"Failed to update task {task_id!r}") from exc
