from __future__ import annotations

from sqlalchemy import Column, DateTime, String, Text

from .db import Base


class TaskModel(Base):
    """Mapping of the externally owned ``tasks`` table."""

    __tablename__ = "tasks"

    id = Column(String, primary_key=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    status = Column(String, nullable=False)
    priority = Column(String, nullable=False)
    due_date = Column(DateTime(timezone=True), nullable=True)
    assigned_to = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=True)
