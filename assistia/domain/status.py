"""Presentation helpers for raw status and priority values.

The store keeps whatever status text was written. Everything here derives a
display value from it and never feeds back into a write.
"""
from __future__ import annotations

from .enums import CanonicalStatus, Priority, StoredStatus

_STATUS_MAP = {
    StoredStatus.NOT_STARTED.value: CanonicalStatus.TODO.value,
    StoredStatus.PENDING.value: CanonicalStatus.IN_PROGRESS.value,
    StoredStatus.COMPLETED.value: CanonicalStatus.COMPLETED.value,
}

STATUS_LABELS = {
    CanonicalStatus.TODO.value: "To Do",
    CanonicalStatus.IN_PROGRESS.value: "In Progress",
    CanonicalStatus.COMPLETED.value: "Completed",
}

STATUS_COLORS = {
    CanonicalStatus.TODO.value: "#6B7280",
    CanonicalStatus.IN_PROGRESS.value: "#3B82F6",
    CanonicalStatus.COMPLETED.value: "#22C55E",
}
DEFAULT_STATUS_COLOR = "#6B7280"

PRIORITY_COLORS = {
    Priority.HIGH.value: "#EF4444",
    Priority.MEDIUM.value: "#EAB308",
    Priority.LOW.value: "#22C55E",
}
DEFAULT_PRIORITY_COLOR = "#3B82F6"


def normalize_status(raw: str | None) -> str:
    """Collapse a stored status into ``todo``, ``in-progress`` or ``completed``.

    Unrecognised values come back lowercased. Canonical keys map onto
    themselves, so the function is idempotent.
    """
    value = (raw or "").lower()
    return _STATUS_MAP.get(value, value)


def status_label(raw: str | None) -> str:
    normalized = normalize_status(raw)
    if normalized in STATUS_LABELS:
        return STATUS_LABELS[normalized]
    text = raw or ""
    return text[:1].upper() + text[1:].replace("-", " ", 1)


def status_color(raw: str | None) -> str:
    return STATUS_COLORS.get(normalize_status(raw), DEFAULT_STATUS_COLOR)


def priority_label(raw: str | None) -> str:
    text = raw or ""
    return text[:1].upper() + text[1:].lower()


def priority_color(raw: str | None) -> str:
    return PRIORITY_COLORS.get((raw or "").lower(), DEFAULT_PRIORITY_COLOR)
