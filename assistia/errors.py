from __future__ import annotations


class AssistiaError(Exception):
    """Base class for every error raised by the application."""


class ConfigError(AssistiaError):
    pass


class DataAccessError(AssistiaError):
    """The task store could not be reached or rejected the operation."""


class NotFoundError(DataAccessError):
    def __init__(self, task_id: str) -> None:
        super().__init__(f"Task {task_id!r} not found")
        self.task_id = task_id


class RelayError(AssistiaError):
    """Webhook forwarding failed.

    ``public_message`` is safe to show to callers; the exception text may carry
    upstream detail and is only meant for the server log.
    """

    public_message = "Failed to trigger n8n webhook"


class RelayConfigError(RelayError):
    public_message = "N8N webhook URL not configured"


class RelayTransportError(RelayError):
    public_message = "Failed to trigger n8n webhook"
