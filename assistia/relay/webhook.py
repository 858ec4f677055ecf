"""Forwarding of JSON payloads to the external automation webhook."""
from __future__ import annotations

import logging
from typing import Any, Protocol

import requests

from assistia.config import Settings
from assistia.errors import RelayConfigError, RelayTransportError

logger = logging.getLogger(__name__)

SUCCESS_RESPONSE = {"success": True}


class Relay(Protocol):
    def relay(self, payload: dict[str, Any]) -> dict[str, Any]: ...


class WebhookRelay:
    """POSTs payloads verbatim to ``destination_url``.

    No retries and no timeout override: a failed forward is reported once and
    the caller decides what to do with it.
    """

    def __init__(self, destination_url: str | None, session: requests.Session | None = None) -> None:
        self.destination_url = destination_url
        self._session = session or requests.Session()

    @property
    def configured(self) -> bool:
        return bool(self.destination_url)

    def relay(self, payload: dict[str, Any]) -> dict[str, Any]:
        if not self.configured:
            logger.error("Webhook relay called without a destination URL")
            raise RelayConfigError("N8N webhook URL not configured")

        try:
            response = self._session.post(self.destination_url, json=payload)
        except requests.RequestException as exc:
            logger.error("Error triggering n8n webhook: %s", exc)
            raise RelayTransportError(str(exc)) from exc

        if not response.ok:
            logger.error(
                "Error triggering n8n webhook: HTTP %s %s",
                response.status_code,
                response.reason,
            )
            raise RelayTransportError(f"HTTP {response.status_code} {response.reason}")

        return dict(SUCCESS_RESPONSE)


class RelayEndpointClient:
    """Calls a running relay server instead of the webhook itself."""

    def __init__(self, endpoint_url: str, session: requests.Session | None = None) -> None:
        self.endpoint_url = endpoint_url
        self._session = session or requests.Session()

    def relay(self, payload: dict[str, Any]) -> dict[str, Any]:
        try:
            response = self._session.post(self.endpoint_url, json=payload)
            response.raise_for_status()
            return response.json()
        except requests.RequestException as exc:
            logger.error("Relay endpoint call failed: %s", exc)
            raise RelayTransportError(str(exc)) from exc
        except ValueError as exc:
            logger.error("Relay endpoint returned a non-JSON body")
            raise RelayTransportError("Invalid relay response") from exc


def build_client_relay(settings: Settings) -> Relay:
    if settings.public_n8n_webhook_url:
        return WebhookRelay(settings.public_n8n_webhook_url)
    if settings.relay_endpoint_url:
        return RelayEndpointClient(settings.relay_endpoint_url)
    return WebhookRelay(settings.n8n_webhook_url)
