from __future__ import annotations

import pytest
import requests

from assistia.config import Settings
from assistia.errors import RelayConfigError, RelayTransportError
from assistia.relay.webhook import RelayEndpointClient, WebhookRelay, build_client_relay

WEBHOOK_URL = "https://n8n.example.com/webhook/secret-path"


class FakeResponse:
    def __init__(self, status_code: int = 200, body=None, reason: str = "OK") -> None:
        self.status_code = status_code
        self.reason = reason
        self._body = body

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    def raise_for_status(self) -> None:
        if not self.ok:
            raise requests.HTTPError(f"{self.status_code} {self.reason}")

    def json(self):
        if self._body is None:
            raise ValueError("no JSON body")
        return self._body


class FakeSession:
    def __init__(self, response: FakeResponse | None = None, error: Exception | None = None) -> None:
        self.response = response or FakeResponse()
        self.error = error
        self.calls: list[tuple[str, dict]] = []

    def post(self, url: str, json=None):
        self.calls.append((url, json))
        if self.error:
            raise self.error
        return self.response


def test_relay_forwards_payload_verbatim() -> None:
    session = FakeSession()
    relay = WebhookRelay(WEBHOOK_URL, session=session)
    payload = {"taskId": "t1", "status": "completed", "nested": {"a": [1, 2]}}

    assert relay.relay(payload) == {"success": True}
    assert session.calls == [(WEBHOOK_URL, payload)]


def test_relay_without_destination_makes_no_calls() -> None:
    session = FakeSession()
    relay = WebhookRelay(None, session=session)

    with pytest.raises(RelayConfigError) as excinfo:
        relay.relay({"taskId": "t1"})

    assert excinfo.value.public_message == "N8N webhook URL not configured"
    assert session.calls == []


def test_relay_non_2xx_is_generic_failure() -> None:
    session = FakeSession(FakeResponse(502, reason="Bad Gateway from upstream"))
    relay = WebhookRelay(WEBHOOK_URL, session=session)

    with pytest.raises(RelayTransportError) as excinfo:
        relay.relay({"taskId": "t1"})

    assert excinfo.value.public_message == "Failed to trigger n8n webhook"
    assert WEBHOOK_URL not in excinfo.value.public_message


def test_relay_connection_error_is_transport_error() -> None:
    session = FakeSession(error=requests.ConnectionError("refused"))
    relay = WebhookRelay(WEBHOOK_URL, session=session)

    with pytest.raises(RelayTransportError):
        relay.relay({"taskId": "t1"})


def test_endpoint_client_returns_json_body() -> None:
    session = FakeSession(FakeResponse(200, body={"result": "Task created"}))
    client = RelayEndpointClient("http://relay.local/api/trigger-n8n-update", session=session)

    assert client.relay({"message": "hi"}) == {"result": "Task created"}


def test_endpoint_client_treats_error_status_as_failure() -> None:
    session = FakeSession(FakeResponse(500, body={"error": "Failed to trigger n8n webhook"}))
    client = RelayEndpointClient("http://relay.local/api/trigger-n8n-update", session=session)

    with pytest.raises(RelayTransportError):
        client.relay({"message": "hi"})


def test_client_relay_prefers_public_destination() -> None:
    relay = build_client_relay(
        Settings(
            n8n_webhook_url="https://server.example.com/hook",
            public_n8n_webhook_url="https://public.example.com/hook",
            relay_endpoint_url="http://127.0.0.1:8000/api/trigger-n8n-update",
        )
    )
    assert isinstance(relay, WebhookRelay)
    assert relay.destination_url == "https://public.example.com/hook"


def test_client_relay_uses_endpoint_then_server_destination() -> None:
    endpoint = build_client_relay(
        Settings(
            n8n_webhook_url="https://server.example.com/hook",
            relay_endpoint_url="http://127.0.0.1:8000/api/trigger-n8n-update",
        )
    )
    assert isinstance(endpoint, RelayEndpointClient)

    direct = build_client_relay(Settings(n8n_webhook_url="https://server.example.com/hook"))
    assert isinstance(direct, WebhookRelay)
    assert direct.destination_url == "https://server.example.com/hook"
    assert Settings(n8n_webhook_url="a", public_n8n_webhook_url="b").client_webhook_url == "b"
