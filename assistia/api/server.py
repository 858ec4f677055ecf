"""HTTP surface of the webhook relay.

Run with ``assistia-relay`` or ``uvicorn assistia.api.server:app``.
"""
from __future__ import annotations

import logging

import uvicorn
from fastapi import FastAPI, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse

from assistia.config import get_settings
from assistia.errors import RelayError, RelayTransportError
from assistia.infra.logging import setup_logging
from assistia.relay.webhook import Relay, WebhookRelay

logger = logging.getLogger(__name__)

RELAY_PATH = "/api/trigger-n8n-update"


def create_app(relay: Relay | None = None) -> FastAPI:
    if relay is None:
        relay = WebhookRelay(get_settings().n8n_webhook_url)

    app = FastAPI(title="Assistia relay")
    app.state.relay = relay

    @app.get("/healthz")
    def healthz() -> dict:
        return {"status": "ok"}

    @app.post(RELAY_PATH)
    async def trigger_n8n_update(request: Request) -> JSONResponse:
        try:
            try:
                body = await request.json()
            except ValueError as exc:
                raise RelayTransportError("Request body is not valid JSON") from exc
            if not isinstance(body, dict):
                raise RelayTransportError("Request body must be a JSON object")
            result = await run_in_threadpool(app.state.relay.relay, body)
        except RelayError as exc:
            logger.error("Error triggering n8n webhook: %s", exc)
            return JSONResponse({"error": exc.public_message}, status_code=500)
        return JSONResponse(result)

    return app


app = create_app()


def main() -> None:
    settings = get_settings()
    setup_logging(settings, log_name="assistia-relay.log")
    uvicorn.run(app, host=settings.relay_host, port=settings.relay_port)


if __name__ == "__main__":
    main()
