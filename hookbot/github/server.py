"""HTTP receiver for GitHub webhooks.

Deliveries are authenticated with the shared secret, acknowledged with 202
and handed to the listener in the background.
"""

import asyncio
import hashlib
import hmac
import json
from collections.abc import Awaitable, Callable
from typing import Any

import uvicorn
from fastapi import BackgroundTasks, FastAPI, Header, HTTPException, Request, status
from loguru import logger

from hookbot.config.schema import ListenerConfig
from hookbot.github.events import event_type

DeliveryHandler = Callable[[str, dict[str, Any]], Awaitable[None]]


def sign(body: bytes, secret: str) -> str:
    """Compute the GitHub-style HMAC-SHA256 signature for a payload."""
    digest = hmac.new(secret.encode("utf-8"), msg=body, digestmod=hashlib.sha256).hexdigest()
    return f"sha256={digest}"


def verify_signature(body: bytes, secret: str, signature: str | None) -> bool:
    """Constant-time check of ``X-Hub-Signature-256``. An empty secret disables the check."""
    if not secret:
        return True
    if not signature:
        return False
    return hmac.compare_digest(sign(body, secret), signature)


def create_app(config: ListenerConfig, on_delivery: DeliveryHandler) -> FastAPI:
    """Build the webhook app serving ``config.path``."""
    app = FastAPI(title="hookbot", docs_url=None, redoc_url=None, openapi_url=None)

    @app.post(config.path, status_code=status.HTTP_202_ACCEPTED)
    async def github_webhook(
        request: Request,
        background_tasks: BackgroundTasks,
        x_github_event: str = Header(...),
        x_hub_signature_256: str | None = Header(None),
    ) -> dict:
        body = await request.body()
        if not verify_signature(body, config.secret, x_hub_signature_256):
            logger.error("GitHub listener: Rejected delivery with invalid signature.")
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid signature")

        if x_github_event == "ping":
            return {"status": "pong"}

        if event_type(x_github_event) is None:
            logger.trace(f"GitHub listener: Ignoring unsupported event {x_github_event}.")
            return {"status": "ignored"}

        try:
            payload = json.loads(body)
        except ValueError:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid JSON")
        if not isinstance(payload, dict):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid payload")

        background_tasks.add_task(on_delivery, x_github_event, payload)
        return {"status": "accepted"}

    return app


class WebhookServer:
    """Runs the webhook app with uvicorn inside the current event loop."""

    def __init__(self, config: ListenerConfig, on_delivery: DeliveryHandler):
        self.config = config
        self.app = create_app(config, on_delivery)
        self._server: uvicorn.Server | None = None
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> bool:
        """Start serving. Returns True once the socket is bound, False if binding failed."""
        if self.running:
            return True
        self._server = uvicorn.Server(uvicorn.Config(
            self.app,
            host=self.config.host,
            port=self.config.port,
            log_level="warning",
            lifespan="off",
        ))
        self._task = asyncio.create_task(self._serve(self._server))
        while not self._server.started and not self._task.done():
            await asyncio.sleep(0.05)
        return self._server.started

    async def _serve(self, server: uvicorn.Server) -> None:
        try:
            await server.serve()
        except SystemExit:
            # uvicorn exits when the socket cannot be bound
            logger.error(f"GitHub listener: Webhook server on port {self.config.port} failed to start.")

    async def stop(self) -> None:
        """Stop serving and wait until the port is released."""
        if self._server:
            self._server.should_exit = True
        if self._task:
            try:
                await self._task
            except asyncio.CancelledError:
                pass
        self._server = None
        self._task = None
