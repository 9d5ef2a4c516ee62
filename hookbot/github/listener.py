"""GitHub listener plugin: alerts for webhook events and self-updates on push."""

import asyncio
from collections.abc import Callable
from pathlib import Path
from typing import Any

from loguru import logger
from pydantic import ValidationError

from hookbot.config.schema import ListenerConfig
from hookbot.deploy.changes import classify
from hookbot.deploy.executor import DeploymentExecutor
from hookbot.deploy.git import GitRepo
from hookbot.deploy.policy import should_update
from hookbot.github.events import EventType, PushEvent, WebhookEvent, event_type, parse_event
from hookbot.github.formatter import format_event
from hookbot.github.server import WebhookServer

SendMessage = Callable[..., None]


class GitHubListener:
    """
    Receives GitHub webhooks, sends alerts and keeps the bot up to date.

    Collaborators are passed in explicitly:
    - send_message(text, is_alert=True) delivers an alert to chat
    - shutdown(reason) stops the host process
    - reload() reloads the bot's plugins in-process
    """

    name = "github-listener"

    def __init__(
        self,
        config: ListenerConfig,
        send_message: SendMessage,
        shutdown: Callable[[str], None],
        reload: Callable[[], None],
        git: GitRepo | None = None,
        app_root: Path | None = None,
    ):
        self.config = config
        self._send_message = send_message
        self.git = git or GitRepo(app_root or Path.cwd())
        self.app_root = Path(app_root) if app_root else (self.git.root or Path.cwd())
        self.executor = DeploymentExecutor(config, self.git, self.app_root, shutdown, reload)
        self._server: WebhookServer | None = None
        self._update_lock = asyncio.Lock()

    async def start(self) -> None:
        """Start listening for webhooks if the plugin is enabled."""
        if not self.config.enabled:
            logger.info("GitHub listener: disabled in config")
            return

        self._server = WebhookServer(self.config, self.handle_delivery)
        if not await self._server.start():
            logger.error(
                f"GitHub listener: Could not listen on {self.config.host}:{self.config.port}."
            )
            await self._server.stop()
            self._server = None
            return

        logger.info("GitHub listener: Listening for Webhooks from GitHub.")
        logger.debug(f"GitHub listener: Listening at {self.config.path} on {self.config.port}.")
        logger.trace(
            f"GitHub listener: Listening for repo {self.config.repository}, "
            f"branch {self.config.branch}."
        )

    async def stop(self) -> None:
        """Stop the webhook server. Returns once the port is released."""
        if self._server:
            await self._server.stop()
            self._server = None

    unload = stop

    @property
    def listening(self) -> bool:
        return self._server is not None and self._server.running

    async def handle_delivery(self, event_name: str, payload: dict[str, Any]) -> None:
        """Entry point for one webhook delivery."""
        kind = event_type(event_name)
        if kind is None:
            logger.trace(f"GitHub listener: Ignoring unsupported event {event_name}.")
            return

        try:
            event = parse_event(kind, payload)
        except ValidationError as e:
            logger.warning(f"GitHub listener: Dropping malformed {event_name} payload: {e}")
            return

        try:
            await self.dispatch(kind, event)
        except Exception as e:
            logger.exception(f"GitHub listener: Error handling {event_name}: {e}")

    async def dispatch(self, kind: EventType, event: WebhookEvent) -> None:
        if isinstance(event, PushEvent) and event.deleted:
            return

        messages = format_event(kind, event)
        if self.config.events.is_enabled(kind.value):
            for message in messages:
                self._alert(message)

        if isinstance(event, PushEvent):
            await self.on_push(event)

    def _alert(self, message: str) -> None:
        logger.debug("GitHub listener: Sending alert.")
        try:
            self._send_message(message, is_alert=True)
        except Exception as e:
            logger.error(f"GitHub listener: Failed to send alert: {e}")

    async def on_push(self, event: PushEvent) -> bool:
        """Run the self-update for a push if it targets this bot. Returns True if it ran."""
        logger.trace(f"GitHub listener: Received Webhook: ref => {event.ref}.")

        branch = event.branch
        if event.repository.name != self.config.repository:
            return False
        if not should_update(branch, self.config.branch):
            return False

        # One update at a time: each one reads and rewrites the working tree.
        async with self._update_lock:
            return await self._update(branch, event)

    async def _update(self, branch: str, event: PushEvent) -> bool:
        decision = classify(
            branch,
            self.git.branch(),
            [commit.to_commit() for commit in event.commits],
            self.config.auto_update,
            hot_files=self.config.hot_files,
            manifest_file=self.config.manifest_file,
        )
        if not decision.should_update:
            logger.debug("GitHub listener: Nothing to update; stopping update.")
            return False
        return await self.executor.handle(branch, decision)
