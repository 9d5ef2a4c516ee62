"""GitHub webhook handling."""

from hookbot.github.events import EventType, parse_event
from hookbot.github.formatter import format_event
from hookbot.github.listener import GitHubListener
from hookbot.github.server import WebhookServer

__all__ = ["EventType", "GitHubListener", "WebhookServer", "format_event", "parse_event"]
