"""Configuration schema using Pydantic."""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class Base(BaseModel):
    """Base model that reads and writes camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class EventsConfig(BaseModel):
    """Per-event alert switches, keyed by GitHub event name."""
    push: bool = True
    pull_request: bool = True
    issues: bool = True
    issue_comment: bool = True
    gollum: bool = True
    fork: bool = True
    watch: bool = True

    def is_enabled(self, event: str) -> bool:
        return bool(getattr(self, event, False))


class ListenerConfig(Base):
    """Configuration for the GitHub listener plugin."""
    host: str = "0.0.0.0"
    port: int = 4269
    path: str = "/github/callback"
    secret: str = ""
    repository: str = "hookbot"
    branch: str | list[str] = "master"  # Pattern or list of patterns
    auto_update: bool = False
    events: EventsConfig = Field(default_factory=EventsConfig)
    enabled: bool = True
    hot_files: list[str] = Field(default_factory=lambda: ["app.py"])  # Force a full restart
    manifest_file: str = "requirements.txt"  # Forces a reinstall
    install_command: str = "pip install -r requirements.txt"
    plugin_glob: str = "plugins/*/plugin.json"
