"""Deploy types."""

from dataclasses import dataclass, field


@dataclass
class CommitAuthor:
    """Author of a pushed commit."""
    username: str | None = None
    name: str | None = None


@dataclass
class Commit:
    """A commit as reported by a push event."""
    id: str
    message: str = ""
    author: CommitAuthor = field(default_factory=CommitAuthor)
    created: list[str] = field(default_factory=list)
    modified: list[str] = field(default_factory=list)


@dataclass
class UpdateDecision:
    """What a push means for the running bot."""
    should_update: bool = False
    shutdown_required: bool = False  # Full restart instead of a soft reload
    reinstall_required: bool = False  # Dependencies must be installed again
