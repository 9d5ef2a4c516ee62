"""Pydantic models for the GitHub webhook payloads the listener understands.

Only the fields the alerts and the updater read are modelled; everything
else in a delivery is ignored.

Reference: https://docs.github.com/en/webhooks/webhook-events-and-payloads
"""

from enum import Enum
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from hookbot.deploy.types import Commit, CommitAuthor


class EventType(str, Enum):
    """Supported ``X-GitHub-Event`` names."""

    PUSH = "push"
    PULL_REQUEST = "pull_request"
    ISSUES = "issues"
    ISSUE_COMMENT = "issue_comment"
    GOLLUM = "gollum"
    FORK = "fork"
    WATCH = "watch"


class Payload(BaseModel):
    """Base for webhook payloads. Deliveries are never modified."""

    model_config = ConfigDict(frozen=True)


class Repository(Payload):
    name: str


class User(Payload):
    login: str


class PushAuthor(Payload):
    username: str | None = None
    name: str | None = None


class PushCommit(Payload):
    """A single commit within a push event."""

    id: str
    message: str = ""
    author: PushAuthor = Field(default_factory=PushAuthor)
    created: list[str] = Field(
        default_factory=list, validation_alias=AliasChoices("created", "added")
    )
    modified: list[str] = Field(default_factory=list)

    def to_commit(self) -> Commit:
        return Commit(
            id=self.id,
            message=self.message,
            author=CommitAuthor(username=self.author.username, name=self.author.name),
            created=list(self.created),
            modified=list(self.modified),
        )


class Pusher(Payload):
    name: str


class PushEvent(Payload):
    repository: Repository
    ref: str
    compare: str = ""
    created: bool = False
    deleted: bool = False
    forced: bool = False
    pusher: Pusher
    commits: list[PushCommit] = Field(default_factory=list)

    @property
    def branch(self) -> str:
        """Short ref name: ``refs/heads/main`` becomes ``main``."""
        return self.ref[self.ref.find("/", 5) + 1:]

    @property
    def is_tag(self) -> bool:
        return self.ref.startswith("refs/tags/")


class PullRequest(Payload):
    title: str
    merged: bool = False


class PullRequestEvent(Payload):
    repository: Repository
    action: str
    number: int
    pull_request: PullRequest


class Label(Payload):
    name: str


class Issue(Payload):
    number: int
    title: str


class IssuesEvent(Payload):
    repository: Repository
    action: str
    issue: Issue
    assignee: User | None = None
    label: Label | None = None


class Comment(Payload):
    body: str
    html_url: str
    user: User


class IssueCommentEvent(Payload):
    repository: Repository
    issue: Issue
    comment: Comment


class WikiPage(Payload):
    page_name: str
    action: str
    html_url: str


class GollumEvent(Payload):
    repository: Repository
    pages: list[WikiPage] = Field(default_factory=list)


class Forkee(Payload):
    html_url: str


class ForkEvent(Payload):
    repository: Repository
    sender: User
    forkee: Forkee


class WatchEvent(Payload):
    repository: Repository
    sender: User


WebhookEvent = (
    PushEvent
    | PullRequestEvent
    | IssuesEvent
    | IssueCommentEvent
    | GollumEvent
    | ForkEvent
    | WatchEvent
)

EVENT_MODELS: dict[EventType, type[Payload]] = {
    EventType.PUSH: PushEvent,
    EventType.PULL_REQUEST: PullRequestEvent,
    EventType.ISSUES: IssuesEvent,
    EventType.ISSUE_COMMENT: IssueCommentEvent,
    EventType.GOLLUM: GollumEvent,
    EventType.FORK: ForkEvent,
    EventType.WATCH: WatchEvent,
}


def event_type(name: str) -> EventType | None:
    """Map an ``X-GitHub-Event`` header value to an EventType, None if unsupported."""
    try:
        return EventType(name)
    except ValueError:
        return None


def parse_event(kind: EventType, payload: dict[str, Any]) -> WebhookEvent:
    """Validate a raw delivery. Raises pydantic.ValidationError on bad payloads."""
    return EVENT_MODELS[kind].model_validate(payload)
