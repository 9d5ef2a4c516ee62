"""Render GitHub webhook events as chat alerts."""

from collections.abc import Callable

from hookbot.github.events import (
    EventType,
    ForkEvent,
    GollumEvent,
    IssueCommentEvent,
    IssuesEvent,
    PullRequestEvent,
    PushEvent,
    WatchEvent,
    WebhookEvent,
)

MAX_TEXT_LENGTH = 80
MAX_PUSH_COMMITS = 3
SHORT_SHA_LENGTH = 7


def _prefix(repo: str) -> str:
    return f"[GitHub] [{repo}]"


def pluralize(count: int, noun: str) -> str:
    """``1 commit``, ``2 commits``."""
    return f"{count} {noun}" if count == 1 else f"{count} {noun}s"


def truncate(text: str, limit: int = MAX_TEXT_LENGTH) -> str:
    if len(text) > limit:
        return text[:limit] + "..."
    return text


def first_line(message: str) -> str:
    end = message.find("\n")
    return message if end == -1 else message[:end]


def format_push(event: PushEvent) -> list[str]:
    """One message: the push summary followed by up to three newest commits."""
    if event.deleted:
        return []

    repo = event.repository.name
    commits = pluralize(len(event.commits), "commit")
    force = "force " if event.forced and not event.created else ""
    new = "new " if event.created else ""
    kind = "tag" if event.is_tag else "branch"

    msg = f"{_prefix(repo)} {commits} {force}pushed to {new}"
    msg += f"{kind} {repo}:{event.branch} by {event.pusher.name}. "
    msg += f"({event.compare})"

    for commit in list(reversed(event.commits))[:MAX_PUSH_COMMITS]:
        sha = commit.id[:SHORT_SHA_LENGTH]
        author = commit.author.username or commit.author.name
        msg += f"\n[{sha}] {author}: {first_line(commit.message)}"

    return [msg]


def format_pull_request(event: PullRequestEvent) -> list[str]:
    action = event.action
    if action == "closed" and event.pull_request.merged:
        action = "merged"
    title = truncate(event.pull_request.title)
    return [
        f"{_prefix(event.repository.name)} Pull Request {event.number} {action}. Title: {title}"
    ]


def format_issues(event: IssuesEvent) -> list[str]:
    action = event.action
    if action in ("assigned", "unassigned") and event.assignee:
        direction = "from" if action == "unassigned" else "to"
        action += f" {direction} {event.assignee.login}"
    if event.action in ("labeled", "unlabeled") and event.label:
        action += f" {event.label.name}"
    title = truncate(event.issue.title)
    return [f"{_prefix(event.repository.name)} Issue {event.issue.number} {action}. Title: {title}"]


def format_issue_comment(event: IssueCommentEvent) -> list[str]:
    comment = event.comment
    return [
        f"{_prefix(event.repository.name)} New comment on issue {event.issue.number} "
        f"by {comment.user.login}. {truncate(comment.body)} ({comment.html_url})"
    ]


def format_gollum(event: GollumEvent) -> list[str]:
    prefix = _prefix(event.repository.name)
    return [
        f"{prefix} Wiki Page {page.page_name} {page.action}. ({page.html_url})"
        for page in event.pages
    ]


def format_fork(event: ForkEvent) -> list[str]:
    return [
        f"{_prefix(event.repository.name)} New Fork! {event.sender.login} "
        f"forked the repo! ({event.forkee.html_url})"
    ]


def format_watch(event: WatchEvent) -> list[str]:
    return [f"{_prefix(event.repository.name)} New Star! {event.sender.login} starred the repo!"]


FORMATTERS: dict[EventType, Callable[..., list[str]]] = {
    EventType.PUSH: format_push,
    EventType.PULL_REQUEST: format_pull_request,
    EventType.ISSUES: format_issues,
    EventType.ISSUE_COMMENT: format_issue_comment,
    EventType.GOLLUM: format_gollum,
    EventType.FORK: format_fork,
    EventType.WATCH: format_watch,
}


def format_event(kind: EventType, event: WebhookEvent) -> list[str]:
    """Render ``event`` into zero or more chat messages."""
    return FORMATTERS[kind](event)
