"""Shared fixtures: fake git checkout and webhook payload builders."""

from typing import Any

import pytest


class FakeGit:
    """Stands in for GitRepo, recording commands instead of running git."""

    def __init__(self, branch: str | None = "master", tag: str | None = None, available: bool = True):
        self._branch = branch
        self._tag = tag
        self._available = available
        self.root = None
        self.calls: list[tuple[str, ...]] = []
        self.fail: set[str] = set()  # Subcommands that exit non-zero

    def available(self) -> bool:
        return self._available

    def branch(self) -> str | None:
        return self._branch

    def tag(self) -> str | None:
        return self._tag

    def commit(self) -> str | None:
        return "0123456789abcdef"

    def run(self, *args: str) -> int:
        self.calls.append(args)
        if args[0] in self.fail:
            return 1
        if args[0] == "checkout":
            self._branch = args[-1]
        return 0

    @property
    def subcommands(self) -> list[str]:
        return [call[0] for call in self.calls]


@pytest.fixture
def fake_git() -> FakeGit:
    return FakeGit()


@pytest.fixture
def git_factory():
    """Build a FakeGit with a custom branch, tag or availability."""
    return FakeGit


def _commit(
    sha: str,
    message: str = "update",
    username: str = "octocat",
    modified: list[str] | None = None,
    added: list[str] | None = None,
) -> dict[str, Any]:
    return {
        "id": sha,
        "message": message,
        "timestamp": "2026-02-07T12:00:00Z",
        "author": {"name": "Octo Cat", "email": "octo@example.com", "username": username},
        "added": added or [],
        "removed": [],
        "modified": modified or [],
    }


@pytest.fixture
def make_commit():
    return _commit


@pytest.fixture
def push_payload():
    """Build a realistic GitHub push payload."""

    def build(
        *,
        repo: str = "hookbot",
        ref: str = "refs/heads/master",
        commits: list[dict[str, Any]] | None = None,
        created: bool = False,
        deleted: bool = False,
        forced: bool = False,
    ) -> dict[str, Any]:
        if commits is None:
            commits = [_commit("a1b2c3d4e5f60718293a")]
        return {
            "ref": ref,
            "before": "0000000000000000000000000000000000000000",
            "after": commits[-1]["id"] if commits else "0" * 40,
            "created": created,
            "deleted": deleted,
            "forced": forced,
            "compare": "https://github.com/octo/hookbot/compare/abc...def",
            "commits": commits,
            "pusher": {"name": "octocat", "email": "octo@example.com"},
            "repository": {"id": 1, "name": repo, "full_name": f"octo/{repo}"},
        }

    return build
