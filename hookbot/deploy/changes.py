"""Decide how much of the bot a push touches."""

import posixpath
from collections.abc import Iterable, Sequence

from loguru import logger

from hookbot.deploy.types import Commit, UpdateDecision


def classify(
    observed_branch: str,
    current_branch: str | None,
    commits: Sequence[Commit],
    auto_update: bool,
    hot_files: Iterable[str] = ("app.py",),
    manifest_file: str = "requirements.txt",
) -> UpdateDecision:
    """
    Classify a push against the checked out branch.

    Switching branches always means a restart and a reinstall. Otherwise a
    restart is needed when a hot file was modified, and a reinstall when a
    dependency manifest was modified.

    Args:
        observed_branch: Branch the push was made to.
        current_branch: Branch currently checked out, None if unknown.
        commits: Commits in the push.
        auto_update: Whether auto-updates are enabled at all.
        hot_files: Paths whose modification forces a full restart.
        manifest_file: File name of the dependency manifest.
    """
    changing_branch = observed_branch != current_branch
    update = auto_update and (len(commits) != 0 or changing_branch)

    logger.trace(f"GitHub listener: Is changing branch? {changing_branch}.")
    logger.trace(f"GitHub listener: Is updating? {update}.")

    if not update:
        return UpdateDecision()

    decision = UpdateDecision(
        should_update=True,
        shutdown_required=changing_branch,
        reinstall_required=changing_branch,
    )
    if changing_branch:
        return decision

    hot = set(hot_files)
    for commit in commits:
        for path in commit.modified:
            if path in hot:
                decision.shutdown_required = True
            if posixpath.basename(path) == manifest_file:
                decision.reinstall_required = True

    return decision
