"""Auto-deploy decisions and execution."""

from hookbot.deploy.changes import classify
from hookbot.deploy.executor import DeploymentExecutor
from hookbot.deploy.git import GitRepo
from hookbot.deploy.patterns import matches
from hookbot.deploy.policy import should_update
from hookbot.deploy.types import Commit, CommitAuthor, UpdateDecision

__all__ = [
    "Commit",
    "CommitAuthor",
    "DeploymentExecutor",
    "GitRepo",
    "UpdateDecision",
    "classify",
    "matches",
    "should_update",
]
