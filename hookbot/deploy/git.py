"""Access to the bot's own git working tree."""

import shutil
import subprocess
from pathlib import Path

from loguru import logger


class GitRepo:
    """
    The git checkout the bot runs from.

    Commands are run synchronously and judged by exit code only.
    """

    def __init__(self, path: Path | str = "."):
        self.path = Path(path).expanduser().resolve()
        self._root = self._find_root(self.path)

    @staticmethod
    def _find_root(start: Path) -> Path | None:
        """Walk up from ``start`` looking for a ``.git`` entry."""
        for candidate in (start, *start.parents):
            if (candidate / ".git").exists():
                return candidate
        return None

    @property
    def root(self) -> Path | None:
        return self._root

    @property
    def is_repo(self) -> bool:
        return self._root is not None

    def available(self) -> bool:
        """Check that git is installed and the path is inside a repository."""
        return shutil.which("git") is not None and self.is_repo

    def _run_git(self, *args: str) -> tuple[int, str, str]:
        """Run a git command in the repo directory."""
        try:
            result = subprocess.run(
                ["git", *args],
                cwd=self.path,
                capture_output=True,
                text=True,
            )
            return result.returncode, result.stdout, result.stderr
        except OSError as e:
            return 1, "", str(e)

    def run(self, *args: str) -> int:
        """Run a git command and return its exit code."""
        code, _, stderr = self._run_git(*args)
        if code != 0 and stderr:
            logger.debug(f"GitHub listener: git {' '.join(args)}: {stderr.strip()}")
        return code

    def _read(self, *args: str) -> str | None:
        code, stdout, _ = self._run_git(*args)
        value = stdout.strip()
        return value if code == 0 and value else None

    def branch(self) -> str | None:
        """Currently checked out branch, None when detached or unknown."""
        name = self._read("rev-parse", "--abbrev-ref", "HEAD")
        return None if name == "HEAD" else name

    def commit(self) -> str | None:
        """SHA of HEAD."""
        return self._read("rev-parse", "HEAD")

    def tag(self) -> str | None:
        """Tag pointing exactly at HEAD, if any."""
        return self._read("describe", "--tags", "--exact-match", "HEAD")
