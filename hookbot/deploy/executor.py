"""Self-update of the running bot."""

import asyncio
from collections.abc import Callable
from pathlib import Path

from loguru import logger

from hookbot.config.schema import ListenerConfig
from hookbot.deploy.git import GitRepo
from hookbot.deploy.types import UpdateDecision

SHUTDOWN_MESSAGE = "I'm updating! :3"


class DeploymentExecutor:
    """
    Fetch, check out and install a branch of the bot, then restart it.

    Every step aborts the update on failure. Nothing is rolled back.
    """

    def __init__(
        self,
        config: ListenerConfig,
        git: GitRepo,
        app_root: Path,
        shutdown: Callable[[str], None],
        reload: Callable[[], None],
    ):
        self.config = config
        self.git = git
        self.app_root = Path(app_root)
        self._shutdown = shutdown
        self._reload = reload

    async def handle(self, branch: str, decision: UpdateDecision) -> bool:
        """
        Update the bot to ``branch``.

        Returns True when the update ran through to shutdown or reload.
        """
        logger.info(f"GitHub listener: Handling Webhook for branch {branch}.")

        if not self.git.available():
            logger.debug("GitHub listener: Not a git repo; stopping update.")
            return False

        if not decision.should_update:
            logger.debug("GitHub listener: Nothing to update; stopping update.")
            return False

        logger.debug(f'GitHub listener: Updating to branch "{branch}".')

        if not self.checkout(branch):
            return False

        if decision.reinstall_required:
            await self.reinstall()

        self.finalize(decision)
        return True

    def fetch(self) -> bool:
        if self.git.run("fetch"):
            logger.error("GitHub listener: Attempted git fetch failed!")
            return False
        logger.debug("GitHub listener: Fetched latest code from git.")
        return True

    def checkout(self, branch: str) -> bool:
        """Fetch, switch to ``branch`` if needed and hard reset it to the remote."""
        if not branch or not self.fetch():
            return False

        if self.git.branch() != branch:
            if self.git.run("checkout", "-q", branch):
                logger.error(f'GitHub listener: Attempted git checkout of "{branch}" failed!')
                return False
            logger.debug(f'GitHub listener: Successfully checked out branch "{branch}".')

        if self.git.branch() or self.git.tag():
            if self.git.run("reset", "-q", f"origin/{branch}", "--hard"):
                logger.error("GitHub listener: Attempted git reset failed!")
                return False
            logger.debug(f'GitHub listener: Successfully reset to branch "{branch}".')
        return True

    async def reinstall(self) -> list[tuple[Path, str]]:
        """
        Install dependencies at the app root, then in every plugin directory.

        Plugin installs run concurrently. Their failures are logged once all
        of them have finished and returned as ``(directory, reason)`` pairs.
        """
        logger.debug(f"GitHub listener: Executing {self.config.install_command}.")
        try:
            code = await self._run_install(self.app_root)
        except OSError as e:
            logger.error(f"GitHub listener: Install at {self.app_root} failed: {e}")
        else:
            if code != 0:
                logger.warning(f"GitHub listener: Install at {self.app_root} exited with {code}.")

        projects = self.discover_projects()
        if not projects:
            return []

        results = await asyncio.gather(
            *(self._install_project(path) for path in projects),
            return_exceptions=True,
        )

        failures: list[tuple[Path, str]] = []
        for path, result in zip(projects, results):
            if isinstance(result, BaseException):
                failures.append((path, str(result) or type(result).__name__))
            elif result != 0:
                failures.append((path, f"exit code {result}"))

        for path, reason in failures:
            logger.error(f"GitHub listener: Install for {path} failed: {reason}")
        return failures

    def discover_projects(self) -> list[Path]:
        """Directories holding a plugin manifest below the app root."""
        try:
            manifests = sorted(self.app_root.glob(self.config.plugin_glob))
        except (OSError, ValueError) as e:
            logger.error(f'GitHub listener: Glob error: "{e}".')
            return []
        return [manifest.resolve().parent for manifest in manifests]

    async def _install_project(self, path: Path) -> int:
        logger.debug(f"GitHub listener: Executing {self.config.install_command} for {path}.")
        return await self._run_install(path)

    async def _run_install(self, cwd: Path) -> int:
        """Run the install command in ``cwd`` and return its exit code."""
        proc = await asyncio.create_subprocess_shell(
            self.config.install_command,
            cwd=cwd,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
        _, stderr = await proc.communicate()
        if proc.returncode != 0 and stderr:
            logger.trace(f"GitHub listener: {cwd}: {stderr.decode(errors='replace').strip()}")
        return proc.returncode

    def finalize(self, decision: UpdateDecision) -> None:
        if decision.shutdown_required:
            self._shutdown(SHUTDOWN_MESSAGE)
        else:
            self._reload()
