"""Tests for DeploymentExecutor."""

import asyncio
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

from hookbot.config.schema import ListenerConfig
from hookbot.deploy.executor import SHUTDOWN_MESSAGE, DeploymentExecutor
from hookbot.deploy.types import UpdateDecision


def _plugin(root: Path, name: str) -> Path:
    directory = root / "plugins" / name
    directory.mkdir(parents=True)
    (directory / "plugin.json").write_text("{}")
    return directory


@pytest.fixture
def callbacks():
    return MagicMock(), MagicMock()


@pytest.fixture
def executor(tmp_path: Path, fake_git, callbacks):
    shutdown, reload = callbacks
    executor = DeploymentExecutor(ListenerConfig(), fake_git, tmp_path, shutdown, reload)
    executor._run_install = AsyncMock(return_value=0)
    return executor


UPDATE = UpdateDecision(should_update=True)


class TestHandle:
    """Test the full update sequence."""

    @pytest.mark.asyncio
    async def test_reload_when_no_restart_needed(self, executor, fake_git, callbacks):
        shutdown, reload = callbacks
        assert await executor.handle("master", UPDATE) is True

        assert fake_git.calls == [("fetch",), ("reset", "-q", "origin/master", "--hard")]
        reload.assert_called_once_with()
        shutdown.assert_not_called()
        executor._run_install.assert_not_called()

    @pytest.mark.asyncio
    async def test_shutdown_when_required(self, executor, callbacks):
        shutdown, reload = callbacks
        decision = UpdateDecision(should_update=True, shutdown_required=True)
        assert await executor.handle("master", decision) is True

        shutdown.assert_called_once_with(SHUTDOWN_MESSAGE)
        reload.assert_not_called()

    @pytest.mark.asyncio
    async def test_precondition_aborts_silently(self, tmp_path, git_factory, callbacks):
        shutdown, reload = callbacks
        git = git_factory(available=False)
        executor = DeploymentExecutor(ListenerConfig(), git, tmp_path, shutdown, reload)

        assert await executor.handle("master", UPDATE) is False
        assert git.calls == []
        shutdown.assert_not_called()
        reload.assert_not_called()

    @pytest.mark.asyncio
    async def test_nothing_to_update(self, executor, fake_git, callbacks):
        assert await executor.handle("master", UpdateDecision()) is False
        assert fake_git.calls == []
        callbacks[1].assert_not_called()

    @pytest.mark.asyncio
    async def test_fetch_failure_aborts(self, executor, fake_git, callbacks):
        fake_git.fail.add("fetch")
        assert await executor.handle("master", UPDATE) is False
        assert fake_git.subcommands == ["fetch"]
        callbacks[0].assert_not_called()
        callbacks[1].assert_not_called()

    @pytest.mark.asyncio
    async def test_checkout_failure_aborts(self, executor, fake_git, callbacks):
        fake_git.fail.add("checkout")
        assert await executor.handle("dev", UPDATE) is False
        assert fake_git.subcommands == ["fetch", "checkout"]
        callbacks[1].assert_not_called()

    @pytest.mark.asyncio
    async def test_reset_failure_aborts(self, executor, fake_git, callbacks):
        fake_git.fail.add("reset")
        decision = UpdateDecision(should_update=True, reinstall_required=True)
        assert await executor.handle("master", decision) is False
        executor._run_install.assert_not_called()
        callbacks[1].assert_not_called()

    @pytest.mark.asyncio
    async def test_reinstall_before_finalize(self, executor, tmp_path, callbacks):
        decision = UpdateDecision(should_update=True, reinstall_required=True)
        assert await executor.handle("master", decision) is True
        executor._run_install.assert_awaited_once_with(tmp_path)
        callbacks[1].assert_called_once()


class TestCheckout:
    """Test fetch/checkout/reset."""

    def test_switches_branch(self, executor, fake_git):
        assert executor.checkout("dev") is True
        assert fake_git.calls == [
            ("fetch",),
            ("checkout", "-q", "dev"),
            ("reset", "-q", "origin/dev", "--hard"),
        ]

    def test_same_branch_skips_checkout(self, executor, fake_git):
        assert executor.checkout("master") is True
        assert "checkout" not in fake_git.subcommands

    def test_reset_skipped_without_branch_or_tag(self, tmp_path, git_factory, callbacks):
        git = git_factory(branch=None)
        git.run = MagicMock(return_value=0)
        executor = DeploymentExecutor(ListenerConfig(), git, tmp_path, *callbacks)
        assert executor.checkout("master") is True
        calls = [call.args[0] for call in git.run.call_args_list]
        assert calls == ["fetch", "checkout"]

    def test_reset_runs_on_tag(self, tmp_path, git_factory, callbacks):
        git = git_factory(branch=None, tag="v1.0")
        git.run = MagicMock(return_value=0)
        executor = DeploymentExecutor(ListenerConfig(), git, tmp_path, *callbacks)
        assert executor.checkout("master") is True
        assert git.run.call_args_list[-1].args == ("reset", "-q", "origin/master", "--hard")

    def test_empty_branch(self, executor, fake_git):
        assert executor.checkout("") is False
        assert fake_git.calls == []


class TestReinstall:
    """Test dependency installs."""

    def test_discover_projects(self, executor, tmp_path):
        weather = _plugin(tmp_path, "weather")
        dice = _plugin(tmp_path, "dice")
        (tmp_path / "plugins" / "empty").mkdir()

        assert executor.discover_projects() == [dice.resolve(), weather.resolve()]

    def test_discover_without_plugins(self, executor):
        assert executor.discover_projects() == []

    @pytest.mark.asyncio
    async def test_installs_root_and_plugins(self, executor, tmp_path):
        weather = _plugin(tmp_path, "weather")
        dice = _plugin(tmp_path, "dice")

        failures = await executor.reinstall()

        assert failures == []
        dirs = [call.args[0] for call in executor._run_install.await_args_list]
        assert dirs[0] == tmp_path
        assert sorted(dirs[1:]) == sorted([weather.resolve(), dice.resolve()])

    @pytest.mark.asyncio
    async def test_plugin_installs_run_concurrently(self, executor, tmp_path):
        """Every plugin install is in flight before any of them finishes."""
        plugins = {_plugin(tmp_path, name).resolve() for name in ("dice", "weather", "quotes")}
        started: set[Path] = set()
        all_started = asyncio.Event()

        async def install(cwd):
            if cwd == tmp_path:
                return 0
            started.add(cwd)
            if started == plugins:
                all_started.set()
            await asyncio.wait_for(all_started.wait(), timeout=1)
            return 0

        executor._run_install = AsyncMock(side_effect=install)

        assert await executor.reinstall() == []
        assert started == plugins

    @pytest.mark.asyncio
    async def test_root_install_finishes_before_plugins(self, executor, tmp_path):
        _plugin(tmp_path, "weather")
        order: list[str] = []

        async def install(cwd):
            order.append("start root" if cwd == tmp_path else "start plugin")
            await asyncio.sleep(0.01)
            order.append("end root" if cwd == tmp_path else "end plugin")
            return 0

        executor._run_install = AsyncMock(side_effect=install)
        await executor.reinstall()

        assert order == ["start root", "end root", "start plugin", "end plugin"]

    @pytest.mark.asyncio
    async def test_plugin_failures_are_collected(self, executor, tmp_path):
        good = _plugin(tmp_path, "good")
        bad = _plugin(tmp_path, "bad")
        broken = _plugin(tmp_path, "broken")

        async def install(cwd):
            if cwd == bad.resolve():
                return 2
            if cwd == broken.resolve():
                raise OSError("no such directory")
            return 0

        executor._run_install = AsyncMock(side_effect=install)
        failures = dict(await executor.reinstall())

        assert good.resolve() not in failures
        assert failures[bad.resolve()] == "exit code 2"
        assert failures[broken.resolve()] == "no such directory"

    @pytest.mark.asyncio
    async def test_plugin_failures_do_not_stop_update(self, executor, tmp_path, callbacks):
        _plugin(tmp_path, "bad")
        executor._run_install = AsyncMock(side_effect=[0, 1])
        decision = UpdateDecision(should_update=True, reinstall_required=True)

        assert await executor.handle("master", decision) is True
        callbacks[1].assert_called_once()

    @pytest.mark.asyncio
    async def test_root_install_error_is_logged(self, executor, tmp_path):
        _plugin(tmp_path, "weather")
        executor._run_install = AsyncMock(side_effect=[OSError("boom"), 0])
        assert await executor.reinstall() == []
        assert executor._run_install.await_count == 2


class TestRunInstall:
    """Run the install command through a real shell."""

    @pytest.mark.asyncio
    async def test_exit_code(self, tmp_path, fake_git, callbacks):
        config = ListenerConfig(install_command="exit 3")
        executor = DeploymentExecutor(config, fake_git, tmp_path, *callbacks)
        assert await executor._run_install(tmp_path) == 3

    @pytest.mark.asyncio
    async def test_runs_in_directory(self, tmp_path, fake_git, callbacks):
        config = ListenerConfig(install_command="touch installed")
        executor = DeploymentExecutor(config, fake_git, tmp_path, *callbacks)
        assert await executor._run_install(tmp_path) == 0
        assert (tmp_path / "installed").exists()
