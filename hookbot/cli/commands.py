"""CLI commands for hookbot."""

import asyncio
import signal
import sys
from pathlib import Path

import typer
from loguru import logger
from rich.console import Console

from hookbot import __logo__, __version__

app = typer.Typer(
    name="hookbot",
    help=f"{__logo__} hookbot - GitHub alerts and self-updates for chat bots",
    no_args_is_help=True,
)

console = Console()


def version_callback(value: bool):
    if value:
        console.print(f"{__logo__} hookbot v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None, "--version", "-v", callback=version_callback, is_eager=True
    ),
):
    """hookbot - GitHub alerts and self-updates for chat bots."""
    pass


def _setup_logging(verbose: bool) -> None:
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if verbose else "INFO")


# ============================================================================
# Onboard / Setup
# ============================================================================


@app.command()
def onboard():
    """Write the default listener configuration."""
    from hookbot.config.loader import get_config_path, save_config
    from hookbot.config.schema import ListenerConfig

    config_path = get_config_path()

    if config_path.exists():
        console.print(f"[yellow]Config already exists at {config_path}[/yellow]")
        if not typer.confirm("Overwrite?"):
            raise typer.Exit()

    save_config(ListenerConfig(), config_path)
    console.print(f"[green]✓[/green] Created config at {config_path}")

    console.print("\nNext steps:")
    console.print(f"  1. Set [cyan]repository[/cyan], [cyan]branch[/cyan] and [cyan]secret[/cyan] in {config_path}")
    console.print("  2. Point a GitHub webhook at [cyan]http://<host>:4269/github/callback[/cyan]")
    console.print("  3. Run: [cyan]hookbot listen[/cyan]")


# ============================================================================
# Listener
# ============================================================================


@app.command()
def listen(
    root: Path = typer.Option(Path("."), "--root", "-r", help="Root of the bot checkout"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    """Run the GitHub listener until stopped."""
    from hookbot.config.loader import load_config
    from hookbot.github.listener import GitHubListener

    _setup_logging(verbose)

    shutdown_event = asyncio.Event()
    reload_event = asyncio.Event()

    def send_message(text: str, is_alert: bool = False) -> None:
        style = "bold magenta" if is_alert else None
        console.print(text, style=style, markup=False, highlight=False)

    def shutdown(reason: str) -> None:
        console.print(reason, markup=False)
        shutdown_event.set()

    def reload() -> None:
        reload_event.set()

    def make_listener() -> GitHubListener:
        return GitHubListener(
            load_config(),
            send_message=send_message,
            shutdown=shutdown,
            reload=reload,
            app_root=root,
        )

    async def run():
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGTERM, signal.SIGINT):
            loop.add_signal_handler(sig, shutdown_event.set)

        listener = make_listener()
        await listener.start()
        console.print(f"{__logo__} Listening on port {listener.config.port}")
        try:
            while not shutdown_event.is_set():
                shutdown_wait = asyncio.create_task(shutdown_event.wait())
                reload_wait = asyncio.create_task(reload_event.wait())
                await asyncio.wait(
                    [shutdown_wait, reload_wait],
                    return_when=asyncio.FIRST_COMPLETED,
                )
                for task in (shutdown_wait, reload_wait):
                    task.cancel()

                if reload_event.is_set() and not shutdown_event.is_set():
                    reload_event.clear()
                    logger.info("Reloading GitHub listener")
                    await listener.stop()
                    listener = make_listener()
                    await listener.start()
        finally:
            console.print("Shutting down...")
            await listener.stop()

    asyncio.run(run())


# ============================================================================
# Status Commands
# ============================================================================


@app.command()
def status(
    root: Path = typer.Option(Path("."), "--root", "-r", help="Root of the bot checkout"),
):
    """Show listener configuration and repository state."""
    from hookbot.config.loader import get_config_path, load_config
    from hookbot.deploy.git import GitRepo

    config_path = get_config_path()
    exists = config_path.exists()
    config = load_config()
    git = GitRepo(root)

    console.print(f"{__logo__} hookbot Status\n")
    console.print(f"Config: {config_path} {'[green]✓[/green]' if exists else '[yellow]created[/yellow]'}")
    console.print(f"Listener: {'[green]enabled[/green]' if config.enabled else '[dim]disabled[/dim]'}")
    console.print(f"Endpoint: {config.host}:{config.port}{config.path}")
    branches = ", ".join(config.branch) if isinstance(config.branch, list) else config.branch
    console.print(f"Watching: {config.repository} ({branches})")
    console.print(f"Auto-update: {'[green]on[/green]' if config.auto_update else '[dim]off[/dim]'}")
    enabled = [name for name, on in config.events.model_dump().items() if on]
    console.print(f"Alerts: {', '.join(enabled) or '[dim]none[/dim]'}")

    if git.is_repo:
        console.print(f"Repository: {git.root}")
        console.print(f"Branch: {git.branch() or '[dim]detached[/dim]'}")
        commit = git.commit()
        console.print(f"Commit: {commit[:8] if commit else '[dim]unknown[/dim]'}")
        tag = git.tag()
        if tag:
            console.print(f"Tag: {tag}")
    else:
        console.print(f"Repository: [red]✗[/red] {root} is not a git checkout")


if __name__ == "__main__":
    app()
