"""CLI entry point for multiai.

Commands:
- mai add [PREFIX]: create worktrees and the terminal layout (picker without PREFIX)
- mai continue|resume PREFIX: reopen the layout for existing worktrees
- mai remove [PREFIX]: kill the tmux session and remove the worktrees (picker without PREFIX)
- mai list: show worktree groups
- mai send: type a prompt into AI panes (or a command into shell panes) of a tmux session
- mai init: write a starter multi-ai-config.jsonc
- mai config: open the project config in the default editor
- mai apps: open the global AI tool catalog, creating it first if needed
"""

import asyncio
import subprocess
import sys
from datetime import datetime
from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape
from rich.prompt import Prompt
from rich.table import Table

from . import __version__, catalog
from .environment import Environment
from .errors import ConfigNotFound, MultiAiError, OpenFailed
from .init import InitWizard
from .models import TerminalMode
from .orchestrator import Orchestrator
from .picker import AppPicker, PrefixPicker
from .project import load_project
from .send import MessageKind, Sender
from .telemetry import get_logger, setup_logging

logger = get_logger(__name__)

console = Console()
err_console = Console(stderr=True)

MODE_CHOICES = [m.value for m in TerminalMode]


def _parse_mode(ctx, param, value: str | None) -> TerminalMode | None:
    return TerminalMode.parse(value) if value else None


def mode_options(func):
    """``--mode`` plus the older ``--tmux`` spelling of tmux-multi-window."""
    func = click.option(
        "--tmux",
        "legacy_tmux",
        is_flag=True,
        help="Same as --mode tmux-multi-window",
    )(func)
    return click.option(
        "--mode",
        type=click.Choice(MODE_CHOICES, case_sensitive=False),
        callback=_parse_mode,
        help="Terminal mode for this run (overrides the config)",
    )(func)


def _mode(mode: TerminalMode | None, legacy_tmux: bool) -> TerminalMode | None:
    if legacy_tmux and mode is not None:
        raise click.UsageError("--tmux and --mode cannot be used together")
    return TerminalMode.TMUX_MULTI_WINDOW if legacy_tmux else mode


def _run(flow):
    """Call ``flow`` (running the coroutine it returns, if any).

    Classified errors are printed and exit with code 1.
    """
    try:
        result = flow()
        if asyncio.iscoroutine(result):
            return asyncio.run(result)
        return result
    except MultiAiError as e:
        logger.debug("command failed", exc_info=True)
        err_console.print(f"[red]Error:[/red] {escape(str(e))}")
        sys.exit(e.exit_code)


def _orchestrator(env: Environment) -> Orchestrator:
    return Orchestrator(env, console=console)


def format_relative_time(when: datetime | None, now: datetime | None = None) -> str:
    if when is None:
        return "-"
    seconds = int(((now or datetime.now()) - when).total_seconds())
    if seconds < 60:
        return "just now"
    if seconds < 3600:
        return f"{seconds // 60}m ago"
    if seconds < 86400:
        return f"{seconds // 3600}h ago"
    if seconds < 604800:
        return f"{seconds // 86400}d ago"
    return f"{seconds // 604800}w ago"


def _open_file(env: Environment, path: Path) -> None:
    """Hand ``path`` to the desktop opener (``open`` on macOS, else ``xdg-open``).

    Raises:
        OpenFailed: the opener could not be started
    """
    opener = "open" if env.is_macos else "xdg-open"
    try:
        subprocess.Popen([opener, str(path)], stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL)
    except OSError as e:
        raise OpenFailed(str(path), str(e)) from e


@click.group()
@click.version_option(__version__, "-v", "--version")
@click.option("--verbose", is_flag=True, help="Debug logging")
@click.pass_context
def main(ctx: click.Context, verbose: bool) -> None:
    """mai - run AI coding tools side by side in git worktrees."""
    setup_logging("DEBUG" if verbose else None)
    if ctx.obj is None:
        ctx.obj = Environment.current()


@main.command()
@click.argument("prefix", required=False)
@mode_options
@click.option("--force", is_flag=True, help="Add windows to an existing session")
@click.pass_obj
def add(env: Environment, prefix: str | None, mode: TerminalMode | None, legacy_tmux: bool, force: bool) -> None:
    """Create worktrees PREFIX-<app> and open them side by side.

    Without PREFIX, asks for one and for the tools to start.
    """
    mode = _mode(mode, legacy_tmux)
    orchestrator = _orchestrator(env)
    if prefix:
        _run(lambda: orchestrator.add(prefix, mode_override=mode, force=force))
        return

    choices = _run(orchestrator.picker_apps)
    if not choices:
        console.print("No AI tools configured. Run 'mai apps' or 'mai init' first.")
        return
    result = AppPicker(choices, console=console).run()
    if result is None:
        console.print("Cancelled.")
        return
    if not result.apps:
        console.print("No tools selected.")
        return
    _run(lambda: orchestrator.add(result.prefix, mode_override=mode, force=force, apps=result.apps))


def _continue(env: Environment, prefix: str, mode: TerminalMode | None, legacy_tmux: bool) -> None:
    mode = _mode(mode, legacy_tmux)
    _run(lambda: _orchestrator(env).continue_(prefix, mode_override=mode))


@main.command(name="continue")
@click.argument("prefix")
@mode_options
@click.pass_obj
def continue_cmd(env: Environment, prefix: str, mode: TerminalMode | None, legacy_tmux: bool) -> None:
    """Reopen the layout for existing PREFIX worktrees."""
    _continue(env, prefix, mode, legacy_tmux)


@main.command()
@click.argument("prefix")
@mode_options
@click.pass_obj
def resume(env: Environment, prefix: str, mode: TerminalMode | None, legacy_tmux: bool) -> None:
    """Alias of continue."""
    _continue(env, prefix, mode, legacy_tmux)


@main.command()
@click.argument("prefix", required=False)
@mode_options
@click.option("--force", "-f", is_flag=True, help="Do not ask for confirmation")
@click.pass_obj
def remove(env: Environment, prefix: str | None, mode: TerminalMode | None, legacy_tmux: bool, force: bool) -> None:
    """Remove PREFIX worktrees and their tmux session.

    Without PREFIX, lists the worktree groups and asks which to remove.
    """
    mode = _mode(mode, legacy_tmux)
    orchestrator = _orchestrator(env)
    if prefix:
        prefixes = [prefix]
    else:
        groups = _run(orchestrator.list_environments)
        if not groups:
            console.print("No worktree prefixes found.")
            return
        prefixes = PrefixPicker(groups, console=console).run()
        if not prefixes:
            console.print("Nothing selected.")
            return

    for target in prefixes:
        removed = _run(
            lambda: orchestrator.remove(
                target,
                mode_override=mode,
                force=force,
                confirm=lambda question: click.confirm(question, default=False),
            )
        )
        if removed:
            console.print(f"[green]✓[/green] Cleanup completed ({len(removed)} worktrees)")


@main.command(name="list")
@click.pass_obj
def list_cmd(env: Environment) -> None:
    """List worktree groups, newest first."""
    groups = _run(lambda: _orchestrator(env).list_environments())
    if not groups:
        console.print("No worktrees found.")
        return

    table = Table(show_header=True, header_style="bold")
    table.add_column("Prefix")
    table.add_column("Modified")
    table.add_column("Apps")
    now = datetime.now()
    for group in groups:
        apps = "" if group.standalone else ", ".join(group.app_suffixes())
        table.add_row(group.prefix, format_relative_time(group.modified, now), apps)
    console.print(table)


@main.command()
@click.option("--yes", "-y", is_flag=True, help="Accept defaults without prompting")
@click.pass_obj
def init(env: Environment, yes: bool) -> None:
    """Write multi-ai-config.jsonc in the current directory."""
    _run(lambda: InitWizard(env, console=console, assume_yes=yes).run())


@main.command(name="config")
@click.pass_obj
def config_cmd(env: Environment) -> None:
    """Open the project's multi-ai-config.jsonc."""
    path = _run(lambda: load_project(env).config_path)
    console.print(f"Opening {path}")
    _run(lambda: _open_file(env, path))


def _ensure_apps_file(env: Environment) -> tuple[Path, bool]:
    try:
        return catalog.ensure_apps_file(env)
    except OSError as e:
        raise OpenFailed(str(catalog.apps_path(env)), str(e)) from e


@main.command()
@click.pass_obj
def apps(env: Environment) -> None:
    """Open the global AI tool catalog (created with defaults if missing)."""
    path, created = _run(lambda: _ensure_apps_file(env))
    if created:
        console.print(f"[green]✓[/green] Created {path}")
    if path.is_symlink():
        console.print(f"Opening {path} -> {path.resolve()}")
    else:
        console.print(f"Opening {path}")
    _run(lambda: _open_file(env, path))


@main.command()
@click.option("--session", "-s", help="Target tmux session (default: the only one)")
@click.option("--message", "-m", help="Text to send (prompted when omitted)")
@click.option("--pane", "panes", multiple=True, help="Target pane id, e.g. %3 (repeatable)")
@click.option("--think", is_flag=True, help="Append each app's prompt hint")
@click.option("--command", "as_command", is_flag=True, help="Send to the shell panes instead of the AI panes")
@click.pass_obj
def send(
    env: Environment,
    session: str | None,
    message: str | None,
    panes: tuple[str, ...],
    think: bool,
    as_command: bool,
) -> None:
    """Send a prompt to the AI panes of a tmux session."""
    project = _run(lambda: _optional_project(env))
    kind = MessageKind.COMMAND if as_command else MessageKind.PROMPT

    if not message:
        message = Prompt.ask("Command" if as_command else "Message", console=console)
    if not message.strip():
        console.print("Nothing to send.")
        return

    sender = Sender(project)
    sent = _run(lambda: sender.send_message(session, message, list(panes) or None, think=think, kind=kind))
    console.print(f"[green]✓[/green] Sent {kind.value} to {len(sent)} pane(s)")


def _optional_project(env: Environment):
    """Project config when run inside a project, else None."""
    try:
        return load_project(env).config
    except ConfigNotFound:
        return None


if __name__ == "__main__":
    main()
