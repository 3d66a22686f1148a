"""Orchestrator - add / continue / remove / list flows

Ties config, worktree gateway, layout planner and terminal driver together.
Each flow validates everything it can before the first mutation, then runs
strictly in order. Nothing is rolled back on failure: what was created
stays, and ``continue`` picks it up.
"""

from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from rich.console import Console

from . import catalog
from .adapters import RealizedLayout, TerminalDriver, create_driver, resolve_mode
from .core.naming import app_from_branch, project_name, session_name, worktree_branch_name
from .core.registry import Existence, SessionRegistry
from .environment import Environment
from .errors import (
    ConfigNotFound,
    EmptyConfiguration,
    MultiAiError,
    MultiplexerCommandFailed,
    SessionAlreadyExists,
    SessionNotFound,
    WorktreeOperationFailed,
)
from .layout import plan
from .models import AiApp, TerminalMode, WorktreeRecord
from .project import LoadedProject, load_project
from .telemetry import get_logger
from .timing import SettlePolicy
from .worktree import PrefixGroup, WorktreeGateway

logger = get_logger(__name__)

DriverFactory = Callable[[TerminalMode, Environment, SettlePolicy], TerminalDriver]
ConfirmFn = Callable[[str], bool]


@dataclass
class RunContext:
    """Everything one flow needs, resolved up front."""

    project: LoadedProject
    mode: TerminalMode
    session: str
    gateway: WorktreeGateway
    driver: TerminalDriver
    registry: SessionRegistry


class Orchestrator:
    """Runs the CLI flows against injected collaborators.

    Args:
        env: Process environment
        driver_factory: Builds the terminal driver for a mode
        gateway_factory: Builds the worktree gateway for a project path
        console: Where progress lines go
    """

    def __init__(
        self,
        env: Environment,
        driver_factory: DriverFactory = create_driver,
        gateway_factory: Callable[[Path, Environment], WorktreeGateway] = WorktreeGateway,
        console: Console | None = None,
    ):
        self.env = env
        self._driver_factory = driver_factory
        self._gateway_factory = gateway_factory
        self.console = console or Console()

    def _context(
        self, prefix: str, mode_override: TerminalMode | None, tmux_driver: bool = False
    ) -> RunContext:
        """Resolve config, mode, names and collaborators.

        With ``tmux_driver`` the driver is always a tmux one, whatever the
        mode; ``remove`` uses this for its best-effort session cleanup.
        """
        project = load_project(self.env)
        self.console.print(f"Using config: {project.config_path}")

        name = project_name(project.project_path)
        if not name:
            raise ConfigNotFound([str(project.project_path)])

        mode = resolve_mode(mode_override, project.config.mode, self.env)
        settle = SettlePolicy.from_millis(project.config.settle_delay_ms)
        driver_mode = mode
        if tmux_driver and not mode.is_tmux:
            driver_mode = TerminalMode.TMUX_SINGLE_WINDOW
        driver = self._driver_factory(driver_mode, self.env, settle)
        gateway = self._gateway_factory(project.project_path, self.env)
        return RunContext(
            project=project,
            mode=mode,
            session=session_name(name, prefix),
            gateway=gateway,
            driver=driver,
            registry=SessionRegistry(driver, gateway),
        )

    def _records(self, ctx: RunContext, apps: list[AiApp], prefix: str) -> list[WorktreeRecord]:
        return [
            WorktreeRecord(
                app=app,
                branch_name=worktree_branch_name(prefix, app.name),
                path=ctx.gateway.path_for(worktree_branch_name(prefix, app.name)),
            )
            for app in apps
        ]

    def _plan(self, ctx: RunContext, records: list[WorktreeRecord], prefix: str):
        window_name = prefix if ctx.mode == TerminalMode.ITERM2 else None
        return plan(records, ctx.mode, ctx.project.config.terminals_per_column, window_name=window_name)

    async def _realize(self, ctx: RunContext, layout_plan, reuse: bool) -> RealizedLayout:
        realized = await ctx.driver.realize(layout_plan, ctx.session, reuse=reuse)
        self.console.print(f"[green]✓[/green] {ctx.driver.name} layout ready: {ctx.session}")
        if ctx.mode.is_tmux:
            await ctx.driver.attach(ctx.session)
        return realized

    # === add ===

    async def add(
        self,
        prefix: str,
        mode_override: TerminalMode | None = None,
        force: bool = False,
        apps: list[AiApp] | None = None,
    ) -> RealizedLayout:
        """Create one worktree per app, then the terminal layout.

        ``apps`` (from the picker) replaces the configured apps for this run.

        Raises:
            EmptyConfiguration / InvalidPaneCount: before anything runs
            SessionAlreadyExists: session exists and ``force`` is not set
            WorktreeCliUnavailable, WorktreeOperationFailed: from gwt
            MultiplexerCommandFailed: status query or layout command failed
        """
        ctx = self._context(prefix, mode_override)
        apps = list(ctx.project.config.ai_apps if apps is None else apps)
        if not apps:
            raise EmptyConfiguration()
        records = self._records(ctx, apps, prefix)
        layout_plan = self._plan(ctx, records, prefix)

        ctx.gateway.ensure_cli()
        if not ctx.gateway.is_gwt_project():
            raise WorktreeOperationFailed(
                "initialize",
                prefix,
                f"{ctx.project.project_path} is not a gwt project; run 'gwt init' first",
            )

        await ctx.driver.connect()
        try:
            status = await ctx.registry.container_status(ctx.session)
            if status == Existence.QUERY_FAILED:
                raise MultiplexerCommandFailed(
                    f"{ctx.driver.name} status {ctx.session}", "could not determine whether it exists"
                )
            if status == Existence.EXISTS and not force:
                raise SessionAlreadyExists(ctx.session)

            for record in records:
                self.console.print(f"  Creating worktree '{record.branch_name}' for {record.app_name}...")
                ctx.gateway.create(record.branch_name)
                self.console.print(f"  [green]✓[/green] {record.path}")

            return await self._realize(ctx, layout_plan, reuse=status == Existence.EXISTS)
        finally:
            await ctx.driver.disconnect()

    # === continue ===

    def _existing_records(self, ctx: RunContext, prefix: str) -> list[WorktreeRecord]:
        apps = list(ctx.project.config.ai_apps)
        if apps:
            records = self._records(ctx, apps, prefix)
            status = ctx.registry.worktrees_status([r.branch_name for r in records])
            if status == Existence.QUERY_FAILED:
                raise SessionNotFound(prefix, f"cannot read {ctx.project.project_path}")
            if status != Existence.EXISTS:
                raise SessionNotFound(prefix)
            return records

        # No apps configured: rebuild them from the worktree directory names,
        # taking launch commands from the global catalog where it knows the app
        branches = ctx.gateway.discover(prefix)
        if not branches:
            raise SessionNotFound(prefix)
        known = catalog.load_apps(self.env)
        records = []
        for branch in branches:
            app_name = app_from_branch(prefix, branch).replace("/", "-")
            app = catalog.find_app(known, app_name) or AiApp(name=app_name, command=app_name)
            records.append(
                WorktreeRecord(
                    app=app,
                    branch_name=branch,
                    path=ctx.gateway.path_for(branch),
                )
            )
        return records

    async def continue_(self, prefix: str, mode_override: TerminalMode | None = None) -> RealizedLayout:
        """Open a layout for worktrees created earlier by ``add``.

        An existing session gets new windows; worktrees are never touched.

        Raises:
            SessionNotFound: the prefix's worktrees do not all exist
        """
        ctx = self._context(prefix, mode_override)
        records = self._existing_records(ctx, prefix)
        layout_plan = self._plan(ctx, records, prefix)
        self.console.print(f"[green]✓[/green] Found existing worktrees for '{prefix}'")

        await ctx.driver.connect()
        try:
            return await self._realize(ctx, layout_plan, reuse=True)
        finally:
            await ctx.driver.disconnect()

    # === remove ===

    def _branches_to_remove(self, ctx: RunContext, prefix: str) -> list[str]:
        apps = ctx.project.config.app_names()
        if apps:
            return [worktree_branch_name(prefix, name) for name in apps]
        return ctx.gateway.discover(prefix)

    async def remove(
        self,
        prefix: str,
        mode_override: TerminalMode | None = None,
        force: bool = False,
        confirm: ConfirmFn | None = None,
    ) -> list[str]:
        """Kill the tmux session (best effort) and remove the prefix's worktrees.

        Without ``force`` the user is asked through ``confirm``; declining
        (or having no way to ask) changes nothing. The session step never
        blocks the worktree removals: a tmux session of that name is killed
        whatever the mode, and iTerm2 tabs are left for the user to close.

        Returns:
            Branches whose worktrees were removed

        Raises:
            WorktreeOperationFailed: one or more worktrees failed to remove;
                the others are still removed
        """
        ctx = self._context(prefix, mode_override, tmux_driver=True)
        branches = self._branches_to_remove(ctx, prefix)
        if not branches:
            self.console.print(f"No worktrees found for prefix '{prefix}'.")
            return []

        self.console.print("You are about to remove:")
        for branch in branches:
            self.console.print(f"  • worktree {branch}")
        self.console.print(f"  • tmux session {ctx.session} (if present)")
        if ctx.mode == TerminalMode.ITERM2:
            self.console.print("  • iTerm2 tabs must be closed manually")

        if not force:
            if confirm is None or not confirm("Remove these worktrees and the session?"):
                self.console.print("Removal cancelled.")
                return []

        ctx.gateway.ensure_cli()
        await self._kill_session(ctx)
        if ctx.mode == TerminalMode.ITERM2:
            self.console.print(f"Close the iTerm2 tab '{ctx.session}' manually.")

        removed: list[str] = []
        failures: list[str] = []
        for branch in branches:
            try:
                ctx.gateway.remove(branch)
            except WorktreeOperationFailed as e:
                logger.warning(str(e))
                self.console.print(f"  [red]✗[/red] {e}")
                failures.append(branch)
                continue
            removed.append(branch)
            self.console.print(f"  [green]✓[/green] Removed worktree {branch}")

        if failures:
            raise WorktreeOperationFailed("remove", ", ".join(failures), f"{len(failures)} of {len(branches)} failed")
        return removed

    async def _kill_session(self, ctx: RunContext) -> None:
        """Kill the tmux session if it exists; failures are reported, not raised."""
        try:
            await ctx.driver.connect()
            try:
                status = await ctx.registry.container_status(ctx.session)
                if status == Existence.EXISTS:
                    await ctx.driver.destroy(ctx.session)
                    self.console.print(f"[green]✓[/green] Session {ctx.session} removed")
                elif status == Existence.QUERY_FAILED:
                    self.console.print(f"[yellow]⚠[/yellow] Could not check session {ctx.session}; skipped")
            finally:
                await ctx.driver.disconnect()
        except MultiAiError as e:
            logger.warning(f"Session cleanup skipped: {e}")
            self.console.print(f"[yellow]⚠[/yellow] Session cleanup skipped: {e}")

    # === list ===

    def known_app_names(self, project: LoadedProject) -> list[str]:
        """App names from the global catalog and the project config."""
        names = [app.name for app in catalog.load_apps(self.env)]
        names.extend(project.config.app_names())
        return list(dict.fromkeys(names))

    def picker_apps(self) -> list[AiApp]:
        """Tools offered by the ``add`` picker: the catalog, else the project's apps."""
        apps = catalog.load_apps(self.env)
        if apps:
            return apps
        project = load_project(self.env)
        return [app.model_copy(update={"default": True}) for app in project.config.ai_apps]

    def list_environments(self) -> list[PrefixGroup]:
        """Prefix groups, most recently modified first."""
        project = load_project(self.env)
        gateway = self._gateway_factory(project.project_path, self.env)
        groups = gateway.discover_prefixes(self.known_app_names(project))
        return sorted(groups, key=lambda g: g.modified.timestamp() if g.modified else 0.0, reverse=True)
