"""Worktree gateway

Wraps the external ``gwt`` (git-worktree-cli) tool. gwt lays worktrees out
as sibling directories of the project path, named after their branch:

    project/
        main/              primary checkout
        feat-claude/       worktree for branch feat-claude
        feat-gemini/

Discovery only looks at the filesystem: a directory holding a ``.git``
entry is a worktree.
"""

import os
import subprocess
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from . import config, git
from .core.registry import Existence
from .environment import Environment
from .errors import WorktreeCliUnavailable, WorktreeOperationFailed
from .telemetry import get_logger, metrics, truncate_command

logger = get_logger(__name__)


@dataclass(frozen=True)
class PrefixGroup:
    """Worktrees sharing one branch prefix (one ``mai add`` run)."""

    prefix: str
    worktrees: list[str]
    modified: datetime | None = None

    @property
    def standalone(self) -> bool:
        """A single worktree named exactly like the prefix."""
        return self.worktrees == [self.prefix]

    def app_suffixes(self) -> list[str]:
        lead = f"{self.prefix}-"
        return [w[len(lead):] if w.startswith(lead) else w for w in self.worktrees]


def collect_worktree_entries(base: Path) -> list[str]:
    """Worktree directory names under ``base``, relative and '/'-joined.

    Directories without ``.git`` are descended into, so a branch like
    ``feat/login`` shows up as "feat/login".
    """
    found: list[str] = []

    def walk(directory: Path, prefix: str) -> None:
        try:
            entries = sorted(directory.iterdir())
        except OSError:
            return
        for entry in entries:
            if not entry.is_dir():
                continue
            relative = f"{prefix}/{entry.name}" if prefix else entry.name
            if (entry / ".git").exists():
                found.append(relative)
            else:
                walk(entry, relative)

    walk(base, "")
    return found


class WorktreeGateway:
    """gwt wrapper bound to one project path.

    Usage:
        gateway = WorktreeGateway(project_path, env)
        gateway.ensure_cli()
        path = gateway.create("feat-claude")
    """

    def __init__(self, project_path: Path, env: Environment, binary: str | None = None):
        self.project_path = project_path
        self._env = env
        self._binary = binary or config.GWT_BINARY

    def path_for(self, branch_name: str) -> Path:
        return self.project_path / branch_name

    # === gwt ===

    def has_cli(self) -> bool:
        """True when ``gwt --version`` exits 0."""
        try:
            result = subprocess.run(
                [self._binary, "--version"], capture_output=True, text=True, timeout=10
            )
        except (OSError, subprocess.TimeoutExpired) as e:
            logger.debug(f"{self._binary} --version failed: {e}")
            return False
        return result.returncode == 0

    def ensure_cli(self) -> None:
        """Raises WorktreeCliUnavailable when gwt is missing."""
        if not self.has_cli():
            raise WorktreeCliUnavailable(self._binary, config.GWT_INSTALL_HINT)

    def create(self, branch_name: str) -> Path:
        """``gwt add <branch>``; returns the new worktree's path.

        Raises:
            WorktreeCliUnavailable: gwt is not installed
            WorktreeOperationFailed: gwt exited non-zero
        """
        self._stream("create", ["add", branch_name], branch_name)
        metrics.inc("worktree.created")
        return self.path_for(branch_name)

    def remove(self, branch_name: str) -> None:
        """``gwt remove <branch> --force``.

        Raises:
            WorktreeCliUnavailable: gwt is not installed
            WorktreeOperationFailed: gwt exited non-zero
        """
        self._stream("remove", ["remove", branch_name, "--force"], branch_name)
        metrics.inc("worktree.removed")

    def _stream(self, operation: str, args: list[str], branch_name: str) -> None:
        cmd = [self._binary, *args]
        logger.debug(f"gwt: {truncate_command(cmd)}")
        try:
            proc = subprocess.Popen(
                cmd,
                cwd=self.project_path,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
            )
        except OSError as e:
            raise WorktreeCliUnavailable(self._binary, config.GWT_INSTALL_HINT) from e

        with proc:
            for line in proc.stdout:
                logger.info(f"    {line.rstrip()}")
            stderr = proc.stderr.read()
            returncode = proc.wait()

        if returncode != 0:
            logger.warning(f"gwt {operation} {branch_name} failed ({returncode})")
            raise WorktreeOperationFailed(operation, branch_name, stderr)

    def is_gwt_project(self) -> bool:
        """Whether gwt knows this project.

        Checked in order: a gwt config in the project dir or ``main/``, a
        global config keyed by the remote URL, then ``gwt list``.
        """
        for directory in (self.project_path, self.project_path / "main"):
            for name in config.GWT_CONFIG_NAMES:
                if (directory / name).is_file():
                    return True

        for directory in (self.project_path / "main", self.project_path):
            url = git.get_remote_origin_url(directory) if directory.is_dir() else None
            if url:
                stem = git.generate_config_filename(url)
                global_dir = self._env.home / config.GWT_GLOBAL_PROJECTS_DIR
                if any((global_dir / f"{stem}{Path(n).suffix}").is_file() for n in config.GWT_CONFIG_NAMES):
                    return True
                break

        try:
            result = subprocess.run(
                [self._binary, "list"], cwd=self.project_path, capture_output=True, text=True, timeout=10
            )
        except (OSError, subprocess.TimeoutExpired):
            return False
        return result.returncode == 0

    # === Discovery ===

    def worktrees_status(self, branch_names: list[str]) -> Existence:
        """EXISTS only when every branch has a directory."""
        if not os.access(self.project_path, os.R_OK | os.X_OK):
            return Existence.QUERY_FAILED
        try:
            present = [self.path_for(b).is_dir() for b in branch_names]
        except OSError as e:
            logger.warning(f"Cannot read worktrees in {self.project_path}: {e}")
            return Existence.QUERY_FAILED
        if present and all(present):
            return Existence.EXISTS
        return Existence.NOT_FOUND

    def discover(self, prefix: str) -> list[str]:
        """Worktree names ``<prefix>-*`` or exactly ``<prefix>``, sorted."""
        lead = f"{prefix}-"
        return sorted(
            name for name in collect_worktree_entries(self.project_path)
            if name == prefix or name.startswith(lead)
        )

    def discover_prefixes(self, app_names: list[str]) -> list[PrefixGroup]:
        """Group worktrees by prefix, stripping known app-name suffixes.

        Longer app names are tried first ("claude-yolo" before "yolo").
        Worktrees matching no app form a standalone group. ``main`` is
        skipped. Groups come back sorted by prefix.
        """
        suffixes = sorted(set(app_names), key=len, reverse=True)
        groups: dict[str, list[str]] = {}
        for name in collect_worktree_entries(self.project_path):
            if name == "main":
                continue
            prefix = name
            for app in suffixes:
                tail = f"-{app}"
                if name.endswith(tail) and len(name) > len(tail):
                    prefix = name[: -len(tail)]
                    break
            groups.setdefault(prefix, []).append(name)

        return [
            PrefixGroup(prefix=prefix, worktrees=sorted(names), modified=self._latest_mtime(names))
            for prefix, names in sorted(groups.items())
        ]

    def _latest_mtime(self, names: list[str]) -> datetime | None:
        times = []
        for name in names:
            try:
                times.append((self.project_path / name).stat().st_mtime)
            except OSError:
                continue
        return datetime.fromtimestamp(max(times)) if times else None
