"""Session registry

Existence checks for the named multiplexer container and for a prefix's
worktrees. The multiplexer and the filesystem are the source of truth; no
result is cached.
"""

from enum import Enum
from typing import TYPE_CHECKING

from ..telemetry import get_logger

if TYPE_CHECKING:
    from ..adapters.base import TerminalDriver
    from ..worktree import WorktreeGateway

logger = get_logger(__name__)


class Existence(Enum):
    """Outcome of an existence query.

    QUERY_FAILED is kept apart from NOT_FOUND so a broken query is never
    read as "safe to create".
    """

    EXISTS = "exists"
    NOT_FOUND = "not_found"
    QUERY_FAILED = "query_failed"


class SessionRegistry:
    """Answers "does this already exist?" for the orchestrator."""

    def __init__(self, driver: "TerminalDriver", gateway: "WorktreeGateway"):
        self._driver = driver
        self._gateway = gateway

    async def container_status(self, name: str) -> Existence:
        status = await self._driver.container_status(name)
        logger.debug(f"{self._driver.name} container {name!r}: {status.value}")
        return status

    def worktrees_status(self, branch_names: list[str]) -> Existence:
        status = self._gateway.worktrees_status(branch_names)
        logger.debug(f"worktrees {branch_names}: {status.value}")
        return status
