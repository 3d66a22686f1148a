"""Settling wait before typing into freshly split panes.

A new pane's shell needs a moment to start; keystrokes sent earlier can be
swallowed by shell startup. This is a fixed heuristic wait, kept behind a
named policy so call sites never sleep on a literal.
"""

import asyncio
from dataclasses import dataclass

from . import config
from .telemetry import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class SettlePolicy:
    """Fixed post-split delay.

    Attributes:
        delay_seconds: Time to wait; 0 disables waiting (tests)
    """

    delay_seconds: float = config.SETTLE_DELAY_MS / 1000.0

    @classmethod
    def from_millis(cls, millis: int | None) -> "SettlePolicy":
        if millis is None:
            return cls()
        return cls(delay_seconds=millis / 1000.0)

    async def settle(self) -> None:
        if self.delay_seconds <= 0:
            return
        logger.debug(f"Settling for {self.delay_seconds:.3f}s")
        await asyncio.sleep(self.delay_seconds)


NO_WAIT = SettlePolicy(delay_seconds=0.0)
