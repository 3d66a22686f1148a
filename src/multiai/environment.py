"""Process environment passed explicitly to every component."""

import os
import platform
from dataclasses import dataclass, field
from pathlib import Path


@dataclass(frozen=True)
class Environment:
    """Working directory, OS kind and home directory of this run.

    Attributes:
        cwd: Directory the command was started from
        os_kind: ``platform.system()`` value ("Darwin", "Linux", ...)
        home: User home directory
        variables: Environment variables (read-only snapshot)
    """

    cwd: Path
    os_kind: str
    home: Path
    variables: dict[str, str] = field(default_factory=dict)

    @classmethod
    def current(cls) -> "Environment":
        return cls(
            cwd=Path.cwd(),
            os_kind=platform.system(),
            home=Path.home(),
            variables=dict(os.environ),
        )

    @property
    def is_macos(self) -> bool:
        return self.os_kind == "Darwin"

    @property
    def inside_tmux(self) -> bool:
        """True when running inside a tmux client ($TMUX set)."""
        return bool(self.variables.get("TMUX"))
