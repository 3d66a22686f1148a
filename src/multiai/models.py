"""Config model

Immutable description of one run: AI apps, terminal mode, panes per column.
Validated with pydantic; ``WorktreeRecord`` is a plain dataclass because it
is produced by the worktree gateway, not parsed from a file.
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator

from . import config


class TerminalMode(str, Enum):
    """Terminal layout backend."""

    ITERM2 = "iterm2"
    TMUX_MULTI_WINDOW = "tmux-multi-window"
    TMUX_SINGLE_WINDOW = "tmux-single-window"

    @classmethod
    def parse(cls, value: str) -> "TerminalMode":
        """Parse a mode name case-insensitively.

        Raises:
            ValueError: for unknown names
        """
        normalized = value.strip().lower()
        for mode in cls:
            if mode.value == normalized:
                return mode
        choices = ", ".join(m.value for m in cls)
        raise ValueError(f"Unknown mode '{value}' (expected one of: {choices})")

    @classmethod
    def system_default(cls, os_kind: str) -> "TerminalMode":
        """iTerm2 on macOS, single-window tmux everywhere else."""
        if os_kind == "Darwin":
            return cls.ITERM2
        return cls.TMUX_SINGLE_WINDOW

    @property
    def is_tmux(self) -> bool:
        return self in (TerminalMode.TMUX_MULTI_WINDOW, TerminalMode.TMUX_SINGLE_WINDOW)


class AiApp(BaseModel):
    """One AI tool: name (used in branch names), launch command, optional prompt hint."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str
    command: str
    prompt_hint: str | None = Field(
        default=None, validation_alias=AliasChoices("prompt_hint", "ultrathink")
    )
    default: bool = False  # preselected in the add picker
    description: str | None = None

    @field_validator("name")
    @classmethod
    def _check_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("app name must not be empty")
        if any(c.isspace() for c in v) or "/" in v:
            raise ValueError(f"app name '{v}' must not contain whitespace or '/'")
        return v

    @field_validator("command")
    @classmethod
    def _check_command(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("app command must not be empty")
        return v


class ProjectConfig(BaseModel):
    """Contents of ``multi-ai-config.jsonc``."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    ai_apps: list[AiApp] = Field(default_factory=list)
    terminals_per_column: int = config.DEFAULT_TERMINALS_PER_COLUMN
    mode: TerminalMode | None = Field(
        default=None, validation_alias=AliasChoices("mode", "terminal_mode")
    )
    settle_delay_ms: int | None = None

    @field_validator("mode", mode="before")
    @classmethod
    def _parse_mode(cls, v):
        if isinstance(v, str):
            return TerminalMode.parse(v)
        return v

    @field_validator("settle_delay_ms")
    @classmethod
    def _check_delay(cls, v: int | None) -> int | None:
        if v is not None and v < 0:
            raise ValueError("settle_delay_ms must not be negative")
        return v

    @model_validator(mode="after")
    def _unique_names(self) -> "ProjectConfig":
        seen: set[str] = set()
        for app in self.ai_apps:
            if app.name in seen:
                raise ValueError(f"duplicate app name '{app.name}'")
            seen.add(app.name)
        return self

    def app_names(self) -> list[str]:
        return [app.name for app in self.ai_apps]

    def find_app(self, name: str) -> AiApp | None:
        for app in self.ai_apps:
            if app.name == name:
                return app
        return None


@dataclass(frozen=True)
class WorktreeRecord:
    """A worktree materialized for one AI app."""

    app: AiApp
    branch_name: str
    path: Path

    @property
    def app_name(self) -> str:
        return self.app.name
