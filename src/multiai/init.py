"""``mai init``: write a starter multi-ai-config.jsonc.

Asks which known AI tools to use (and which command variant of each), the
terminal mode and panes per column. ``assume_yes`` takes the defaults:
claude and gemini with their plain commands, the OS default mode, two
panes per column.
"""

import json
from dataclasses import dataclass
from pathlib import Path

from rich.console import Console
from rich.prompt import Confirm, IntPrompt, Prompt

from . import config
from .environment import Environment
from .models import AiApp, TerminalMode
from .telemetry import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class Variant:
    command: str
    description: str
    suffix: str = ""  # app name suffix in the global catalog ("claude-yolo")


@dataclass(frozen=True)
class Service:
    name: str
    display_name: str
    variants: tuple[Variant, ...]
    default: bool = False


CATALOG: tuple[Service, ...] = (
    Service(
        "claude",
        "Claude Code",
        (
            Variant("claude", "Standard"),
            Variant("claude --dangerously-skip-permissions", "Skip permission prompts", "yolo"),
        ),
        default=True,
    ),
    Service(
        "gemini",
        "Gemini CLI",
        (Variant("gemini", "Standard"), Variant("gemini --yolo", "Auto-approve all actions", "yolo")),
        default=True,
    ),
    Service("codex", "Codex CLI", (Variant("codex", "Standard"), Variant("codex --yolo", "Auto-approve", "yolo"))),
    Service("amp", "Amp", (Variant("amp", "Standard"), Variant("amp --dangerously-allow-all", "Allow all", "yolo"))),
    Service(
        "opencode",
        "OpenCode",
        (Variant("opencode", "Standard"), Variant("opencode --auto-approve", "Auto-approve", "yolo")),
    ),
)


def default_apps() -> list[AiApp]:
    return [AiApp(name=s.name, command=s.variants[0].command) for s in CATALOG if s.default]


def render_config(apps: list[AiApp], mode: TerminalMode, terminals_per_column: int) -> str:
    """JSONC text for a config file."""
    entries = ",".join(
        f'\n    {{\n      "name": {json.dumps(app.name)},\n      "command": {json.dumps(app.command)}\n    }}'
        for app in apps
    )
    return (
        "{\n"
        "  // Multi-AI CLI configuration\n"
        "  // Generated by: mai init\n"
        f'  "terminals_per_column": {terminals_per_column},  // panes per column (first runs the AI command)\n'
        f'  "mode": "{mode.value}",  // iterm2 | tmux-single-window | tmux-multi-window\n'
        f'  "ai_apps": [{entries}\n'
        "  ]\n"
        "}\n"
    )


class InitWizard:
    """Prompts for a config and writes it.

    Args:
        env: Process environment (target dir, default mode)
        console: Prompt and output console
        assume_yes: Accept every default without asking
    """

    def __init__(self, env: Environment, console: Console | None = None, assume_yes: bool = False):
        self.env = env
        self.console = console or Console()
        self.assume_yes = assume_yes

    @property
    def target(self) -> Path:
        return self.env.cwd / config.CONFIG_FILE_NAME

    def choose_apps(self) -> list[AiApp]:
        if self.assume_yes:
            return default_apps()
        apps: list[AiApp] = []
        for service in CATALOG:
            if not Confirm.ask(f"Use {service.display_name}?", default=service.default, console=self.console):
                continue
            command = service.variants[0].command
            if len(service.variants) > 1:
                for i, variant in enumerate(service.variants, 1):
                    self.console.print(f"  {i}. {variant.command}  [dim]{variant.description}[/dim]")
                choice = Prompt.ask(
                    "  Variant",
                    choices=[str(i) for i in range(1, len(service.variants) + 1)],
                    default="1",
                    console=self.console,
                )
                command = service.variants[int(choice) - 1].command
            apps.append(AiApp(name=service.name, command=command))
        return apps

    def choose_mode(self) -> TerminalMode:
        default = TerminalMode.system_default(self.env.os_kind)
        if self.assume_yes:
            return default
        value = Prompt.ask(
            "Terminal mode",
            choices=[m.value for m in TerminalMode],
            default=default.value,
            console=self.console,
        )
        return TerminalMode.parse(value)

    def choose_terminals_per_column(self) -> int:
        if self.assume_yes:
            return config.DEFAULT_TERMINALS_PER_COLUMN
        while True:
            count = IntPrompt.ask(
                "Terminals per column", default=config.DEFAULT_TERMINALS_PER_COLUMN, console=self.console
            )
            if count >= 1:
                return count
            self.console.print("[red]Must be at least 1[/red]")

    def run(self) -> Path | None:
        """Ask, then write the file. Returns its path, or None if not saved."""
        target = self.target
        if target.exists() and not self.assume_yes:
            if not Confirm.ask(f"{target} exists. Overwrite?", default=False, console=self.console):
                self.console.print("Configuration not saved.")
                return None

        apps = self.choose_apps()
        if not apps:
            self.console.print("[yellow]No tools selected; configuration not saved.[/yellow]")
            return None
        mode = self.choose_mode()
        count = self.choose_terminals_per_column()

        target.write_text(render_config(apps, mode, count), encoding="utf-8")
        logger.info(f"Wrote {target}")
        self.console.print(f"[green]✓[/green] Configuration saved to {target}")
        self.console.print("\nYou can now run:")
        self.console.print("  mai add <branch-prefix>")
        self.console.print("  mai add <branch-prefix> --mode tmux-single-window")
        return target
