"""Interactive pickers for ``mai add`` and ``mai remove`` without a prefix."""

from dataclasses import dataclass

from rich.console import Console
from rich.markup import escape
from rich.prompt import Prompt

from .models import AiApp
from .worktree import PrefixGroup


@dataclass(frozen=True)
class PickerResult:
    prefix: str
    apps: list[AiApp]


def parse_selection(text: str, count: int) -> list[int]:
    """Parse "1,3" / "1 3" into zero-based indices, keeping order, no duplicates.

    Raises:
        ValueError: a token is not a number in 1..count
    """
    indices: list[int] = []
    for token in text.replace(",", " ").split():
        if not token.isdigit() or not 1 <= int(token) <= count:
            raise ValueError(f"'{token}' is not a number between 1 and {count}")
        index = int(token) - 1
        if index not in indices:
            indices.append(index)
    return indices


class AppPicker:
    """Asks for a branch prefix and which tools to start.

    Args:
        apps: Tools to offer; those with ``default`` set are preselected
        console: Prompt console
    """

    def __init__(self, apps: list[AiApp], console: Console | None = None):
        self.apps = apps
        self.console = console or Console()

    def run(self) -> PickerResult | None:
        """Returns None when cancelled (empty prefix)."""
        prefix = Prompt.ask("Branch prefix", default="", console=self.console).strip()
        if not prefix:
            return None

        for i, app in enumerate(self.apps, 1):
            mark = "x" if app.default else " "
            detail = f"  [dim]{escape(app.description)}[/dim]" if app.description else ""
            self.console.print(f"  \\[{mark}] {i}. {app.name}: {escape(app.command)}{detail}")
        preselected = ",".join(str(i) for i, app in enumerate(self.apps, 1) if app.default)

        while True:
            answer = Prompt.ask("Tools (numbers)", default=preselected, console=self.console)
            try:
                chosen = parse_selection(answer, len(self.apps))
            except ValueError as e:
                self.console.print(f"[red]{e}[/red]")
                continue
            return PickerResult(prefix=prefix, apps=[self.apps[i] for i in chosen])


class PrefixPicker:
    """Asks which worktree groups to remove."""

    def __init__(self, groups: list[PrefixGroup], console: Console | None = None):
        self.groups = groups
        self.console = console or Console()

    def run(self) -> list[str]:
        """Chosen prefixes; empty when nothing was picked."""
        for i, group in enumerate(self.groups, 1):
            apps = "" if group.standalone else f"  [dim]{', '.join(group.app_suffixes())}[/dim]"
            self.console.print(f"  {i}. {group.prefix}{apps}")

        while True:
            answer = Prompt.ask("Prefixes to remove (numbers)", default="", console=self.console)
            try:
                chosen = parse_selection(answer, len(self.groups))
            except ValueError as e:
                self.console.print(f"[red]{e}[/red]")
                continue
            return [self.groups[i].prefix for i in chosen]
