"""Global AI tool catalog (``~/.config/multi-ai-cli/apps.jsonc``).

The catalog lists every tool the user has set up, independent of any
project. It feeds the ``mai add`` picker, lets ``continue`` recover the
launch command of a worktree whose app is not in the project config, and
tells ``list`` which name suffixes are app names.

The file holds either a JSON array of apps or an object with an ``apps``
array; each entry has the same fields as a project ``ai_apps`` entry.
"""

import json
from pathlib import Path

from pydantic import TypeAdapter, ValidationError

from . import config, jsonc
from .environment import Environment
from .errors import ConfigParseError
from .init import CATALOG
from .models import AiApp
from .telemetry import get_logger

logger = get_logger(__name__)

_APPS = TypeAdapter(list[AiApp])


def apps_path(env: Environment) -> Path:
    return env.home / config.GLOBAL_CONFIG_DIR / config.APPS_FILE_NAME


def parse_apps(text: str, source: str = "<string>") -> list[AiApp]:
    """Parse catalog text.

    Raises:
        ConfigParseError: malformed JSONC or an invalid entry
    """
    try:
        data = jsonc.loads(text)
    except ValueError as e:
        raise ConfigParseError(source, str(e)) from e
    if isinstance(data, dict):
        data = data.get("apps", data.get("ai_apps", []))
    try:
        return _APPS.validate_python(data)
    except ValidationError as e:
        raise ConfigParseError(source, str(e)) from e


def load_apps(env: Environment) -> list[AiApp]:
    """Catalog apps; empty when the file is missing or unreadable."""
    path = apps_path(env)
    if not path.is_file():
        return []
    try:
        return parse_apps(path.read_text(encoding="utf-8"), str(path))
    except (OSError, ConfigParseError) as e:
        logger.warning(f"Ignoring app catalog {path}: {e}")
        return []


def find_app(apps: list[AiApp], name: str) -> AiApp | None:
    return next((app for app in apps if app.name == name), None)


def default_apps_content() -> str:
    """Starter catalog: every known tool, one entry per command variant."""
    entries = []
    for service in CATALOG:
        for index, variant in enumerate(service.variants):
            name = f"{service.name}-{variant.suffix}" if variant.suffix else service.name
            entry = {
                "name": name,
                "command": variant.command,
                "description": f"{service.display_name}: {variant.description}",
                "default": service.default and index == 0,
            }
            entries.append("    " + json.dumps(entry))
    return (
        "{\n"
        "  // AI tools offered by 'mai add' and recognised by 'mai list'/'mai continue'\n"
        "  // Fields: name (worktree suffix), command, description, default, prompt_hint\n"
        '  "apps": [\n' + ",\n".join(entries) + "\n  ]\n"
        "}\n"
    )


def ensure_apps_file(env: Environment) -> tuple[Path, bool]:
    """Create the catalog with defaults if missing. Returns (path, created)."""
    path = apps_path(env)
    if path.exists():
        return path, False
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(default_apps_content(), encoding="utf-8")
    logger.info(f"Wrote {path}")
    return path, True
