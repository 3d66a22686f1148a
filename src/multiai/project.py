"""Project config discovery and loading.

The config file is searched in the working directory first, then in its
``main/`` subdirectory (the gwt layout keeps the primary checkout there).
"""

from dataclasses import dataclass
from pathlib import Path

from pydantic import ValidationError

from . import config, jsonc
from .environment import Environment
from .errors import ConfigNotFound, ConfigParseError
from .models import ProjectConfig
from .telemetry import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class LoadedProject:
    """A parsed config together with where it came from."""

    config: ProjectConfig
    config_path: Path
    project_path: Path


def find_config_file(env: Environment) -> Path:
    """Locate ``multi-ai-config.jsonc``.

    Raises:
        ConfigNotFound: if no candidate exists
    """
    searched = []
    for subdir in config.CONFIG_SEARCH_SUBDIRS:
        candidate = env.cwd / subdir / config.CONFIG_FILE_NAME
        searched.append(str(candidate))
        if candidate.is_file():
            return candidate
    raise ConfigNotFound(searched)


def parse_config(text: str, source: str = "<string>") -> ProjectConfig:
    """Parse JSONC text into a ProjectConfig.

    Raises:
        ConfigParseError: on malformed JSON or schema violations
    """
    try:
        data = jsonc.loads(text)
    except ValueError as e:
        raise ConfigParseError(source, str(e)) from e

    if not isinstance(data, dict):
        raise ConfigParseError(source, "top-level value must be an object")

    try:
        return ProjectConfig.model_validate(data)
    except ValidationError as e:
        reasons = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or '<root>'}: {err['msg']}" for err in e.errors()
        )
        raise ConfigParseError(source, reasons) from e


def load_project(env: Environment) -> LoadedProject:
    """Find and parse the project config for ``env.cwd``.

    The project path is always the working directory; worktrees are created
    next to ``main/`` by gwt.
    """
    path = find_config_file(env)
    logger.debug(f"Using config {path}")
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigParseError(str(path), str(e)) from e
    return LoadedProject(config=parse_config(text, str(path)), config_path=path, project_path=env.cwd)
