"""Git remote helpers used to locate gwt's global project configs."""

import re
import subprocess
from pathlib import Path

from .telemetry import get_logger

logger = get_logger(__name__)

_URL_PREFIXES = ("ssh://git@", "git@", "https://", "http://")
_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def get_remote_origin_url(path: Path) -> str | None:
    """Return ``git remote get-url origin`` for ``path``, or None."""
    try:
        result = subprocess.run(
            ["git", "remote", "get-url", "origin"],
            cwd=path,
            capture_output=True,
            text=True,
            timeout=5,
        )
    except (OSError, subprocess.TimeoutExpired) as e:
        logger.debug(f"git remote lookup failed: {e}")
        return None
    if result.returncode != 0:
        return None
    url = result.stdout.strip()
    return url or None


def generate_config_filename(repo_url: str) -> str:
    """Turn a remote URL into gwt's global config file stem.

    Examples:
        git@github.com:owner/repo.git -> github_com_owner_repo
        https://github.com/owner/repo -> github_com_owner_repo
    """
    url = repo_url.strip()
    for prefix in _URL_PREFIXES:
        if url.startswith(prefix):
            url = url[len(prefix):]
            break
    if url.endswith(".git"):
        url = url[: -len(".git")]
    return _NON_ALNUM.sub("_", url.lower()).strip("_")
