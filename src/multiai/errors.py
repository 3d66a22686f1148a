"""Error kinds surfaced at the CLI boundary.

Every error carries a human-readable message. None of them are retried.
"""


class MultiAiError(Exception):
    """Base class for all classified multiai errors."""

    exit_code = 1


class ConfigNotFound(MultiAiError):
    def __init__(self, searched: list[str]):
        self.searched = searched
        locations = ", ".join(searched) if searched else "(nowhere)"
        super().__init__(
            f"Config file not found. Searched: {locations}. Run 'mai init' to create one."
        )


class ConfigParseError(MultiAiError):
    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to parse {path}: {reason}")


class EmptyConfiguration(MultiAiError):
    def __init__(self):
        super().__init__("No AI apps configured; add at least one entry to 'ai_apps'")


class InvalidPaneCount(MultiAiError):
    def __init__(self, count: int):
        self.count = count
        super().__init__(f"terminals_per_column must be at least 1, got {count}")


class WorktreeCliUnavailable(MultiAiError):
    def __init__(self, binary: str, hint: str = ""):
        self.binary = binary
        msg = f"{binary} CLI is not installed or not in PATH"
        if hint:
            msg += f". Install it from {hint}"
        super().__init__(msg)


class WorktreeOperationFailed(MultiAiError):
    def __init__(self, operation: str, branch: str, stderr: str = ""):
        self.operation = operation
        self.branch = branch
        self.stderr = stderr
        detail = stderr.strip() or "Unknown error"
        super().__init__(f"Failed to {operation} worktree '{branch}': {detail}")


class SessionAlreadyExists(MultiAiError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(
            f"Session '{name}' already exists. Use 'mai continue' or pass --force to add windows to it."
        )


class SessionNotFound(MultiAiError):
    def __init__(self, prefix: str, detail: str = ""):
        self.prefix = prefix
        msg = f"No worktrees found for '{prefix}'. Run 'mai add {prefix}' first."
        if detail:
            msg = f"{msg} ({detail})"
        super().__init__(msg)


class MultiplexerCommandFailed(MultiAiError):
    def __init__(self, command: str, stderr: str):
        self.command = command
        self.stderr = stderr
        super().__init__(f"Command failed: {command}: {stderr.strip() or 'no output'}")


class UnsupportedModeOnPlatform(MultiAiError):
    def __init__(self, mode: str, platform: str):
        self.mode = mode
        self.platform = platform
        super().__init__(f"Mode '{mode}' is not supported on {platform}")


class SendTargetError(MultiAiError):
    """No usable session or pane for ``mai send``."""

    def __init__(self, message: str):
        super().__init__(message)


class OpenFailed(MultiAiError):
    def __init__(self, path: str, reason: str):
        self.path = path
        super().__init__(f"Failed to open {path}: {reason}")
