"""multiai configuration

Module-level constants, grouped by concern:
- project config discovery
- external tools (gwt, tmux)
- pane settling
- logging
"""

import os

# === Project config ===
CONFIG_FILE_NAME = "multi-ai-config.jsonc"
CONFIG_SEARCH_SUBDIRS = ["", "main"]  # "" = working directory itself
DEFAULT_TERMINALS_PER_COLUMN = 2

# === gwt (git-worktree-cli) ===
GWT_BINARY = os.environ.get("MULTIAI_GWT_BINARY", "gwt")
GWT_CONFIG_NAMES = ["git-worktree-config.jsonc", "git-worktree-config.yaml"]
GWT_GLOBAL_PROJECTS_DIR = os.path.join(".config", "git-worktree-cli", "projects")  # under $HOME
GWT_INSTALL_HINT = "https://github.com/mikko-kohtala/git-worktree-cli"

# === Global app catalog ===
GLOBAL_CONFIG_DIR = os.path.join(".config", "multi-ai-cli")  # under $HOME
APPS_FILE_NAME = "apps.jsonc"

# === tmux ===
TMUX_BINARY = os.environ.get("MULTIAI_TMUX_BINARY", "tmux")
SINGLE_WINDOW_NAME = "apps"  # window name used by tmux-single-window

# === Pane settling ===
# Wait after the structural splits before typing into new panes, so the
# interactive shell has finished starting up.
SETTLE_DELAY_MS = int(os.environ.get("MULTIAI_SETTLE_DELAY_MS", "500"))

# === Send ===
DEFAULT_PROMPT_HINTS = {
    "claude": "ultrathink",
    "amp": "Use oracle and think heavily",
}
FALLBACK_PROMPT_HINT = "Think deeply about this"

# === Logging ===
LOG_LEVEL = os.environ.get("MULTIAI_LOG_LEVEL", "WARNING")
LOG_MAX_CMD_LEN = 160  # truncation for logged command lines

# === iTerm2 ===
USER_NAME_VAR = "user.name"  # user variable holding the tab/session name
