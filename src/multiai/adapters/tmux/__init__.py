"""Tmux driver for multiai."""

from .client import TmuxClient
from .driver import TmuxDriver
from .layout import SessionPane, TmuxLayoutBuilder

__all__ = ["SessionPane", "TmuxClient", "TmuxDriver", "TmuxLayoutBuilder"]
