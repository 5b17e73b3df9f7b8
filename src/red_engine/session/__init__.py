"""Editing session composing buffer, history, search and completion."""

from .diagnostics import CrashContext, clear_crash_logs, write_crash_log
from .events import EventBus, Intent, IntentResult
from .files import (
    FileWatcher,
    format_path,
    read_file,
    validate_startup_path,
    write_file,
)
from .recent import RecentFile, RecentFiles
from .session import FILE_CHANGED_PROMPT, PERMISSION_HINT, EditorSession

__all__ = [
    "CrashContext",
    "EditorSession",
    "EventBus",
    "FILE_CHANGED_PROMPT",
    "FileWatcher",
    "Intent",
    "IntentResult",
    "PERMISSION_HINT",
    "RecentFile",
    "RecentFiles",
    "clear_crash_logs",
    "format_path",
    "read_file",
    "validate_startup_path",
    "write_crash_log",
    "write_file",
]
