"""Core of the red terminal text editor.

The package exposes the line buffer, undo history, search and completion
engines, and an :class:`EditorSession` that composes them. A Textual host
lives in :mod:`red_engine.adapters.textual`.
"""

from .buffer import HistoryManager, Motion, TextBuffer
from .errors import EditorError
from .search import SearchEngine
from .session import EditorSession, Intent, IntentResult
from .suggest import SuggestionEngine

__version__ = "0.1.0"

__all__ = [
    "EditorError",
    "EditorSession",
    "HistoryManager",
    "Intent",
    "IntentResult",
    "Motion",
    "SearchEngine",
    "SuggestionEngine",
    "TextBuffer",
    "__version__",
]
