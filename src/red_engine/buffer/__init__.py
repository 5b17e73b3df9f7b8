"""Buffer abstractions and undo/redo data structures."""

from .buffer import AUTO_PAIRS, BufferDelta, Motion, TextBuffer, Transaction
from .document import BufferDocument, split_lines
from .state import BufferState, Cursor
from .sync import BufferMirror, BufferSync, BufferValidationError
from .transliterate import RESERVED_GLYPHS, transliterate
from .undo import HistoryEntry, HistoryManager, HistoryOutcome, LineDelta, SnapshotStack
from .validation import clamp_cursor, ensure_cursor

__all__ = [
    "AUTO_PAIRS",
    "BufferDocument",
    "BufferState",
    "Cursor",
    "HistoryEntry",
    "HistoryManager",
    "HistoryOutcome",
    "LineDelta",
    "SnapshotStack",
    "TextBuffer",
    "BufferDelta",
    "Motion",
    "Transaction",
    "BufferMirror",
    "BufferSync",
    "BufferValidationError",
    "RESERVED_GLYPHS",
    "clamp_cursor",
    "ensure_cursor",
    "split_lines",
    "transliterate",
]
