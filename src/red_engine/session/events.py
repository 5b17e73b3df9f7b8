"""Intent vocabulary, results and the session event bus."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Optional


class Intent(str, Enum):
    """Discrete user actions an :class:`EditorSession` understands."""

    INSERT = "insert"
    NEWLINE = "newline"
    TAB = "tab"
    BACKSPACE = "backspace"
    DELETE = "delete"
    MOVE = "move"
    JUMP_TO_LINE = "jump_to_line"
    CUT_LINE = "cut_line"
    UNDO = "undo"
    REDO = "redo"
    FIND = "find"
    FIND_NEXT = "find_next"
    REPLACE_CURRENT = "replace_current"
    REPLACE_ALL = "replace_all"
    CYCLE_SUGGESTION = "cycle_suggestion"
    APPLY_SUGGESTION = "apply_suggestion"
    DISMISS_SUGGESTIONS = "dismiss_suggestions"
    DELETE_COMMENTS = "delete_comments"
    REMOVE_EMPTY_LINES = "remove_empty_lines"
    CLEAR_CACHE = "clear_cache"
    SAVE = "save"
    RELOAD = "reload"


@dataclass(slots=True)
class IntentResult:
    """Returned from every session intent."""

    consumed: bool
    status: str = "ok"
    message: Optional[str] = None
    changed: bool = False
    payload: object | None = None


class EventBus:
    """Synchronous publish/subscribe channel for session notifications."""

    def __init__(self) -> None:
        self._subscribers: Dict[str, list[Callable[[object], None]]] = {}

    def subscribe(self, event: str, callback: Callable[[object], None]) -> None:
        self._subscribers.setdefault(event, []).append(callback)

    def unsubscribe(self, event: str, callback: Callable[[object], None]) -> None:
        callbacks = self._subscribers.get(event, [])
        if callback in callbacks:
            callbacks.remove(callback)

    def emit(self, event: str, payload: object | None = None) -> None:
        for callback in list(self._subscribers.get(event, [])):
            callback(payload)


__all__ = ["EventBus", "Intent", "IntentResult"]
