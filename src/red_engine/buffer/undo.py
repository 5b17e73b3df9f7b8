"""Undo/redo history kept as line-range deltas.

Each stack materializes only its most recent state. Older entries are stored
as :class:`LineDelta` patches that rebuild the state below from the state
above, so a long history of single-line edits costs one changed line per
entry rather than a copy of the document.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Deque, Optional, Sequence, Tuple

from red_engine.runtime import telemetry

from .buffer import TextBuffer
from .state import Cursor

Lines = Tuple[str, ...]

DEFAULT_HISTORY_LIMIT = 10_000


@dataclass(frozen=True, slots=True)
class LineDelta:
    """Patch turning one line sequence into another.

    Applying the delta replaces ``span`` lines starting at ``start`` with
    ``lines``.
    """

    start: int
    span: int
    lines: Lines

    @classmethod
    def between(cls, source: Sequence[str], target: Sequence[str]) -> "LineDelta":
        limit = min(len(source), len(target))
        prefix = 0
        while prefix < limit and source[prefix] == target[prefix]:
            prefix += 1
        suffix = 0
        while (
            suffix < limit - prefix
            and source[len(source) - 1 - suffix] == target[len(target) - 1 - suffix]
        ):
            suffix += 1
        return cls(
            start=prefix,
            span=len(source) - prefix - suffix,
            lines=tuple(target[prefix : len(target) - suffix]),
        )

    @property
    def is_empty(self) -> bool:
        return self.span == 0 and not self.lines

    def apply(self, source: Sequence[str]) -> Lines:
        return (
            tuple(source[: self.start])
            + self.lines
            + tuple(source[self.start + self.span :])
        )


@dataclass(frozen=True, slots=True)
class HistoryEntry:
    """Immutable (lines, cursor) state handed back by a stack."""

    lines: Lines
    cursor: Cursor


@dataclass(slots=True)
class HistoryOutcome:
    applied: bool
    message: str


class SnapshotStack:
    """LIFO of document states with bottom eviction.

    ``_head`` holds the top state in full. ``_deltas[i]`` rebuilds state ``i``
    from state ``i + 1`` and ``_cursors[i]`` is the cursor of state ``i``.
    """

    def __init__(self, limit: Optional[int] = None) -> None:
        self.limit = limit
        self._head: Optional[Lines] = None
        self._head_cursor: Cursor = (0, 0)
        self._deltas: Deque[LineDelta] = deque()
        self._cursors: Deque[Cursor] = deque()

    def __len__(self) -> int:
        return 0 if self._head is None else len(self._deltas) + 1

    def __bool__(self) -> bool:
        return self._head is not None

    def push(self, lines: Sequence[str], cursor: Cursor) -> None:
        snapshot = tuple(lines)
        if self._head is not None:
            self._deltas.append(LineDelta.between(snapshot, self._head))
            self._cursors.append(self._head_cursor)
        self._head = snapshot
        self._head_cursor = cursor
        if self.limit is not None:
            while self._deltas and len(self) > self.limit:
                self._deltas.popleft()
                self._cursors.popleft()

    def peek(self) -> Optional[HistoryEntry]:
        if self._head is None:
            return None
        return HistoryEntry(lines=self._head, cursor=self._head_cursor)

    def pop(self) -> Optional[HistoryEntry]:
        if self._head is None:
            return None
        entry = HistoryEntry(lines=self._head, cursor=self._head_cursor)
        if self._deltas:
            delta = self._deltas.pop()
            self._head = delta.apply(self._head)
            self._head_cursor = self._cursors.pop()
        else:
            self._head = None
            self._head_cursor = (0, 0)
        return entry

    def entries(self) -> list[HistoryEntry]:
        """All states, oldest first."""

        if self._head is None:
            return []
        states = [HistoryEntry(lines=self._head, cursor=self._head_cursor)]
        current = self._head
        for delta, cursor in zip(reversed(self._deltas), reversed(self._cursors)):
            current = delta.apply(current)
            states.append(HistoryEntry(lines=current, cursor=cursor))
        states.reverse()
        return states

    def retain_matching(self, lines: Sequence[str]) -> int:
        """Drop every state whose content differs from ``lines``."""

        target = tuple(lines)
        states = self.entries()
        kept = [state for state in states if state.lines == target]
        if len(kept) == len(states):
            return 0
        self.clear()
        for state in kept:
            self.push(state.lines, state.cursor)
        return len(states) - len(kept)

    def clear(self) -> None:
        self._head = None
        self._head_cursor = (0, 0)
        self._deltas.clear()
        self._cursors.clear()


class HistoryManager:
    """Checkpointed undo/redo for one :class:`TextBuffer`.

    ``maybe_snapshot`` is offered the pre-edit state before every content
    changing intent. A checkpoint is only pushed when the cursor row no
    longer matches that row as recorded at the last checkpoint, or when no
    checkpoint baseline exists yet.
    """

    def __init__(
        self, buffer: TextBuffer, *, limit: int = DEFAULT_HISTORY_LIMIT
    ) -> None:
        if limit < 1:
            raise ValueError("history limit must be at least 1")
        self.buffer = buffer
        self.limit = limit
        self.undo_stack = SnapshotStack(limit)
        self.redo_stack = SnapshotStack()
        self._baseline: Optional[Lines] = None
        self._logger_name = "red_engine.history"

    @property
    def undo_depth(self) -> int:
        return len(self.undo_stack)

    @property
    def redo_depth(self) -> int:
        return len(self.redo_stack)

    def can_undo(self) -> bool:
        return bool(self.undo_stack)

    def can_redo(self) -> bool:
        return bool(self.redo_stack)

    def maybe_snapshot(self) -> bool:
        """Checkpoint the current state if the cursor row changed since the last one."""

        _, row = self.buffer.clamp_cursor()
        lines = self.buffer.lines
        baseline = self._baseline
        if baseline is not None and row < len(baseline) and baseline[row] == lines[row]:
            return False

        self.undo_stack.push(lines, self.buffer.cursor)
        self._baseline = tuple(lines)
        if self.redo_stack:
            dropped = self.redo_stack.retain_matching(lines)
            if dropped:
                telemetry.record_event(
                    "history.redo_invalidated",
                    level="debug",
                    logger_name=self._logger_name,
                    data={"dropped": dropped},
                )
        return True

    def undo(self) -> HistoryOutcome:
        entry = self.undo_stack.pop()
        if entry is None:
            return HistoryOutcome(applied=False, message="No more actions to undo.")
        self.redo_stack.push(self.buffer.lines, self.buffer.cursor)
        self._restore(entry)
        return HistoryOutcome(applied=True, message="Undid last action.")

    def redo(self) -> HistoryOutcome:
        entry = self.redo_stack.pop()
        if entry is None:
            return HistoryOutcome(applied=False, message="No more actions to redo.")
        self.undo_stack.push(self.buffer.lines, self.buffer.cursor)
        self._restore(entry)
        return HistoryOutcome(applied=True, message="Redid last action.")

    def reset_baseline(self) -> None:
        self._baseline = None

    def clear(self) -> None:
        self.undo_stack.clear()
        self.redo_stack.clear()
        self._baseline = None

    def _restore(self, entry: HistoryEntry) -> None:
        delta = LineDelta.between(self.buffer.lines, entry.lines)
        self.buffer.replace_lines(
            delta.start, delta.start + delta.span, delta.lines, cursor=entry.cursor
        )
        self.buffer.modified = True
        # The restored state is not a checkpoint of its own; the next edit
        # always opens a new one.
        self._baseline = None


__all__ = [
    "DEFAULT_HISTORY_LIMIT",
    "HistoryEntry",
    "HistoryManager",
    "HistoryOutcome",
    "LineDelta",
    "SnapshotStack",
]
