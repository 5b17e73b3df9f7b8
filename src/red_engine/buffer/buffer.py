"""Line-oriented text buffer with a clamped cursor."""

from __future__ import annotations

from contextlib import AbstractContextManager
from dataclasses import dataclass
from enum import Enum
from typing import ContextManager, Iterable, Optional, Sequence

from red_engine.runtime import telemetry

from .document import BufferDocument, split_lines
from .state import BufferState, Cursor
from .sync import BufferMirror, BufferValidationError
from .transliterate import RESERVED_GLYPHS, transliterate, transliterate_loaded_line
from .validation import clamp_cursor, ensure_cursor

AUTO_PAIRS = {"{": "}", "(": ")", "[": "]", '"': '"', "'": "'"}


class Motion(str, Enum):
    """Cursor movements understood by ``TextBuffer.move_cursor``."""

    LEFT = "left"
    RIGHT = "right"
    UP = "up"
    DOWN = "down"
    WORD_LEFT = "word_left"
    WORD_LEFT_START = "word_left_start"
    WORD_RIGHT = "word_right"
    WORD_RIGHT_START = "word_right_start"
    LINE_START = "line_start"
    LINE_END = "line_end"
    PAGE_UP = "page_up"
    PAGE_DOWN = "page_down"
    FAST_UP = "fast_up"
    FAST_DOWN = "fast_down"


@dataclass(slots=True)
class BufferDelta:
    label: str
    version: int
    cursor_before: Cursor
    cursor: Cursor
    changed: bool


class TextBuffer:
    """Owns the document lines and the cursor.

    Every mutation runs inside a :class:`Transaction`, which profiles the
    edit, flags the buffer as modified when the text changed and clamps the
    cursor back into bounds before returning.
    """

    def __init__(
        self,
        *,
        name: str = "untitled",
        document: Optional[BufferDocument] = None,
        state: Optional[BufferState] = None,
        tab_width: int = 4,
        fast_move_rows: int = 5,
    ) -> None:
        self.name = name
        self.document = document or BufferDocument()
        self.state = state or BufferState()
        self.tab_width = tab_width
        self.fast_move_rows = fast_move_rows
        self.state.cursor = clamp_cursor(self.document, self.state.cursor)

    @classmethod
    def from_text(cls, text: str, *, name: str = "untitled") -> "TextBuffer":
        """Build a buffer from raw text, without transliteration."""

        return cls(name=name, document=BufferDocument.from_text(text))

    @classmethod
    def from_lines(
        cls, lines: Iterable[str], *, cursor: Cursor = (0, 0), name: str = "untitled"
    ) -> "TextBuffer":
        return cls(
            name=name,
            document=BufferDocument.from_lines(lines),
            state=BufferState(cursor=cursor),
        )

    # -- read access -----------------------------------------------------

    @property
    def lines(self) -> Sequence[str]:
        return self.document.snapshot()

    @property
    def cursor(self) -> Cursor:
        return self.state.cursor

    @property
    def line_count(self) -> int:
        return self.document.line_count

    @property
    def current_line(self) -> str:
        return self.document.get_line(self.state.row)

    @property
    def modified(self) -> bool:
        return self.state.modified

    @modified.setter
    def modified(self, value: bool) -> None:
        self.state.modified = value

    @property
    def text(self) -> str:
        return self.document.to_text()

    def file_text(self) -> str:
        """Text as written to disk: lines joined by newlines plus a final one."""

        return self.document.to_text() + "\n"

    def mirror(self, *, attributes: Optional[dict[str, str]] = None) -> BufferMirror:
        return BufferMirror(
            text=self.document.to_text(),
            cursor=self.state.cursor,
            modified=self.state.modified,
            version=self.document.version,
            attributes=dict(attributes or {}),
        )

    # -- cursor ------------------------------------------------------------

    def set_cursor(self, column: int, row: int) -> Cursor:
        """Place the cursor, rejecting positions outside the document."""

        self.state.cursor = ensure_cursor(self.document, (column, row))
        return self.state.cursor

    def clamp_cursor(self) -> Cursor:
        self.state.cursor = clamp_cursor(self.document, self.state.cursor)
        return self.state.cursor

    def move_cursor(self, motion: Motion, *, page_height: Optional[int] = None) -> Cursor:
        column, row = self.clamp_cursor()
        line = self.document.get_line(row)
        last_row = self.document.line_count - 1

        if motion is Motion.LEFT:
            if column > 0:
                column -= 1
            elif row > 0:
                row -= 1
                column = len(self.document.get_line(row))
        elif motion is Motion.RIGHT:
            if column < len(line):
                column += 1
            elif row < last_row:
                row += 1
                column = 0
        elif motion is Motion.UP:
            row = max(0, row - 1)
        elif motion is Motion.DOWN:
            row = min(last_row, row + 1)
        elif motion is Motion.FAST_UP:
            row = max(0, row - self.fast_move_rows)
        elif motion is Motion.FAST_DOWN:
            row = min(last_row, row + self.fast_move_rows)
        elif motion in (Motion.PAGE_UP, Motion.PAGE_DOWN):
            if page_height is None or page_height < 1:
                raise ValueError("page motions need a positive page_height")
            step = -page_height if motion is Motion.PAGE_UP else page_height
            row = max(0, min(last_row, row + step))
        elif motion is Motion.LINE_START:
            column = 0
        elif motion is Motion.LINE_END:
            column = len(line)
        elif motion in (Motion.WORD_LEFT, Motion.WORD_LEFT_START):
            column = _word_left(line, column, after_space=motion is Motion.WORD_LEFT_START)
        elif motion is Motion.WORD_RIGHT:
            column = _word_right(line, column)
        elif motion is Motion.WORD_RIGHT_START:
            column = _next_word_start(line, column)
        else:  # pragma: no cover - exhaustive over Motion
            raise ValueError(f"Unsupported motion '{motion}'")

        self.state.cursor = clamp_cursor(self.document, (column, row))
        return self.state.cursor

    def jump_to_line(self, number: int) -> Cursor:
        """Move to the start of 1-based line ``number``."""

        if number < 1 or number > self.document.line_count:
            raise BufferValidationError(
                "Invalid line number", cursor=(0, number - 1)
            )
        self.state.cursor = (0, number - 1)
        return self.state.cursor

    # -- edits ---------------------------------------------------------------

    def insert(self, text: str) -> BufferDelta:
        """Insert ``text`` at the cursor after folding it to ASCII."""

        folded = transliterate(text)
        with Transaction(self, "insert") as tx:
            if folded:
                self._insert_raw(folded)
        return tx.result

    def insert_pair(self, opener: str) -> BufferDelta:
        """Insert an auto-closed pair and leave the cursor between the two."""

        closer = AUTO_PAIRS.get(opener)
        if closer is None:
            return self.insert(opener)
        with Transaction(self, "insert_pair") as tx:
            column, row = self.state.cursor
            line = self.document.get_line(row)
            self.document.set_line(row, line[:column] + opener + closer + line[column:])
            self.state.cursor = (column + 1, row)
        return tx.result

    def insert_tab(self) -> BufferDelta:
        return self.insert(" " * self.tab_width)

    def _insert_raw(self, text: str) -> None:
        column, row = self.state.cursor
        line = self.document.get_line(row)
        segments = text.split("\n")
        if len(segments) == 1:
            self.document.set_line(row, line[:column] + text + line[column:])
            self.state.cursor = (column + len(text), row)
            return
        head = line[:column] + segments[0]
        tail = segments[-1] + line[column:]
        self.document.update_lines(row, row + 1, [head, *segments[1:-1], tail])
        self.state.cursor = (len(segments[-1]), row + len(segments) - 1)

    def delete_backward(self, count: int = 1) -> BufferDelta:
        """Backspace ``count`` times, joining lines at column 0."""

        with Transaction(self, "delete_backward") as tx:
            for _ in range(max(0, count)):
                column, row = self.state.cursor
                if column > 0:
                    line = self.document.get_line(row)
                    self.document.set_line(row, line[: column - 1] + line[column:])
                    self.state.cursor = (column - 1, row)
                elif row > 0:
                    previous = self.document.get_line(row - 1)
                    merged = previous + self.document.get_line(row)
                    self.document.update_lines(row - 1, row + 1, [merged])
                    self.state.cursor = (len(previous), row - 1)
                else:
                    break
        return tx.result

    def delete_forward(self, count: int = 1) -> BufferDelta:
        """Delete under the cursor, pulling the next line up at end of line."""

        with Transaction(self, "delete_forward") as tx:
            for _ in range(max(0, count)):
                column, row = self.state.cursor
                line = self.document.get_line(row)
                if column < len(line):
                    self.document.set_line(row, line[:column] + line[column + 1 :])
                elif row < self.document.line_count - 1:
                    merged = line + self.document.get_line(row + 1)
                    self.document.update_lines(row, row + 2, [merged])
                else:
                    break
        return tx.result

    def split_line_at_cursor(self) -> BufferDelta:
        """Enter: break the line, carrying the indentation onto the new line."""

        with Transaction(self, "split_line") as tx:
            column, row = self.state.cursor
            line = self.document.get_line(row)
            indent = leading_whitespace(line)
            self.document.update_lines(
                row, row + 1, [line[:column], indent + line[column:]]
            )
            self.state.cursor = (len(indent), row + 1)
        return tx.result

    def replace_range(self, row: int, start: int, end: int, text: str) -> BufferDelta:
        """Replace ``[start, end)`` on ``row`` with ``text``.

        Bounds are the caller's responsibility and are not checked here.
        """

        with Transaction(self, "replace_range") as tx:
            line = self.document.get_line(row)
            self.document.set_line(row, line[:start] + text + line[end:])
        return tx.result

    def replace_lines(
        self, start: int, end: int, new_lines: Iterable[str], *, cursor: Cursor
    ) -> BufferDelta:
        """Swap a block of whole lines and place the cursor (used by history)."""

        with Transaction(self, "replace_lines") as tx:
            self.document.update_lines(start, end, new_lines)
            self.state.cursor = cursor
        return tx.result

    def cut_line(self) -> str:
        """Remove the cursor's line and return its text."""

        with Transaction(self, "cut_line"):
            row = self.state.row
            removed = self.document.get_line(row)
            self.document.update_lines(row, row + 1, [])
            self.state.cursor = (0, row)
        return removed

    def delete_comments(self) -> BufferDelta:
        """Strip ``//`` comments outside string literals and inline ``/* */``."""

        with Transaction(self, "delete_comments") as tx:
            column, row = self.state.cursor
            cleaned = []
            for index, line in enumerate(self.document.snapshot()):
                result, cut_at = _strip_comments(line)
                if index == row and cut_at is not None and column > cut_at:
                    column = cut_at
                cleaned.append(result)
            self.document.replace(cleaned)
            self.state.cursor = (column, row)
        return tx.result

    def remove_empty_lines(self) -> BufferDelta:
        with Transaction(self, "remove_empty_lines") as tx:
            kept = [line for line in self.document.snapshot() if line.strip()]
            self.document.replace(kept or [""])
        return tx.result

    def load(
        self,
        text: str,
        *,
        preserve_glyphs: bool = True,
        name: Optional[str] = None,
    ) -> BufferDelta:
        """Replace the whole document with file text.

        Lines are folded to ASCII unless they hold a reserved glyph and
        ``preserve_glyphs`` is set. The buffer is left unmodified at (0, 0).
        """

        glyphs = RESERVED_GLYPHS if preserve_glyphs else frozenset()
        lines = [transliterate_loaded_line(line, glyphs) for line in split_lines(text)]
        with Transaction(self, "load", mark_modified=False) as tx:
            self.document.replace(lines)
            self.state.cursor = (0, 0)
        self.state.modified = False
        if name is not None:
            self.name = name
        return tx.result


class Transaction(AbstractContextManager["Transaction"]):
    """Wraps one buffer mutation in a telemetry span and fixes up state."""

    def __init__(
        self, buffer: TextBuffer, label: str, *, mark_modified: bool = True
    ) -> None:
        self.buffer = buffer
        self.label = label
        self.mark_modified = mark_modified
        self.result: BufferDelta | None = None  # type: ignore[assignment]
        self._span_cm: Optional[ContextManager[object]] = None
        self._cursor_before: Cursor = buffer.state.cursor
        self._version_before = buffer.document.version

    def __enter__(self) -> "Transaction":
        self._cursor_before = self.buffer.clamp_cursor()
        self._version_before = self.buffer.document.version
        self._span_cm = telemetry.span(
            name=f"buffer::{self.label}",
            component="buffer",
            metadata={"buffer": self.buffer.name},
        )
        self._span_cm.__enter__()
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        try:
            buffer = self.buffer
            changed = buffer.document.version != self._version_before
            if changed and self.mark_modified:
                buffer.state.modified = True
            cursor = buffer.clamp_cursor()
            self.result = BufferDelta(
                label=self.label,
                version=buffer.document.version,
                cursor_before=self._cursor_before,
                cursor=cursor,
                changed=changed,
            )
        finally:
            if self._span_cm is not None:
                self._span_cm.__exit__(exc_type, exc, tb)
        return False


def leading_whitespace(line: str) -> str:
    return line[: len(line) - len(line.lstrip())]


def _word_left(line: str, column: int, *, after_space: bool) -> int:
    if column == 0:
        return 0
    before = line[:column]
    for index in range(len(before) - 1, -1, -1):
        if before[index].isspace():
            return index + 1 if after_space else index
    return 0


def _word_right(line: str, column: int) -> int:
    for index in range(column, len(line)):
        if line[index].isspace():
            return index
    return len(line)


def _next_word_start(line: str, column: int) -> int:
    if column >= len(line):
        return len(line)
    boundary = _word_right(line, column)
    for index in range(boundary, len(line)):
        if not line[index].isspace():
            return index
    return len(line)


def _strip_comments(line: str) -> tuple[str, Optional[int]]:
    result = line
    cut_at: Optional[int] = None
    pos = result.find("//")
    if pos != -1 and not _inside_string(result[:pos]):
        result = result[:pos].rstrip()
        cut_at = pos
    while True:
        start = result.find("/*")
        if start == -1:
            break
        end = result.find("*/", start)
        if end == -1:
            break
        result = result[:start].rstrip() + result[end + 2 :]
        cut_at = start if cut_at is None else min(cut_at, start)
    return result, cut_at


def _inside_string(prefix: str) -> bool:
    in_string = False
    escaped = False
    for char in prefix:
        if char == "\\":
            escaped = not escaped
        elif char == '"' and not escaped:
            in_string = not in_string
            escaped = False
        else:
            escaped = False
    return in_string


__all__ = [
    "AUTO_PAIRS",
    "BufferDelta",
    "Motion",
    "TextBuffer",
    "Transaction",
    "leading_whitespace",
]
