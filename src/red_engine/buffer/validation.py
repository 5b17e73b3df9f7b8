"""Cursor bound checks shared across buffer services."""

from __future__ import annotations

from .document import BufferDocument
from .state import Cursor
from .sync import BufferValidationError


def ensure_cursor(document: BufferDocument, cursor: Cursor) -> Cursor:
    column, row = cursor
    if row < 0 or row >= document.line_count:
        raise BufferValidationError("Row out of range", cursor=cursor)
    line = document.get_line(row)
    if column < 0 or column > len(line):
        raise BufferValidationError("Column out of range", cursor=cursor)
    return cursor


def clamp_cursor(document: BufferDocument, cursor: Cursor) -> Cursor:
    column, row = cursor
    row = max(0, min(row, document.line_count - 1))
    column = max(0, min(column, len(document.get_line(row))))
    return (column, row)
