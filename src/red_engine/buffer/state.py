"""Cursor and change tracking state for buffers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

Cursor = Tuple[int, int]  # (column, row)


@dataclass(slots=True)
class BufferState:
    """Mutable cursor + modified flag tied to a BufferDocument."""

    cursor: Cursor = (0, 0)
    modified: bool = False

    def set_cursor(self, column: int, row: int) -> None:
        self.cursor = (column, row)

    @property
    def column(self) -> int:
        return self.cursor[0]

    @property
    def row(self) -> int:
        return self.cursor[1]
