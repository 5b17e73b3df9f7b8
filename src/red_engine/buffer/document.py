"""Line storage for a single open document."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Sequence


def split_lines(text: str) -> List[str]:
    """Split file text into lines the way the editor reads files.

    Only ``\\n`` separates lines; a trailing ``\\r`` is dropped from each line
    and a final newline does not produce an extra empty line.
    """

    if not text:
        return [""]
    lines = text.split("\n")
    if text.endswith("\n"):
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines] or [""]


@dataclass(slots=True)
class BufferDocument:
    """Mutable list-of-lines storage that is never empty.

    ``version`` increases on every mutation so callers can tell whether an
    operation actually touched the text.
    """

    _lines: List[str] = field(default_factory=lambda: [""])
    version: int = 0

    def __post_init__(self) -> None:
        if not self._lines:
            self._lines = [""]

    @classmethod
    def from_text(cls, text: str) -> "BufferDocument":
        return cls(_lines=split_lines(text))

    @classmethod
    def from_lines(cls, lines: Iterable[str]) -> "BufferDocument":
        return cls(_lines=list(lines))

    def snapshot(self) -> Sequence[str]:
        """Return the current lines without exposing internal mutability."""

        return tuple(self._lines)

    @property
    def line_count(self) -> int:
        return len(self._lines)

    def get_line(self, index: int) -> str:
        return self._lines[index]

    def set_line(self, index: int, text: str) -> None:
        if self._lines[index] == text:
            return
        self._lines[index] = text
        self.version += 1

    def update_lines(self, start: int, end: int, new_lines: Iterable[str]) -> None:
        """Replace ``[start:end]`` with ``new_lines`` in place."""

        replacement = list(new_lines)
        if self._lines[start:end] == replacement:
            return
        self._lines[start:end] = replacement
        if not self._lines:
            self._lines.append("")
        self.version += 1

    def replace(self, lines: Iterable[str]) -> None:
        self.update_lines(0, len(self._lines), lines)

    def to_text(self) -> str:
        return "\n".join(self._lines)


__all__ = ["BufferDocument", "split_lines"]
