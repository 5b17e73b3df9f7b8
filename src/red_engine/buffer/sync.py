"""Adapter boundary types for handing buffer state to a host UI."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol

from red_engine.errors import EditorError

from .state import Cursor


@dataclass(slots=True)
class BufferMirror:
    """Host-friendly snapshot describing the current buffer state."""

    text: str
    cursor: Cursor
    modified: bool
    version: int
    attributes: dict[str, str] = field(default_factory=dict)


class BufferSync(Protocol):
    """How hosts pull the state they should render."""

    def pull_buffer(self) -> BufferMirror:
        """Return the latest buffer snapshot that the host should render."""
        ...


class BufferValidationError(EditorError):
    """Raised when callers provide out-of-bounds cursor or line info."""

    def __init__(self, message: str, *, cursor: Cursor | None = None) -> None:
        super().__init__(message)
        self.cursor = cursor
