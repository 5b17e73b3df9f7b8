"""File access for the session: startup checks, load/save, change polling."""

from __future__ import annotations

import math
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Optional, Union

from red_engine.errors import (
    EditorIOError,
    FileTooLargeError,
    InvalidFileError,
    IsDirectoryError,
    PermissionDeniedError,
)
from red_engine.runtime import telemetry

DEFAULT_MAX_FILE_SIZE = 100 * 1024 * 1024
PROBE_FILE_NAME = ".red_test_file"

PathLike = Union[str, Path]


def validate_startup_path(
    path: PathLike, *, max_size: int = DEFAULT_MAX_FILE_SIZE
) -> Path:
    """Refuse paths the editor could never save back to.

    Existing files are probed by opening them for append; for new files a
    throwaway probe file is created (and removed) next to the target. A new
    file in a directory that does not exist yet is accepted unprobed.
    """

    target = Path(path).expanduser()
    if target.is_dir():
        raise IsDirectoryError(f"{target} is a directory", path=target)

    if target.exists():
        try:
            size = target.stat().st_size
        except OSError as exc:
            raise InvalidFileError(str(exc), path=target) from exc
        if size > max_size:
            raise FileTooLargeError(
                f"{target} is {size} bytes", path=target, size=size
            )
        try:
            with target.open("a", encoding="utf-8"):
                pass
        except PermissionError as exc:
            raise PermissionDeniedError(str(exc), path=target) from exc
        except OSError as exc:
            raise InvalidFileError(str(exc), path=target) from exc
        return target

    parent = target.parent if target.parent != Path("") else Path(".")
    if not parent.exists():
        return target
    probe = parent / PROBE_FILE_NAME
    try:
        with probe.open("w", encoding="utf-8"):
            pass
        probe.unlink()
    except PermissionError as exc:
        raise PermissionDeniedError(str(exc), path=target) from exc
    except OSError as exc:
        raise EditorIOError(str(exc), path=target) from exc
    return target


def read_file(path: PathLike) -> str:
    """UTF-8 contents of ``path``; undecodable bytes become U+FFFD."""

    target = Path(path)
    try:
        return target.read_text(encoding="utf-8", errors="replace")
    except PermissionError as exc:
        raise PermissionDeniedError(str(exc), path=target) from exc
    except IsADirectoryError as exc:
        raise IsDirectoryError(str(exc), path=target) from exc
    except OSError as exc:
        raise EditorIOError(str(exc), path=target) from exc


def write_file(path: PathLike, text: str) -> float:
    """Write ``text`` and return the file's new modification time."""

    target = Path(path)
    try:
        with telemetry.span(
            "files::write", component="files", metadata={"path": str(target)}
        ):
            target.write_text(text, encoding="utf-8")
            return target.stat().st_mtime
    except PermissionError as exc:
        raise PermissionDeniedError(str(exc), path=target) from exc
    except OSError as exc:
        raise EditorIOError(str(exc), path=target) from exc


def file_mtime(path: Optional[PathLike]) -> Optional[float]:
    if path is None:
        return None
    try:
        return Path(path).stat().st_mtime
    except OSError:
        return None


def format_path(path: PathLike, *, home: Optional[Path] = None) -> str:
    """Display form of ``path`` with the home directory shortened to ``~``."""

    target = Path(path)
    base = home if home is not None else Path.home()
    try:
        relative = target.relative_to(base)
    except ValueError:
        return str(target)
    if str(relative) == ".":
        return "~"
    return f"~/{relative.as_posix()}"


@dataclass
class FileWatcher:
    """Throttled check for edits made to the bound file by other programs.

    ``loaded_at`` is the modification time the buffer was last synced with
    and ``saved_at`` the one produced by the session's own last save.
    """

    path: Optional[Path] = None
    interval: float = 1.0
    clock: Callable[[], float] = time.monotonic
    loaded_at: Optional[float] = None
    saved_at: Optional[float] = None
    _last_check: float = field(default=-math.inf, repr=False)

    def bind(self, path: Optional[Path]) -> None:
        self.path = path
        self.saved_at = None
        self.mark_loaded()

    def mark_loaded(self) -> None:
        self.loaded_at = file_mtime(self.path)

    def mark_saved(self, mtime: float) -> None:
        self.saved_at = mtime
        self.loaded_at = mtime

    def acknowledge(self) -> None:
        """Accept the on-disk version as known without reloading it."""

        self.mark_loaded()

    def poll(self, *, modal_active: bool = False) -> bool:
        if modal_active or self.path is None:
            return False
        now = self.clock()
        if now - self._last_check < self.interval:
            return False
        self._last_check = now

        mtime = file_mtime(self.path)
        if mtime is None:
            return False
        reference = self.loaded_at if self.loaded_at is not None else time.time()
        if mtime <= reference:
            return False
        if self.saved_at is not None and mtime == self.saved_at:
            return False
        telemetry.record_event(
            "files.changed_on_disk",
            level="info",
            data={"path": str(self.path), "mtime": mtime},
        )
        return True


__all__ = [
    "DEFAULT_MAX_FILE_SIZE",
    "FileWatcher",
    "PROBE_FILE_NAME",
    "file_mtime",
    "format_path",
    "read_file",
    "validate_startup_path",
    "write_file",
]
