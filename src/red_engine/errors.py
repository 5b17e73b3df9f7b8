"""Exception taxonomy for file handling and editing failures."""

from __future__ import annotations

from pathlib import Path
from typing import Optional


class EditorError(RuntimeError):
    """Base class for every failure the editor reports to the user."""

    category = "error"

    def __init__(self, message: str, *, path: Optional[Path] = None) -> None:
        super().__init__(message)
        self.path = path


class EditorIOError(EditorError):
    category = "io"


class PermissionDeniedError(EditorError):
    category = "permission_denied"


class FileTooLargeError(EditorError):
    category = "file_too_large"

    def __init__(
        self, message: str, *, path: Optional[Path] = None, size: int = 0
    ) -> None:
        super().__init__(message, path=path)
        self.size = size


class InvalidFileError(EditorError):
    category = "invalid_file"


class IsDirectoryError(EditorError):
    category = "is_directory"


def describe_startup_error(error: EditorError) -> str:
    """Message printed on stderr when the editor refuses to start."""

    if isinstance(error, PermissionDeniedError):
        return "Permission denied. Use 'sudo red' to edit this file."
    if isinstance(error, IsDirectoryError):
        return "Cannot edit a directory."
    if isinstance(error, FileTooLargeError):
        return "File is too large (>100MB)."
    if isinstance(error, InvalidFileError):
        return f"Invalid file: {error}"
    return f"Error: {error}"


__all__ = [
    "EditorError",
    "EditorIOError",
    "PermissionDeniedError",
    "FileTooLargeError",
    "InvalidFileError",
    "IsDirectoryError",
    "describe_startup_error",
]
