"""Crash logs written when the host loop dies with an unexpected error."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from red_engine.runtime import telemetry

CRASH_LOG_PREFIX = "red_error_"
TIMESTAMP_FORMAT = "%Y-%m-%d_%H-%M-%S"
TAIL_LINES = 5


@dataclass(slots=True)
class CrashContext:
    """Editor state captured alongside the error."""

    path: Optional[Path]
    modified: bool
    cursor: Tuple[int, int]
    modal: Optional[str] = None
    lines: Sequence[str] = field(default_factory=tuple)


def render_crash_report(
    error: str, context: CrashContext, *, timestamp: str
) -> str:
    out: List[str] = [
        "Red Editor Error Log",
        f"Timestamp: {timestamp}",
        f"Error: {error}",
        "",
        "Editor State:",
        f"File: {context.path if context.path is not None else '<unnamed>'}",
        f"Modified: {context.modified}",
        f"Cursor: {context.cursor}",
        f"Modal: {context.modal or 'none'}",
        "",
        "Last few lines of content:",
    ]
    start = max(0, len(context.lines) - TAIL_LINES)
    for offset, line in enumerate(context.lines[start:]):
        out.append(f"{start + offset}: {line}")
    return "\n".join(out) + "\n"


def write_crash_log(
    log_dir: Path,
    error: str,
    context: CrashContext,
    *,
    now: Optional[datetime] = None,
) -> Optional[Path]:
    """Write a crash report into ``log_dir``; ``None`` if that failed."""

    timestamp = (now or datetime.now()).strftime(TIMESTAMP_FORMAT)
    target = log_dir / f"{CRASH_LOG_PREFIX}{timestamp}.log"
    try:
        log_dir.mkdir(parents=True, exist_ok=True)
        target.write_text(
            render_crash_report(error, context, timestamp=timestamp),
            encoding="utf-8",
        )
    except OSError as exc:
        telemetry.record_event(
            "diagnostics.crash_log_failed",
            level="error",
            data={"log_dir": str(log_dir), "error": str(exc)},
        )
        return None
    telemetry.record_event(
        "diagnostics.crash_logged", level="error", data={"log": str(target)}
    )
    return target


def clear_crash_logs(log_dir: Path) -> int:
    """Remove every crash log in ``log_dir`` and return how many went."""

    if not log_dir.is_dir():
        return 0
    removed = 0
    for entry in log_dir.glob(f"{CRASH_LOG_PREFIX}*.log"):
        entry.unlink()
        removed += 1
    return removed


__all__ = [
    "CRASH_LOG_PREFIX",
    "CrashContext",
    "TIMESTAMP_FORMAT",
    "clear_crash_logs",
    "render_crash_report",
    "write_crash_log",
]
