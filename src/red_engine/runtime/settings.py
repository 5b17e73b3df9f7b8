"""Editor settings resolved from defaults and ``RED_ENGINE_*`` variables."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional

from platformdirs import user_config_dir

from .telemetry import ENV_PREFIX

APP_NAME = "red"


def _default_config_dir() -> Path:
    return Path(user_config_dir(APP_NAME))


@dataclass(frozen=True, slots=True)
class EditorSettings:
    """Tunables for one editing session.

    Defaults mirror the behaviour users of the terminal editor already know:
    four-space tabs, five-row fast movement and a 10,000 step undo history.
    """

    tab_width: int = 4
    fast_move_rows: int = 5
    history_limit: int = 10_000
    recent_files_limit: int = 20
    max_file_size: int = 100 * 1024 * 1024
    file_poll_interval: float = 1.0
    suggestion_limit: int = 50
    status_timeout: float = 3.0
    config_dir: Path = field(default_factory=_default_config_dir)

    @property
    def history_file(self) -> Path:
        return self.config_dir / "history"

    @property
    def log_dir(self) -> Path:
        return self.config_dir / "logs"


def _env_int(env: Mapping[str, str], key: str, fallback: int) -> int:
    value = env.get(f"{ENV_PREFIX}{key}")
    if value is None:
        return fallback
    try:
        return int(value)
    except ValueError:
        return fallback


def _env_float(env: Mapping[str, str], key: str, fallback: float) -> float:
    value = env.get(f"{ENV_PREFIX}{key}")
    if value is None:
        return fallback
    try:
        return float(value)
    except ValueError:
        return fallback


def load_settings(
    env: Optional[Mapping[str, str]] = None, *, config_dir: Optional[Path] = None
) -> EditorSettings:
    """Build settings from ``env`` (defaults to ``os.environ``)."""

    source = os.environ if env is None else env
    defaults = EditorSettings()
    raw_dir = source.get(f"{ENV_PREFIX}CONFIG_DIR")
    resolved_dir = config_dir or (Path(raw_dir) if raw_dir else defaults.config_dir)
    return EditorSettings(
        tab_width=max(1, _env_int(source, "TAB_WIDTH", defaults.tab_width)),
        fast_move_rows=max(
            1, _env_int(source, "FAST_MOVE_ROWS", defaults.fast_move_rows)
        ),
        history_limit=max(1, _env_int(source, "HISTORY_LIMIT", defaults.history_limit)),
        recent_files_limit=max(
            1, _env_int(source, "RECENT_FILES_LIMIT", defaults.recent_files_limit)
        ),
        max_file_size=_env_int(source, "MAX_FILE_SIZE", defaults.max_file_size),
        file_poll_interval=_env_float(
            source, "FILE_POLL_INTERVAL", defaults.file_poll_interval
        ),
        suggestion_limit=max(
            1, _env_int(source, "SUGGESTION_LIMIT", defaults.suggestion_limit)
        ),
        status_timeout=_env_float(source, "STATUS_TIMEOUT", defaults.status_timeout),
        config_dir=resolved_dir,
    )


__all__ = ["APP_NAME", "EditorSettings", "load_settings"]
