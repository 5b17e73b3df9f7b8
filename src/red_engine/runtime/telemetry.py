"""Structured logging and profiling for the editing core, built on telelog.

An editing session owns the terminal, so nothing is written to the console
unless a preset or ``RED_ENGINE_*`` variable asks for it. Components log
through ``record_event`` and wrap their work in ``span``; the host picks a
preset once at startup with ``configure``.
"""

from __future__ import annotations

import os
from contextlib import ExitStack, contextmanager
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple, cast

import telelog  # type: ignore[import]

tl = cast(Any, telelog)

ENV_PREFIX = "RED_ENGINE_"
ROOT_LOGGER = "red_engine"

# min level, console, colour, default log file, buffered
PRESETS: Dict[str, Tuple[str, bool, bool, str, bool]] = {
    "development": ("DEBUG", True, True, "", False),
    "quiet": ("WARNING", False, False, "", False),
    "production": ("INFO", False, False, "red_engine.log", True),
}

_loggers: Dict[str, Any] = {}
_config: Optional[Any] = None


def _env(name: str) -> Optional[str]:
    return os.getenv(f"{ENV_PREFIX}{name}")


def _env_flag(name: str) -> bool:
    return (_env(name) or "").lower() in {"1", "true", "yes", "on"}


def _text(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, (dict, list, tuple, set)):
        return repr(value)
    return str(value)


def _pairs(data: Dict[str, Any]) -> List[Tuple[str, str]]:
    return [(str(key), _text(value)) for key, value in data.items()]


def _preset_config(preset: str) -> Any:
    try:
        level, console, colour, log_file, buffered = PRESETS[preset.lower()]
    except KeyError:
        raise ValueError(f"Unknown preset '{preset}'.") from None
    config = tl.Config()
    config.with_min_level(level)
    config.with_console_output(console)
    config.with_colored_output(colour)
    log_file = _env("LOG_FILE") or log_file
    if log_file:
        config.with_file_output(log_file)
    if buffered:
        config.with_buffering(True)
    return config


def _env_config() -> Any:
    """Configuration used before the host calls :func:`configure`."""

    config = tl.Config()
    config.with_min_level((_env("LOG_LEVEL") or "WARNING").upper())
    console = not _env_flag("DISABLE_CONSOLE") and _env("LOG_LEVEL") is not None
    config.with_console_output(console)
    if console:
        config.with_colored_output(not _env_flag("NO_COLOR"))
    if _env_flag("LOG_JSON"):
        config.with_json_format(True)
    if _env("LOG_FILE"):
        config.with_file_output(_env("LOG_FILE"))
    if _env_flag("LOG_BUFFERED"):
        config.with_buffering(True)
        config.with_buffer_size(int(_env("LOG_BUFFER_SIZE") or "2048"))
    return config


def configure(*, config: Optional[Any] = None, preset: Optional[str] = None) -> None:
    """Install a telelog configuration for every editor logger.

    ``preset`` names an entry of :data:`PRESETS`; ``config`` adopts a ready
    ``telelog.Config``. Passing neither re-reads the environment. Loggers
    created earlier are dropped so they pick up the new configuration.
    """

    global _config
    if config is not None and preset:
        raise ValueError("Provide either `config` or `preset`, not both.")
    if preset:
        config = _preset_config(preset)
    elif config is None:
        config = _env_config()
    config.with_profiling(True)
    _config = config
    _loggers.clear()


def get_logger(name: Optional[str] = None) -> Any:
    """Return the cached ``telelog.Logger`` for ``name`` (default ``red_engine``)."""

    if _config is None:
        configure()
    key = name or ROOT_LOGGER
    if key not in _loggers:
        _loggers[key] = tl.Logger.with_config(key, _config)
    return _loggers[key]


def _level_method(logger: Any, level: Any) -> Tuple[Callable[..., Any], bool]:
    name = str(level).lower()
    structured = getattr(logger, f"{name}_with", None)
    if structured is not None:
        return structured, True
    plain = getattr(logger, name, None)
    if plain is None:
        raise ValueError(f"Unsupported log level '{level}'.")
    return plain, False


def _emit(logger: Any, level: Any, message: str, payload: Dict[str, Any]) -> None:
    method, structured = _level_method(logger, level)
    if structured:
        method(message, _pairs(payload))
    else:
        method(f"{message} {payload}")


def record_event(
    name: str,
    *,
    level: str | Any = "info",
    data: Optional[Dict[str, Any]] = None,
    logger_name: Optional[str] = None,
) -> None:
    """Log ``event::<name>`` with ``data`` attached as key/value pairs."""

    _emit(get_logger(logger_name), level, f"event::{name}", {"event": name, **(data or {})})


@dataclass
class SpanHandle:
    """Yielded by :func:`span`; metadata added here is logged if the block fails."""

    logger: Any
    name: str
    component: Optional[str] = None
    metadata: Dict[str, str] = field(default_factory=dict)

    def add_metadata(self, key: str, value: Any) -> None:
        self.metadata[key] = _text(value)

    def fail(self, reason: str) -> None:
        payload: Dict[str, Any] = {"span": self.name, **self.metadata, "reason": reason}
        if self.component:
            payload["component"] = self.component
        _emit(self.logger, "error", "span::fail", payload)


@contextmanager
def span(
    name: str,
    *,
    logger_name: Optional[str] = None,
    component: Optional[str | bool] = None,
    metadata: Optional[Dict[str, Any]] = None,
) -> Iterator[SpanHandle]:
    """Profile a block, optionally tracking it as a telelog component.

    ``component=True`` reuses ``name``. ``metadata`` is pushed as logger
    context while the block runs. An exception escaping the block is logged
    as ``span::fail`` and re-raised.
    """

    log = get_logger(logger_name)
    component_name = name if component is True else component or None
    context = {key: _text(value) for key, value in (metadata or {}).items()}
    for key, value in context.items():
        log.add_context(key, value)

    handle = SpanHandle(log, name, component_name, dict(context))
    try:
        with ExitStack() as stack:
            if component_name:
                stack.enter_context(log.track_component(component_name))
            stack.enter_context(log.profile(name))
            try:
                yield handle
            except Exception as exc:
                handle.fail(str(exc))
                raise
    finally:
        for key in context:
            log.remove_context(key)


__all__ = [
    "ENV_PREFIX",
    "PRESETS",
    "SpanHandle",
    "configure",
    "get_logger",
    "record_event",
    "span",
]
