"""Executable Textual app hosting an EditorSession."""

from __future__ import annotations

import argparse
import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Optional, Sequence

try:  # pragma: no cover - imported only when the editor is run
    from textual import events
    from textual.app import App, ComposeResult
    from textual.containers import Vertical
    from textual.widgets import Footer, Header, Static
except ModuleNotFoundError as exc:  # pragma: no cover - friendly error for missing dep
    raise RuntimeError(
        "Install the 'textual' package to use red_engine.adapters.textual.app"
    ) from exc

from red_engine.buffer import BufferMirror
from red_engine.errors import EditorError, describe_startup_error
from red_engine.runtime import EditorSettings, load_settings, telemetry
from red_engine.session import EditorSession, validate_startup_path

from .controller import TextualEditorAdapter, TextualUIHooks

CURSOR_MARK = "▏"
VISIBLE_SUGGESTIONS = 5


def render_buffer(mirror: BufferMirror) -> str:
    """Numbered lines with a caret drawn at the cursor."""

    lines = mirror.text.split("\n")
    column, row = mirror.cursor
    width = len(str(len(lines)))
    out = []
    for index, line in enumerate(lines):
        if index == row:
            line = line[:column] + CURSOR_MARK + line[column:]
        out.append(f"{index + 1:>{width}} {line}")
    return "\n".join(out)


def render_suggestions(visible: Sequence[str], selected: int) -> str:
    if not visible:
        return ""
    start = max(0, min(selected, len(visible) - VISIBLE_SUGGESTIONS))
    out = []
    for index in range(start, min(len(visible), start + VISIBLE_SUGGESTIONS)):
        label = visible[index].replace("\n", "↵")
        marker = ">" if index == selected else " "
        out.append(f"{marker} {label}")
    return "\n".join(out)


@dataclass
class UIState:
    buffer_text: str = ""
    status_text: str = ""
    prompt_text: str = ""
    suggestions: List[str] = field(default_factory=list)


class RedEditorApp(App[None]):
    """Single-file editor UI around an EditorSession."""

    CSS = """
	Screen {
		layout: vertical;
	}

	#buffer-view {
		height: 1fr;
		border: round $accent;
		padding: 0 1;
		content-align: left top;
		overflow: auto;
	}

	#suggestions {
		height: auto;
		max-height: 5;
		background: $surface-darken-1;
		padding: 0 1;
	}

	#status-line {
		height: 1;
		background: $surface-darken-1;
		padding: 0 1;
	}

	#prompt-line {
		height: 1;
		background: $surface-darken-2;
		padding: 0 1;
	}
	"""

    BINDINGS = [
        ("ctrl+c", "request_quit", "Quit"),
    ]

    def __init__(self, session: EditorSession) -> None:
        super().__init__()
        self.session = session
        self._state = UIState()
        self.adapter: TextualEditorAdapter | None = None
        self._buffer_widget: Static | None = None
        self._suggestion_widget: Static | None = None
        self._status_widget: Static | None = None
        self._prompt_widget: Static | None = None
        self.crash_error: Optional[BaseException] = None
        self.crash_log: Optional[Path] = None

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        with Vertical(id="buffer-area"):
            self._buffer_widget = Static("", id="buffer-view", markup=False)
            yield self._buffer_widget
        self._suggestion_widget = Static("", id="suggestions", markup=False)
        self._status_widget = Static("", id="status-line", markup=False)
        self._prompt_widget = Static("", id="prompt-line", markup=False)
        yield self._suggestion_widget
        yield self._status_widget
        yield self._prompt_widget
        yield Footer()

    async def on_mount(self) -> None:
        hooks = TextualUIHooks(
            update_buffer=self._update_buffer,
            update_status=self._update_status,
            show_prompt=self._show_prompt,
            show_suggestions=self._show_suggestions,
            handle_event=self._handle_event,
            request_exit=self._request_exit,
        )
        self.adapter = TextualEditorAdapter(
            self.session, hooks, page_height=self._page_height
        )
        self.title = "red"
        self.sub_title = self.session.display_name
        message = self.session.status_message
        if message:
            self._update_status(message)
        self.set_interval(self.session.settings.file_poll_interval, self._tick)

    async def on_key(self, event: events.Key) -> None:
        if not self.adapter or event.key == "ctrl+c":
            return
        try:
            self.adapter.handle_textual_key(event.key, character=event.character)
        except Exception as exc:
            self._crash(exc)
        event.stop()
        event.prevent_default()

    def action_request_quit(self) -> None:
        if self.adapter:
            self.adapter.request_quit()

    def _tick(self) -> None:
        if not self.adapter:
            return
        try:
            self.adapter.poll_file_changes()
        except Exception as exc:
            self._crash(exc)
            return
        self._render_status()

    def _crash(self, error: BaseException) -> None:
        telemetry.record_event(
            "app.crash", level="error", data={"error": repr(error)}
        )
        self.crash_error = error
        self.crash_log = self.session.log_crash(error)
        self.exit(return_code=1)

    def _page_height(self) -> int:
        if self._buffer_widget is None:
            return 20
        return max(1, self._buffer_widget.size.height)

    def _update_buffer(self, mirror: BufferMirror) -> None:
        self._state.buffer_text = render_buffer(mirror)
        if self._buffer_widget:
            self._buffer_widget.update(self._state.buffer_text)
        self._render_status()

    def _update_status(self, status: str) -> None:
        self._state.status_text = status
        self._render_status()

    def _render_status(self) -> None:
        if not self._status_widget:
            return
        session = self.session
        column, row = session.buffer.cursor
        flag = " [+]" if session.buffer.modified else ""
        message = session.status_message or ""
        self._status_widget.update(
            f"{session.display_name}{flag} | Ln {row + 1}, Col {column + 1} | {message}"
        )

    def _show_prompt(self, text: str) -> None:
        self._state.prompt_text = text
        if self._prompt_widget:
            self._prompt_widget.update(text)

    def _show_suggestions(self, visible: List[str], selected: int) -> None:
        self._state.suggestions = list(visible)
        if self._suggestion_widget:
            self._suggestion_widget.update(render_suggestions(visible, selected))

    def _handle_event(self, name: str, payload: Any | None) -> None:
        if name in {"file.opened", "file.saved"}:
            self.sub_title = self.session.display_name

    def _request_exit(self, code: int) -> None:
        self.exit(return_code=code)


def _parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="red", description="Edit a text file in the terminal."
    )
    parser.add_argument("path", nargs="?", help="File to open or create")
    parser.add_argument(
        "--log-preset",
        choices=("development", "quiet", "production"),
        default=os.environ.get("RED_ENGINE_LOG_PRESET", "quiet"),
        help="telelog preset for diagnostics (default: quiet)",
    )
    parser.add_argument(
        "--config-dir",
        type=Path,
        default=None,
        help="Directory for recent files and crash logs",
    )
    return parser.parse_args(argv)


def build_session(
    path: Optional[str], settings: EditorSettings
) -> EditorSession:
    """Create a session and open ``path``; startup errors propagate."""

    session = EditorSession(settings)
    session.recent.load()
    if path:
        target = validate_startup_path(path, max_size=settings.max_file_size)
        session.open_file(target)
    return session


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = _parse_args(argv)
    telemetry.configure(preset=args.log_preset)
    settings = load_settings(config_dir=args.config_dir)
    try:
        session = build_session(args.path, settings)
    except EditorError as exc:
        print(describe_startup_error(exc), file=sys.stderr)
        return 1

    app = RedEditorApp(session)
    app.run()
    if app.crash_error is not None:
        where = f" Details: {app.crash_log}" if app.crash_log else ""
        print(f"red stopped after an error: {app.crash_error}.{where}", file=sys.stderr)
        return 1
    return app.return_code or 0


if __name__ == "__main__":  # pragma: no cover - manual run
    sys.exit(main())
