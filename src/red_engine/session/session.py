"""EditorSession: the buffer, its history, search and completion behind one API."""

from __future__ import annotations

import time
from contextlib import contextmanager
from pathlib import Path
from typing import Callable, Iterator, Optional, Tuple, Union

from red_engine.buffer import (
    AUTO_PAIRS,
    BufferMirror,
    BufferValidationError,
    HistoryManager,
    Motion,
    TextBuffer,
)
from red_engine.errors import (
    EditorError,
    FileTooLargeError,
    PermissionDeniedError,
    describe_startup_error,
)
from red_engine.runtime import EditorSettings, load_settings, telemetry
from red_engine.search import SearchEngine, check_replacement
from red_engine.suggest import SuggestionEngine, detect_language
from red_engine.suggest.corpus import is_word_char

from .diagnostics import CrashContext, clear_crash_logs, write_crash_log
from .events import EventBus, Intent, IntentResult
from .files import FileWatcher, format_path, read_file, write_file
from .recent import RecentFiles

PERMISSION_HINT = "Permission denied. Use 'sudo red' to edit this file."
FILE_CHANGED_PROMPT = "File changed on disk. Reload? (y/n)"
FILE_CHANGED_MODAL = "file_changed"


class EditorSession:
    """Routes one intent at a time to the editing components.

    Every content changing intent first offers the pre-edit state to
    :meth:`HistoryManager.maybe_snapshot`. Typing a word character rebuilds
    the word table and refreshes completions; any other edit hides them.
    """

    def __init__(
        self,
        settings: Optional[EditorSettings] = None,
        *,
        bus: Optional[EventBus] = None,
        recent: Optional[RecentFiles] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.settings = settings or load_settings()
        self.buffer = TextBuffer(
            tab_width=self.settings.tab_width,
            fast_move_rows=self.settings.fast_move_rows,
        )
        self.history = HistoryManager(self.buffer, limit=self.settings.history_limit)
        self.search = SearchEngine(self.buffer)
        self.suggestions = SuggestionEngine(
            self.buffer, limit=self.settings.suggestion_limit
        )
        self.bus = bus or EventBus()
        self.recent = recent or RecentFiles(
            self.settings.history_file, limit=self.settings.recent_files_limit
        )
        self.watcher = FileWatcher(
            interval=self.settings.file_poll_interval, clock=clock
        )
        self.path: Optional[Path] = None
        self.modal: Optional[str] = None
        self._clock = clock
        self._status: Optional[Tuple[str, float]] = None
        self._logger_name = "red_engine.session"

    # -- status ----------------------------------------------------------------

    @property
    def status_message(self) -> Optional[str]:
        if self._status is None:
            return None
        message, stamp = self._status
        if self._clock() - stamp > self.settings.status_timeout:
            return None
        return message

    def set_status(self, message: str) -> None:
        self._status = (message, self._clock())
        self.bus.emit("status", message)

    @property
    def display_name(self) -> str:
        return format_path(self.path) if self.path is not None else "untitled"

    def pull_buffer(self) -> BufferMirror:
        return self.buffer.mirror(attributes={"path": self.display_name})

    # -- dispatch --------------------------------------------------------------

    def dispatch(
        self, intent: Union[Intent, str], argument: object = None, **options: object
    ) -> IntentResult:
        """Run ``intent`` with an optional positional ``argument``."""

        intent = Intent(intent)
        handler = getattr(self, _HANDLERS[intent])
        if argument is None:
            return handler(**options)
        return handler(argument, **options)

    @contextmanager
    def _intent(self, name: str) -> Iterator[dict]:
        version = self.buffer.document.version
        outcome: dict = {}
        with telemetry.span(
            f"session::{name}",
            component="session",
            metadata={"buffer": self.buffer.name},
            logger_name=self._logger_name,
        ):
            yield outcome
        outcome["changed"] = self.buffer.document.version != version
        if outcome["changed"]:
            self.bus.emit("buffer.changed", self.buffer.mirror())

    def _result(
        self,
        outcome: dict,
        *,
        message: Optional[str] = None,
        status: str = "ok",
        payload: object | None = None,
    ) -> IntentResult:
        if message:
            self.set_status(message)
        return IntentResult(
            consumed=True,
            status=status,
            message=message,
            changed=bool(outcome.get("changed")),
            payload=payload,
        )

    # -- typing ----------------------------------------------------------------

    def insert_text(self, text: str) -> IntentResult:
        if not text:
            return IntentResult(consumed=False, status="ignored")
        with self._intent("insert") as outcome:
            self.history.maybe_snapshot()
            if text in AUTO_PAIRS:
                self.buffer.insert_pair(text)
            else:
                self.buffer.insert(text)
            if is_word_char(text[-1]):
                self.suggestions.rebuild_word_table()
                self.suggestions.refresh()
            else:
                self.suggestions.hide()
        self._emit_suggestions()
        return self._result(outcome)

    def newline(self) -> IntentResult:
        with self._intent("newline") as outcome:
            self.history.maybe_snapshot()
            self.buffer.split_line_at_cursor()
            self.suggestions.hide()
        return self._result(outcome)

    def tab(self) -> IntentResult:
        if self.suggestions.showing:
            return self.apply_suggestion()
        with self._intent("tab") as outcome:
            self.history.maybe_snapshot()
            self.buffer.insert_tab()
        return self._result(outcome)

    def backspace(self, count: int = 1) -> IntentResult:
        with self._intent("backspace") as outcome:
            self.history.maybe_snapshot()
            self.buffer.delete_backward(count)
            self.suggestions.hide()
        return self._result(outcome)

    def delete(self, count: int = 1) -> IntentResult:
        with self._intent("delete") as outcome:
            self.history.maybe_snapshot()
            self.buffer.delete_forward(count)
            self.suggestions.hide()
        return self._result(outcome)

    def cut_line(self) -> IntentResult:
        with self._intent("cut_line") as outcome:
            self.history.maybe_snapshot()
            removed = self.buffer.cut_line()
            self.suggestions.hide()
        return self._result(outcome, message="Line cut", payload=removed)

    # -- navigation ------------------------------------------------------------

    def move(
        self, motion: Union[Motion, str], *, page_height: Optional[int] = None
    ) -> IntentResult:
        self.buffer.move_cursor(Motion(motion), page_height=page_height)
        self.suggestions.hide()
        return IntentResult(consumed=True, payload=self.buffer.cursor)

    def jump_to_line(self, number: int) -> IntentResult:
        try:
            cursor = self.buffer.jump_to_line(int(number))
        except (BufferValidationError, ValueError):
            self.set_status("Invalid line number")
            return IntentResult(
                consumed=True, status="invalid", message="Invalid line number"
            )
        self.suggestions.hide()
        return IntentResult(consumed=True, payload=cursor)

    # -- history ---------------------------------------------------------------

    def undo(self) -> IntentResult:
        with self._intent("undo") as outcome:
            result = self.history.undo()
            self.suggestions.hide()
        return self._result(
            outcome,
            message=result.message,
            status="ok" if result.applied else "empty",
        )

    def redo(self) -> IntentResult:
        with self._intent("redo") as outcome:
            result = self.history.redo()
            self.suggestions.hide()
        return self._result(
            outcome,
            message=result.message,
            status="ok" if result.applied else "empty",
        )

    # -- search ----------------------------------------------------------------

    def find(self, query: str) -> IntentResult:
        self.search.find_all(query)
        return self.find_next()

    def find_next(self) -> IntentResult:
        if not self.search.query:
            return IntentResult(consumed=True, status="empty")
        outcome = self.search.advance()
        if not outcome.found:
            return self._result({}, message=outcome.message, status="no_match")
        total = len(self.search.matches)
        index = (self.search.current_index or 0) + 1
        return IntentResult(
            consumed=True,
            message=f"Match {index} of {total}",
            payload=outcome.match,
        )

    def replace_current(self, replacement: str) -> IntentResult:
        if not self.search.matches:
            return self._result({}, message="No matches found.", status="no_match")
        try:
            check_replacement(replacement)
        except ValueError as exc:
            return self._result({}, message=str(exc), status="invalid")
        with self._intent("replace_current") as outcome:
            self.history.maybe_snapshot()
            replaced = self.search.replace_current(replacement)
        if not replaced.found:
            return self._result(outcome, message=replaced.message, status="stale")
        match = replaced.match
        self.search.advance_from(match.row, match.column + len(replacement))
        return self._result(outcome, message=replaced.message, payload=replaced.match)

    def replace_all(self, replacement: str) -> IntentResult:
        try:
            check_replacement(replacement)
        except ValueError as exc:
            return self._result({}, message=str(exc), status="invalid")
        with self._intent("replace_all") as outcome:
            self.history.maybe_snapshot()
            count = self.search.replace_all(replacement)
        return self._result(outcome, message="Replacement completed.", payload=count)

    # -- completion ------------------------------------------------------------

    def cycle_suggestion(self) -> IntentResult:
        selected = self.suggestions.cycle()
        self._emit_suggestions()
        return IntentResult(consumed=selected is not None, payload=selected)

    def apply_suggestion(self, selected: Optional[str] = None) -> IntentResult:
        if selected is None and not self.suggestions.showing:
            return IntentResult(consumed=False, status="ignored")
        with self._intent("apply_suggestion") as outcome:
            self.history.maybe_snapshot()
            self.suggestions.apply(selected)
        self._emit_suggestions()
        return self._result(outcome)

    def dismiss_suggestions(self) -> IntentResult:
        was_showing = self.suggestions.showing
        self.suggestions.hide()
        self._emit_suggestions()
        return IntentResult(consumed=was_showing)

    def _emit_suggestions(self) -> None:
        self.bus.emit("suggestions", list(self.suggestions.visible))

    # -- tools -----------------------------------------------------------------

    def delete_comments(self) -> IntentResult:
        with self._intent("delete_comments") as outcome:
            self.history.maybe_snapshot()
            self.buffer.delete_comments()
        return self._result(outcome, message="Comments deleted")

    def remove_empty_lines(self) -> IntentResult:
        with self._intent("remove_empty_lines") as outcome:
            self.history.maybe_snapshot()
            self.buffer.remove_empty_lines()
        return self._result(outcome, message="Empty lines removed")

    def clear_cache(self) -> IntentResult:
        """Forget undo history, the recent-files list and old crash logs."""

        try:
            self.recent.clear()
            clear_crash_logs(self.settings.log_dir)
        except OSError as exc:
            return self._result(
                {}, message=f"Error clearing cache: {exc}", status="error"
            )
        self.history.clear()
        return self._result({}, message="Cache cleared")

    # -- files -----------------------------------------------------------------

    def open_file(self, path: Union[str, Path]) -> IntentResult:
        """Bind the session to ``path`` and load it; missing files start empty."""

        target = Path(path).expanduser()
        if target.is_dir():
            return self._result(
                {}, message="Cannot open a directory", status="error"
            )
        exists = target.exists()
        size = target.stat().st_size if exists else 0
        if size > self.settings.max_file_size:
            error = FileTooLargeError(
                f"{target} is {size} bytes", path=target, size=size
            )
            return self._result(
                {}, message=describe_startup_error(error), status="error"
            )
        try:
            text = read_file(target) if exists else ""
        except EditorError as exc:
            return self._result(
                {}, message=f"Error opening file: {exc}", status="error"
            )

        with self._intent("open") as outcome:
            self.buffer.load(text, name=target.name)
        self.path = target
        self.modal = None
        self.history.clear()
        self.search.clear()
        self.suggestions.reload_for_language(detect_language(target))
        self.suggestions.rebuild_word_table()
        self.suggestions.hide()
        self.watcher.bind(target)
        self.recent.add(target)
        self.bus.emit("file.opened", target)
        label = format_path(target)
        message = f"Opened {label}" if exists else f"New file: {label}"
        return self._result(outcome, message=message, payload=target)

    def save(
        self, path: Union[str, Path, None] = None, *, overwrite: bool = False
    ) -> IntentResult:
        """Write the buffer to ``path`` (default: the bound file).

        Saving under a new name that already exists needs ``overwrite``.
        """

        target = Path(path).expanduser() if path is not None else self.path
        if target is None:
            return IntentResult(
                consumed=True, status="needs_path", message="Enter a file name"
            )
        if (
            not overwrite
            and target != self.path
            and target.exists()
        ):
            return IntentResult(
                consumed=True,
                status="confirm_overwrite",
                message=f"{format_path(target)} exists. Overwrite? (y/n)",
                payload=target,
            )
        try:
            mtime = write_file(target, self.buffer.file_text())
        except PermissionDeniedError:
            return self._result({}, message=PERMISSION_HINT, status="error")
        except EditorError as exc:
            return self._result(
                {}, message=f"Error saving file: {exc}", status="error"
            )

        if target != self.path:
            self.path = target
            self.buffer.name = target.name
            self.suggestions.reload_for_language(detect_language(target))
            self.watcher.path = target
        self.buffer.modified = False
        self.watcher.mark_saved(mtime)
        self.recent.add(target)
        self.bus.emit("file.saved", target)
        return self._result({}, message=f"Saved {format_path(target)}", payload=target)

    def reload(self) -> IntentResult:
        """Replace the buffer with the bound file's current contents."""

        self.modal = None
        if self.path is None or not self.path.exists():
            return IntentResult(consumed=False, status="ignored")
        try:
            text = read_file(self.path)
        except EditorError as exc:
            return self._result(
                {}, message=f"Error reloading file: {exc}", status="error"
            )
        with self._intent("reload") as outcome:
            self.history.reset_baseline()
            self.history.maybe_snapshot()
            self.buffer.load(text)
        self.history.reset_baseline()
        self.search.find_all(self.search.query)
        self.suggestions.rebuild_word_table()
        self.watcher.mark_loaded()
        return self._result(outcome, message="File reloaded from disk")

    def is_modified(self) -> bool:
        """True when there are edits that differ from what is on disk."""

        if not self.buffer.modified:
            return False
        if self.path is not None:
            try:
                on_disk = read_file(self.path)
            except EditorError:
                return True
            return self.buffer.file_text() != on_disk
        return True

    def check_file_changes(self) -> bool:
        """Poll the bound file and raise the reload prompt on outside edits."""

        if not self.watcher.poll(modal_active=self.modal is not None):
            return False
        self.modal = FILE_CHANGED_MODAL
        self.set_status(FILE_CHANGED_PROMPT)
        self.bus.emit("file.changed_on_disk", self.path)
        return True

    def resolve_file_change(self, reload: bool) -> IntentResult:
        if self.modal != FILE_CHANGED_MODAL:
            return IntentResult(consumed=False, status="ignored")
        if reload:
            return self.reload()
        self.modal = None
        self.watcher.acknowledge()
        return IntentResult(consumed=True, status="kept")

    # -- diagnostics -----------------------------------------------------------

    def crash_context(self) -> CrashContext:
        return CrashContext(
            path=self.path,
            modified=self.buffer.modified,
            cursor=self.buffer.cursor,
            modal=self.modal,
            lines=self.buffer.lines,
        )

    def log_crash(self, error: BaseException | str) -> Optional[Path]:
        return write_crash_log(
            self.settings.log_dir, str(error), self.crash_context()
        )


_HANDLERS = {
    Intent.INSERT: "insert_text",
    Intent.NEWLINE: "newline",
    Intent.TAB: "tab",
    Intent.BACKSPACE: "backspace",
    Intent.DELETE: "delete",
    Intent.MOVE: "move",
    Intent.JUMP_TO_LINE: "jump_to_line",
    Intent.CUT_LINE: "cut_line",
    Intent.UNDO: "undo",
    Intent.REDO: "redo",
    Intent.FIND: "find",
    Intent.FIND_NEXT: "find_next",
    Intent.REPLACE_CURRENT: "replace_current",
    Intent.REPLACE_ALL: "replace_all",
    Intent.CYCLE_SUGGESTION: "cycle_suggestion",
    Intent.APPLY_SUGGESTION: "apply_suggestion",
    Intent.DISMISS_SUGGESTIONS: "dismiss_suggestions",
    Intent.DELETE_COMMENTS: "delete_comments",
    Intent.REMOVE_EMPTY_LINES: "remove_empty_lines",
    Intent.CLEAR_CACHE: "clear_cache",
    Intent.SAVE: "save",
    Intent.RELOAD: "reload",
}


__all__ = [
    "EditorSession",
    "FILE_CHANGED_PROMPT",
    "PERMISSION_HINT",
]
