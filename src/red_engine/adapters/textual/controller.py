"""Textual adapter translating key presses into EditorSession intents."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple

from red_engine.buffer import BufferMirror, Motion
from red_engine.session import EditorSession, Intent, IntentResult

SHIFT_BACKSPACE_COUNT = 5


def _noop(*_args, **_kwargs) -> None:  # pragma: no cover - default hook
    return None


@dataclass(slots=True)
class TextualUIHooks:
    """Callbacks invoked by the adapter to update Textual widgets."""

    update_buffer: Callable[[BufferMirror], None]
    update_status: Callable[[str], None] = _noop
    show_prompt: Callable[[str], None] = _noop
    show_suggestions: Callable[[List[str], int], None] = _noop
    handle_event: Callable[[str, object | None], None] = _noop
    request_exit: Callable[[int], None] = _noop


class Prompt(str, Enum):
    FIND = "find"
    REPLACE_QUERY = "replace_query"
    REPLACE_WITH = "replace_with"
    JUMP_TO_LINE = "jump_to_line"
    OPEN = "open"
    SAVE_AS = "save_as"
    CONFIRM_OVERWRITE = "confirm_overwrite"
    SAVE_CONFIRM = "save_confirm"
    FILE_CHANGED = "file_changed"
    TOOLS = "tools"


PROMPT_LABELS: Dict[Prompt, str] = {
    Prompt.FIND: "Find: ",
    Prompt.REPLACE_QUERY: "Replace: ",
    Prompt.REPLACE_WITH: "Replace with (Enter: next, Ctrl+A: all): ",
    Prompt.JUMP_TO_LINE: "Go to line: ",
    Prompt.OPEN: "Open: ",
    Prompt.SAVE_AS: "Save as: ",
    Prompt.CONFIRM_OVERWRITE: "File exists. Overwrite? (y/n)",
    Prompt.SAVE_CONFIRM: "Save changes before quitting? (y/n)",
    Prompt.FILE_CHANGED: "File changed on disk. Reload? (y/n)",
    Prompt.TOOLS: "Tools: 1 delete comments, 2 remove empty lines, 3 clear cache",
}

YES_NO_PROMPTS = frozenset(
    {Prompt.CONFIRM_OVERWRITE, Prompt.SAVE_CONFIRM, Prompt.FILE_CHANGED}
)

KEY_BINDINGS: Dict[str, Tuple[Intent, object]] = {
    "left": (Intent.MOVE, Motion.LEFT),
    "right": (Intent.MOVE, Motion.RIGHT),
    "up": (Intent.MOVE, Motion.UP),
    "down": (Intent.MOVE, Motion.DOWN),
    "ctrl+left": (Intent.MOVE, Motion.WORD_LEFT),
    "alt+left": (Intent.MOVE, Motion.WORD_LEFT_START),
    "ctrl+right": (Intent.MOVE, Motion.WORD_RIGHT_START),
    "alt+right": (Intent.MOVE, Motion.WORD_RIGHT),
    "ctrl+up": (Intent.MOVE, Motion.FAST_UP),
    "ctrl+down": (Intent.MOVE, Motion.FAST_DOWN),
    "home": (Intent.MOVE, Motion.LINE_START),
    "end": (Intent.MOVE, Motion.LINE_END),
    "pageup": (Intent.MOVE, Motion.PAGE_UP),
    "pagedown": (Intent.MOVE, Motion.PAGE_DOWN),
    "backspace": (Intent.BACKSPACE, None),
    "shift+backspace": (Intent.BACKSPACE, SHIFT_BACKSPACE_COUNT),
    "delete": (Intent.DELETE, None),
    "enter": (Intent.NEWLINE, None),
    "tab": (Intent.TAB, None),
    "alt+tab": (Intent.CYCLE_SUGGESTION, None),
    "escape": (Intent.DISMISS_SUGGESTIONS, None),
    "ctrl+z": (Intent.UNDO, None),
    "ctrl+y": (Intent.REDO, None),
    "ctrl+s": (Intent.SAVE, None),
    "ctrl+x": (Intent.CUT_LINE, None),
    "alt+n": (Intent.FIND_NEXT, None),
}

PROMPT_KEYS: Dict[str, Prompt] = {
    "ctrl+f": Prompt.FIND,
    "ctrl+r": Prompt.REPLACE_QUERY,
    "ctrl+g": Prompt.JUMP_TO_LINE,
    "alt+o": Prompt.OPEN,
    "alt+t": Prompt.TOOLS,
}

QUIT_KEYS = frozenset({"ctrl+q", "alt+q"})

TOOL_INTENTS: Dict[str, Intent] = {
    "1": Intent.DELETE_COMMENTS,
    "2": Intent.REMOVE_EMPTY_LINES,
    "3": Intent.CLEAR_CACHE,
}


class TextualEditorAdapter:
    """Bridges an EditorSession and its bus events to a Textual surface.

    Prompts (find, replace, go to line, save as, confirmations) are tracked
    here; while one is open the session is flagged as modal so external
    change polling stays quiet.
    """

    def __init__(
        self,
        session: EditorSession,
        hooks: TextualUIHooks,
        *,
        page_height: Callable[[], int] = lambda: 20,
    ) -> None:
        self.session = session
        self.hooks = hooks
        self.page_height = page_height
        self.prompt: Optional[Prompt] = None
        self.prompt_text = ""
        self._pending_path: Optional[Path] = None
        self._exit_after_save = False
        self._subscribe_events()
        self._refresh_buffer()

    # -- entry points ----------------------------------------------------------

    def handle_textual_key(
        self, key: str, *, character: Optional[str] = None
    ) -> IntentResult:
        """Route one normalized Textual key (``"ctrl+left"``, ``"a"``...)."""

        key = key.lower()
        if self.prompt is not None:
            result = self._handle_prompt_key(key, character)
        elif key in QUIT_KEYS:
            result = self.request_quit()
        elif key in PROMPT_KEYS:
            self.open_prompt(PROMPT_KEYS[key])
            result = IntentResult(consumed=True, status="prompt")
        elif key in KEY_BINDINGS:
            result = self._dispatch_binding(*KEY_BINDINGS[key])
        elif _is_printable(character):
            result = self.session.dispatch(Intent.INSERT, character)
        else:
            result = IntentResult(consumed=False, status="unbound")
        self._after_result(result)
        return result

    def poll_file_changes(self) -> bool:
        if self.prompt is not None:
            return False
        if not self.session.check_file_changes():
            return False
        self.open_prompt(Prompt.FILE_CHANGED)
        return True

    def request_quit(self) -> IntentResult:
        if self.session.is_modified():
            self.open_prompt(Prompt.SAVE_CONFIRM)
            return IntentResult(consumed=True, status="prompt")
        self.hooks.request_exit(0)
        return IntentResult(consumed=True, status="exit")

    # -- prompts ---------------------------------------------------------------

    def open_prompt(self, prompt: Prompt, text: str = "") -> None:
        self.prompt = prompt
        self.prompt_text = text
        self.session.modal = prompt.value
        self._refresh_prompt()

    def close_prompt(self) -> None:
        self.prompt = None
        self.prompt_text = ""
        self._pending_path = None
        self.session.modal = None
        self._refresh_prompt()

    def _handle_prompt_key(
        self, key: str, character: Optional[str]
    ) -> IntentResult:
        prompt = self.prompt
        assert prompt is not None
        if prompt in YES_NO_PROMPTS:
            return self._handle_confirmation(prompt, key, character)
        if prompt is Prompt.TOOLS:
            return self._handle_tools(key, character)
        if key == "escape":
            self.close_prompt()
            return IntentResult(consumed=True, status="cancelled")
        if key == "backspace":
            self.prompt_text = self.prompt_text[:-1]
        elif key == "enter":
            return self._submit_prompt(prompt)
        elif key == "ctrl+a" and prompt is Prompt.REPLACE_WITH:
            result = self.session.replace_all(self.prompt_text)
            self.close_prompt()
            return result
        elif _is_printable(character):
            self.prompt_text += character or ""
        self._refresh_prompt()
        return IntentResult(consumed=True, status="prompt")

    def _submit_prompt(self, prompt: Prompt) -> IntentResult:
        text = self.prompt_text
        if prompt is Prompt.FIND:
            self.close_prompt()
            return self.session.find(text)
        if prompt is Prompt.REPLACE_QUERY:
            result = self.session.find(text)
            self.open_prompt(Prompt.REPLACE_WITH)
            return result
        if prompt is Prompt.REPLACE_WITH:
            result = self.session.replace_current(text)
            self._refresh_prompt()
            return result
        if prompt is Prompt.JUMP_TO_LINE:
            self.close_prompt()
            return self.session.jump_to_line(text.strip() or "0")
        if prompt is Prompt.OPEN:
            self.close_prompt()
            if not text.strip():
                return IntentResult(consumed=True, status="cancelled")
            return self.session.open_file(text.strip())
        if prompt is Prompt.SAVE_AS:
            if not text.strip():
                return IntentResult(consumed=True, status="prompt")
            return self._save(Path(text.strip()).expanduser())
        return IntentResult(consumed=False, status="unbound")

    def _handle_confirmation(
        self, prompt: Prompt, key: str, character: Optional[str]
    ) -> IntentResult:
        answer = (character or "").lower()
        if key == "escape":
            answer = "n" if prompt is Prompt.FILE_CHANGED else "cancel"
        if answer not in {"y", "n", "cancel"}:
            return IntentResult(consumed=True, status="prompt")

        if prompt is Prompt.FILE_CHANGED:
            self.prompt = None
            self.prompt_text = ""
            self._refresh_prompt()
            return self.session.resolve_file_change(answer == "y")

        if prompt is Prompt.CONFIRM_OVERWRITE:
            path = self._pending_path
            if answer == "y" and path is not None:
                self.close_prompt()
                return self._finish_save(self.session.save(path, overwrite=True))
            self._exit_after_save = False
            self.close_prompt()
            return IntentResult(consumed=True, status="cancelled")

        # Prompt.SAVE_CONFIRM
        if answer == "cancel":
            self.close_prompt()
            return IntentResult(consumed=True, status="cancelled")
        if answer == "n":
            self.close_prompt()
            self.hooks.request_exit(0)
            return IntentResult(consumed=True, status="exit")
        self.close_prompt()
        self._exit_after_save = True
        return self._save(None)

    def _handle_tools(self, key: str, character: Optional[str]) -> IntentResult:
        if key == "escape":
            self.close_prompt()
            return IntentResult(consumed=True, status="cancelled")
        intent = TOOL_INTENTS.get(character or "")
        if intent is None:
            return IntentResult(consumed=True, status="prompt")
        self.close_prompt()
        return self.session.dispatch(intent)

    # -- saving ----------------------------------------------------------------

    def _save(self, path: Optional[Path]) -> IntentResult:
        result = self.session.save(path)
        if result.status == "needs_path":
            self.open_prompt(Prompt.SAVE_AS)
            return result
        if result.status == "confirm_overwrite":
            self.open_prompt(Prompt.CONFIRM_OVERWRITE)
            self._pending_path = path
            return result
        if self.prompt is Prompt.SAVE_AS:
            self.close_prompt()
        return self._finish_save(result)

    def _finish_save(self, result: IntentResult) -> IntentResult:
        if self._exit_after_save and result.status == "ok":
            self._exit_after_save = False
            self.hooks.request_exit(0)
        return result

    # -- plumbing --------------------------------------------------------------

    def _dispatch_binding(self, intent: Intent, argument: object) -> IntentResult:
        if intent is Intent.SAVE:
            return self._save(None)
        if intent is Intent.MOVE and argument in (Motion.PAGE_UP, Motion.PAGE_DOWN):
            return self.session.move(argument, page_height=max(1, self.page_height()))
        return self.session.dispatch(intent, argument)

    def _after_result(self, result: IntentResult) -> None:
        if result.message and result.message != self.session.status_message:
            self.hooks.update_status(result.message)
        self._refresh_buffer()

    def _subscribe_events(self) -> None:
        bus = self.session.bus
        bus.subscribe("status", lambda payload: self.hooks.update_status(str(payload)))
        bus.subscribe("suggestions", self._on_suggestions)
        for event in ("file.opened", "file.saved", "file.changed_on_disk"):
            bus.subscribe(
                event, lambda payload, name=event: self.hooks.handle_event(name, payload)
            )

    def _on_suggestions(self, payload: object | None) -> None:
        visible = list(payload) if isinstance(payload, list) else []
        self.hooks.show_suggestions(visible, self.session.suggestions.selected)

    def _refresh_buffer(self) -> None:
        self.hooks.update_buffer(self.session.pull_buffer())

    def _refresh_prompt(self) -> None:
        if self.prompt is None:
            self.hooks.show_prompt("")
            return
        self.hooks.show_prompt(PROMPT_LABELS[self.prompt] + self.prompt_text)


def _is_printable(character: Optional[str]) -> bool:
    return bool(character) and len(character) == 1 and character.isprintable()


__all__ = [
    "KEY_BINDINGS",
    "PROMPT_KEYS",
    "Prompt",
    "TextualEditorAdapter",
    "TextualUIHooks",
]
