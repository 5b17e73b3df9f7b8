from __future__ import annotations

import os
from pathlib import Path
from typing import Any, List

from red_engine.adapters.textual import Prompt, TextualEditorAdapter, TextualUIHooks
from red_engine.session import EditorSession


class Recorder:
    def __init__(self) -> None:
        self.texts: List[str] = []
        self.statuses: List[str] = []
        self.prompts: List[str] = []
        self.suggestions: List[List[str]] = []
        self.events: List[tuple[str, object | None]] = []
        self.exits: List[int] = []

    def hooks(self) -> TextualUIHooks:
        return TextualUIHooks(
            update_buffer=lambda mirror: self.texts.append(mirror.text),
            update_status=self.statuses.append,
            show_prompt=self.prompts.append,
            show_suggestions=lambda visible, selected: self.suggestions.append(visible),
            handle_event=lambda name, payload: self.events.append((name, payload)),
            request_exit=self.exits.append,
        )


def make_adapter(session: EditorSession, **kwargs: Any) -> tuple[TextualEditorAdapter, Recorder]:
    recorder = Recorder()
    adapter = TextualEditorAdapter(session, recorder.hooks(), **kwargs)
    return adapter, recorder


def type_keys(adapter: TextualEditorAdapter, text: str) -> None:
    for char in text:
        adapter.handle_textual_key(char, character=char)


def test_typing_updates_buffer_snapshots(session: EditorSession) -> None:
    adapter, recorder = make_adapter(session)

    type_keys(adapter, "hey")
    adapter.handle_textual_key("enter")

    assert recorder.texts[-1] == "hey\n"
    assert session.buffer.cursor == (0, 1)


def test_word_motions_differ_by_modifier(session: EditorSession) -> None:
    adapter, _ = make_adapter(session)
    type_keys(adapter, "foo bar")

    adapter.handle_textual_key("ctrl+left")
    assert session.buffer.cursor == (3, 0)

    adapter.handle_textual_key("end")
    adapter.handle_textual_key("alt+left")
    assert session.buffer.cursor == (4, 0)


def test_page_motion_uses_view_height(session: EditorSession) -> None:
    session.buffer.load("\n".join(f"line {i}" for i in range(30)))
    adapter, _ = make_adapter(session, page_height=lambda: 10)

    adapter.handle_textual_key("pagedown")

    assert session.buffer.cursor == (0, 10)


def test_shift_backspace_removes_five(session: EditorSession) -> None:
    adapter, _ = make_adapter(session)
    type_keys(adapter, "abcdefgh")

    adapter.handle_textual_key("shift+backspace")

    assert session.buffer.lines == ("abc",)


def test_word_characters_publish_suggestions(session: EditorSession) -> None:
    adapter, recorder = make_adapter(session)

    type_keys(adapter, "alpha al")

    assert recorder.suggestions[-1] == ["alpha"]
    adapter.handle_textual_key("escape")
    assert recorder.suggestions[-1] == []


def test_find_prompt_moves_to_match(session: EditorSession) -> None:
    adapter, recorder = make_adapter(session)
    type_keys(adapter, "foo bar")

    adapter.handle_textual_key("ctrl+f")
    assert adapter.prompt is Prompt.FIND
    assert session.modal == "find"
    type_keys(adapter, "bar")
    assert recorder.prompts[-1] == "Find: bar"

    adapter.handle_textual_key("enter")

    assert adapter.prompt is None
    assert session.modal is None
    assert session.buffer.cursor == (4, 0)
    assert "Match 1 of 1" in recorder.statuses


def test_replace_prompt_replaces_all(session: EditorSession) -> None:
    adapter, _ = make_adapter(session)
    type_keys(adapter, "ab ab")

    adapter.handle_textual_key("ctrl+r")
    type_keys(adapter, "ab")
    adapter.handle_textual_key("enter")
    assert adapter.prompt is Prompt.REPLACE_WITH
    type_keys(adapter, "cd")
    adapter.handle_textual_key("ctrl+a")

    assert session.buffer.lines == ("cd cd",)
    assert adapter.prompt is None


def test_jump_prompt_reports_invalid_lines(session: EditorSession) -> None:
    adapter, recorder = make_adapter(session)

    adapter.handle_textual_key("ctrl+g")
    type_keys(adapter, "9")
    adapter.handle_textual_key("enter")

    assert "Invalid line number" in recorder.statuses


def test_quit_without_changes_exits(session: EditorSession) -> None:
    adapter, recorder = make_adapter(session)

    adapter.handle_textual_key("ctrl+q")

    assert recorder.exits == [0]


def test_quit_with_changes_asks_first(session: EditorSession) -> None:
    adapter, recorder = make_adapter(session)
    type_keys(adapter, "x")

    adapter.handle_textual_key("ctrl+q")
    assert adapter.prompt is Prompt.SAVE_CONFIRM
    assert recorder.exits == []

    adapter.handle_textual_key("n", character="n")
    assert recorder.exits == [0]


def test_save_as_then_exit(session: EditorSession, tmp_path: Path) -> None:
    adapter, recorder = make_adapter(session)
    target = tmp_path / "saved.txt"
    type_keys(adapter, "hi")

    adapter.handle_textual_key("alt+q")
    adapter.handle_textual_key("y", character="y")
    assert adapter.prompt is Prompt.SAVE_AS

    type_keys(adapter, str(target))
    adapter.handle_textual_key("enter")

    assert target.read_text() == "hi\n"
    assert adapter.prompt is None
    assert recorder.exits == [0]
    assert ("file.saved", target) in recorder.events


def test_save_as_existing_file_confirms(session: EditorSession, tmp_path: Path) -> None:
    adapter, _ = make_adapter(session)
    target = tmp_path / "taken.txt"
    target.write_text("old\n")
    type_keys(adapter, "new")

    adapter.handle_textual_key("ctrl+s")
    type_keys(adapter, str(target))
    adapter.handle_textual_key("enter")
    assert adapter.prompt is Prompt.CONFIRM_OVERWRITE

    adapter.handle_textual_key("y", character="y")

    assert target.read_text() == "new\n"
    assert adapter.prompt is None
    assert session.path == target


def test_file_change_prompt_reloads(session: EditorSession, tmp_path: Path, clock) -> None:
    target = tmp_path / "watched.txt"
    target.write_text("one\n")
    session.open_file(target)
    adapter, recorder = make_adapter(session)

    target.write_text("two\n")
    later = target.stat().st_mtime + 10
    os.utime(target, (later, later))
    clock.advance(2)

    assert adapter.poll_file_changes() is True
    assert adapter.prompt is Prompt.FILE_CHANGED
    assert ("file.changed_on_disk", target) in recorder.events

    adapter.handle_textual_key("y", character="y")

    assert session.buffer.lines == ("two",)
    assert adapter.prompt is None
    assert recorder.texts[-1] == "two"


def test_tools_prompt_runs_selected_tool(session: EditorSession) -> None:
    session.buffer.load("a\n\n\nb")
    adapter, _ = make_adapter(session)

    adapter.handle_textual_key("alt+t")
    adapter.handle_textual_key("2", character="2")

    assert session.buffer.lines == ("a", "b")
    assert adapter.prompt is None


def test_unbound_key_is_not_consumed(session: EditorSession) -> None:
    adapter, _ = make_adapter(session)

    result = adapter.handle_textual_key("f5")

    assert result.consumed is False
    assert result.status == "unbound"


def test_open_prompt_loads_file(session: EditorSession, tmp_path: Path) -> None:
    target = tmp_path / "doc.txt"
    target.write_text("content\n")
    adapter, recorder = make_adapter(session)

    adapter.handle_textual_key("alt+o")
    type_keys(adapter, str(target))
    adapter.handle_textual_key("enter")

    assert session.buffer.lines == ("content",)
    assert ("file.opened", target) in recorder.events
