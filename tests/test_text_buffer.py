from __future__ import annotations

import pytest

from red_engine.buffer import BufferValidationError, Motion, TextBuffer


def test_insert_moves_cursor_past_text() -> None:
    buffer = TextBuffer.from_lines(["hello world"], cursor=(5, 0))

    delta = buffer.insert("X")

    assert buffer.lines == ("helloX world",)
    assert buffer.cursor == (6, 0)
    assert delta.changed is True
    assert buffer.modified is True


def test_insert_multiline_text_splits_lines() -> None:
    buffer = TextBuffer.from_lines(["xy"], cursor=(1, 0))

    buffer.insert("a\nb")

    assert buffer.lines == ("xa", "by")
    assert buffer.cursor == (1, 1)


def test_insert_transliterates_non_ascii() -> None:
    buffer = TextBuffer.from_lines(["caf"], cursor=(3, 0))

    buffer.insert("é")

    assert buffer.lines == ("cafe",)
    assert buffer.cursor == (4, 0)


def test_insert_pair_places_cursor_between() -> None:
    buffer = TextBuffer.from_lines(["call"], cursor=(4, 0))

    buffer.insert_pair("(")

    assert buffer.lines == ("call()",)
    assert buffer.cursor == (5, 0)


def test_insert_tab_uses_tab_width() -> None:
    buffer = TextBuffer(tab_width=2)

    buffer.insert_tab()

    assert buffer.lines == ("  ",)


def test_backspace_at_line_start_joins_lines() -> None:
    buffer = TextBuffer.from_lines(["foo", "bar"], cursor=(0, 1))

    buffer.delete_backward()

    assert buffer.lines == ("foobar",)
    assert buffer.cursor == (3, 0)


def test_backspace_at_origin_is_noop() -> None:
    buffer = TextBuffer.from_lines(["foo"], cursor=(0, 0))

    delta = buffer.delete_backward()

    assert buffer.lines == ("foo",)
    assert delta.changed is False
    assert buffer.modified is False


def test_backspace_count_crosses_lines() -> None:
    buffer = TextBuffer.from_lines(["ab", "cd"], cursor=(1, 1))

    buffer.delete_backward(3)

    assert buffer.lines == ("ad",)
    assert buffer.cursor == (1, 0)


def test_delete_forward_at_line_end_pulls_next_line() -> None:
    buffer = TextBuffer.from_lines(["foo", "bar"], cursor=(3, 0))

    buffer.delete_forward()

    assert buffer.lines == ("foobar",)
    assert buffer.cursor == (3, 0)


def test_split_line_carries_indentation() -> None:
    buffer = TextBuffer.from_lines(["    foo bar"], cursor=(8, 0))

    buffer.split_line_at_cursor()

    assert buffer.lines == ("    foo ", "    bar")
    assert buffer.cursor == (4, 1)


def test_cut_line_never_empties_buffer() -> None:
    buffer = TextBuffer.from_lines(["only"], cursor=(2, 0))

    removed = buffer.cut_line()

    assert removed == "only"
    assert buffer.lines == ("",)
    assert buffer.cursor == (0, 0)


def test_cut_last_line_clamps_cursor() -> None:
    buffer = TextBuffer.from_lines(["a", "b"], cursor=(1, 1))

    buffer.cut_line()

    assert buffer.lines == ("a",)
    assert buffer.cursor == (0, 0)


def test_set_cursor_rejects_out_of_range() -> None:
    buffer = TextBuffer.from_lines(["abc"])

    with pytest.raises(BufferValidationError):
        buffer.set_cursor(4, 0)
    with pytest.raises(BufferValidationError):
        buffer.set_cursor(0, 1)


def test_vertical_motion_clamps_column() -> None:
    buffer = TextBuffer.from_lines(["long line", "ab"], cursor=(8, 0))

    buffer.move_cursor(Motion.DOWN)

    assert buffer.cursor == (2, 1)


def test_left_and_right_wrap_between_lines() -> None:
    buffer = TextBuffer.from_lines(["ab", "cd"], cursor=(0, 1))

    buffer.move_cursor(Motion.LEFT)
    assert buffer.cursor == (2, 0)

    buffer.move_cursor(Motion.RIGHT)
    assert buffer.cursor == (0, 1)


def test_word_motions() -> None:
    buffer = TextBuffer.from_lines(["foo bar baz"], cursor=(7, 0))

    assert buffer.move_cursor(Motion.WORD_LEFT) == (3, 0)
    buffer.set_cursor(7, 0)
    assert buffer.move_cursor(Motion.WORD_LEFT_START) == (4, 0)
    buffer.set_cursor(0, 0)
    assert buffer.move_cursor(Motion.WORD_RIGHT) == (3, 0)
    buffer.set_cursor(0, 0)
    assert buffer.move_cursor(Motion.WORD_RIGHT_START) == (4, 0)


def test_fast_and_page_motions() -> None:
    buffer = TextBuffer.from_lines([str(i) for i in range(30)], cursor=(0, 0))

    assert buffer.move_cursor(Motion.FAST_DOWN) == (0, 5)
    assert buffer.move_cursor(Motion.PAGE_DOWN, page_height=20) == (0, 25)
    assert buffer.move_cursor(Motion.PAGE_DOWN, page_height=20) == (0, 29)
    assert buffer.move_cursor(Motion.FAST_UP) == (0, 24)

    with pytest.raises(ValueError):
        buffer.move_cursor(Motion.PAGE_UP)


def test_jump_to_line_is_one_based() -> None:
    buffer = TextBuffer.from_lines(["a", "b", "c"], cursor=(1, 0))

    assert buffer.jump_to_line(3) == (0, 2)
    with pytest.raises(BufferValidationError):
        buffer.jump_to_line(4)
    with pytest.raises(BufferValidationError):
        buffer.jump_to_line(0)


def test_delete_comments_respects_strings() -> None:
    buffer = TextBuffer.from_lines(
        ["int x = 1; // note", 'print("//keep")', "a /* b */ c"], cursor=(15, 0)
    )

    buffer.delete_comments()

    assert buffer.lines == ("int x = 1;", 'print("//keep")', "a c")
    assert buffer.cursor == (10, 0)


def test_remove_empty_lines_keeps_one_line() -> None:
    buffer = TextBuffer.from_lines(["", "  ", "x", ""])

    buffer.remove_empty_lines()
    assert buffer.lines == ("x",)

    blank = TextBuffer.from_lines(["", " "])
    blank.remove_empty_lines()
    assert blank.lines == ("",)


def test_load_folds_lines_but_keeps_reserved_glyphs() -> None:
    buffer = TextBuffer()

    buffer.load("caf\u00e9 \ue7a8\nna\u00efve\r\n")

    assert buffer.lines == ("caf\u00e9 \ue7a8", "naive")
    assert buffer.cursor == (0, 0)
    assert buffer.modified is False


def test_file_text_appends_final_newline() -> None:
    buffer = TextBuffer.from_lines(["a", "b"])

    assert buffer.file_text() == "a\nb\n"
    assert buffer.mirror().text == "a\nb"
