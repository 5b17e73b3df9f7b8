from __future__ import annotations

from red_engine.buffer import TextBuffer
from red_engine.suggest import (
    LANGUAGE_TABLES,
    SuggestionEngine,
    build_word_table,
    detect_language,
    fuzzy_rank,
    fuzzy_score,
    word_before,
)


def make_engine(lines, cursor=(0, 0), *, language="Python", limit=50) -> SuggestionEngine:
    buffer = TextBuffer.from_lines(lines, cursor=cursor)
    engine = SuggestionEngine(buffer, limit=limit, language=language)
    engine.rebuild_word_table()
    return engine


def test_word_table_counts_long_non_numeric_tokens() -> None:
    table = build_word_table(["the cat the 123 ab cat."])

    assert table == {"the": 2.0, "cat": 1.0, "cat.": 1.0}


def test_word_before_scans_identifier_chars() -> None:
    assert word_before("x = os.pa", 9) == ("os.pa", 4)
    assert word_before("foo_bar", 7) == ("foo_bar", 0)
    assert word_before("foo ", 4) is None
    assert word_before("foo", 0) is None


def test_suggestions_share_prefix_and_sort_by_weight() -> None:
    engine = make_engine(["print printer prints pri"])

    suggestions = engine.suggestions_for("pri")

    assert all(item.startswith("pri") for item in suggestions)
    assert suggestions == ["print()", "pri", "print", "printer", "prints"]


def test_prefix_filter_is_case_sensitive() -> None:
    engine = make_engine(["print printer"])

    assert engine.suggestions_for("Pri") == []


def test_static_weight_wins_over_word_count() -> None:
    engine = make_engine(["import import import"])

    assert engine.corpus["import"] == 2.0


def test_suggestion_limit_caps_results() -> None:
    engine = make_engine(["aaa1 aaa2 aaa3 aaa4"], language=None, limit=2)

    assert engine.suggestions_for("aaa") == ["aaa1", "aaa2"]


def test_refresh_and_cycle() -> None:
    engine = make_engine(["printer prints", "pri"], cursor=(3, 1))

    visible = engine.refresh()

    assert visible[0] == "print()"
    assert engine.showing is True
    assert engine.cycle() == visible[1]
    for _ in range(len(visible) - 1):
        engine.cycle()
    assert engine.selected_suggestion == visible[0]


def test_refresh_hides_without_current_word() -> None:
    engine = make_engine(["print "], cursor=(6, 0))

    assert engine.refresh() == []
    assert engine.showing is False


def test_apply_replaces_current_word() -> None:
    engine = make_engine(["x = pri"], cursor=(7, 0))
    engine.refresh()

    engine.apply("print()")

    assert engine.buffer.lines == ("x = print()",)
    assert engine.buffer.cursor == (11, 0)
    assert engine.showing is False


def test_apply_keeps_text_after_cursor() -> None:
    engine = make_engine(["foo bar"], cursor=(3, 0), language=None)

    engine.apply("foobar")

    assert engine.buffer.lines == ("foobar bar",)
    assert engine.buffer.cursor == (6, 0)


def test_apply_multiline_snippet_indents_following_lines() -> None:
    engine = make_engine(["    de"], cursor=(6, 0))

    engine.apply("def ():\n    ")

    assert engine.buffer.lines == ("    def ():", "        ")
    assert engine.buffer.cursor == (8, 1)


def test_reload_for_language_swaps_static_table() -> None:
    engine = make_engine(["fnord"], language="Rust")
    assert "fn main() {\n    \n}" in engine.corpus

    engine.reload_for_language("Brainfuck")

    assert engine.static_table == {}
    assert engine.corpus == {"fnord": 1.0}


def test_language_tables_use_snippet_weight_for_templates() -> None:
    python = dict(LANGUAGE_TABLES["Python"])

    assert python["def"] == 2.0
    assert python["class ():\n    "] == 2.5


def test_detect_language_by_extension() -> None:
    assert detect_language("src/main.rs") == "Rust"
    assert detect_language("App.TSX") == "TypeScript"
    assert detect_language("Program.cs") == "C#"
    assert detect_language("Makefile") is None
    assert detect_language(None) is None


def test_fuzzy_score_requires_ordered_subsequence() -> None:
    assert fuzzy_score("pt", "print").matches is True
    assert fuzzy_score("tp", "print").matches is False
    assert fuzzy_score("", "anything").score == 0.0


def test_fuzzy_rank_prefers_tight_boundary_matches() -> None:
    assert fuzzy_rank("fb", ["foobar", "fb_x", "bar"]) == ["fb_x", "foobar"]


def test_engine_fuzzy_rank_uses_corpus_by_default() -> None:
    engine = make_engine(["printer"], language=None)

    assert engine.fuzzy_rank("ptr") == ["printer"]


def test_python_table_includes_common_library_imports() -> None:
    python = dict(LANGUAGE_TABLES["Python"])

    for entry in (
        "import requests",
        "import numpy as np",
        "import pandas as pd",
        "import matplotlib.pyplot as plt",
    ):
        assert python[entry] == 2.0
