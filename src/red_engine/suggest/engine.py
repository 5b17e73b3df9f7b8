"""Autocomplete over a live word table and a static per-language table."""

from __future__ import annotations

from typing import Dict, List, Optional, Sequence, Tuple

from red_engine.buffer import BufferDelta, TextBuffer
from red_engine.buffer.buffer import leading_whitespace
from red_engine.runtime import telemetry

from .corpus import build_word_table, merge_corpus, word_before
from .fuzzy import fuzzy_rank
from .languages import language_table

DEFAULT_SUGGESTION_LIMIT = 50


class SuggestionEngine:
    """Prefix completion for the word ending at the cursor.

    ``word_table`` is rebuilt from the whole buffer on demand and
    ``static_table`` holds the active language's keywords and snippets.
    Static weights win over word counts for shared keys.
    """

    def __init__(
        self,
        buffer: TextBuffer,
        *,
        limit: int = DEFAULT_SUGGESTION_LIMIT,
        language: Optional[str] = None,
    ) -> None:
        self.buffer = buffer
        self.limit = limit
        self.language: Optional[str] = None
        self.word_table: Dict[str, float] = {}
        self.static_table: Dict[str, float] = {}
        self.visible: List[str] = []
        self.selected = 0
        self._logger_name = "red_engine.suggest"
        if language is not None:
            self.reload_for_language(language)

    @property
    def showing(self) -> bool:
        return bool(self.visible)

    @property
    def corpus(self) -> Dict[str, float]:
        return merge_corpus(self.word_table, self.static_table)

    @property
    def selected_suggestion(self) -> Optional[str]:
        if not self.visible:
            return None
        return self.visible[self.selected]

    def rebuild_word_table(self) -> int:
        self.word_table = build_word_table(self.buffer.lines)
        return len(self.word_table)

    def current_word(self) -> Optional[Tuple[str, int]]:
        column, row = self.buffer.cursor
        if row >= self.buffer.line_count:
            return None
        return word_before(self.buffer.document.get_line(row), column)

    def suggestions_for(self, word: str) -> List[str]:
        """Corpus keys starting with ``word``, heaviest first, then by key."""

        if not word:
            return []
        candidates = [
            (weight, key) for key, weight in self.corpus.items() if key.startswith(word)
        ]
        candidates.sort(key=lambda item: (-item[0], item[1]))
        return [key for _, key in candidates[: self.limit]]

    def fuzzy_rank(self, word: str, candidates: Optional[Sequence[str]] = None) -> List[str]:
        """Order ``candidates`` (default: the whole corpus) by fuzzy score."""

        pool = list(self.corpus) if candidates is None else list(candidates)
        return fuzzy_rank(word, pool)[: self.limit]

    def refresh(self) -> List[str]:
        found = self.current_word()
        if found is None:
            self.hide()
            return []
        word, _ = found
        self.visible = self.suggestions_for(word)
        self.selected = 0
        return list(self.visible)

    def hide(self) -> None:
        self.visible = []
        self.selected = 0

    def cycle(self) -> Optional[str]:
        if not self.visible:
            return None
        self.selected = (self.selected + 1) % len(self.visible)
        return self.visible[self.selected]

    def apply(self, selected: Optional[str] = None) -> Optional[BufferDelta]:
        """Replace the word before the cursor with a suggestion.

        Later segments of a multi-line suggestion become new lines under the
        current one, each carrying that line's indentation. Text that followed
        the cursor ends up after the last inserted segment, and the cursor is
        left between the two.
        """

        suggestion = selected if selected is not None else self.selected_suggestion
        found = self.current_word()
        if suggestion is None or found is None:
            self.hide()
            return None
        _, start = found
        column, row = self.buffer.cursor
        line = self.buffer.document.get_line(row)
        remainder = line[column:]
        segments = suggestion.split("\n")
        if len(segments) == 1:
            new_lines = [line[:start] + suggestion]
        else:
            indent = leading_whitespace(line)
            new_lines = [line[:start] + segments[0]]
            new_lines.extend(indent + segment for segment in segments[1:])
        cursor = (len(new_lines[-1]), row + len(new_lines) - 1)
        new_lines[-1] += remainder
        delta = self.buffer.replace_lines(row, row + 1, new_lines, cursor=cursor)
        telemetry.record_event(
            "suggest.applied",
            level="debug",
            logger_name=self._logger_name,
            data={"suggestion": suggestion, "lines": len(new_lines)},
        )
        self.hide()
        return delta

    def reload_for_language(self, name: Optional[str]) -> None:
        """Swap the static half for ``name``'s table; unknown names empty it."""

        self.language = name
        self.static_table = language_table(name)
        telemetry.record_event(
            "suggest.language",
            level="debug",
            logger_name=self._logger_name,
            data={"language": name or "none", "entries": len(self.static_table)},
        )


__all__ = ["DEFAULT_SUGGESTION_LIMIT", "SuggestionEngine"]
