"""Literal, case-sensitive find and replace over a TextBuffer."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, NamedTuple, Optional, Sequence

from red_engine.buffer import TextBuffer
from red_engine.runtime import telemetry


class Match(NamedTuple):
    row: int
    column: int


@dataclass(slots=True)
class SearchOutcome:
    found: bool
    message: Optional[str] = None
    match: Optional[Match] = None


def find_matches(lines: Sequence[str], query: str) -> List[Match]:
    """Every start offset of ``query`` in ``lines``, overlapping ones included."""

    if not query:
        return []
    matches: List[Match] = []
    for row, line in enumerate(lines):
        start = line.find(query)
        while start != -1:
            matches.append(Match(row, start))
            start = line.find(query, start + 1)
    return matches


class SearchEngine:
    """Tracks the active query, its match list and the current match."""

    def __init__(self, buffer: TextBuffer) -> None:
        self.buffer = buffer
        self.query = ""
        self.matches: List[Match] = []
        self.current_index: Optional[int] = None
        self._logger_name = "red_engine.search"

    @property
    def current_match(self) -> Optional[Match]:
        if self.current_index is None or self.current_index >= len(self.matches):
            return None
        return self.matches[self.current_index]

    def find_all(self, query: str) -> List[Match]:
        """Recompute matches for ``query``; an empty query clears everything."""

        if query != self.query:
            self.current_index = None
        self.query = query
        if not query:
            self.clear()
            return []
        with telemetry.span(
            "search::find_all",
            component="search",
            metadata={"query": query},
            logger_name=self._logger_name,
        ) as handle:
            self.matches = find_matches(self.buffer.lines, query)
            handle.add_metadata("matches", len(self.matches))
        if self.current_index is not None and self.current_index >= len(self.matches):
            self.current_index = None
        return list(self.matches)

    def clear(self) -> None:
        self.query = ""
        self.matches = []
        self.current_index = None

    def advance(self) -> SearchOutcome:
        """Jump to the next match after the current one, wrapping at the end."""

        self.find_all(self.query)
        if not self.matches:
            self.current_index = None
            return SearchOutcome(found=False, message="No matches found")
        if self.current_index is None:
            self.current_index = 0
        else:
            self.current_index = (self.current_index + 1) % len(self.matches)
        match = self.matches[self.current_index]
        self.buffer.set_cursor(match.column, match.row)
        return SearchOutcome(found=True, match=match)

    def advance_from(self, row: int, column: int) -> SearchOutcome:
        """Jump to the first match at or after ``(row, column)``, wrapping."""

        self.find_all(self.query)
        if not self.matches:
            self.current_index = None
            return SearchOutcome(found=False, message="No matches found")
        self.current_index = 0
        for index, match in enumerate(self.matches):
            if (match.row, match.column) >= (row, column):
                self.current_index = index
                break
        match = self.matches[self.current_index]
        self.buffer.set_cursor(match.column, match.row)
        return SearchOutcome(found=True, match=match)

    def replace_current(self, replacement: str) -> SearchOutcome:
        """Replace the tracked match without refreshing the match list.

        Offsets later on the same line go stale after this call; callers
        search again before the next replace.
        """

        check_replacement(replacement)
        match = self.current_match
        if match is None:
            return SearchOutcome(found=False, message="No current match to replace")
        end = match.column + len(self.query)
        if not self._match_still_valid(match, end):
            return SearchOutcome(
                found=False, message="Match is out of date; search again"
            )
        self.buffer.replace_range(match.row, match.column, end, replacement)
        telemetry.record_event(
            "search.replace_current",
            level="debug",
            logger_name=self._logger_name,
            data={"row": match.row, "column": match.column},
        )
        return SearchOutcome(
            found=True,
            match=match,
            message=f"Replaced occurrence at line {match.row + 1}.",
        )

    def replace_all(self, replacement: str) -> int:
        """``str.replace`` on every line; returns how many occurrences went."""

        check_replacement(replacement)
        if not self.query:
            return 0
        replaced = 0
        with telemetry.span(
            "search::replace_all", component="search", logger_name=self._logger_name
        ) as handle:
            for row, line in enumerate(self.buffer.lines):
                count = line.count(self.query)
                if count:
                    replaced += count
                    self.buffer.replace_range(
                        row, 0, len(line), line.replace(self.query, replacement)
                    )
            handle.add_metadata("replaced", replaced)
        self.matches = []
        self.current_index = None
        return replaced

    def _match_still_valid(self, match: Match, end: int) -> bool:
        if match.row >= self.buffer.line_count:
            return False
        line = self.buffer.document.get_line(match.row)
        return end <= len(line) and line[match.column : end] == self.query


def check_replacement(text: str) -> None:
    """Raise ``ValueError`` for replacement text that would break a line."""

    if "\n" in text or "\r" in text:
        raise ValueError("replacement text cannot span lines")


__all__ = [
    "Match",
    "SearchEngine",
    "SearchOutcome",
    "check_replacement",
    "find_matches",
]
