"""Word-frequency corpus built from the buffer text."""

from __future__ import annotations

from typing import Dict, Iterable, Mapping, Optional, Tuple

MIN_WORD_LENGTH = 3


def is_word_char(char: str) -> bool:
    return char.isalnum() or char in "_."


def build_word_table(lines: Iterable[str]) -> Dict[str, float]:
    """Count whitespace separated tokens of three or more non-numeric chars."""

    table: Dict[str, float] = {}
    for line in lines:
        for token in line.split():
            if len(token) < MIN_WORD_LENGTH or token.isnumeric():
                continue
            table[token] = table.get(token, 0.0) + 1.0
    return table


def merge_corpus(
    dynamic: Mapping[str, float], static: Mapping[str, float]
) -> Dict[str, float]:
    merged = dict(dynamic)
    merged.update(static)
    return merged


def word_before(line: str, column: int) -> Optional[Tuple[str, int]]:
    """``(word, start)`` of the identifier-ish run ending at ``column``."""

    if column <= 0 or not line:
        return None
    column = min(column, len(line))
    start = column
    while start > 0 and is_word_char(line[start - 1]):
        start -= 1
    if start == column:
        return None
    return line[start:column], start


__all__ = [
    "MIN_WORD_LENGTH",
    "build_word_table",
    "is_word_char",
    "merge_corpus",
    "word_before",
]
