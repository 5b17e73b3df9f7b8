"""Lossy ASCII folding applied to text entering the buffer."""

from __future__ import annotations

from typing import FrozenSet

from unidecode import unidecode

# Icon glyphs the editor's own decorations write into files. Lines holding
# one of these are loaded verbatim.
RESERVED_GLYPHS: FrozenSet[str] = frozenset({"\U000f018d", "\ue7a8"})


def transliterate(text: str) -> str:
    """Map every non-ASCII character to its nearest ASCII spelling.

    Characters without an ASCII spelling are dropped. ``\\r`` never reaches
    the buffer.
    """

    if text.isascii():
        return text.replace("\r", "")
    parts = []
    for char in text:
        if char == "\r":
            continue
        parts.append(char if char.isascii() else unidecode(char))
    return "".join(parts)


def has_reserved_glyph(line: str, glyphs: FrozenSet[str] = RESERVED_GLYPHS) -> bool:
    return any(glyph in line for glyph in glyphs)


def transliterate_loaded_line(
    line: str, glyphs: FrozenSet[str] = RESERVED_GLYPHS
) -> str:
    if line.isascii() or has_reserved_glyph(line, glyphs):
        return line
    return transliterate(line)


__all__ = [
    "RESERVED_GLYPHS",
    "has_reserved_glyph",
    "transliterate",
    "transliterate_loaded_line",
]
