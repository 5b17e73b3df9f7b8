"""Completion corpus, language tables and the suggestion engine."""

from .corpus import build_word_table, word_before
from .engine import DEFAULT_SUGGESTION_LIMIT, SuggestionEngine
from .fuzzy import FuzzyScore, fuzzy_rank, fuzzy_score
from .languages import LANGUAGE_TABLES, detect_language, language_table

__all__ = [
    "DEFAULT_SUGGESTION_LIMIT",
    "FuzzyScore",
    "LANGUAGE_TABLES",
    "SuggestionEngine",
    "build_word_table",
    "detect_language",
    "fuzzy_rank",
    "fuzzy_score",
    "language_table",
    "word_before",
]
