"""Substring search, cyclic navigation and replace."""

from .engine import Match, SearchEngine, SearchOutcome, check_replacement, find_matches

__all__ = [
    "Match",
    "SearchEngine",
    "SearchOutcome",
    "check_replacement",
    "find_matches",
]
