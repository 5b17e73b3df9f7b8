"""Subsequence scoring for completion candidates.

A candidate matches when every character of the typed word appears in it in
order. Lower scores rank higher: contiguous runs and hits at identifier
boundaries are rewarded, gaps and late hits are penalized.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, List

_BOUNDARY_RE = re.compile(r"[\s\-_./:(<\[]")


@dataclass(slots=True)
class FuzzyScore:
    matches: bool
    score: float


def fuzzy_score(word: str, candidate: str) -> FuzzyScore:
    needle = word.lower()
    haystack = candidate.lower()
    if not needle:
        return FuzzyScore(matches=True, score=0.0)
    if len(needle) > len(haystack):
        return FuzzyScore(matches=False, score=0.0)

    position = 0
    score = 0.0
    previous = -1
    run = 0
    for index, char in enumerate(haystack):
        if position == len(needle):
            break
        if char != needle[position]:
            continue
        if previous == index - 1:
            run += 1
            score -= run * 5
        else:
            run = 0
            if previous >= 0:
                score += (index - previous - 1) * 2
        if index == 0 or _BOUNDARY_RE.match(haystack[index - 1]):
            score -= 10
        score += index * 0.1
        previous = index
        position += 1

    if position < len(needle):
        return FuzzyScore(matches=False, score=0.0)
    return FuzzyScore(matches=True, score=score)


def fuzzy_rank(word: str, candidates: Iterable[str]) -> List[str]:
    """Matching candidates, best first; ties keep their incoming order."""

    scored = []
    for order, candidate in enumerate(candidates):
        result = fuzzy_score(word, candidate)
        if result.matches:
            scored.append((result.score, order, candidate))
    scored.sort()
    return [candidate for _, _, candidate in scored]


__all__ = ["FuzzyScore", "fuzzy_rank", "fuzzy_score"]
