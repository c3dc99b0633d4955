"""Approximate string matching for the palette.

Scores are in ``[0, 1]`` where 0 is a perfect hit and 1 is no similarity,
so a threshold reads as "how far off a candidate may be".
"""

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from difflib import SequenceMatcher
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class Match(Generic[T]):
    """A candidate that passed the threshold."""

    item: T
    score: float


def _partial_ratio(needle: str, haystack: str) -> float:
    """Best similarity of ``needle`` against any same-sized slice of ``haystack``.

    Only slices anchored on a matching block are tried, which keeps the cost
    proportional to the number of blocks instead of the text length.
    """
    if not needle or not haystack:
        return 0.0
    if len(haystack) <= len(needle):
        return SequenceMatcher(None, needle, haystack, autojunk=False).ratio()

    matcher = SequenceMatcher(None, needle, haystack, autojunk=False)
    best = 0.0
    for block in matcher.get_matching_blocks():
        start = max(block.b - block.a, 0)
        window = haystack[start : start + len(needle)]
        ratio = SequenceMatcher(None, needle, window, autojunk=False).ratio()
        if ratio > best:
            best = ratio
            if best > 0.995:
                break
    return best


def score(query: str, text: str) -> float:
    """Distance between ``query`` and ``text`` (case-insensitive)."""
    needle = query.lower()
    haystack = text.lower()
    if not needle.strip():
        return 0.0
    if needle in haystack:
        return 0.0

    best = 1.0 - _partial_ratio(needle, haystack)

    # Reordered words still match as long as each word is close to something.
    tokens = needle.split()
    if len(tokens) > 1:
        token_scores = [
            0.0 if token in haystack else 1.0 - _partial_ratio(token, haystack)
            for token in tokens
        ]
        best = min(best, sum(token_scores) / len(token_scores))

    return best


def search(
    query: str,
    items: Iterable[T],
    threshold: float,
    key: Callable[[T], str] = str,
) -> list[Match[T]]:
    """Rank ``items`` against ``query``, best first.

    Ties keep input order.
    """
    matches = []
    for item in items:
        distance = score(query, key(item))
        if distance <= threshold:
            matches.append(Match(item=item, score=distance))
    matches.sort(key=lambda match: match.score)
    return matches
