"""Label matching heuristics shared by the nutrition sources."""

import re
from collections.abc import Callable, Iterable
from typing import TypeVar

T = TypeVar("T")

MIN_BEST_MATCH_SCORE = 0.3

_LABEL_SPLIT = re.compile(r"[\s,]+")


def query_words(text: str) -> list[str]:
    return text.lower().split()


def label_words(text: str) -> list[str]:
    return [word for word in _LABEL_SPLIT.split(text.lower()) if word]


def match_confidence(
    query: str,
    label: str,
    *,
    exact: float = 0.95,
    query_in_label: float = 0.9,
    label_in_query: float = 0.88,
) -> float:
    """Score how well a source label matches the query."""
    query_lower = query.lower().strip()
    label_lower = label.lower().strip()
    if not query_lower or not label_lower:
        return 0.0
    if label_lower == query_lower:
        return exact
    if query_lower in label_lower:
        return query_in_label
    if label_lower in query_lower:
        return label_in_query

    words = query_words(query_lower)
    labels = set(label_words(label_lower))
    matching = sum(1 for word in words if word in labels)
    return min(0.85, 0.6 + (matching / len(words)) * 0.25)


def word_overlap_score(query: str, label: str) -> float:
    """Fraction of words shared between query and label, partial words included."""
    words = query_words(query)
    labels = label_words(label)
    if not words or not labels:
        return 0.0
    matching = 0
    for word in words:
        if any(name in word or word in name for name in labels):
            matching += 1
    return matching / max(len(words), len(labels))


def best_match(
    query: str,
    candidates: Iterable[T],
    label_of: Callable[[T], str | None],
    bonus_of: Callable[[T], float] | None = None,
    minimum: float = MIN_BEST_MATCH_SCORE,
) -> T | None:
    """Pick the candidate whose label best matches the query.

    An exact label match wins immediately. Otherwise the highest word overlap
    plus bonus wins, provided it reaches ``minimum``.
    """
    query_lower = query.lower().strip()
    best: T | None = None
    best_score = 0.0
    for candidate in candidates:
        label = label_of(candidate)
        if not label:
            continue
        if label.lower().strip() == query_lower:
            return candidate
        score = word_overlap_score(query_lower, label)
        if bonus_of is not None:
            score += bonus_of(candidate)
        if score > best_score:
            best_score = score
            best = candidate
    return best if best_score >= minimum else None
