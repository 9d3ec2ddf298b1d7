"""Normalized edit-distance similarity for noisy identifiers."""

from __future__ import annotations

from rapidfuzz.distance import Levenshtein


def normalize_identifier(value: str | None) -> str | None:
    """Lowercase and strip an identifier; blank values collapse to ``None``."""

    if value is None:
        return None
    normalized = value.strip().lower()
    return normalized or None


def levenshtein_distance(a: str, b: str) -> int:
    return Levenshtein.distance(a, b)


def similarity(a: str, b: str) -> float:
    """Return ``1 - distance / len(longer)`` in ``[0, 1]``.

    Case differences never count as edits. Two empty strings are identical; an
    empty string shares nothing with a non-empty one.
    """

    left = a.casefold()
    right = b.casefold()
    if not left and not right:
        return 1.0
    if not left or not right:
        return 0.0
    longest = max(len(left), len(right))
    return (longest - levenshtein_distance(left, right)) / longest
