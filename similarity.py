"""Jaro-Winkler similarity for short human-authored titles."""

from __future__ import annotations

from rapidfuzz.distance import JaroWinkler

PREFIX_SCALE = 0.1


def jaro_winkler(first: str, second: str, prefix_scale: float = PREFIX_SCALE) -> float:
    """Return the Jaro-Winkler similarity of two strings in [0, 1].

    Characters match when equal and within ``max(len) // 2 - 1`` positions of
    each other; half the out-of-order matches count as transpositions. The
    Jaro score is then boosted by ``prefix_scale`` for each shared leading
    character, up to four. An empty string is similar to nothing.
    """
    if not first or not second:
        return 0.0
    return JaroWinkler.normalized_similarity(first, second, prefix_weight=prefix_scale)


def similarity(first: str, second: str) -> float:
    """Symmetric, bounded title similarity used by the classifier."""
    return jaro_winkler(first, second)
