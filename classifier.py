"""Pairwise duplicate classification."""

from __future__ import annotations

from models import ComparisonResult, Method, Outcome, Record, Thresholds
from similarity import similarity


def classify(
    first: Record,
    second: Record,
    thresholds: Thresholds,
    method: Method = Method.ADVANCED,
) -> ComparisonResult:
    """Classify one unordered pair of records from the same subject.

    Decision order, first match wins:
    - equal non-null identifiers -> identical
    - standard method: equal non-empty title keys -> identical
    - advanced method: score titles; above match -> duplicate,
      above review -> ambiguous, else distinct
    - anything else -> distinct (missing data never implies duplication)
    """
    if first.identifier and second.identifier and first.identifier == second.identifier:
        return ComparisonResult(Outcome.IDENTICAL, 1.0)

    if not first.title_key or not second.title_key:
        return ComparisonResult(Outcome.DISTINCT)

    if method is Method.STANDARD:
        if first.title_key == second.title_key:
            return ComparisonResult(Outcome.IDENTICAL, 1.0)
        return ComparisonResult(Outcome.DISTINCT)

    score = similarity(first.title_key, second.title_key)
    if score > thresholds.match / 100:
        return ComparisonResult(Outcome.DUPLICATE, score)
    if score > thresholds.review / 100:
        return ComparisonResult(Outcome.AMBIGUOUS, score)
    return ComparisonResult(Outcome.DISTINCT, score)
