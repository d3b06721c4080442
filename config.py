"""Environment-driven run configuration."""

from __future__ import annotations

import os

from models import DedupConfig, Method, SourcePriority, Thresholds
from survivor import DEFAULT_SOURCE_ORDER

_DEFAULT_METHOD = "standard"
_DEFAULT_MATCH_THRESHOLD = 97
_DEFAULT_REVIEW_THRESHOLD = 90


def load_config(
    method: str | None = None,
    match_threshold: int | None = None,
    review_threshold: int | None = None,
    source_priority: list[str] | None = None,
    protected_sources: list[str] | None = None,
) -> DedupConfig:
    """Build the immutable run configuration.

    Explicit arguments (usually CLI flags) win over DEDUP_* environment
    variables, which win over the built-in defaults. A single threshold
    argument moves the other value along like the review sliders; passing
    both must already satisfy review <= match.
    """
    method_name = method or os.getenv("DEDUP_METHOD", _DEFAULT_METHOD)
    try:
        resolved_method = Method(method_name.strip().lower())
    except ValueError as exc:
        raise ValueError(f"Unknown deduplication method: {method_name!r}") from exc

    if match_threshold is not None and review_threshold is not None:
        thresholds = Thresholds(match=match_threshold, review=review_threshold)
    else:
        thresholds = Thresholds(
            match=int(os.getenv("DEDUP_MATCH_THRESHOLD", _DEFAULT_MATCH_THRESHOLD)),
            review=int(os.getenv("DEDUP_REVIEW_THRESHOLD", _DEFAULT_REVIEW_THRESHOLD)),
        )
        if match_threshold is not None:
            thresholds = thresholds.with_match(match_threshold)
        elif review_threshold is not None:
            thresholds = thresholds.with_review(review_threshold)

    if source_priority is None:
        source_priority = _split_env("DEDUP_SOURCE_PRIORITY") or list(DEFAULT_SOURCE_ORDER)
    if protected_sources is None:
        protected_sources = _split_env("DEDUP_PROTECTED_SOURCES")

    return DedupConfig(
        method=resolved_method,
        thresholds=thresholds,
        priority=SourcePriority(
            order=tuple(source_priority),
            protected=frozenset(protected_sources),
        ),
    )


def output_dir() -> str:
    return os.getenv("DEDUP_OUTPUT_DIR", ".")


def _split_env(name: str) -> list[str]:
    raw = os.getenv(name, "")
    return [part.strip() for part in raw.split(",") if part.strip()]
