"""Per-subject deduplication pipeline.

Flow for each subject: rows -> records (normalized keys, local ids) ->
all-pairs classification -> confirmed duplicates collapsed by source
priority -> ambiguous pairs grouped into connected components. Subjects run
strictly one after another; the review groups of all subjects are queued for
sequential human review in creation order.
"""

from __future__ import annotations

import itertools
import logging
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass, field
from typing import Any

from classifier import classify
from grouping import build_groups
from models import (
    DedupConfig,
    DuplicateLogEntry,
    FieldMap,
    Outcome,
    Record,
    RunStats,
    SubjectResult,
)
from normalize import comparison_key, normalize_identifier, normalize_title
from review import ReviewState, begin_review
from survivor import resolve_duplicate

LOGGER = logging.getLogger(__name__)

DEFAULT_SUBJECT = "all"
MISSING_SUBJECT = "N/A"

Fetcher = Callable[[str], list[dict[str, Any]]]


@dataclass(slots=True)
class DedupRun:
    """Everything a run produces: review state, duplicate log and counters."""

    state: ReviewState
    log: list[DuplicateLogEntry] = field(default_factory=list)
    stats: RunStats = field(default_factory=RunStats)


def build_records(
    rows: Iterable[dict[str, Any]],
    subject: str,
    ids: Iterator[int],
    fields: FieldMap = FieldMap(),
) -> list[Record]:
    """Wrap raw rows as records, assigning each a fresh run-local id."""
    records: list[Record] = []
    for row in rows:
        title = row.get(fields.title)
        title_text = title.strip() if isinstance(title, str) else ""
        if fields.compare:
            title_key = comparison_key(row, fields.compare)
        else:
            title_key = normalize_title(title_text)

        identifier = normalize_identifier(row.get(fields.identifier)) if fields.identifier else None
        source = row.get(fields.source) if fields.source else None

        records.append(
            Record(
                local_id=f"r{next(ids)}",
                subject=subject,
                title=title_text,
                title_key=title_key,
                identifier=identifier,
                source=source.strip() if isinstance(source, str) else "",
                fields=dict(row),
            )
        )
    return records


def split_by_subject(
    rows: Iterable[dict[str, Any]],
    column: str | None = None,
) -> dict[str, list[dict[str, Any]]]:
    """Split table rows into subjects by ``column``, keeping first-seen order."""
    rows = list(rows)
    if not column:
        return {DEFAULT_SUBJECT: rows} if rows else {}

    subjects: dict[str, list[dict[str, Any]]] = {}
    for row in rows:
        value = row.get(column)
        key = str(value).strip() if value is not None and str(value).strip() else MISSING_SUBJECT
        subjects.setdefault(key, []).append(row)
    return subjects


def dedupe_subject(subject: str, records: list[Record], config: DedupConfig) -> SubjectResult:
    """Classify all pairs of one subject and resolve confirmed duplicates.

    Every unordered pair is compared at most once. A record removed as a
    duplicate takes no part in later comparisons, and ambiguous pairs that
    touch a removed record are dropped before grouping.
    """
    removed: set[str] = set()
    log: list[DuplicateLogEntry] = []
    ambiguous: list[tuple[Record, Record, float]] = []

    for i, first in enumerate(records):
        if first.local_id in removed:
            continue
        for second in records[i + 1:]:
            if second.local_id in removed:
                continue

            result = classify(first, second, config.thresholds, config.method)

            if result.outcome in (Outcome.IDENTICAL, Outcome.DUPLICATE):
                if config.priority.is_protected_pair(first, second):
                    continue
                _, loser, entry = resolve_duplicate(first, second, config.priority)
                removed.add(loser.local_id)
                log.append(entry)
                if loser is first:
                    break
            elif result.outcome is Outcome.AMBIGUOUS:
                ambiguous.append((first, second, result.score))

    ambiguous = [
        pair for pair in ambiguous
        if pair[0].local_id not in removed and pair[1].local_id not in removed
    ]
    groups = build_groups(ambiguous)
    survivors = tuple(r for r in records if r.local_id not in removed)

    LOGGER.info(
        "Subject %s: initial=%s removed=%s review_groups=%s",
        subject,
        len(records),
        len(removed),
        len(groups),
    )
    return SubjectResult(
        subject=subject,
        records=survivors,
        log=tuple(log),
        groups=tuple(groups),
        initial=len(records),
    )


def run_subjects(
    subjects: Iterable[str],
    fetch: Fetcher,
    config: DedupConfig,
    fields: FieldMap = FieldMap(),
) -> DedupRun:
    """Fetch and deduplicate each subject in turn.

    A subject whose fetch fails is logged and skipped; the remaining subjects
    still run.
    """
    ids = itertools.count(1)
    results: list[SubjectResult] = []
    stats = RunStats()

    for subject in subjects:
        try:
            rows = fetch(subject)
        except Exception as exc:  # one failing subject must not abort the run
            LOGGER.exception("Fetch failed for subject=%s: %s", subject, exc)
            stats.failed_subjects.append((subject, str(exc)))
            continue

        LOGGER.info("Fetched %s records for subject=%s", len(rows), subject)
        records = build_records(rows, subject, ids, fields)
        results.append(dedupe_subject(subject, records, config))

    return _finish(results, stats)


def run_table(
    rows: Iterable[dict[str, Any]],
    config: DedupConfig,
    fields: FieldMap = FieldMap(),
    group_column: str | None = None,
) -> DedupRun:
    """Deduplicate an uploaded table, optionally split into subjects by a column."""
    ids = itertools.count(1)
    results = [
        dedupe_subject(subject, build_records(subject_rows, subject, ids, fields), config)
        for subject, subject_rows in split_by_subject(rows, group_column).items()
    ]
    return _finish(results, RunStats())


def _finish(results: list[SubjectResult], stats: RunStats) -> DedupRun:
    records = [r for result in results for r in result.records]
    log = [entry for result in results for entry in result.log]
    groups = [g for result in results for g in result.groups]

    stats.initial = sum(result.initial for result in results)
    stats.final = len(records)
    stats.duplicates_removed = len(log)
    stats.review_groups = len(groups)

    state = begin_review(ReviewState(), records, groups)
    LOGGER.info(
        "Run complete. initial=%s final=%s duplicates_removed=%s review_groups=%s failed=%s",
        stats.initial,
        stats.final,
        stats.duplicates_removed,
        stats.review_groups,
        len(stats.failed_subjects),
    )
    return DedupRun(state=state, log=log, stats=stats)
