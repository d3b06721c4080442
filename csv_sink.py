"""CSV input and output for deduplication runs."""

from __future__ import annotations

import csv
import logging
from collections.abc import Iterable, Sequence
from pathlib import Path
from typing import Any

from models import DuplicateLogEntry, Record, ReviewGroup

LOGGER = logging.getLogger(__name__)

RESULTS_FILENAME = "dedup_results.csv"
DEDUP_LOG_FILENAME = "deduplication_log.csv"
REVIEW_SHEET_FILENAME = "manual_review.csv"

DEDUP_LOG_COLUMNS = [
    "subject",
    "reason",
    "duplicate_of_title",
    "duplicate_of_identifier",
]
REVIEW_SHEET_COLUMNS = [
    "review_group_id",
    "similarity",
    "subject",
]


def read_rows(path: str | Path) -> list[dict[str, Any]]:
    """Read a CSV file (UTF-8, optional BOM) into a list of row dicts."""
    with Path(path).open(newline="", encoding="utf-8-sig") as fh:
        return list(csv.DictReader(fh))


def write_results(path: str | Path, records: Sequence[Record]) -> None:
    """Write the deduplicated record set with its original columns."""
    rows = [dict(r.fields) for r in records]
    _write_csv(path, _field_union(rows), rows)
    LOGGER.info("Wrote %s records to %s", len(rows), path)


def write_rows(path: str | Path, rows: Sequence[dict[str, Any]]) -> None:
    """Write plain row dicts with the union of their columns."""
    _write_csv(path, _field_union(rows), list(rows))
    LOGGER.info("Wrote %s rows to %s", len(rows), path)


def write_dedup_log(path: str | Path, entries: Sequence[DuplicateLogEntry]) -> None:
    """Write one row per removed record, annotated with its survivor."""
    rows = [
        {
            **entry.removed.fields,
            "subject": entry.removed.subject,
            "reason": entry.reason,
            "duplicate_of_title": entry.kept_title,
            "duplicate_of_identifier": entry.kept_identifier or "",
        }
        for entry in entries
    ]
    columns = _field_union(entry.removed.fields for entry in entries) + DEDUP_LOG_COLUMNS
    _write_csv(path, _dedupe_columns(columns), rows)
    LOGGER.info("Wrote %s duplicate log entries to %s", len(rows), path)


def write_review_sheet(path: str | Path, groups: Sequence[ReviewGroup]) -> None:
    """Write pending review groups, one row per member, numbered from 1."""
    rows: list[dict[str, Any]] = []
    for group_id, group in enumerate(groups, 1):
        for member in group.members:
            rows.append({
                **member.record.fields,
                "review_group_id": group_id,
                "similarity": format_similarity(member.score),
                "subject": member.record.subject,
            })
    fields = _field_union(m.record.fields for g in groups for m in g.members)
    _write_csv(path, _dedupe_columns(REVIEW_SHEET_COLUMNS + fields), rows)
    LOGGER.info("Wrote %s review groups (%s rows) to %s", len(groups), len(rows), path)


def format_similarity(score: float) -> str:
    return f"{score * 100:.1f}%"


def _field_union(rows: Iterable[Any]) -> list[str]:
    """Column names across rows, in first-seen order."""
    columns: dict[str, None] = {}
    for row in rows:
        for key in row:
            columns.setdefault(key, None)
    return list(columns)


def _dedupe_columns(columns: list[str]) -> list[str]:
    return list(dict.fromkeys(columns))


def _write_csv(path: str | Path, columns: list[str], rows: list[dict[str, Any]]) -> None:
    with Path(path).open("w", newline="", encoding="utf-8") as fh:
        writer = csv.DictWriter(fh, fieldnames=columns, extrasaction="ignore")
        writer.writeheader()
        writer.writerows(rows)
