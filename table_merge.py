"""Exact-key merge of several tables, preferring rows from a primary table."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any

LOGGER = logging.getLogger(__name__)

KEY_SEPARATOR = "||"


def merge_tables(
    tables: Mapping[str, Sequence[dict[str, Any]]],
    key_columns: Mapping[str, Sequence[str]],
    primary: str,
) -> list[dict[str, Any]]:
    """Merge rows of the configured tables, one row per composite key.

    Each table names its own key columns, positionally aligned across tables.
    Values compare lowercased and trimmed. On a key collision the row from the
    better-ranked table wins: ``primary`` first, then the input order of
    ``tables``. Rows with an all-empty key are dropped.

    Raises:
        ValueError: no table is configured, a configured table has no key
            columns, or tables configure different numbers of key columns.
    """
    if not key_columns or primary not in key_columns:
        raise ValueError("A primary table and at least one keyed table are required")

    counts = {name: len(cols) for name, cols in key_columns.items()}
    if any(count == 0 for count in counts.values()):
        raise ValueError("Every configured table needs at least one key column")
    if len(set(counts.values())) > 1:
        raise ValueError(f"Key column counts differ between tables: {counts}")

    ranking = [primary, *[name for name in tables if name != primary]]
    merged: dict[str, tuple[int, dict[str, Any]]] = {}
    seen = 0

    for name in tables:
        columns = key_columns.get(name)
        if not columns:
            continue
        rank = ranking.index(name)
        for row in tables[name]:
            seen += 1
            parts = [_key_part(row.get(col)) for col in columns]
            if not any(parts):
                continue
            key = KEY_SEPARATOR.join(parts)
            existing = merged.get(key)
            if existing is None or rank < existing[0]:
                merged[key] = (rank, row)

    rows = [row for _, row in merged.values()]
    LOGGER.info("Table merge: tables=%s rows_in=%s rows_out=%s", len(key_columns), seen, len(rows))
    return rows


def _key_part(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip().lower()
