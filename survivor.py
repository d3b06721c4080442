"""Survivor selection for confirmed duplicate pairs."""

from __future__ import annotations

import logging

from models import DuplicateLogEntry, Record, SourcePriority

LOGGER = logging.getLogger(__name__)

DUPLICATE_REASON = "Duplicate by title/identifier match."

# Researcher-registry provenance labels, best first.
DEFAULT_SOURCE_ORDER: tuple[str, ...] = (
    "Web of Science Researcher Profile Sync",
    "Scopus - Elsevier",
    "Other",
    "author",
)


def resolve_duplicate(
    first: Record,
    second: Record,
    priority: SourcePriority,
) -> tuple[Record, Record, DuplicateLogEntry]:
    """Return ``(kept, removed, log_entry)`` for a confirmed duplicate pair.

    The record whose source ranks better (lower) survives; ties keep
    ``first``, the record encountered first in the subject.
    """
    if priority.rank(first.source) <= priority.rank(second.source):
        kept, removed = first, second
    else:
        kept, removed = second, first

    entry = DuplicateLogEntry(
        removed=removed,
        kept_title=kept.title,
        kept_identifier=kept.identifier,
        reason=DUPLICATE_REASON,
    )
    LOGGER.debug(
        "Duplicate resolved subject=%s kept=%s removed=%s",
        kept.subject,
        kept.local_id,
        removed.local_id,
    )
    return kept, removed, entry
