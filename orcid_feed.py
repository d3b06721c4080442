"""ORCID public API ingestion: one researcher's work summaries."""

from __future__ import annotations

import logging
import os
from typing import Any

import requests

ORCID_API_URL = os.getenv("ORCID_API_URL", "https://pub.orcid.org/v3.0")
REQUEST_TIMEOUT_SECONDS = 20

# Registration agencies are not a meaningful provenance for priority ranking.
_GENERIC_SOURCES = frozenset({"Crossref", "DataCite"})
SELF_ASSERTED_SOURCE = "author"
OTHER_SOURCE = "Other"

LOGGER = logging.getLogger(__name__)


def fetch_orcid_works(
    orcid_id: str,
    start_year: int | None = None,
    end_year: int | None = None,
) -> list[dict[str, Any]]:
    """Fetch an ORCID iD's works as flat rows ready for deduplication.

    Each row has ``orcid, title, journal, year, doi, source, type, put_code``.
    Works outside ``[start_year, end_year]`` are skipped; works without a
    year are kept.
    """
    url = f"{ORCID_API_URL}/{orcid_id.strip()}/works"
    try:
        response = requests.get(
            url,
            headers={"Accept": "application/json"},
            timeout=REQUEST_TIMEOUT_SECONDS,
        )
        response.raise_for_status()
    except requests.RequestException as exc:
        raise RuntimeError(f"ORCID API error for {orcid_id}: {exc}") from exc

    works = _parse_works_payload(response.json(), orcid_id)
    kept = [w for w in works if _in_year_range(w["year"], start_year, end_year)]

    LOGGER.info(
        "ORCID fetch: orcid=%s raw_count=%s after_year_filter=%s",
        orcid_id,
        len(works),
        len(kept),
    )
    return kept


def _parse_works_payload(payload: Any, orcid_id: str) -> list[dict[str, Any]]:
    """Flatten every work summary of every work group."""
    if not isinstance(payload, dict) or not isinstance(payload.get("group", []), list):
        raise RuntimeError("Unexpected ORCID works payload shape: expected an object with 'group'")

    rows: list[dict[str, Any]] = []
    for group in payload.get("group") or []:
        if not isinstance(group, dict):
            continue
        for summary in group.get("work-summary") or []:
            if not isinstance(summary, dict):
                continue
            rows.append({
                "orcid": orcid_id,
                "title": _nested_value(summary, "title", "title"),
                "journal": _nested_value(summary, "journal-title"),
                "year": _nested_value(summary, "publication-date", "year"),
                "doi": _doi(summary),
                "source": _source_label(summary.get("source")),
                "type": _as_str(summary.get("type")),
                "put_code": _as_str(summary.get("put-code")),
            })
    return rows


def _doi(summary: dict[str, Any]) -> str | None:
    external = summary.get("external-ids") or {}
    for item in external.get("external-id") or []:
        if isinstance(item, dict) and str(item.get("external-id-type", "")).lower() == "doi":
            return _as_str(item.get("external-id-value"))
    return None


def _source_label(source: Any) -> str:
    if not isinstance(source, dict):
        return OTHER_SOURCE
    if source.get("source-orcid"):
        return SELF_ASSERTED_SOURCE
    name = _nested_value(source, "source-name") or OTHER_SOURCE
    return OTHER_SOURCE if name in _GENERIC_SOURCES else name


def _in_year_range(year: str | None, start: int | None, end: int | None) -> bool:
    if not year:
        return True
    try:
        value = int(year)
    except ValueError:
        return True
    if start is not None and value < start:
        return False
    if end is not None and value > end:
        return False
    return True


def _nested_value(block: dict[str, Any], *path: str) -> str | None:
    """Walk ``path`` through nested dicts and return the trailing ``value``."""
    node: Any = block
    for key in path:
        if not isinstance(node, dict):
            return None
        node = node.get(key)
    if isinstance(node, dict):
        node = node.get("value")
    return _as_str(node)


def _as_str(value: Any) -> str | None:
    if isinstance(value, int):
        return str(value)
    return value.strip() if isinstance(value, str) and value.strip() else None
