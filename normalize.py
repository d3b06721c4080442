"""Canonical comparison keys for bibliographic records."""

from __future__ import annotations

import re
from collections.abc import Iterable
from typing import Any

# Greek letters and common Latin diacritics seen in re-keyed titles.
_TRANSLITERATION: dict[str, str] = {
    "α": "alpha", "β": "beta", "γ": "gamma", "δ": "delta", "ε": "epsilon",
    "ζ": "zeta", "η": "eta", "θ": "theta", "ι": "iota", "κ": "kappa",
    "λ": "lambda", "μ": "mu", "ν": "nu", "ξ": "xi", "ο": "omicron",
    "π": "pi", "ρ": "rho", "σ": "sigma", "τ": "tau", "υ": "upsilon",
    "φ": "phi", "χ": "chi", "ψ": "psi", "ω": "omega",
    "ä": "a", "ö": "o", "ü": "u", "ß": "ss", "à": "a", "á": "a", "â": "a",
    "ã": "a", "ç": "c", "è": "e", "é": "e", "ê": "e", "ë": "e", "ì": "i",
    "í": "i", "î": "i", "ï": "i", "ð": "d", "ñ": "n", "ò": "o", "ó": "o",
    "ô": "o", "õ": "o", "ù": "u", "ú": "u", "û": "u", "ý": "y", "þ": "th",
    "ÿ": "y", "ø": "o", "ł": "l", "ś": "s", "ą": "a", "ć": "c", "ę": "e",
    "ń": "n", "ź": "z", "ż": "z",
}
_TRANSLITERATION_TABLE = str.maketrans(_TRANSLITERATION)

_ROMAN_NUMERALS: dict[str, int] = {
    "xx": 20, "xix": 19, "xviii": 18, "xvii": 17, "xvi": 16, "xv": 15,
    "xiv": 14, "xiii": 13, "xii": 12, "xi": 11, "x": 10, "ix": 9,
    "viii": 8, "vii": 7, "vi": 6, "v": 5, "iv": 4, "iii": 3, "ii": 2, "i": 1,
}
_ROMAN_RE = re.compile(r"\b(" + "|".join(_ROMAN_NUMERALS) + r")\b")

# Anything that is not a letter, digit or whitespace (underscore counts as \w).
_PUNCT_RE = re.compile(r"[^\w\s]|_")
_SPACE_RE = re.compile(r"\s+")

_DOI_PREFIX_RE = re.compile(r"^(?:https?://(?:dx\.)?doi\.org/|doi:\s*)", re.IGNORECASE)


def normalize_title(raw: Any) -> str:
    """Return the exact-match key for a title; empty string for missing input.

    Lowercases, transliterates Greek letters and Latin diacritics, turns
    standalone Roman numerals into ``romanN`` tokens, drops punctuation and
    collapses whitespace.
    """
    if not isinstance(raw, str) or not raw.strip():
        return ""

    text = raw.lower().strip().translate(_TRANSLITERATION_TABLE)
    text = _ROMAN_RE.sub(lambda m: f" roman{_ROMAN_NUMERALS[m.group(1)]} ", text)
    text = _PUNCT_RE.sub("", text)
    return _SPACE_RE.sub(" ", text).strip()


def normalize_identifier(raw: Any) -> str | None:
    """Strip resolver prefixes and whitespace from a DOI-like identifier."""
    if not isinstance(raw, str):
        return None
    value = _DOI_PREFIX_RE.sub("", raw.strip().lower()).strip()
    return value or None


def comparison_key(row: dict[str, Any], columns: Iterable[str]) -> str:
    """Join the normalized values of several columns into one title key."""
    parts = (normalize_title(_as_text(row.get(col))) for col in columns)
    return " ".join(p for p in parts if p)


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)
