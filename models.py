"""Shared typed models for the deduplication pipeline."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

REVIEW_FLOOR = 80
MAX_THRESHOLD = 100


class Outcome(str, Enum):
    """Classification of one unordered record pair."""

    IDENTICAL = "identical"
    DUPLICATE = "duplicate"
    AMBIGUOUS = "ambiguous"
    DISTINCT = "distinct"


class Method(str, Enum):
    STANDARD = "standard"
    ADVANCED = "advanced"


@dataclass(frozen=True, slots=True)
class Record:
    """One bibliographic work attributed to a subject.

    ``local_id`` is assigned once at pipeline entry and only tracks identity
    within a run. ``fields`` carries the original row untouched.
    """

    local_id: str
    subject: str
    title: str
    title_key: str
    identifier: str | None
    source: str
    fields: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class ComparisonResult:
    outcome: Outcome
    score: float = 0.0


@dataclass(frozen=True, slots=True)
class DuplicateLogEntry:
    """A removed record plus the survivor it was collapsed into."""

    removed: Record
    kept_title: str
    kept_identifier: str | None
    reason: str


@dataclass(frozen=True, slots=True)
class ReviewMember:
    record: Record
    score: float


@dataclass(frozen=True, slots=True)
class ReviewGroup:
    """Records connected through ambiguous pairs, reviewed as one unit."""

    members: tuple[ReviewMember, ...]

    @property
    def records(self) -> tuple[Record, ...]:
        return tuple(m.record for m in self.members)

    @property
    def local_ids(self) -> frozenset[str]:
        return frozenset(m.record.local_id for m in self.members)


@dataclass(frozen=True, slots=True)
class Thresholds:
    """Match / review similarity percentages.

    Construction rejects ``match < review``; ``with_match`` and
    ``with_review`` clamp the other value the way the threshold sliders do.
    """

    match: int = 97
    review: int = 90

    def __post_init__(self) -> None:
        if not REVIEW_FLOOR <= self.review <= self.match <= MAX_THRESHOLD:
            raise ValueError(
                f"Invalid thresholds: need {REVIEW_FLOOR} <= review <= match <= {MAX_THRESHOLD}, "
                f"got match={self.match} review={self.review}"
            )

    def with_match(self, value: int) -> Thresholds:
        value = min(MAX_THRESHOLD, max(REVIEW_FLOOR, value))
        if value <= self.review:
            return Thresholds(match=value, review=max(REVIEW_FLOOR, value - 1))
        return Thresholds(match=value, review=self.review)

    def with_review(self, value: int) -> Thresholds:
        value = min(MAX_THRESHOLD, max(REVIEW_FLOOR, value))
        if value >= self.match:
            return Thresholds(match=min(MAX_THRESHOLD, value + 1), review=value)
        return Thresholds(match=self.match, review=value)


@dataclass(frozen=True, slots=True)
class SourcePriority:
    """Ordered provenance labels; earlier labels win survivor selection."""

    order: tuple[str, ...] = ()
    protected: frozenset[str] = frozenset()

    def rank(self, source: str) -> int:
        try:
            return self.order.index(source) + 1
        except ValueError:
            return len(self.order) + 1

    def is_protected_pair(self, first: Record, second: Record) -> bool:
        return first.source in self.protected and second.source in self.protected


@dataclass(frozen=True, slots=True)
class FieldMap:
    """Which row fields feed the comparison keys.

    When ``compare`` is non-empty the title key is built from those columns
    instead of ``title``.
    """

    title: str = "title"
    identifier: str | None = "doi"
    source: str | None = "source"
    compare: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class DedupConfig:
    """Immutable per-run configuration, passed explicitly through the pipeline."""

    method: Method = Method.STANDARD
    thresholds: Thresholds = field(default_factory=Thresholds)
    priority: SourcePriority = field(default_factory=SourcePriority)


@dataclass(frozen=True, slots=True)
class SubjectResult:
    """Outcome of one subject's classify-and-resolve pass."""

    subject: str
    records: tuple[Record, ...]
    log: tuple[DuplicateLogEntry, ...]
    groups: tuple[ReviewGroup, ...]
    initial: int


@dataclass(slots=True)
class RunStats:
    initial: int = 0
    final: int = 0
    duplicates_removed: int = 0
    review_groups: int = 0
    failed_subjects: list[tuple[str, str]] = field(default_factory=list)
