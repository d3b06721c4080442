"""Human-in-the-loop resolution of ambiguous review groups.

Review is an explicit state machine::

    CLASSIFYING --begin_review--> AWAITING_REVIEW(0) --apply_decision--> ...
        ... AWAITING_REVIEW(n-1) --apply_decision--> DONE

Transitions are pure: every call returns a new ``ReviewState`` and never
blocks waiting for input. The caller holds the state and invokes
``apply_decision`` once a decision for the current group arrives.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, replace
from enum import Enum

from models import Record, ReviewGroup

LOGGER = logging.getLogger(__name__)


class ReviewError(ValueError):
    """Base class for rejected review decisions."""


class ReviewOrderError(ReviewError):
    """Decision does not target the group currently awaiting review."""


class UnknownRecordError(ReviewError):
    """Keep-set names a record that is not a member of the group."""


class ReviewPhase(str, Enum):
    CLASSIFYING = "classifying"
    AWAITING_REVIEW = "awaiting_review"
    DONE = "done"


@dataclass(frozen=True, slots=True)
class ReviewState:
    phase: ReviewPhase = ReviewPhase.CLASSIFYING
    records: tuple[Record, ...] = ()
    groups: tuple[ReviewGroup, ...] = ()
    cursor: int | None = None

    @property
    def current_group(self) -> ReviewGroup | None:
        if self.cursor is None:
            return None
        return self.groups[self.cursor]

    @property
    def pending(self) -> int:
        """Number of groups still awaiting a decision, current one included."""
        if self.cursor is None:
            return 0
        return len(self.groups) - self.cursor


def resolve_group(group: ReviewGroup, keep: Iterable[Record | str]) -> frozenset[str]:
    """Return the local ids of the group members that are not kept.

    ``keep`` may hold records or local ids. An empty keep-set removes the
    whole group. Ids outside the group raise ``UnknownRecordError``.
    """
    keep_ids = {item if isinstance(item, str) else item.local_id for item in keep}
    unknown = keep_ids - group.local_ids
    if unknown:
        raise UnknownRecordError(f"Records not in review group: {sorted(unknown)}")
    return group.local_ids - keep_ids


def begin_review(
    state: ReviewState,
    records: Sequence[Record],
    groups: Sequence[ReviewGroup],
) -> ReviewState:
    """Leave CLASSIFYING once all pairwise comparisons are complete."""
    if state.phase is not ReviewPhase.CLASSIFYING:
        raise ReviewOrderError(f"Cannot begin review from phase {state.phase.value}")

    if groups:
        LOGGER.info("Review started: %s group(s) pending", len(groups))
        return ReviewState(ReviewPhase.AWAITING_REVIEW, tuple(records), tuple(groups), 0)
    return ReviewState(ReviewPhase.DONE, tuple(records), (), None)


def apply_decision(
    state: ReviewState,
    group_index: int,
    keep: Iterable[Record | str],
) -> tuple[ReviewState, frozenset[str]]:
    """Resolve the current group and advance the cursor.

    Returns the new state and the local ids removed from the working result
    set. Groups are resolved strictly in creation order.
    """
    if state.phase is not ReviewPhase.AWAITING_REVIEW or state.cursor is None:
        raise ReviewOrderError(f"No review pending (phase {state.phase.value})")
    if group_index != state.cursor:
        raise ReviewOrderError(
            f"Decision for group {group_index} but group {state.cursor} is awaiting review"
        )

    removed = resolve_group(state.groups[state.cursor], keep)
    records = tuple(r for r in state.records if r.local_id not in removed)

    next_index = state.cursor + 1
    LOGGER.info(
        "Review group %s/%s resolved: removed=%s",
        next_index,
        len(state.groups),
        len(removed),
    )

    if next_index >= len(state.groups):
        return ReviewState(ReviewPhase.DONE, records, (), None), removed
    return replace(state, records=records, cursor=next_index), removed
