"""Group ambiguous pairs into connected components for batched review."""

from __future__ import annotations

from collections import deque
from collections.abc import Iterable

from models import Record, ReviewGroup, ReviewMember


def build_groups(pairs: Iterable[tuple[Record, Record, float]]) -> list[ReviewGroup]:
    """Return one review group per connected component of ambiguous pairs.

    Records are nodes and pairs are undirected edges. Components are found by
    breadth-first traversal, starting from nodes in first-seen order, so group
    and member order are deterministic. Each member keeps the score of the
    first pair it appeared in; the score is for display only.
    """
    nodes: dict[str, Record] = {}
    first_score: dict[str, float] = {}
    adjacency: dict[str, list[str]] = {}

    for left, right, score in pairs:
        for record in (left, right):
            if record.local_id not in nodes:
                nodes[record.local_id] = record
                first_score[record.local_id] = score
                adjacency[record.local_id] = []
        adjacency[left.local_id].append(right.local_id)
        adjacency[right.local_id].append(left.local_id)

    groups: list[ReviewGroup] = []
    visited: set[str] = set()

    for start in nodes:
        if start in visited:
            continue
        visited.add(start)
        queue = deque([start])
        members: list[ReviewMember] = []

        while queue:
            node = queue.popleft()
            members.append(ReviewMember(nodes[node], first_score[node]))
            for neighbour in adjacency[node]:
                if neighbour not in visited:
                    visited.add(neighbour)
                    queue.append(neighbour)

        groups.append(ReviewGroup(tuple(members)))

    return groups
