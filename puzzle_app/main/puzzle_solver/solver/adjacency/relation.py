"""
Resolved adjacency relation.

Stores the conflict-resolved relation R(anchor, neighbor, direction) with a
forward index keyed by (anchor, direction) and an inverse index keyed by
(neighbor, direction), so walks in both directions are dictionary lookups.
"""

from __future__ import annotations
from collections import defaultdict
from typing import Iterator, Mapping, Optional

from ..models import Direction


class ResolvedAdjacency:
    """One authoritative direction per ordered fragment pair."""

    def __init__(self, relations: Optional[Mapping[tuple[int, int], Direction]] = None):
        self._relations: dict[tuple[int, int], Direction] = {}
        self._forward: dict[tuple[int, Direction], list[int]] = defaultdict(list)
        self._inverse: dict[tuple[int, Direction], list[int]] = defaultdict(list)

        for (anchor_id, neighbor_id), direction in (relations or {}).items():
            self.add(anchor_id, neighbor_id, direction)

    def add(self, anchor_id: int, neighbor_id: int, direction: Direction) -> None:
        """Record R(anchor, neighbor, direction), replacing an earlier direction for the pair."""
        pair = (anchor_id, neighbor_id)
        previous = self._relations.get(pair)
        if previous is not None:
            self._forward[(anchor_id, previous)].remove(neighbor_id)
            self._inverse[(neighbor_id, previous)].remove(anchor_id)

        self._relations[pair] = direction
        self._forward[(anchor_id, direction)].append(neighbor_id)
        self._inverse[(neighbor_id, direction)].append(anchor_id)

    def direction(self, anchor_id: int, neighbor_id: int) -> Optional[Direction]:
        return self._relations.get((anchor_id, neighbor_id))

    def neighbors(self, anchor_id: int, direction: Direction) -> list[int]:
        """All b with R(anchor, b, direction), sorted by id."""
        return sorted(self._forward.get((anchor_id, direction), []))

    def anchors(self, neighbor_id: int, direction: Direction) -> list[int]:
        """All a with R(a, neighbor, direction), sorted by id."""
        return sorted(self._inverse.get((neighbor_id, direction), []))

    def as_dict(self) -> dict[tuple[int, int], Direction]:
        return dict(self._relations)

    def items(self) -> Iterator[tuple[tuple[int, int], Direction]]:
        return iter(self._relations.items())

    def __len__(self):
        return len(self._relations)

    def __contains__(self, pair):
        return pair in self._relations

    def __repr__(self):
        return f"ResolvedAdjacency({len(self._relations)} pairs)"
