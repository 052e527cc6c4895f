"""
Conflict Resolution.

Reduces every candidate pair to a single authoritative direction.

A pair with one candidate direction keeps it. A pair with two candidate
directions (p1, p2) -> {d1, d2} is resolved against competing claims of the
same anchor p1:
1. error1[d]: mismatch of (p1, p2) along d
2. error2[d]: lowest mismatch of any other pair (p1, p3) claiming d
3. d is eliminated if a competitor fits strictly better (error1 > error2)
4. if both survive, the one with higher error1 is discarded
"""

from __future__ import annotations
import logging
from collections import defaultdict
from typing import Mapping, Optional

from ..errors import PreconditionViolation
from ..edge_matching.metric import border_mismatch
from ..models import CandidateSet, Direction, FragmentEdges
from .relation import ResolvedAdjacency

logger = logging.getLogger(__name__)

_DECLARATION_ORDER = {direction: index for index, direction in enumerate(Direction)}


def _index_by_anchor(candidates: CandidateSet) -> dict[int, list[tuple[int, tuple[Direction, ...]]]]:
    by_anchor = defaultdict(list)
    for (anchor_id, other_id), directions in candidates.items():
        by_anchor[anchor_id].append((other_id, directions))
    return by_anchor


def _competing_errors(
    anchor_id: int,
    neighbor_id: int,
    directions: tuple[Direction, ...],
    competitors: list[tuple[int, tuple[Direction, ...]]],
    edges: Mapping[int, FragmentEdges],
    color_threshold: int
) -> dict[Direction, float]:
    """
    error2: best mismatch of other pairs (anchor, p3) for the contested directions.

    Raises:
        PreconditionViolation: A competitor shares both contested directions
    """
    error2: dict[Direction, float] = {}

    for other_id, other_directions in sorted(competitors, key=lambda c: c[0]):
        if other_id == neighbor_id:
            continue

        surviving = other_directions
        if len(other_directions) > 1:
            surviving = tuple(d for d in other_directions if d in directions)
            if len(surviving) > 1:
                raise PreconditionViolation(
                    f"Fragments {anchor_id}/{other_id} share more than one common direction "
                    f"{[d.value for d in surviving]} with pair {anchor_id}/{neighbor_id}"
                )
        if not surviving:
            continue

        direction = surviving[0]
        if direction not in directions:
            continue

        error = border_mismatch(edges[anchor_id], edges[other_id], direction, color_threshold)
        if direction not in error2 or error < error2[direction]:
            error2[direction] = error

    return error2


def resolve_pair(
    pair: tuple[int, int],
    directions: tuple[Direction, ...],
    candidates: CandidateSet,
    edges: Mapping[int, FragmentEdges],
    color_threshold: int,
    by_anchor: Optional[dict] = None
) -> Optional[Direction]:
    """
    Pick the authoritative direction of one candidate pair.

    Args:
        pair: (anchor_id, neighbor_id)
        directions: Candidate directions of the pair
        candidates: The whole candidate set (competing claims)
        edges: fragment_id -> borders
        color_threshold: Per-channel tolerance of the metric
        by_anchor: Optional precomputed anchor index of candidates

    Returns:
        The resolved direction, or None if competitors fit better on
        every candidate direction

    Raises:
        PreconditionViolation: More than two candidate directions, or an
            ambiguous competitor
    """
    if len(directions) > 2:
        raise PreconditionViolation(
            f"Pair {pair} has {len(directions)} candidate directions: {[d.value for d in directions]}"
        )
    if len(directions) == 1:
        return directions[0]
    if not directions:
        raise PreconditionViolation(f"Pair {pair} has no candidate direction")

    anchor_id, neighbor_id = pair
    if by_anchor is None:
        by_anchor = _index_by_anchor(candidates)

    error1 = {
        d: border_mismatch(edges[anchor_id], edges[neighbor_id], d, color_threshold)
        for d in directions
    }
    error2 = _competing_errors(
        anchor_id, neighbor_id, directions, by_anchor.get(anchor_id, []), edges, color_threshold
    )
    logger.debug("Pair %s: error1=%s error2=%s", pair,
                 {d.value: e for d, e in error1.items()},
                 {d.value: e for d, e in error2.items()})

    remaining = [d for d in directions if not (d in error2 and error1[d] > error2[d])]

    if len(remaining) > 1:
        remaining.sort(key=lambda d: (error1[d], _DECLARATION_ORDER[d]))
        remaining = remaining[:1]

    if not remaining:
        logger.warning("Pair %s dropped: competitors fit better on %s",
                       pair, [d.value for d in directions])
        return None

    return remaining[0]


def resolve_conflicts(
    candidates: CandidateSet,
    edges: Mapping[int, FragmentEdges],
    color_threshold: int
) -> ResolvedAdjacency:
    """
    Resolve every candidate pair to one direction.

    Args:
        candidates: Output of discover_candidates()
        edges: fragment_id -> borders
        color_threshold: Per-channel tolerance of the metric

    Returns:
        ResolvedAdjacency with one direction per resolved pair

    Notes:
        - Pairs are evaluated in sorted order, but results do not depend on it
        - Resolving an already-resolved candidate set returns it unchanged
    """
    by_anchor = _index_by_anchor(candidates)
    adjacency = ResolvedAdjacency()

    for pair in sorted(candidates):
        direction = resolve_pair(pair, candidates[pair], candidates, edges,
                                 color_threshold, by_anchor=by_anchor)
        if direction is not None:
            adjacency.add(pair[0], pair[1], direction)

    logger.info("Resolved %d of %d candidate pairs", len(adjacency), len(candidates))
    return adjacency
