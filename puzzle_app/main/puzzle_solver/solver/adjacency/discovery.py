"""
Adjacency Discovery.

Compares every ordered pair of fragments on all four sides and collects the
directions whose borders match within tolerance. Work is fanned out over a
thread pool, one task per anchor fragment, and joined before returning.
"""

from __future__ import annotations
import logging
from concurrent.futures import ThreadPoolExecutor, wait, FIRST_EXCEPTION
from typing import Mapping

from ..config import MatchingConfig
from ..edge_matching.metric import borders_match
from ..models import CandidateSet, Direction, FragmentEdges, DISCOVERY_ORDER

logger = logging.getLogger(__name__)


def candidate_directions(
    anchor: FragmentEdges,
    other: FragmentEdges,
    config: MatchingConfig
) -> tuple[Direction, ...]:
    """
    Directions in which `other` could lie relative to `anchor`.

    Tested in order RIGHT, LEFT, BOTTOM, TOP:
    - RIGHT: right(anchor) ~ left(other)
    - LEFT: left(anchor) ~ right(other)
    - BOTTOM: bottom(anchor) ~ top(other)
    - TOP: top(anchor) ~ bottom(other)
    """
    return tuple(
        direction for direction in DISCOVERY_ORDER
        if borders_match(anchor, other, direction, config)
    )


def _compare_anchor(
    anchor_id: int,
    edges: Mapping[int, FragmentEdges],
    config: MatchingConfig
) -> list[tuple[tuple[int, int], tuple[Direction, ...]]]:
    """Task body: compare one anchor against every other fragment."""
    anchor = edges[anchor_id]
    found = []

    for other_id in sorted(edges):
        if other_id == anchor_id:
            continue
        directions = candidate_directions(anchor, edges[other_id], config)
        if directions:
            found.append(((anchor_id, other_id), directions))

    return found


def discover_candidates(
    edges: Mapping[int, FragmentEdges],
    config: MatchingConfig
) -> CandidateSet:
    """
    Build the candidate set of a puzzle instance.

    Args:
        edges: fragment_id -> extracted borders, for every fragment
        config: Matching thresholds and pool size

    Returns:
        CandidateSet with an entry for every ordered pair that matched on
        at least one side

    Raises:
        Whatever the first failing task raised. Remaining tasks are cancelled
        and no partial result is returned.

    Notes:
        - O(F^2) border comparisons for F fragments
        - Each task returns its own list; lists are merged after the barrier,
          so task order never affects the result
    """
    if not edges:
        return {}

    with ThreadPoolExecutor(max_workers=config.max_workers,
                            thread_name_prefix="adjacency") as pool:
        futures = [
            pool.submit(_compare_anchor, anchor_id, edges, config)
            for anchor_id in sorted(edges)
        ]
        done, not_done = wait(futures, return_when=FIRST_EXCEPTION)

        for future in not_done:
            future.cancel()

        for future in futures:
            if future in done and future.exception() is not None:
                logger.error("Adjacency discovery aborted: %s", future.exception())
                raise future.exception()

    candidates: CandidateSet = {}
    for future in futures:
        for pair, directions in future.result():
            candidates[pair] = directions

    logger.info("All %d discovery tasks finished, %d candidate pairs",
                len(futures), len(candidates))
    return candidates
