"""
Arrangement verification.

Checks a client-submitted layout for row/column edge consistency, without
using the adjacency relation: placements are sorted into reading order and
every fragment must match its upper and left neighbor.
"""

from __future__ import annotations
import functools
import logging
from typing import Mapping

from .config import GridConfig, MatchingConfig
from .edge_matching.metric import borders_match
from .errors import InvalidArrangement, NotFoundError
from .models import Direction, FragmentEdges, Placement

logger = logging.getLogger(__name__)


def order_placements(placements: list[Placement], fragment_height: int) -> list[Placement]:
    """
    Sort placements row-major with a tolerance band.

    Two placements are in the same row if their y differ by less than half a
    fragment height (rounded down); same-row placements are ordered by x, others by y.
    """
    half_height = fragment_height // 2

    def compare(a: Placement, b: Placement) -> int:
        if abs(a.y - b.y) < half_height:
            return a.x - b.x
        return a.y - b.y

    return sorted(placements, key=functools.cmp_to_key(compare))


def placement_matrix(placements: list[Placement], grid: GridConfig) -> list[list[int]]:
    """
    Partition sorted placements into rows of fragment ids.

    Raises:
        InvalidArrangement: Placement count does not fill the grid exactly
    """
    if len(placements) != grid.fragment_count:
        raise InvalidArrangement(
            f"Expected {grid.fragment_count} placements, got {len(placements)}"
        )
    return [
        [placements[row * grid.num_cols + col].fragment_id for col in range(grid.num_cols)]
        for row in range(grid.num_rows)
    ]


def verify_arrangement(
    placements: list[Placement],
    edges: Mapping[int, FragmentEdges],
    grid: GridConfig,
    fragment_height: int,
    config: MatchingConfig
) -> bool:
    """
    Check whether a proposed arrangement is edge-consistent.

    Args:
        placements: Client placements in any order
        edges: fragment_id -> borders of the stored fragments
        grid: Grid shape
        fragment_height: Row tolerance reference
        config: Matching thresholds

    Returns:
        True iff every fragment matches the fragment above and to its left

    Raises:
        NotFoundError: A placement names an unknown fragment
        InvalidArrangement: Placement count does not fill the grid
    """
    for placement in placements:
        if placement.fragment_id not in edges:
            raise NotFoundError(f"Fragment {placement.fragment_id} not found")

    matrix = placement_matrix(order_placements(placements, fragment_height), grid)
    logger.info("Fragment matrix: %s", matrix)

    for i, row in enumerate(matrix):
        for j, fid in enumerate(row):
            current = edges[fid]
            if i > 0 and not borders_match(edges[matrix[i - 1][j]], current, Direction.BOTTOM, config):
                logger.info("Bottom check failed for F%d above F%d", matrix[i - 1][j], fid)
                return False
            if j > 0 and not borders_match(edges[row[j - 1]], current, Direction.RIGHT, config):
                logger.info("Right check failed for F%d left of F%d", row[j - 1], fid)
                return False

    return True
