"""
Grid reconstruction from a resolved adjacency relation.

For a 3x2 grid:
    (0,0) - (0,1) - (0,2)
      |       |       |
    (1,0) - (1,1) - (1,2)

1. Walk LEFT then TOP from a start fragment to find the origin (0,0)
2. Walk RIGHT along each row, BOTTOM from each row's first fragment
3. Rewrite fragment coordinates from the resulting matrix

Whenever several fragments claim the same slot, the one with the lowest
border mismatch wins (then the lowest id).
"""

from __future__ import annotations
import logging
from typing import Mapping, Optional

from ..config import GridConfig
from ..edge_matching.metric import border_mismatch
from ..models import Direction, Fragment, FragmentEdges
from ..adjacency.relation import ResolvedAdjacency

logger = logging.getLogger(__name__)


def best_neighbor(
    adjacency: ResolvedAdjacency,
    edges: Mapping[int, FragmentEdges],
    anchor_id: int,
    direction: Direction,
    color_threshold: int
) -> Optional[int]:
    """
    The neighbor of anchor in direction, or None.

    With several candidates, picks the lowest border mismatch against the
    anchor, ties broken by lowest id.
    """
    candidates = adjacency.neighbors(anchor_id, direction)
    if not candidates:
        return None
    if len(candidates) == 1:
        return candidates[0]

    return min(
        candidates,
        key=lambda nid: (
            border_mismatch(edges[anchor_id], edges[nid], direction, color_threshold),
            nid
        )
    )


def _walk(
    adjacency: ResolvedAdjacency,
    edges: Mapping[int, FragmentEdges],
    start_id: int,
    direction: Direction,
    color_threshold: int
) -> int:
    """Follow direction from start until no neighbor exists or a fragment repeats."""
    current = start_id
    visited = {current}

    while True:
        nxt = best_neighbor(adjacency, edges, current, direction, color_threshold)
        if nxt is None:
            return current
        if nxt in visited:
            logger.warning("Cycle while walking %s from F%d, stopping at F%d",
                           direction.value, start_id, current)
            return current
        visited.add(nxt)
        current = nxt


def choose_start(adjacency: ResolvedAdjacency, fragment_ids) -> int:
    """
    Deterministic start fragment for the origin search.

    The lowest id that no fragment claims as its RIGHT or BOTTOM neighbor,
    otherwise the lowest id.
    """
    ordered = sorted(fragment_ids)
    for fid in ordered:
        if not adjacency.anchors(fid, Direction.RIGHT) and not adjacency.anchors(fid, Direction.BOTTOM):
            return fid
    return ordered[0]


def locate_top_left(
    adjacency: ResolvedAdjacency,
    edges: Mapping[int, FragmentEdges],
    color_threshold: int,
    start_id: Optional[int] = None
) -> int:
    """
    Find the fragment with no left and no top neighbor.

    Args:
        adjacency: Resolved relation
        edges: fragment_id -> borders (tie-breaks)
        color_threshold: Per-channel tolerance of the metric
        start_id: Where to start walking (default: choose_start())

    Returns:
        Id of the grid origin
    """
    if start_id is None:
        start_id = choose_start(adjacency, edges.keys())

    leftmost = _walk(adjacency, edges, start_id, Direction.LEFT, color_threshold)
    origin = _walk(adjacency, edges, leftmost, Direction.TOP, color_threshold)

    logger.info("Top-left fragment: F%d (started at F%d)", origin, start_id)
    return origin


def walk_grid(
    adjacency: ResolvedAdjacency,
    edges: Mapping[int, FragmentEdges],
    origin_id: int,
    grid: GridConfig,
    color_threshold: int
) -> list[list[int]]:
    """
    Rebuild the row-major fragment matrix starting at the origin.

    A missing neighbor keeps the current anchor, so the matrix always has
    num_rows x num_cols entries but may repeat a fragment.

    Returns:
        rows[row][col] -> fragment id
    """
    rows = []
    current = origin_id

    for row_index in range(grid.num_rows):
        row = []
        for col_index in range(grid.num_cols):
            row.append(current)
            # The anchor advances after every cell, the last column included;
            # without a BOTTOM neighbor the next row starts from there.
            nxt = best_neighbor(adjacency, edges, current, Direction.RIGHT, color_threshold)
            if nxt is not None:
                current = nxt
            elif col_index < grid.num_cols - 1:
                logger.warning("No RIGHT neighbor for F%d at (%d, %d)", current, row_index, col_index)
        rows.append(row)

        if row_index == grid.num_rows - 1:
            break
        below = best_neighbor(adjacency, edges, row[0], Direction.BOTTOM, color_threshold)
        if below is None:
            logger.warning("No BOTTOM neighbor for F%d at row %d", row[0], row_index)
        else:
            current = below

    repeated = len({fid for row in rows for fid in row}) != grid.fragment_count
    if repeated:
        logger.warning("Reconstructed grid repeats fragments: %s", rows)

    return rows


def recompute_coordinates(
    rows: list[list[int]],
    fragments: Mapping[int, Fragment],
    fragment_width: int,
    fragment_height: int
) -> None:
    """Overwrite x, y of every fragment in the matrix with its canonical position."""
    for row_index, row in enumerate(rows):
        for col_index, fid in enumerate(row):
            fragment = fragments[fid]
            fragment.x = col_index * fragment_width
            fragment.y = row_index * fragment_height


def reconstruct_grid(
    adjacency: ResolvedAdjacency,
    edges: Mapping[int, FragmentEdges],
    grid: GridConfig,
    color_threshold: int
) -> list[list[int]]:
    """Locate the origin and walk the grid. Does not touch fragment coordinates."""
    origin = locate_top_left(adjacency, edges, color_threshold)
    rows = walk_grid(adjacency, edges, origin, grid, color_threshold)
    logger.info("Fragment rows: %s", rows)
    return rows
