"""
Fragment Solver: grid reconstruction from border similarity.

Main API:
    solve_layout(edges, grid, config) -> rows of fragment ids
    verify_arrangement(placements, edges, grid, fragment_height, config) -> bool

Pipeline:
    discover_candidates -> resolve_conflicts -> reconstruct_grid
"""

from typing import Mapping, Optional

from .config import GridConfig, MatchingConfig
from .errors import (
    PuzzleError,
    PreconditionViolation,
    NotFoundError,
    StorageFailure,
    InvalidArrangement,
)
from .models import (
    Direction,
    Fragment,
    PuzzleInstance,
    FragmentEdges,
    Placement,
    CandidateSet,
)
from .edge_matching import extract_edges, mean_mismatch, edges_match
from .adjacency import discover_candidates, resolve_conflicts, ResolvedAdjacency
from .grid import reconstruct_grid, recompute_coordinates
from .performance import AssemblyReport, StageTiming
from .verification import verify_arrangement, order_placements


__all__ = [
    # Main API
    "solve_layout",
    "verify_arrangement",
    # Config
    "GridConfig",
    "MatchingConfig",
    # Errors
    "PuzzleError",
    "PreconditionViolation",
    "NotFoundError",
    "StorageFailure",
    "InvalidArrangement",
    # Models
    "Direction",
    "Fragment",
    "PuzzleInstance",
    "FragmentEdges",
    "Placement",
    "CandidateSet",
    # Stages
    "extract_edges",
    "mean_mismatch",
    "edges_match",
    "discover_candidates",
    "resolve_conflicts",
    "ResolvedAdjacency",
    "reconstruct_grid",
    "recompute_coordinates",
    "order_placements",
    # Reporting
    "AssemblyReport",
    "StageTiming",
]


def solve_layout(
    edges: Mapping[int, FragmentEdges],
    grid: GridConfig,
    config: MatchingConfig,
    report: Optional[AssemblyReport] = None
) -> list[list[int]]:
    """
    Reconstruct the row-major layout of a fragment set.

    Args:
        edges: fragment_id -> borders, for every fragment of the instance
        grid: Grid shape
        config: Matching thresholds and pool size
        report: Receives per-stage timings and output sizes

    Returns:
        rows[row][col] -> fragment id

    Raises:
        PreconditionViolation: Inconsistent border evidence

    Notes:
        - Pure with respect to fragments: callers apply the result with
          recompute_coordinates() once it is complete
    """
    if not edges:
        raise PreconditionViolation("Cannot solve an empty fragment set")

    if report is None:
        report = AssemblyReport()
    report.fragment_count = len(edges)

    with report.stage("discover") as timing:
        candidates = discover_candidates(edges, config)
        timing.items = len(candidates)

    with report.stage("resolve") as timing:
        adjacency = resolve_conflicts(candidates, edges, config.color_threshold)
        timing.items = len(adjacency)

    with report.stage("reconstruct") as timing:
        rows = reconstruct_grid(adjacency, edges, grid, config.color_threshold)
        timing.items = len(rows)

    return rows
