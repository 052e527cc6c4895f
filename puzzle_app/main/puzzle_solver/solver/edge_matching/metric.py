"""
Border similarity metric.

mean_mismatch() is the single source of truth for every adjacency judgment:
discovery, conflict resolution, grid walking and arrangement verification
all go through it.
"""

from __future__ import annotations
import logging
import numpy as np
from typing import TYPE_CHECKING

from ..errors import PreconditionViolation
from .borders import unpack_rgb

if TYPE_CHECKING:
    from ..config import MatchingConfig
    from ..models import Direction, FragmentEdges

logger = logging.getLogger(__name__)


def mean_mismatch(edge_a: np.ndarray, edge_b: np.ndarray, color_threshold: int) -> float:
    """
    Fraction of mismatched pixel pairs between two borders.

    A pixel pair is mismatched if any of its R, G, B channel differences
    exceeds color_threshold.

    Args:
        edge_a: 1D packed RGB border
        edge_b: 1D packed RGB border of the same length
        color_threshold: Per-channel tolerance (0-255)

    Returns:
        mismatched_count / length in [0, 1]

    Raises:
        PreconditionViolation: Lengths differ or borders are empty
    """
    if len(edge_a) != len(edge_b):
        raise PreconditionViolation(f"Edge lengths differ: {len(edge_a)} vs {len(edge_b)}")
    if len(edge_a) == 0:
        raise PreconditionViolation("Cannot compare empty edges")

    diff = np.abs(unpack_rgb(edge_a) - unpack_rgb(edge_b))
    mismatched = np.any(diff > color_threshold, axis=-1)

    return float(np.count_nonzero(mismatched)) / len(edge_a)


def edges_match(edge_a: np.ndarray, edge_b: np.ndarray, config: MatchingConfig) -> bool:
    """True iff mean_mismatch(edge_a, edge_b) <= config.mean_error_threshold."""
    error = mean_mismatch(edge_a, edge_b, config.color_threshold)
    return error <= config.mean_error_threshold


def border_mismatch(
    anchor: FragmentEdges,
    neighbor: FragmentEdges,
    direction: Direction,
    color_threshold: int
) -> float:
    """
    Mismatch of the shared border if neighbor lies in direction of anchor.

    Compares side `direction` of anchor with the opposite side of neighbor,
    e.g. RIGHT compares right(anchor) with left(neighbor).
    """
    return mean_mismatch(
        anchor.border(direction),
        neighbor.border(direction.opposite),
        color_threshold
    )


def borders_match(
    anchor: FragmentEdges,
    neighbor: FragmentEdges,
    direction: Direction,
    config: MatchingConfig
) -> bool:
    """True iff neighbor fits in direction of anchor within tolerance."""
    error = border_mismatch(anchor, neighbor, direction, config.color_threshold)
    logger.debug("F%d -%s-> F%d: mismatch %.3f",
                 anchor.fragment_id, direction.value, neighbor.fragment_id, error)
    return error <= config.mean_error_threshold
