"""
Tests for adjacency discovery and conflict resolution.

Discovery runs on a synthetic gradient image whose borders only match
between true neighbors. Resolution runs on hand-built candidate sets.
"""

import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

import logging

import pytest
import numpy as np
from solver.config import MatchingConfig
from solver.errors import PreconditionViolation
from solver.models import Direction, FragmentEdges
from solver.edge_matching import extract_edges
from solver.adjacency import (
    discover_candidates,
    candidate_directions,
    resolve_conflicts,
    resolve_pair,
    ResolvedAdjacency,
)

L, R, T, B = Direction.LEFT, Direction.RIGHT, Direction.TOP, Direction.BOTTOM


# ========== Test Fixtures ==========

def gradient_edges(num_cols, num_rows, size=20):
    """
    Edges of a gradient image cut into home-position fragments.

    R = 2x, G = 3y: neighboring pixels differ by at most 3 per channel,
    borders of non-neighbors by at least 38.
    """
    height, width = num_rows * size, num_cols * size
    image = np.zeros((height, width, 3), dtype=np.uint8)
    image[:, :, 0] = (2 * np.arange(width))[None, :]
    image[:, :, 1] = (3 * np.arange(height))[:, None]
    image[:, :, 2] = 128

    edges = {}
    for fid in range(num_cols * num_rows):
        row, col = divmod(fid, num_cols)
        tile = image[row * size:(row + 1) * size, col * size:(col + 1) * size]
        edges[fid] = extract_edges(fid, tile)
    return edges


def make_edges(fid, length=4, **sides):
    """FragmentEdges from packed values; unspecified sides are all zero."""
    borders = {d: np.zeros(length, dtype=np.uint32) for d in Direction}
    for name, values in sides.items():
        borders[Direction[name.upper()]] = np.array(values, dtype=np.uint32)
    return FragmentEdges(fragment_id=fid, borders=borders)


@pytest.fixture
def config():
    return MatchingConfig(color_threshold=9, mean_error_threshold=0.13)


# ========== Discovery ==========

def test_01_candidate_directions_of_neighbors(config):
    """Test 1: a true right neighbor yields exactly RIGHT, and LEFT in reverse"""
    edges = gradient_edges(3, 2)
    assert candidate_directions(edges[0], edges[1], config) == (R,)
    assert candidate_directions(edges[1], edges[0], config) == (L,)
    assert candidate_directions(edges[0], edges[3], config) == (B,)
    assert candidate_directions(edges[0], edges[4], config) == ()


def test_02_discover_candidates_3x2(config):
    """Test 2: only true neighbors appear, one direction per ordered pair"""
    candidates = discover_candidates(gradient_edges(3, 2), config)

    expected = {}
    for a, b in [(0, 1), (1, 2), (3, 4), (4, 5)]:
        expected[(a, b)] = (R,)
        expected[(b, a)] = (L,)
    for a, b in [(0, 3), (1, 4), (2, 5)]:
        expected[(a, b)] = (B,)
        expected[(b, a)] = (T,)

    assert candidates == expected


def test_03_discovery_independent_of_pool_size(config):
    """Test 3: the candidate set does not depend on task scheduling"""
    edges = gradient_edges(4, 3)
    serial = discover_candidates(edges, MatchingConfig(max_workers=1))
    parallel = discover_candidates(edges, MatchingConfig(max_workers=8))
    assert serial == parallel
    assert serial == discover_candidates(edges, config)


def test_04_discovery_empty_input(config):
    """Test 4: no fragments, no candidates"""
    assert discover_candidates({}, config) == {}


def test_05_discovery_propagates_task_failure(config):
    """Test 5: a failing comparison aborts discovery with no partial result"""
    edges = {
        0: make_edges(0, length=4),
        1: make_edges(1, length=5),
    }
    with pytest.raises(PreconditionViolation):
        discover_candidates(edges, config)


# ========== Conflict resolution ==========

def test_06_single_direction_kept():
    """Test 6: a pair with one candidate direction keeps it"""
    edges = {0: make_edges(0), 1: make_edges(1)}
    assert resolve_pair((0, 1), (R,), {(0, 1): (R,)}, edges, 9) is R


def test_07_competitor_eliminates_direction():
    """Test 7: a better-fitting competitor removes the contested direction"""
    edges = {
        0: make_edges(0),
        1: make_edges(1, left=[0, 0, 100, 100], top=[0, 0, 0, 100]),
        2: make_edges(2),
    }
    candidates = {(0, 1): (R, B), (0, 2): (R,)}
    assert resolve_pair((0, 1), (R, B), candidates, edges, 9) is B


def test_08_lower_error_wins_without_competitors():
    """Test 8: with both directions surviving, the lower error1 wins"""
    edges = {
        0: make_edges(0),
        1: make_edges(1, left=[0, 0, 100, 100], top=[0, 0, 0, 100]),
    }
    assert resolve_pair((0, 1), (R, B), {(0, 1): (R, B)}, edges, 9) is B


def test_09_exact_tie_uses_declaration_order():
    """Test 9: on equal error1 the earlier declared direction wins"""
    edges = {
        0: make_edges(0),
        1: make_edges(1, left=[0, 0, 0, 100], top=[0, 0, 0, 100]),
    }
    assert resolve_pair((0, 1), (B, R), {(0, 1): (B, R)}, edges, 9) is R


def test_10_both_directions_eliminated():
    """Test 10: a pair beaten on every direction is dropped"""
    edges = {
        0: make_edges(0),
        1: make_edges(1, left=[0, 0, 0, 100], top=[0, 0, 0, 100]),
        2: make_edges(2),
        3: make_edges(3),
    }
    candidates = {(0, 1): (R, B), (0, 2): (R,), (0, 3): (B,)}
    assert resolve_pair((0, 1), (R, B), candidates, edges, 9) is None

    adjacency = resolve_conflicts(candidates, edges, 9)
    assert (0, 1) not in adjacency
    assert adjacency.direction(0, 2) is R
    assert adjacency.direction(0, 3) is B


def test_10b_dropped_pair_is_logged_as_warning(caplog):
    """Test 10b: dropping a candidate pair is reported at WARNING"""
    edges = {
        0: make_edges(0),
        1: make_edges(1, left=[0, 0, 0, 100], top=[0, 0, 0, 100]),
        2: make_edges(2),
        3: make_edges(3),
    }
    candidates = {(0, 1): (R, B), (0, 2): (R,), (0, 3): (B,)}
    with caplog.at_level(logging.WARNING, logger="solver.adjacency.resolution"):
        resolve_conflicts(candidates, edges, 9)

    dropped = [r for r in caplog.records if "dropped" in r.getMessage()]
    assert len(dropped) == 1
    assert dropped[0].levelno == logging.WARNING
    assert "(0, 1)" in dropped[0].getMessage()


def test_11_more_than_two_directions_raises():
    """Test 11: three candidate directions are an internal consistency failure"""
    edges = {0: make_edges(0), 1: make_edges(1)}
    with pytest.raises(PreconditionViolation):
        resolve_pair((0, 1), (R, L, B), {(0, 1): (R, L, B)}, edges, 9)


def test_12_ambiguous_competitor_raises():
    """Test 12: a competitor sharing both contested directions is rejected"""
    edges = {0: make_edges(0), 1: make_edges(1), 2: make_edges(2)}
    candidates = {(0, 1): (R, B), (0, 2): (R, B)}
    with pytest.raises(PreconditionViolation):
        resolve_conflicts(candidates, edges, 9)


def test_13_resolution_is_idempotent(config):
    """Test 13: resolving an already-resolved relation changes nothing"""
    edges = gradient_edges(3, 2)
    first = resolve_conflicts(discover_candidates(edges, config), edges, 9)
    again = resolve_conflicts({pair: (d,) for pair, d in first.items()}, edges, 9)
    assert again.as_dict() == first.as_dict()


# ========== ResolvedAdjacency ==========

def test_14_forward_and_inverse_lookup():
    """Test 14: neighbors() and anchors() mirror each other"""
    adjacency = ResolvedAdjacency({(0, 1): R, (2, 1): R, (0, 3): B})
    assert adjacency.neighbors(0, R) == [1]
    assert adjacency.anchors(1, R) == [0, 2]
    assert adjacency.anchors(3, B) == [0]
    assert adjacency.neighbors(3, T) == []


def test_15_add_replaces_direction():
    """Test 15: re-adding a pair moves it between index buckets"""
    adjacency = ResolvedAdjacency()
    adjacency.add(0, 1, R)
    adjacency.add(0, 1, B)
    assert len(adjacency) == 1
    assert adjacency.neighbors(0, R) == []
    assert adjacency.neighbors(0, B) == [1]
    assert adjacency.anchors(1, R) == []


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
