"""
Adjacency Module.

This module turns border evidence into a fragment adjacency relation:
- discover_candidates: Concurrent pairwise border matching
- resolve_conflicts: One authoritative direction per pair
- ResolvedAdjacency: Forward and inverse lookup of the resolved relation
"""

from .discovery import discover_candidates, candidate_directions
from .resolution import resolve_conflicts, resolve_pair
from .relation import ResolvedAdjacency

__all__ = [
    "discover_candidates",
    "candidate_directions",
    "resolve_conflicts",
    "resolve_pair",
    "ResolvedAdjacency",
]
