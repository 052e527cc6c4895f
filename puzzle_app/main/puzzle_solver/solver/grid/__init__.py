"""
Grid Reconstruction Module.

- locate_top_left: Find the grid origin by walking LEFT then TOP
- walk_grid: Rebuild the row-major fragment matrix
- recompute_coordinates: Canonical x, y from matrix indices
"""

from .reconstruction import (
    best_neighbor,
    choose_start,
    locate_top_left,
    walk_grid,
    recompute_coordinates,
    reconstruct_grid,
)

__all__ = [
    "best_neighbor",
    "choose_start",
    "locate_top_left",
    "walk_grid",
    "recompute_coordinates",
    "reconstruct_grid",
]
