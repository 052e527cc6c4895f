"""
Solver Configuration Models.

This module defines the configuration structures for the fragment solver:
- GridConfig: Grid shape the source image is cut into
- MatchingConfig: Border similarity thresholds and fan-out parameters

All sizes in pixels.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Optional


@dataclass
class GridConfig:
    """
    Grid shape of a puzzle.

    Attributes:
        num_cols: Number of fragments per row
        num_rows: Number of fragment rows

    Notes:
        - Fragment ids run row-major: id = row * num_cols + col
        - Both dimensions must be positive
    """
    num_cols: int = 5
    num_rows: int = 4

    def __post_init__(self):
        if self.num_cols <= 0 or self.num_rows <= 0:
            raise ValueError(
                f"Grid dimensions must be positive, got {self.num_cols}x{self.num_rows}"
            )

    @property
    def fragment_count(self) -> int:
        """Total number of fragments in the grid."""
        return self.num_cols * self.num_rows


@dataclass
class MatchingConfig:
    """
    Border matching configuration.

    Organized in 2 groups:
    1. Similarity: thresholds of the mean-mismatch metric
    2. Discovery: thread pool parameters of the adjacency fan-out
    """

    # ========== 1. Similarity ==========
    color_threshold: int = 9
    """Maximum per-channel difference (0-255) for two pixels to count as equal"""

    mean_error_threshold: float = 0.13
    """Maximum fraction of mismatched pixels (0.0-1.0) for two borders to match"""

    # ========== 2. Discovery ==========
    max_workers: Optional[int] = None
    """Thread pool size for adjacency discovery (None = executor default)"""

    def __post_init__(self):
        if not 0 <= self.color_threshold <= 255:
            raise ValueError(f"color_threshold must be in [0, 255], got {self.color_threshold}")
        if not 0.0 <= self.mean_error_threshold <= 1.0:
            raise ValueError(
                f"mean_error_threshold must be in [0.0, 1.0], got {self.mean_error_threshold}"
            )
        if self.max_workers is not None and self.max_workers <= 0:
            raise ValueError(f"max_workers must be positive, got {self.max_workers}")
