"""
Edge Matching Module.

- extract_border / extract_edges: 1-pixel borders as packed RGB
- mean_mismatch / edges_match: the border similarity metric
"""

from .borders import pack_rgb, unpack_rgb, extract_border, extract_edges
from .metric import mean_mismatch, edges_match, border_mismatch, borders_match

__all__ = [
    "pack_rgb",
    "unpack_rgb",
    "extract_border",
    "extract_edges",
    "mean_mismatch",
    "edges_match",
    "border_mismatch",
    "borders_match",
]
