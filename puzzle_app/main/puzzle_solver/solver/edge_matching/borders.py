"""
Border extraction.

Pulls the 1-pixel-wide border of each side out of a fragment pixel grid and
packs it as (R << 16) | (G << 8) | B values.
"""

from __future__ import annotations
import numpy as np

from ..errors import PreconditionViolation
from ..models import Direction, FragmentEdges


def pack_rgb(pixels: np.ndarray) -> np.ndarray:
    """
    Pack an (..., 3) RGB array into uint32 values.

    Args:
        pixels: Array with RGB in the last axis

    Returns:
        Array of shape pixels.shape[:-1], dtype uint32
    """
    rgb = pixels.astype(np.uint32)
    return (rgb[..., 0] << 16) | (rgb[..., 1] << 8) | rgb[..., 2]


def unpack_rgb(packed: np.ndarray) -> np.ndarray:
    """
    Decode packed RGB values into an (N, 3) int16 array.

    int16 leaves room for signed channel differences.
    """
    packed = np.asarray(packed, dtype=np.uint32)
    return np.stack([
        (packed >> 16) & 0xFF,
        (packed >> 8) & 0xFF,
        packed & 0xFF,
    ], axis=-1).astype(np.int16)


def _check_pixel_grid(pixels: np.ndarray) -> None:
    if pixels.ndim != 3 or pixels.shape[2] != 3:
        raise PreconditionViolation(f"Expected (H, W, 3) pixel grid, got shape {pixels.shape}")
    if pixels.shape[0] == 0 or pixels.shape[1] == 0:
        raise PreconditionViolation(f"Zero-sized fragment: {pixels.shape[1]}x{pixels.shape[0]}")


def extract_border(pixels: np.ndarray, side: Direction) -> np.ndarray:
    """
    Extract one border of a fragment.

    Args:
        pixels: (H, W, 3) RGB pixel grid
        side: Which border to take

    Returns:
        LEFT/RIGHT: column of H packed pixels (top to bottom)
        TOP/BOTTOM: row of W packed pixels (left to right)

    Raises:
        PreconditionViolation: Zero-sized or non-RGB grid
    """
    _check_pixel_grid(pixels)

    if side is Direction.LEFT:
        strip = pixels[:, 0, :]
    elif side is Direction.RIGHT:
        strip = pixels[:, -1, :]
    elif side is Direction.TOP:
        strip = pixels[0, :, :]
    else:
        strip = pixels[-1, :, :]

    return pack_rgb(strip)


def extract_edges(fragment_id: int, pixels: np.ndarray) -> FragmentEdges:
    """Extract all four borders of a fragment."""
    return FragmentEdges(
        fragment_id=fragment_id,
        borders={side: extract_border(pixels, side) for side in Direction},
    )
