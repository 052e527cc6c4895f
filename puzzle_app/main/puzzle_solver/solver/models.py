"""
Solver Data Models.

This module defines all data structures used by the fragment solver:
- Direction: Relative position of one fragment to another
- Fragment: One rectangular piece of a sliced source image
- PuzzleInstance: The fragment set owned by one session
- FragmentEdges: The four 1-pixel borders of a fragment
- Placement: A client-submitted fragment position
- CandidateSet: Type alias for discovered candidate directions

All positions and sizes in pixels, origin at the top-left corner.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Any
import numpy as np


class Direction(Enum):
    """
    Relative direction between two fragments.

    R(a, b, d) means fragment b lies immediately in direction d of fragment a.
    The same values name the four sides of a fragment.

    Notes:
        - Declaration order is the tie-break order of the conflict resolver
    """
    LEFT = "LEFT"
    RIGHT = "RIGHT"
    TOP = "TOP"
    BOTTOM = "BOTTOM"

    @property
    def opposite(self) -> Direction:
        """Direction pointing back from the neighbor to the anchor."""
        return _OPPOSITES[self]


_OPPOSITES = {
    Direction.LEFT: Direction.RIGHT,
    Direction.RIGHT: Direction.LEFT,
    Direction.TOP: Direction.BOTTOM,
    Direction.BOTTOM: Direction.TOP,
}

# Order in which the discoverer tests directions
DISCOVERY_ORDER = (Direction.RIGHT, Direction.LEFT, Direction.BOTTOM, Direction.TOP)

# (anchor_id, other_id) -> 1 or 2 candidate directions
CandidateSet = dict[tuple[int, int], tuple[Direction, ...]]


@dataclass
class Fragment:
    """
    One rectangular piece of a sliced source image.

    Attributes:
        id: Unique id within the puzzle instance, equal to the home slot
        x: Current top-left x position
        y: Current top-left y position
        width: Fragment width
        height: Fragment height
        image_ref: Storage path of the fragment pixels

    Notes:
        - Pixel content of fragment K is cut from home slot K
        - x, y start at the shuffled cell the slicer dealt the fragment to
        - Only the grid reconstructor rewrites x, y
    """
    id: int
    x: int
    y: int
    width: int
    height: int
    image_ref: str

    def home_position(self, num_cols: int) -> tuple[int, int]:
        """True top-left position of this fragment in the source image."""
        return (self.id % num_cols) * self.width, (self.id // num_cols) * self.height

    def to_dict(self) -> dict[str, int]:
        """Public representation: id and bounds, no pixel data."""
        return {
            'id': self.id,
            'x': self.x,
            'y': self.y,
            'width': self.width,
            'height': self.height,
        }

    def __repr__(self):
        return f"Fragment(id={self.id}, pos=({self.x}, {self.y}))"


@dataclass
class PuzzleInstance:
    """
    Fragment set owned by one session.

    Attributes:
        session_id: Opaque owner id
        fragments: fragment_id -> Fragment
        fragment_width: Shared fragment width
        fragment_height: Shared fragment height
        num_cols: Grid columns the image was cut into
        num_rows: Grid rows the image was cut into
    """
    session_id: str
    fragments: dict[int, Fragment]
    fragment_width: int
    fragment_height: int
    num_cols: int
    num_rows: int

    def get_fragment(self, fragment_id: int) -> Optional[Fragment]:
        return self.fragments.get(fragment_id)

    def sorted_fragments(self) -> list[Fragment]:
        return [self.fragments[fid] for fid in sorted(self.fragments)]


@dataclass
class FragmentEdges:
    """
    The four packed-RGB borders of a fragment.

    Attributes:
        fragment_id: Owning fragment
        borders: side -> 1D uint32 array of packed RGB values
    """
    fragment_id: int
    borders: dict[Direction, np.ndarray] = field(default_factory=dict)

    def border(self, side: Direction) -> np.ndarray:
        return self.borders[side]


@dataclass
class Placement:
    """
    A client-submitted fragment position.

    Attributes:
        fragment_id: Fragment being placed
        x: Proposed top-left x
        y: Proposed top-left y
        width: Ignored for ordering
        height: Ignored for ordering
    """
    fragment_id: int
    x: int
    y: int
    width: Optional[int] = None
    height: Optional[int] = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Placement:
        """
        Build a placement from a JSON object {id, x, y, width?, height?}.

        Raises:
            KeyError: A required key is missing
            TypeError, ValueError: A value is not an integer
        """
        return cls(
            fragment_id=int(data['id']),
            x=int(data['x']),
            y=int(data['y']),
            width=int(data['width']) if data.get('width') is not None else None,
            height=int(data['height']) if data.get('height') is not None else None,
        )
