"""
Fragment slicing.

Cuts a source image into a num_cols x num_rows grid of equally sized
fragments and deals them to shuffled cells:
- fragment K carries the pixels of home slot K
- fragment K starts at the cell it was dealt to, so the board is shuffled
- remainder pixels on the right and bottom are dropped
"""
import logging
import random

import numpy as np

from puzzle_app.main.puzzle_solver.solver.config import GridConfig
from puzzle_app.main.puzzle_solver.solver.errors import PreconditionViolation
from puzzle_app.main.puzzle_solver.solver.models import Fragment, PuzzleInstance
from puzzle_app.storage.image_store import FileImageStore
from .config import SliceConfig

logger = logging.getLogger(__name__)


class FragmentSlicer:
    """Cuts images into fragments and persists their pixels."""

    def __init__(self, grid: GridConfig, image_store: FileImageStore,
                 config: SliceConfig | None = None):
        self.grid = grid
        self.image_store = image_store
        self.config = config or SliceConfig()
        self.rng = random.Random(self.config.seed)

    def fragment_size(self, image: np.ndarray) -> tuple[int, int]:
        """
        (fragment_width, fragment_height) for an image.

        Raises:
            PreconditionViolation: Image smaller than the grid
        """
        if image.ndim != 3 or image.shape[2] != 3:
            raise PreconditionViolation(f"Expected (H, W, 3) RGB image, got shape {image.shape}")

        height, width = image.shape[:2]
        fragment_width = width // self.grid.num_cols
        fragment_height = height // self.grid.num_rows

        if fragment_width == 0 or fragment_height == 0:
            raise PreconditionViolation(
                f"Image {width}x{height} too small for a "
                f"{self.grid.num_cols}x{self.grid.num_rows} grid"
            )
        return fragment_width, fragment_height

    def deal(self) -> list[int]:
        """Fragment id per cell, row-major: a permutation of range(fragment_count)."""
        ids = list(range(self.grid.fragment_count))
        if self.config.shuffle:
            self.rng.shuffle(ids)
        return ids

    def cut(self, image: np.ndarray, fragment_id: int,
            fragment_width: int, fragment_height: int) -> np.ndarray:
        """Pixels of the home slot of fragment_id."""
        col = fragment_id % self.grid.num_cols
        row = fragment_id // self.grid.num_cols
        x0 = col * fragment_width
        y0 = row * fragment_height
        return image[y0:y0 + fragment_height, x0:x0 + fragment_width, :].copy()

    def slice(self, session_id: str, image: np.ndarray,
              asset_name: str | None = None) -> PuzzleInstance:
        """
        Cut an image into a new puzzle instance for a session.

        Args:
            session_id: Owner of the new instance
            image: (H, W, 3) uint8 RGB source image
            asset_name: Name part of the storage paths (default from config)

        Returns:
            The new PuzzleInstance (not yet registered in any store)

        Raises:
            PreconditionViolation: Image too small; raised before any
                stored data is touched
            StorageFailure: Deleting or writing fragment pixels failed
        """
        fragment_width, fragment_height = self.fragment_size(image)
        asset_name = asset_name or self.config.asset_name
        dealt_ids = self.deal()

        self.image_store.delete_tree(session_id)

        fragments = {}
        for cell, fragment_id in enumerate(dealt_ids):
            col = cell % self.grid.num_cols
            row = cell // self.grid.num_cols
            image_ref = f"{session_id}/{asset_name}_{fragment_id}.{self.image_store.extension}"

            self.image_store.put(
                image_ref, self.cut(image, fragment_id, fragment_width, fragment_height)
            )
            fragments[fragment_id] = Fragment(
                id=fragment_id,
                x=col * fragment_width,
                y=row * fragment_height,
                width=fragment_width,
                height=fragment_height,
                image_ref=image_ref,
            )

        logger.info("Sliced %dx%d image into %d fragments of %dx%d for session %s",
                    image.shape[1], image.shape[0], len(fragments),
                    fragment_width, fragment_height, session_id)

        return PuzzleInstance(
            session_id=session_id,
            fragments=fragments,
            fragment_width=fragment_width,
            fragment_height=fragment_height,
            num_cols=self.grid.num_cols,
            num_rows=self.grid.num_rows,
        )
