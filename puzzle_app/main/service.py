"""
Puzzle service: the operations behind the HTTP routes.

Ties the slicer, the image store, the puzzle store and the solver together.
Every operation is keyed by an opaque session id.
"""
import logging

import numpy as np

from puzzle_app.config import AppConfig
from puzzle_app.main.puzzle_solver.solver import (
    solve_layout,
    verify_arrangement,
    recompute_coordinates,
    extract_edges,
    Fragment,
    FragmentEdges,
    Placement,
    PuzzleInstance,
    GridConfig,
    NotFoundError,
    StorageFailure,
    AssemblyReport,
)
from puzzle_app.puzzle_gen.slicer import FragmentSlicer
from puzzle_app.storage.image_store import FileImageStore
from puzzle_app.storage.puzzle_store import PuzzleStore

logger = logging.getLogger(__name__)


class PuzzleService:
    """Upload, query, verify, assemble and reset puzzles per session."""

    def __init__(self, config: AppConfig, image_store: FileImageStore, puzzle_store: PuzzleStore):
        self.config = config
        self.image_store = image_store
        self.puzzle_store = puzzle_store
        self.slicer = FragmentSlicer(config.grid, image_store, config.slicing)

    def _load_edges(self, instance: PuzzleInstance, fragment_ids=None) -> dict[int, FragmentEdges]:
        """Read stored pixels and extract borders for the given (default: all) fragments."""
        if fragment_ids is None:
            fragment_ids = instance.fragments.keys()

        edges = {}
        for fid in sorted(set(fragment_ids)):
            fragment = instance.get_fragment(fid)
            if fragment is None:
                raise NotFoundError(f"Fragment {fid} not found")
            edges[fid] = extract_edges(fid, self.image_store.get(fragment.image_ref))
        return edges

    def upload(self, session_id: str, image: np.ndarray, source_name: str | None = None) -> PuzzleInstance:
        """
        Slice an image into a new puzzle for the session, replacing any previous one.

        Raises:
            PreconditionViolation: Image too small for the grid (nothing changed)
            StorageFailure: Writing fragments failed (the session is left empty)
        """
        try:
            instance = self.slicer.slice(session_id, image, asset_name=source_name)
        except StorageFailure:
            self.puzzle_store.remove(session_id)
            try:
                self.image_store.delete_tree(session_id)
            except StorageFailure as cleanup_error:
                logger.error("Session %s: could not remove partial fragments: %s",
                             session_id, cleanup_error)
            raise

        self.puzzle_store.put(instance)
        logger.info("Session %s: new puzzle with %d fragments", session_id, len(instance.fragments))
        return instance

    def list_fragments(self, session_id: str) -> list[Fragment]:
        """Current fragments of the session, ordered by id."""
        return self.puzzle_store.get(session_id).sorted_fragments()

    def fragment_image(self, session_id: str, fragment_id: int) -> bytes:
        """Stored encoded bytes of one fragment."""
        instance = self.puzzle_store.get(session_id)
        fragment = instance.get_fragment(fragment_id)
        if fragment is None:
            raise NotFoundError(f"Fragment {fragment_id} not found")
        return self.image_store.read_bytes(fragment.image_ref)

    def check(self, session_id: str, placements: list[Placement]) -> bool:
        """
        Verify a proposed arrangement.

        Returns:
            False for an unknown session, otherwise the verification result

        Raises:
            NotFoundError: A placement names an unknown fragment
            InvalidArrangement: Wrong number of placements
        """
        instance = self.puzzle_store.find(session_id)
        if instance is None:
            logger.info("Session %s: check without a puzzle", session_id)
            return False

        logger.info("Checking puzzle for session %s (fragment %dx%d)",
                    session_id, instance.fragment_width, instance.fragment_height)
        edges = self._load_edges(instance, [p.fragment_id for p in placements])
        grid = GridConfig(num_cols=instance.num_cols, num_rows=instance.num_rows)

        return verify_arrangement(
            placements, edges, grid, instance.fragment_height, self.config.matching
        )

    def assemble(self, session_id: str, report: AssemblyReport | None = None) -> list[Fragment]:
        """
        Solve the session's puzzle and move every fragment to its solved position.

        Coordinates are rewritten only after the full layout is computed.
        Stage timings and sizes go to `report` (a fresh one if omitted) and
        are logged once the layout is known.
        """
        instance = self.puzzle_store.get(session_id)
        grid = GridConfig(num_cols=instance.num_cols, num_rows=instance.num_rows)
        if report is None:
            report = AssemblyReport()
        report.session_id = session_id

        with report.stage("load") as timing:
            edges = self._load_edges(instance)
            timing.items = len(edges)
        rows = solve_layout(edges, grid, self.config.matching, report)
        report.log()

        recompute_coordinates(rows, instance.fragments,
                              instance.fragment_width, instance.fragment_height)
        logger.info("Session %s: assembled %s", session_id, rows)
        return instance.sorted_fragments()

    def reset(self, session_id: str) -> None:
        """Drop the session's puzzle and delete its stored pixels."""
        self.puzzle_store.remove(session_id)
        self.image_store.delete_tree(session_id)
        logger.info("Session %s: reset", session_id)
