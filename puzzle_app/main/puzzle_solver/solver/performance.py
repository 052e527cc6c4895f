"""
Assembly report for one solve.

Records, per solver stage, the wall-clock time and the number of items the
stage produced, so a slow assemble can be attributed to its inputs:

    load         fragments read from storage
    discover     candidate pairs found by the pairwise border scan
    resolve      pairs left after conflict resolution
    reconstruct  grid rows emitted
"""

from __future__ import annotations
import logging
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Iterator, Optional

logger = logging.getLogger(__name__)

STAGE_UNITS = {
    "load": "fragments",
    "discover": "candidate pairs",
    "resolve": "resolved pairs",
    "reconstruct": "rows",
}


@dataclass
class StageTiming:
    """
    One measured stage.

    Attributes:
        name: Stage name (see STAGE_UNITS)
        elapsed: Wall-clock seconds
        items: Size of the stage output, if the stage reported one
        failed: Stage raised instead of finishing
    """
    name: str
    elapsed: float = 0.0
    items: Optional[int] = None
    failed: bool = False

    def describe(self) -> str:
        text = f"{self.name}: {self.elapsed * 1000:.1f} ms"
        if self.items is not None:
            text += f", {self.items} {STAGE_UNITS.get(self.name, 'items')}"
        if self.failed:
            text += " (failed)"
        return text


@dataclass
class AssemblyReport:
    """Stage timings and sizes of a single assemble of one puzzle instance."""
    session_id: Optional[str] = None
    fragment_count: int = 0
    stages: list[StageTiming] = field(default_factory=list)

    @contextmanager
    def stage(self, name: str) -> Iterator[StageTiming]:
        """
        Time a stage. The caller sets `items` on the yielded timing.

        A stage that raises is still recorded, marked as failed.
        """
        timing = StageTiming(name=name)
        start = time.perf_counter()
        try:
            yield timing
        except Exception:
            timing.failed = True
            raise
        finally:
            timing.elapsed = time.perf_counter() - start
            self.stages.append(timing)

    def get(self, name: str) -> Optional[StageTiming]:
        return next((s for s in self.stages if s.name == name), None)

    @property
    def total_elapsed(self) -> float:
        return sum(s.elapsed for s in self.stages)

    @property
    def candidate_pairs(self) -> Optional[int]:
        timing = self.get("discover")
        return timing.items if timing else None

    @property
    def resolved_pairs(self) -> Optional[int]:
        timing = self.get("resolve")
        return timing.items if timing else None

    def summary(self) -> str:
        """Single log line: totals first, then every stage in execution order."""
        head = f"{self.fragment_count} fragments in {self.total_elapsed * 1000:.1f} ms"
        if self.session_id is not None:
            head = f"session {self.session_id}: {head}"
        return "; ".join([head] + [s.describe() for s in self.stages])

    def log(self, level: int = logging.INFO) -> None:
        logger.log(level, "Assembly report: %s", self.summary())
