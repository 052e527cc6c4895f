"""
Error taxonomy for the puzzle solver.

- PreconditionViolation: broken invariant or corrupted input data (fatal)
- NotFoundError: unknown session or fragment id
- StorageFailure: pixel store I/O error
- InvalidArrangement: malformed client submission

None of these are retried by the solver.
"""


class PuzzleError(Exception):
    """Base class for all puzzle domain errors."""


class PreconditionViolation(PuzzleError):
    """An internal-consistency failure: the request must be aborted."""


class NotFoundError(PuzzleError):
    """Unknown session or fragment."""


class StorageFailure(PuzzleError):
    """Reading, writing or deleting stored fragment pixels failed."""


class InvalidArrangement(PuzzleError):
    """A client-submitted payload cannot be interpreted."""
