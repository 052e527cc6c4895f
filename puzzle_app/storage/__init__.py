from .image_store import FileImageStore
from .puzzle_store import PuzzleStore

__all__ = ["FileImageStore", "PuzzleStore"]
