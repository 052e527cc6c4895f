"""File-backed storage of fragment pixel grids."""

import logging
import shutil
from pathlib import Path

import numpy as np
from PIL import Image, UnidentifiedImageError

from puzzle_app.main.puzzle_solver.solver.errors import StorageFailure, NotFoundError

logger = logging.getLogger(__name__)

MIMETYPES = {
    'png': 'image/png',
    'jpg': 'image/jpeg',
}


class FileImageStore:
    """
    Stores RGB pixel grids as image files below a root directory.

    Paths are relative and namespaced by session id ("<session>/<name>"),
    so delete_tree(session_id) removes everything a session stored.
    """

    def __init__(self, root_dir: Path | str, image_format: str = 'png', jpeg_quality: int = 95):
        self.root_dir = Path(root_dir)
        self.image_format = image_format
        self.jpeg_quality = jpeg_quality

    @property
    def extension(self) -> str:
        return self.image_format

    @property
    def mimetype(self) -> str:
        return MIMETYPES[self.image_format]

    def _resolve(self, path: str) -> Path:
        full_path = (self.root_dir / path).resolve()
        if self.root_dir.resolve() not in full_path.parents:
            raise StorageFailure(f"Path escapes storage root: {path}")
        return full_path

    def put(self, path: str, pixels: np.ndarray) -> None:
        """Encode and write an (H, W, 3) uint8 RGB grid."""
        file_path = self._resolve(path)
        img = Image.fromarray(np.ascontiguousarray(pixels, dtype=np.uint8))

        try:
            file_path.parent.mkdir(parents=True, exist_ok=True)
            if self.image_format == 'jpg':
                img.save(file_path, 'JPEG', quality=self.jpeg_quality)
            else:
                img.save(file_path, 'PNG')
        except OSError as e:
            raise StorageFailure(f"Could not write {path}: {e}") from e

    def get(self, path: str) -> np.ndarray:
        """Read a stored grid back as (H, W, 3) uint8 RGB."""
        file_path = self._resolve(path)
        if not file_path.is_file():
            raise NotFoundError(f"No stored image at {path}")

        try:
            with Image.open(file_path) as img:
                return np.asarray(img.convert('RGB'), dtype=np.uint8)
        except (OSError, UnidentifiedImageError) as e:
            raise StorageFailure(f"Could not read {path}: {e}") from e

    def read_bytes(self, path: str) -> bytes:
        """Raw encoded bytes of a stored image."""
        file_path = self._resolve(path)
        if not file_path.is_file():
            raise NotFoundError(f"No stored image at {path}")

        try:
            return file_path.read_bytes()
        except OSError as e:
            raise StorageFailure(f"Could not read {path}: {e}") from e

    def exists_tree(self, session_id: str) -> bool:
        session_dir = self._resolve(session_id)
        return session_dir.is_dir()

    def delete_tree(self, session_id: str) -> None:
        """Delete every image stored for a session. Missing sessions are ignored."""
        session_dir = self._resolve(session_id)
        if not session_dir.is_dir():
            return

        try:
            shutil.rmtree(session_dir)
        except OSError as e:
            raise StorageFailure(f"Could not delete images of session {session_id}: {e}") from e

        logger.info("Deleted stored fragments of session %s", session_id)
