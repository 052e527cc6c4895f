"""Tests for the file-backed fragment image store."""

import sys
from pathlib import Path

# Add app to path
sys.path.insert(0, str(Path(__file__).parent))

import numpy as np
import pytest

from puzzle_app.main.puzzle_solver.solver.errors import NotFoundError, StorageFailure
from puzzle_app.storage import FileImageStore


@pytest.fixture
def store(tmp_path):
    return FileImageStore(tmp_path)


def test_put_get_is_lossless_for_png(store):
    pixels = np.random.default_rng(0).integers(0, 256, size=(7, 9, 3), dtype=np.uint8)
    store.put("s1/image_0.png", pixels)

    restored = store.get("s1/image_0.png")
    assert restored.dtype == np.uint8
    assert np.array_equal(restored, pixels)


def test_read_bytes_returns_encoded_file(store):
    store.put("s1/image_0.png", np.zeros((2, 2, 3), dtype=np.uint8))
    assert store.read_bytes("s1/image_0.png").startswith(b"\x89PNG")
    assert store.mimetype == "image/png"


def test_jpeg_store(tmp_path):
    store = FileImageStore(tmp_path, image_format='jpg', jpeg_quality=90)
    store.put("s1/image_0.jpg", np.full((8, 8, 3), 100, dtype=np.uint8))

    assert store.extension == "jpg"
    assert store.mimetype == "image/jpeg"
    assert store.get("s1/image_0.jpg").shape == (8, 8, 3)


def test_missing_image_not_found(store):
    with pytest.raises(NotFoundError):
        store.get("s1/nothing.png")
    with pytest.raises(NotFoundError):
        store.read_bytes("s1/nothing.png")


def test_path_escape_rejected(store):
    with pytest.raises(StorageFailure):
        store.put("../outside.png", np.zeros((2, 2, 3), dtype=np.uint8))


def test_delete_tree_only_touches_one_session(store):
    pixels = np.zeros((2, 2, 3), dtype=np.uint8)
    store.put("s1/image_0.png", pixels)
    store.put("s2/image_0.png", pixels)

    store.delete_tree("s1")

    assert not store.exists_tree("s1")
    assert store.exists_tree("s2")


def test_delete_missing_tree_is_noop(store):
    store.delete_tree("never-stored")
    assert not store.exists_tree("never-stored")


def test_corrupt_file_is_storage_failure(store, tmp_path):
    (tmp_path / "s1").mkdir()
    (tmp_path / "s1" / "broken.png").write_bytes(b"not an image")
    with pytest.raises(StorageFailure):
        store.get("s1/broken.png")
