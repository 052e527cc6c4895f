"""Shared fixtures for the service-level tests."""

from io import BytesIO

import numpy as np
import pytest
from PIL import Image

from puzzle_app.config import AppConfig, StorageConfig
from puzzle_app.puzzle_gen.config import SliceConfig

FRAGMENT_SIZE = 20


def make_gradient_image(num_cols=5, num_rows=4, size=FRAGMENT_SIZE, extra=(0, 0)):
    """
    RGB image whose borders only match between true grid neighbors.

    R = 2x and G = 3y, so adjacent pixels differ by at most 3 per channel.
    `extra` adds (width, height) remainder pixels on the right and bottom.
    """
    width = num_cols * size + extra[0]
    height = num_rows * size + extra[1]
    image = np.zeros((height, width, 3), dtype=np.uint8)
    image[:, :, 0] = np.minimum(2 * np.arange(width), 255)[None, :]
    image[:, :, 1] = np.minimum(3 * np.arange(height), 255)[:, None]
    image[:, :, 2] = 128
    return image


def encode_png(image):
    buffer = BytesIO()
    Image.fromarray(image).save(buffer, format='PNG')
    return buffer.getvalue()


@pytest.fixture
def gradient_image():
    return make_gradient_image()


@pytest.fixture
def app_config(tmp_path):
    return AppConfig(
        slicing=SliceConfig(seed=3),
        storage=StorageConfig(root_dir=str(tmp_path / "images")),
    )
