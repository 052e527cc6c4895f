"""Tests for application configuration."""

import sys
from pathlib import Path

# Add app to path
sys.path.insert(0, str(Path(__file__).parent))

import pytest

from puzzle_app import create_app
from puzzle_app.config import AppConfig, StorageConfig
from puzzle_app.main.puzzle_solver.solver.config import GridConfig


def test_defaults():
    config = AppConfig()
    assert (config.grid.num_cols, config.grid.num_rows) == (5, 4)
    assert config.matching.color_threshold == 9
    assert config.matching.mean_error_threshold == pytest.approx(0.13)
    assert config.storage.image_format == 'png'


def test_from_mapping_converts_strings():
    config = AppConfig.from_mapping({
        'PUZZLE_NUM_COLS': '3',
        'PUZZLE_NUM_ROWS': '2',
        'PUZZLE_COLOR_THRESHOLD': '12',
        'PUZZLE_MEAN_ERROR_THRESHOLD': '0.2',
        'PUZZLE_MAX_WORKERS': '2',
        'PUZZLE_SEED': '42',
        'PUZZLE_SHUFFLE': 'false',
        'PUZZLE_IMAGE_FORMAT': 'jpg',
        'LOG_LEVEL': 'debug',
        'UNRELATED': 'ignored',
    })

    assert config.grid.fragment_count == 6
    assert config.matching.color_threshold == 12
    assert config.matching.mean_error_threshold == pytest.approx(0.2)
    assert config.matching.max_workers == 2
    assert config.slicing.seed == 42
    assert config.slicing.shuffle is False
    assert config.storage.image_format == 'jpg'
    assert config.log_level == 'debug'


def test_from_mapping_keeps_defaults():
    config = AppConfig.from_mapping({})
    assert config == AppConfig()


@pytest.mark.parametrize("factory", [
    lambda: GridConfig(num_cols=0),
    lambda: StorageConfig(image_format='gif'),
    lambda: StorageConfig(jpeg_quality=0),
    lambda: AppConfig.from_mapping({'PUZZLE_MEAN_ERROR_THRESHOLD': '2'}),
])
def test_invalid_values_rejected(factory):
    with pytest.raises(ValueError):
        factory()


def test_create_app_applies_config(app_config):
    app = create_app(app_config)

    assert app.config['SECRET_KEY'] == app_config.secret_key
    assert app.config['MAX_CONTENT_LENGTH'] == app_config.max_upload_mb * 1024 * 1024
    assert app.extensions['puzzle_config'] is app_config
    assert 'puzzle_service' in app.extensions
    assert 'puzzles' in app.blueprints
