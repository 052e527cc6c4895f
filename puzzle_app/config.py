"""Application configuration."""
from dataclasses import dataclass, field
from typing import Any, Mapping

from puzzle_app.main.puzzle_solver.solver.config import GridConfig, MatchingConfig
from puzzle_app.puzzle_gen.config import SliceConfig

IMAGE_FORMATS = ('png', 'jpg')


@dataclass
class StorageConfig:
    """Where and how fragment pixels are stored."""
    root_dir: str = "./puzzle_images"
    image_format: str = "png"  # png keeps borders lossless, jpg trades accuracy for size
    jpeg_quality: int = 95  # JPEG quality if format is jpg

    def __post_init__(self):
        if self.image_format not in IMAGE_FORMATS:
            raise ValueError(f"image_format must be one of {IMAGE_FORMATS}, got {self.image_format!r}")
        if not 1 <= self.jpeg_quality <= 100:
            raise ValueError(f"jpeg_quality must be in [1, 100], got {self.jpeg_quality}")


@dataclass
class AppConfig:
    """Complete configuration of the puzzle service."""
    grid: GridConfig = field(default_factory=GridConfig)
    matching: MatchingConfig = field(default_factory=MatchingConfig)
    slicing: SliceConfig = field(default_factory=SliceConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)

    secret_key: str = "dev"  # Signs the session cookie, override in production
    log_level: str = "INFO"
    max_upload_mb: int = 16

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> "AppConfig":
        """
        Build a config from flat, upper-case keys (e.g. Flask config or environment).

        Recognized keys: PUZZLE_NUM_COLS, PUZZLE_NUM_ROWS, PUZZLE_COLOR_THRESHOLD,
        PUZZLE_MEAN_ERROR_THRESHOLD, PUZZLE_MAX_WORKERS, PUZZLE_SEED, PUZZLE_SHUFFLE,
        PUZZLE_IMAGES_DIR, PUZZLE_IMAGE_FORMAT, PUZZLE_JPEG_QUALITY, SECRET_KEY,
        LOG_LEVEL, MAX_UPLOAD_MB. Missing keys keep their defaults.
        """
        defaults = cls()

        def get(key, default, convert):
            value = values.get(key)
            return default if value is None else convert(value)

        def to_bool(value):
            if isinstance(value, str):
                return value.strip().lower() in ('1', 'true', 'yes', 'on')
            return bool(value)

        return cls(
            grid=GridConfig(
                num_cols=get('PUZZLE_NUM_COLS', defaults.grid.num_cols, int),
                num_rows=get('PUZZLE_NUM_ROWS', defaults.grid.num_rows, int),
            ),
            matching=MatchingConfig(
                color_threshold=get('PUZZLE_COLOR_THRESHOLD', defaults.matching.color_threshold, int),
                mean_error_threshold=get('PUZZLE_MEAN_ERROR_THRESHOLD',
                                         defaults.matching.mean_error_threshold, float),
                max_workers=get('PUZZLE_MAX_WORKERS', defaults.matching.max_workers, int),
            ),
            slicing=SliceConfig(
                seed=get('PUZZLE_SEED', defaults.slicing.seed, int),
                shuffle=get('PUZZLE_SHUFFLE', defaults.slicing.shuffle, to_bool),
            ),
            storage=StorageConfig(
                root_dir=get('PUZZLE_IMAGES_DIR', defaults.storage.root_dir, str),
                image_format=get('PUZZLE_IMAGE_FORMAT', defaults.storage.image_format, str),
                jpeg_quality=get('PUZZLE_JPEG_QUALITY', defaults.storage.jpeg_quality, int),
            ),
            secret_key=get('SECRET_KEY', defaults.secret_key, str),
            log_level=get('LOG_LEVEL', defaults.log_level, str),
            max_upload_mb=get('MAX_UPLOAD_MB', defaults.max_upload_mb, int),
        )
