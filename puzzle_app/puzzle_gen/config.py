"""Configuration dataclasses for puzzle slicing."""
from dataclasses import dataclass


@dataclass
class SliceConfig:
    """How a source image is dealt into fragments."""
    # Randomization
    seed: int | None = None  # Random seed for reproducibility
    shuffle: bool = True  # False deals every fragment to its home slot

    # Storage naming
    asset_name: str = "image"  # Default asset name in "<session>/<asset>_<id>.<ext>"
