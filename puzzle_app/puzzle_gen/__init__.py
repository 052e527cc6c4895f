from .config import SliceConfig
from .slicer import FragmentSlicer

__all__ = ["SliceConfig", "FragmentSlicer"]
