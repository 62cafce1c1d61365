"""Per-person working/idle classification from pose-model predictions."""

__version__ = "0.1.0"

from .config import CONFIG, Config
from .driver import FrameDriver
from .records import Detection, FrameResult, StatusCounts, Track, TrackStatus
from .registry import TrackRegistry

__all__ = [
    "CONFIG",
    "Config",
    "Detection",
    "FrameDriver",
    "FrameResult",
    "StatusCounts",
    "Track",
    "TrackRegistry",
    "TrackStatus",
]
