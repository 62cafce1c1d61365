from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

Point = tuple[float, float]


class TrackStatus(str, Enum):
    WORKING = "working"
    IDLE = "idle"


@dataclass(frozen=True)
class Box:
    x1: float
    y1: float
    x2: float
    y2: float

    @property
    def center(self) -> Point:
        return ((self.x1 + self.x2) / 2.0, (self.y1 + self.y2) / 2.0)

    @property
    def width(self) -> float:
        return self.x2 - self.x1

    @property
    def height(self) -> float:
        return self.y2 - self.y1


@dataclass(frozen=True)
class Keypoint:
    x: float
    y: float
    confidence: float


@dataclass(frozen=True)
class Detection:
    """One surviving anchor decoded into display-pixel space.

    ``keypoints`` always holds all 17 COCO joints (for drawing); the wrist
    fields are only set when the joint cleared the keypoint threshold.
    """

    box: Box
    center: Point
    score: float
    class_id: int = 0
    keypoints: tuple[Keypoint, ...] = ()
    left_wrist: Optional[Point] = None
    right_wrist: Optional[Point] = None


@dataclass(frozen=True)
class Sample:
    timestamp: float
    left_wrist: Optional[Point] = None
    right_wrist: Optional[Point] = None


@dataclass
class Track:
    id: int
    last_box: Box
    last_center: Point
    last_update_time: float
    last_sample_time: float = float("-inf")
    samples: list[Sample] = field(default_factory=list)
    status: TrackStatus = TrackStatus.IDLE


@dataclass(frozen=True)
class StatusCounts:
    total: int = 0
    working: int = 0
    idle: int = 0


@dataclass(frozen=True)
class RenderItem:
    track_id: int
    box: Box
    score: float
    keypoints: tuple[Keypoint, ...]
    status: TrackStatus


@dataclass(frozen=True)
class FrameResult:
    timestamp: float
    counts: StatusCounts
    items: tuple[RenderItem, ...] = ()

    def as_counts_row(self) -> dict:
        return {
            "t_sec": self.timestamp,
            "total": self.counts.total,
            "working": self.counts.working,
            "idle": self.counts.idle,
        }
