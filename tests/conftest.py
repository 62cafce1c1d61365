from __future__ import annotations

from typing import Optional

import numpy as np
import pytest

from workpose.config import Config
from workpose.decode import BOX_FIELDS, KPT_STRIDE, row_width
from workpose.inference import RawPrediction
from workpose.records import Box, Detection, Point


def build_row(
    cx: float,
    cy: float,
    w: float,
    h: float,
    score: float = 0.9,
    keypoints: Optional[dict[int, tuple[float, float, float]]] = None,
    num_classes: int = 1,
    class_scores: Optional[list[float]] = None,
) -> np.ndarray:
    row = np.zeros(row_width(num_classes), dtype=np.float32)
    row[:BOX_FIELDS] = [cx, cy, w, h]
    if class_scores is not None:
        row[BOX_FIELDS : BOX_FIELDS + num_classes] = class_scores
    else:
        row[BOX_FIELDS] = score
    base = BOX_FIELDS + num_classes
    for idx, triplet in (keypoints or {}).items():
        row[base + idx * KPT_STRIDE : base + (idx + 1) * KPT_STRIDE] = triplet
    return row


def build_block(*rows: np.ndarray, num_classes: int = 1) -> np.ndarray:
    if not rows:
        return np.zeros((0, row_width(num_classes)), dtype=np.float32)
    return np.stack(rows)


def make_detection(
    cx: float,
    cy: float,
    w: float = 40.0,
    h: float = 100.0,
    left_wrist: Optional[Point] = None,
    right_wrist: Optional[Point] = None,
) -> Detection:
    box = Box(cx - w / 2, cy - h / 2, cx + w / 2, cy + h / 2)
    return Detection(box=box, center=(cx, cy), score=0.9, left_wrist=left_wrist, right_wrist=right_wrist)


def keep_all(boxes, scores, iou_threshold, score_threshold):
    return list(range(len(scores)))


class ScriptedModel:
    """Stands in for the inference call: returns queued blocks in order."""

    def __init__(self, *blocks: np.ndarray, x_ratio: float = 1.0, y_ratio: float = 1.0):
        self.blocks = list(blocks)
        self.x_ratio = x_ratio
        self.y_ratio = y_ratio
        self.calls = 0

    def __call__(self, frame) -> RawPrediction:
        self.calls += 1
        block = self.blocks.pop(0) if len(self.blocks) > 1 else self.blocks[0]
        return RawPrediction(block=block, x_ratio=self.x_ratio, y_ratio=self.y_ratio)


class RecordingObserver:
    def __init__(self):
        self.results = []
        self.cleared = 0

    def on_frame(self, result):
        self.results.append(result)

    def clear(self):
        self.cleared += 1


@pytest.fixture
def config() -> Config:
    return Config(
        keypoint_confidence_threshold=0.4,
        sample_interval_seconds=0.5,
        window_seconds=3.0,
        motion_threshold=0.1,
        track_stale_for_match_seconds=1.5,
        track_expiry_seconds=2.0,
        match_distance_floor_pixels=80.0,
        match_distance_box_factor=0.5,
        num_classes=1,
        reset_on_rewind=True,
    )
