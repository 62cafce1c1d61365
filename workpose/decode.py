from __future__ import annotations

from typing import Iterable, Optional

import numpy as np

from .records import Box, Detection, Keypoint, Point

# COCO-17 layout used by YOLOv8-pose: (x, y, conf) per joint
NUM_KEYPOINTS = 17
KPT_STRIDE = 3
BOX_FIELDS = 4
LEFT_WRIST = 9
RIGHT_WRIST = 10


class DecodeError(ValueError):
    """Raised when a raw prediction block does not have the expected layout."""


def row_width(num_classes: int) -> int:
    return BOX_FIELDS + num_classes + NUM_KEYPOINTS * KPT_STRIDE


def _check_block(block: np.ndarray, num_classes: int) -> np.ndarray:
    arr = np.asarray(block)
    if arr.ndim == 3 and arr.shape[0] == 1:
        arr = arr[0]
    if arr.ndim != 2:
        raise DecodeError(f"expected a 2-D anchor-major block, got shape {arr.shape}")
    expected = row_width(num_classes)
    if arr.shape[1] != expected:
        raise DecodeError(
            f"expected {expected} channels per anchor ({num_classes} class(es)), got {arr.shape[1]}"
        )
    return arr


def candidate_boxes(block: np.ndarray, num_classes: int = 1) -> np.ndarray:
    """Corner boxes ``(N, 4)`` as x1, y1, x2, y2 in model space, for the dedup step."""
    arr = _check_block(block, num_classes)
    cx, cy, w, h = arr[:, 0], arr[:, 1], arr[:, 2], arr[:, 3]
    return np.stack([cx - w / 2, cy - h / 2, cx + w / 2, cy + h / 2], axis=1)


def candidate_scores(block: np.ndarray, num_classes: int = 1) -> np.ndarray:
    arr = _check_block(block, num_classes)
    cls = arr[:, BOX_FIELDS : BOX_FIELDS + num_classes]
    if num_classes == 1:
        return cls[:, 0]
    return cls.max(axis=1)


def _confident(kp: Keypoint, threshold: float) -> Optional[Point]:
    if kp.confidence >= threshold:
        return (kp.x, kp.y)
    return None


def decode_predictions(
    block: np.ndarray,
    x_ratio: float,
    y_ratio: float,
    keep: Iterable[int],
    num_classes: int = 1,
    keypoint_threshold: float = 0.4,
) -> list[Detection]:
    """Decode the surviving anchors of a raw prediction block.

    Parameters
    ----------
    block : (N, 4 + C + 51)
        Anchor-major prediction rows: cx, cy, w, h, C class scores, then
        17 keypoint triplets, all in model-input space.
    x_ratio, y_ratio : float
        Multipliers mapping model-space x / y back to display pixels.
    keep : iterable of int
        Surviving anchor indices from the dedup step. Output order follows it.
    num_classes : int
        Number of class-score channels.
    keypoint_threshold : float
        Minimum joint confidence for a wrist to count as observed.
    """
    arr = _check_block(block, num_classes)
    n = arr.shape[0]
    kpt_start = BOX_FIELDS + num_classes

    detections: list[Detection] = []
    for raw_idx in keep:
        idx = int(raw_idx)
        if idx < 0 or idx >= n:
            raise DecodeError(f"surviving index {idx} out of range for {n} anchors")
        row = arr[idx]

        cx, cy, w, h = (float(v) for v in row[:BOX_FIELDS])
        box = Box(
            x1=(cx - w / 2) * x_ratio,
            y1=(cy - h / 2) * y_ratio,
            x2=(cx + w / 2) * x_ratio,
            y2=(cy + h / 2) * y_ratio,
        )

        if num_classes == 1:
            score = float(row[BOX_FIELDS])
            class_id = 0
        else:
            cls = row[BOX_FIELDS:kpt_start]
            class_id = int(np.argmax(cls))
            score = float(cls[class_id])

        kpts = row[kpt_start:].reshape(NUM_KEYPOINTS, KPT_STRIDE)
        keypoints = tuple(
            Keypoint(x=float(x) * x_ratio, y=float(y) * y_ratio, confidence=float(c))
            for x, y, c in kpts
        )

        detections.append(
            Detection(
                box=box,
                center=box.center,
                score=score,
                class_id=class_id,
                keypoints=keypoints,
                left_wrist=_confident(keypoints[LEFT_WRIST], keypoint_threshold),
                right_wrist=_confident(keypoints[RIGHT_WRIST], keypoint_threshold),
            )
        )
    return detections
