from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

import cv2
import numpy as np


class ModelLoadError(RuntimeError):
    pass


@dataclass(frozen=True)
class RawPrediction:
    """Anchor-major prediction rows plus the ratios mapping model space to frame pixels."""

    block: np.ndarray
    x_ratio: float
    y_ratio: float


def preprocess(frame: np.ndarray, input_size: int) -> tuple[np.ndarray, float, float]:
    """Pad a BGR frame to a square (bottom/right), resize, scale to [0, 1] and swap to RGB.

    Returns (blob, x_ratio, y_ratio).
    """
    h, w = frame.shape[:2]
    max_size = max(h, w)
    padded = np.zeros((max_size, max_size, 3), dtype=frame.dtype)
    padded[:h, :w] = frame[:, :, :3]
    blob = cv2.dnn.blobFromImage(
        padded,
        scalefactor=1.0 / 255.0,
        size=(input_size, input_size),
        swapRB=True,
        crop=False,
    )
    ratio = max_size / float(input_size)
    return blob, ratio, ratio


class PoseModel:
    """YOLOv8-pose ONNX export run through OpenCV's DNN module."""

    def __init__(self, model_path: Path | str, input_size: int = 640, warmup: bool = True):
        self.model_path = Path(model_path)
        self.input_size = input_size
        if not self.model_path.exists():
            raise ModelLoadError(f"Pose model not found: {self.model_path}")
        try:
            self.net = cv2.dnn.readNetFromONNX(str(self.model_path))
        except cv2.error as exc:
            raise ModelLoadError(f"Could not load pose model {self.model_path}") from exc
        if warmup:
            self.net.setInput(np.zeros((1, 3, input_size, input_size), dtype=np.float32))
            self.net.forward()

    def infer(self, frame: np.ndarray) -> RawPrediction:
        blob, x_ratio, y_ratio = preprocess(frame, self.input_size)
        self.net.setInput(blob)
        out = self.net.forward()
        # (1, C, N) -> (N, C)
        block = np.ascontiguousarray(np.asarray(out)[0].T)
        return RawPrediction(block=block, x_ratio=x_ratio, y_ratio=y_ratio)

    __call__ = infer


def nms_dedup(
    boxes: np.ndarray,
    scores: np.ndarray,
    iou_threshold: float,
    score_threshold: float,
    top_k: int = 300,
) -> list[int]:
    """Non-max suppression over corner boxes; returns surviving anchor indices."""
    if len(boxes) == 0:
        return []
    xywh: Sequence[list[float]] = [
        [float(x1), float(y1), float(x2 - x1), float(y2 - y1)] for x1, y1, x2, y2 in np.asarray(boxes)
    ]
    keep = cv2.dnn.NMSBoxes(
        xywh,
        np.asarray(scores, dtype=np.float32).tolist(),
        float(score_threshold),
        float(iou_threshold),
        eta=1.0,
        top_k=int(top_k),
    )
    return [int(i) for i in np.asarray(keep).reshape(-1)]
