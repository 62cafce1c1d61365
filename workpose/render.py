from __future__ import annotations

from typing import Optional

import cv2
import numpy as np

from .records import FrameResult, RenderItem, TrackStatus

# ── Colors (BGR for OpenCV) ──
STATUS_COLORS = {
    TrackStatus.WORKING: (0x78, 0xc8, 0x00),   # green
    TrackStatus.IDLE:    (0x28, 0xb4, 0xb4),   # amber
}
BOX_COLOR = (0xf0, 0xff, 0x00)
LIMB_COLOR = (0xe6, 0x00, 0xff)
JOINT_COLOR = (0xff, 0xfa, 0xe6)

# COCO skeleton
SKELETON_EDGES = [
    (0, 1), (0, 2), (1, 3), (2, 4),
    (5, 6), (5, 7), (7, 9), (6, 8), (8, 10),
    (5, 11), (6, 12), (11, 12),
    (11, 13), (13, 15), (12, 14), (14, 16),
]


def _pt(x: float, y: float) -> tuple[int, int]:
    return int(round(x)), int(round(y))


def draw_item(frame: np.ndarray, item: RenderItem, kp_threshold: float = 0.4) -> None:
    b = item.box
    cv2.rectangle(frame, _pt(b.x1, b.y1), _pt(b.x2, b.y2), BOX_COLOR, 2)

    kps = item.keypoints
    for a, c in SKELETON_EDGES:
        if a >= len(kps) or c >= len(kps):
            continue
        ka, kc = kps[a], kps[c]
        if ka.confidence >= kp_threshold and kc.confidence >= kp_threshold:
            cv2.line(frame, _pt(ka.x, ka.y), _pt(kc.x, kc.y), LIMB_COLOR, 3, cv2.LINE_AA)
    for kp in kps:
        if kp.confidence < kp_threshold:
            continue
        cv2.circle(frame, _pt(kp.x, kp.y), 4, JOINT_COLOR, -1, cv2.LINE_AA)

    # Status pill above the box
    label = f"#{item.track_id} {item.status.value}"
    font = cv2.FONT_HERSHEY_SIMPLEX
    (tw, th), _ = cv2.getTextSize(label, font, 0.5, 1)
    h, w = frame.shape[:2]
    bx = max(0, min(w - tw - 18, int(b.x1)))
    by = max(0, int(b.y1) - th - 14)
    cv2.rectangle(frame, (bx, by), (bx + tw + 16, by + th + 10), STATUS_COLORS[item.status], -1)
    cv2.putText(frame, label, (bx + 8, by + th + 4), font, 0.5, (255, 255, 255), 1, cv2.LINE_AA)


def draw_counts(frame: np.ndarray, result: FrameResult) -> None:
    c = result.counts
    text = f"people {c.total} | working {c.working} | idle {c.idle}"
    font = cv2.FONT_HERSHEY_SIMPLEX
    (tw, th), _ = cv2.getTextSize(text, font, 0.6, 2)
    overlay = frame.copy()
    cv2.rectangle(overlay, (8, 8), (8 + tw + 20, 8 + th + 16), (30, 30, 30), -1)
    cv2.addWeighted(overlay, 0.8, frame, 0.2, 0, frame)
    cv2.putText(frame, text, (18, 8 + th + 8), font, 0.6, (255, 255, 255), 2, cv2.LINE_AA)


class OverlayRenderer:
    """Holds the latest frame result and paints it onto frames on request."""

    def __init__(self, kp_threshold: float = 0.4):
        self.kp_threshold = kp_threshold
        self.result: Optional[FrameResult] = None

    def on_frame(self, result: FrameResult) -> None:
        self.result = result

    def clear(self) -> None:
        self.result = None

    def draw(self, frame: np.ndarray) -> np.ndarray:
        if self.result is None:
            return frame
        for item in self.result.items:
            draw_item(frame, item, self.kp_threshold)
        draw_counts(frame, self.result)
        return frame
