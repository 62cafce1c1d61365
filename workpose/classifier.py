from __future__ import annotations

import math
from typing import Optional, Sequence

from .records import Box, Point, Sample, Track, TrackStatus


def _displacement(a: Optional[Point], b: Optional[Point]) -> float:
    if a is None or b is None:
        return 0.0
    return math.hypot(b[0] - a[0], b[1] - a[1])


def normalized_motion(samples: Sequence[Sample], box: Box) -> float:
    """Mean wrist displacement per sampled interval, as a fraction of box height.

    Pairs where neither wrist moved (or neither was seen in both samples)
    do not count towards the mean.
    """
    total = 0.0
    pairs = 0
    for prev, cur in zip(samples, samples[1:]):
        d_left = _displacement(prev.left_wrist, cur.left_wrist)
        d_right = _displacement(prev.right_wrist, cur.right_wrist)
        if d_left > 0:
            total += d_left
        if d_right > 0:
            total += d_right
        if d_left > 0 or d_right > 0:
            pairs += 1
    if pairs == 0:
        return 0.0
    box_h = max(1.0, box.height)
    return (total / pairs) / box_h


def classify(samples: Sequence[Sample], box: Box, motion_threshold: float = 0.1) -> TrackStatus:
    if len(samples) < 2:
        return TrackStatus.IDLE
    if normalized_motion(samples, box) >= motion_threshold:
        return TrackStatus.WORKING
    return TrackStatus.IDLE


def update_status(track: Track, motion_threshold: float = 0.1) -> TrackStatus:
    track.status = classify(track.samples, track.last_box, motion_threshold)
    return track.status
