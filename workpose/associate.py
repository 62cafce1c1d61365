from __future__ import annotations

import math
from typing import Optional, Sequence

from .records import Box, Detection
from .registry import TrackRegistry


def match_gate(box: Box, floor_px: float = 80.0, box_factor: float = 0.5) -> float:
    """Max center distance a detection may be from a track whose last box is *box*."""
    return max(box_factor * math.hypot(box.width, box.height), floor_px)


def associate(
    detections: Sequence[Detection],
    registry: TrackRegistry,
    now_t: float,
    stale_for_match_s: float = 1.5,
    floor_px: float = 80.0,
    box_factor: float = 0.5,
) -> list[int]:
    """Greedy nearest-center matching of *detections* onto *registry*.

    Returns the track id assigned to each detection, in detection order.
    Unmatched detections get a new track; matched tracks take the
    detection's box, center and *now_t*.
    """
    # Only tracks alive before this frame compete; new ones are minted after the pass.
    candidates = list(registry)
    assigned: list[Optional[int]] = [None] * len(detections)
    claimed: set[int] = set()

    for i, det in enumerate(detections):
        best_tid: Optional[int] = None
        best_dist = math.inf
        for tr in candidates:
            if tr.id in claimed:
                continue
            if now_t - tr.last_update_time > stale_for_match_s:
                continue
            dist = math.hypot(det.center[0] - tr.last_center[0], det.center[1] - tr.last_center[1])
            if dist < match_gate(tr.last_box, floor_px, box_factor) and dist < best_dist:
                best_dist = dist
                best_tid = tr.id
        if best_tid is not None:
            assigned[i] = best_tid
            claimed.add(best_tid)

    track_ids: list[int] = []
    for det, tid in zip(detections, assigned):
        if tid is None:
            tid = registry.create(det.box, det.center, now_t)
        else:
            registry.upsert(tid, det.box, det.center, now_t)
        track_ids.append(tid)
    return track_ids
