from __future__ import annotations

import numpy as np

from workpose.records import Box, FrameResult, Keypoint, RenderItem, StatusCounts, TrackStatus
from workpose.render import OverlayRenderer


def _result() -> FrameResult:
    kps = tuple(Keypoint(100 + i, 120 + i, 0.9) for i in range(17))
    item = RenderItem(track_id=1, box=Box(80, 80, 160, 220), score=0.9, keypoints=kps, status=TrackStatus.WORKING)
    return FrameResult(timestamp=0.0, counts=StatusCounts(1, 1, 0), items=(item,))


def test_renderer_draws_latest_result():
    renderer = OverlayRenderer()
    renderer.on_frame(_result())
    frame = renderer.draw(np.zeros((300, 300, 3), dtype=np.uint8))
    assert frame.any()


def test_clear_leaves_frames_untouched():
    renderer = OverlayRenderer()
    renderer.on_frame(_result())
    renderer.clear()
    frame = renderer.draw(np.zeros((300, 300, 3), dtype=np.uint8))
    assert not frame.any()
