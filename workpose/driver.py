from __future__ import annotations

from enum import Enum
from typing import Any, Callable, Optional, Protocol, Sequence

import numpy as np
from tqdm import tqdm

from .associate import associate
from .classifier import update_status
from .config import CONFIG, Config
from .decode import candidate_boxes, candidate_scores, decode_predictions
from .inference import RawPrediction, nms_dedup
from .records import Detection, FrameResult, RenderItem, StatusCounts, TrackStatus
from .registry import TrackRegistry
from .sampler import record_sample

InferFn = Callable[[Any], RawPrediction]
DedupFn = Callable[[np.ndarray, np.ndarray, float, float], Sequence[int]]


class DriverState(str, Enum):
    IDLE_WAITING = "idle_waiting"
    PROCESSING = "processing"


class FrameObserver(Protocol):
    def on_frame(self, result: FrameResult) -> None: ...

    def clear(self) -> None: ...


class FrameDriver:
    """Runs one processing pass per distinct video timestamp.

    The host calls :meth:`step` once per scheduling tick and :meth:`stop`
    to cancel. Tracks live in :attr:`registry` for the lifetime of the driver.
    """

    def __init__(
        self,
        infer: InferFn,
        dedup: DedupFn = nms_dedup,
        config: Optional[Config] = None,
        observer: Optional[FrameObserver] = None,
    ):
        self.infer = infer
        self.dedup = dedup
        self.config = (config or CONFIG).validate()
        self.observer = observer
        self.registry = TrackRegistry()
        self.state = DriverState.IDLE_WAITING
        self.last_timestamp: Optional[float] = None
        self.stopped = False
        # set when a rewind is seen, consumed by the next successful pass
        self.reset_pending = False

    def step(
        self,
        timestamp: float,
        frame: Any = None,
        paused: bool = False,
        ended: bool = False,
    ) -> Optional[FrameResult]:
        if self.stopped or paused or ended:
            return None
        if self.last_timestamp is not None and timestamp == self.last_timestamp:
            return None

        if self.last_timestamp is not None and timestamp < self.last_timestamp:
            self.reset_pending = True
        self.last_timestamp = timestamp
        self.state = DriverState.PROCESSING
        try:
            return self._process(timestamp, frame)
        finally:
            self.state = DriverState.IDLE_WAITING

    def stop(self) -> None:
        self.stopped = True
        self.state = DriverState.IDLE_WAITING
        if self.observer is not None:
            self.observer.clear()

    def _detect(self, frame: Any) -> list[Detection]:
        cfg = self.config
        raw = self.infer(frame)
        boxes = candidate_boxes(raw.block, cfg.num_classes)
        scores = candidate_scores(raw.block, cfg.num_classes)
        keep = list(self.dedup(boxes, scores, cfg.nms_iou_threshold, cfg.nms_score_threshold))
        return decode_predictions(
            raw.block,
            raw.x_ratio,
            raw.y_ratio,
            keep[: cfg.max_detections],
            num_classes=cfg.num_classes,
            keypoint_threshold=cfg.keypoint_confidence_threshold,
        )

    def _process(self, now_t: float, frame: Any) -> Optional[FrameResult]:
        cfg = self.config
        try:
            detections = self._detect(frame)
        except Exception as exc:
            tqdm.write(f"[warn] frame t={now_t:.3f}s skipped: {type(exc).__name__}: {exc}")
            return None

        if self.reset_pending:
            self.reset_pending = False
            if cfg.reset_on_rewind:
                tqdm.write(f"[rewind] t={now_t:.3f}s, dropping {len(self.registry)} live track(s)")
                self.registry.clear()

        self.registry.expire(now_t, cfg.track_expiry_seconds)
        track_ids = associate(
            detections,
            self.registry,
            now_t,
            stale_for_match_s=cfg.track_stale_for_match_seconds,
            floor_px=cfg.match_distance_floor_pixels,
            box_factor=cfg.match_distance_box_factor,
        )

        for det, tid in zip(detections, track_ids):
            record_sample(
                self.registry.tracks[tid],
                det,
                now_t,
                interval_s=cfg.sample_interval_seconds,
                window_s=cfg.window_seconds,
            )

        for tr in self.registry:
            update_status(tr, cfg.motion_threshold)

        items = tuple(
            RenderItem(
                track_id=tid,
                box=det.box,
                score=det.score,
                keypoints=det.keypoints,
                status=self.registry.tracks[tid].status,
            )
            for det, tid in zip(detections, track_ids)
        )
        working = sum(1 for it in items if it.status == TrackStatus.WORKING)
        result = FrameResult(
            timestamp=now_t,
            counts=StatusCounts(total=len(items), working=working, idle=len(items) - working),
            items=items,
        )
        if self.observer is not None:
            self.observer.on_frame(result)
        return result
