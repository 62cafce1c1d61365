from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv


load_dotenv()


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in {"1", "true", "yes"}


@dataclass
class Config:
    model_path: Path = Path(os.getenv("MODEL_PATH", "models/yolov8n-pose.onnx"))
    model_input_size: int = int(os.getenv("MODEL_INPUT_SIZE", "640"))
    num_classes: int = int(os.getenv("NUM_CLASSES", "1"))

    output_dir: Path = Path(os.getenv("OUTPUT_DIR", "outputs"))
    run_id: str = os.getenv("RUN_ID", "latest")

    nms_iou_threshold: float = float(os.getenv("NMS_IOU_THRESHOLD", "0.45"))
    nms_score_threshold: float = float(os.getenv("NMS_SCORE_THRESHOLD", "0.25"))
    max_detections: int = int(os.getenv("MAX_DETECTIONS", "300"))

    keypoint_confidence_threshold: float = float(os.getenv("KEYPOINT_CONFIDENCE_THRESHOLD", "0.4"))
    sample_interval_seconds: float = float(os.getenv("SAMPLE_INTERVAL_SECONDS", "0.5"))
    window_seconds: float = float(os.getenv("WINDOW_SECONDS", "3.0"))
    motion_threshold: float = float(os.getenv("MOTION_THRESHOLD", "0.1"))

    track_stale_for_match_seconds: float = float(os.getenv("TRACK_STALE_FOR_MATCH_SECONDS", "1.5"))
    track_expiry_seconds: float = float(os.getenv("TRACK_EXPIRY_SECONDS", "2.0"))
    match_distance_floor_pixels: float = float(os.getenv("MATCH_DISTANCE_FLOOR_PIXELS", "80"))
    match_distance_box_factor: float = float(os.getenv("MATCH_DISTANCE_BOX_FACTOR", "0.5"))

    reset_on_rewind: bool = _env_bool("RESET_ON_REWIND", "true")
    idle_burst_seconds: float = float(os.getenv("IDLE_BURST_SECONDS", "5"))

    @property
    def runs_dir(self) -> Path:
        return self.output_dir / "runs"

    @property
    def run_dir(self) -> Path:
        return self.runs_dir / self.run_id

    def validate(self) -> "Config":
        for name in ("keypoint_confidence_threshold", "nms_iou_threshold", "nms_score_threshold"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"{name} must be within [0, 1], got {value}")
        for name in (
            "sample_interval_seconds",
            "window_seconds",
            "track_stale_for_match_seconds",
            "track_expiry_seconds",
            "match_distance_floor_pixels",
            "match_distance_box_factor",
            "motion_threshold",
        ):
            value = getattr(self, name)
            if value < 0:
                raise ValueError(f"{name} must be non-negative, got {value}")
        if self.num_classes < 1:
            raise ValueError(f"num_classes must be at least 1, got {self.num_classes}")
        return self


CONFIG = Config()
