from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Optional

import cv2
import pandas as pd
from tqdm import tqdm

from .analytics import generate_insights, session_summary, track_metrics, track_segments
from .config import CONFIG, Config
from .driver import FrameDriver
from .inference import PoseModel
from .render import OverlayRenderer
from .report import session_report

_WINDOW = "workpose"


def _open_video(video_path: Path) -> tuple[cv2.VideoCapture, float, int]:
    cap = cv2.VideoCapture(str(video_path))
    if not cap.isOpened():
        raise SystemExit(f"Could not open video: {video_path}")
    source_fps = cap.get(cv2.CAP_PROP_FPS) or 30.0
    total_frames = int(cap.get(cv2.CAP_PROP_FRAME_COUNT) or 0)
    return cap, source_fps, total_frames


def _open_writer(path: Path, fps: float, w: int, h: int) -> cv2.VideoWriter:
    path.parent.mkdir(parents=True, exist_ok=True)
    return cv2.VideoWriter(str(path), cv2.VideoWriter_fourcc(*"mp4v"), fps, (w, h))


def run_pipeline(
    video_path: Path,
    out: Path,
    config: Optional[Config] = None,
    annotate: bool = False,
    show: bool = False,
) -> dict:
    cfg = config or CONFIG
    out.mkdir(parents=True, exist_ok=True)

    print(f"[model] loading {cfg.model_path}")
    model = PoseModel(cfg.model_path, input_size=cfg.model_input_size)
    renderer = OverlayRenderer(kp_threshold=cfg.keypoint_confidence_threshold)
    driver = FrameDriver(model.infer, config=cfg, observer=renderer)

    cap, source_fps, total_frames = _open_video(video_path)
    print(f"[video] {video_path.name}: {source_fps:.2f} fps, {total_frames} frames")

    writer: Optional[cv2.VideoWriter] = None
    counts_rows: list[dict] = []
    track_rows: list[dict] = []
    paused = False
    frame_idx = 0

    pbar = tqdm(total=total_frames or None, desc=f"  {video_path.name}", unit="fr")
    while not driver.stopped:
        if not paused:
            ok, frame = cap.read()
            if not ok:
                break
            t_sec = frame_idx / source_fps
            frame_idx += 1
            pbar.update(1)

        result = driver.step(t_sec, frame, paused=paused)
        if result is not None:
            counts_rows.append(result.as_counts_row())
            for item in result.items:
                track_rows.append(
                    {
                        "t_sec": result.timestamp,
                        "track_id": item.track_id,
                        "status": item.status.value,
                        "score": item.score,
                        "x1": item.box.x1,
                        "y1": item.box.y1,
                        "x2": item.box.x2,
                        "y2": item.box.y2,
                    }
                )
            pbar.set_postfix(
                {"people": result.counts.total, "working": result.counts.working, "tracks": len(driver.registry)}
            )

        if annotate or show:
            canvas = renderer.draw(frame.copy())
            if annotate and not paused:
                if writer is None:
                    h, w = canvas.shape[:2]
                    writer = _open_writer(out / f"{video_path.stem}_annotated.mp4", source_fps, w, h)
                writer.write(canvas)
            if show:
                cv2.imshow(_WINDOW, canvas)
                key = cv2.waitKey(1) & 0xFF
                if key in (ord("q"), 27):
                    driver.stop()
                elif key == ord(" "):
                    paused = not paused

    pbar.close()
    cap.release()
    if writer is not None:
        writer.release()
    if show:
        cv2.destroyWindow(_WINDOW)

    counts_df = pd.DataFrame(counts_rows, columns=["t_sec", "total", "working", "idle"])
    track_df = pd.DataFrame(
        track_rows, columns=["t_sec", "track_id", "status", "score", "x1", "y1", "x2", "y2"]
    )
    counts_df.to_csv(out / "frame_counts.csv", index=False)
    track_df.to_csv(out / "track_predictions.csv", index=False)

    segments = track_segments(track_df)
    metrics = []
    for tid, segs in segments.items():
        metric = track_metrics(tid, segs, cfg.idle_burst_seconds)
        metric["insights"] = generate_insights(metric)
        metrics.append(metric)
    summary = session_summary(counts_df)

    with open(out / "segments.json", "w", encoding="utf-8") as f:
        json.dump({str(k): v for k, v in segments.items()}, f, indent=2)
    with open(out / "metrics.json", "w", encoding="utf-8") as f:
        json.dump({"summary": summary, "tracks": metrics}, f, indent=2)
    (out / "report.md").write_text(session_report(summary, metrics, source=str(video_path)), encoding="utf-8")

    tqdm.write(f"\n✓ Pipeline complete → {out}")
    return summary


def main() -> None:
    parser = argparse.ArgumentParser(description="Working/idle pose monitor")
    parser.add_argument("video", type=Path)
    parser.add_argument("--out", type=Path, default=CONFIG.run_dir)
    parser.add_argument("--model", type=Path, default=CONFIG.model_path)
    parser.add_argument("--motion-threshold", type=float, default=CONFIG.motion_threshold)
    parser.add_argument("--annotate", action="store_true", help="Write an annotated MP4 next to the outputs.")
    parser.add_argument("--show", action="store_true", help="Preview in a window (space = pause, q = stop).")
    args = parser.parse_args()

    cfg = Config(model_path=args.model, motion_threshold=args.motion_threshold)
    run_pipeline(args.video, args.out, cfg, annotate=args.annotate, show=args.show)


if __name__ == "__main__":
    main()
