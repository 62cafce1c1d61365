from __future__ import annotations

import numpy as np
import pandas as pd


def status_segments(t_sec: np.ndarray, labels: list[str]) -> list[dict]:
    """Collapse a time-ordered label sequence into contiguous segments."""
    if len(labels) == 0:
        return []
    segments = []
    start_idx = 0
    for i in range(1, len(labels) + 1):
        boundary = i == len(labels) or labels[i] != labels[start_idx]
        if boundary:
            start_sec = float(t_sec[start_idx])
            if i < len(t_sec):
                end_sec = float(t_sec[i])
            elif len(t_sec) > 1:
                end_sec = float(t_sec[i - 1] + (t_sec[i - 1] - t_sec[i - 2]))
            else:
                end_sec = start_sec
            segments.append(
                {
                    "label": labels[start_idx],
                    "start_sec": start_sec,
                    "end_sec": max(end_sec, start_sec),
                    "duration_sec": max(0.0, end_sec - start_sec),
                    "observations": i - start_idx,
                }
            )
            start_idx = i
    return segments


def track_segments(track_df: pd.DataFrame) -> dict[int, list[dict]]:
    """Per-track segments from a table with t_sec, track_id and status columns."""
    if track_df.empty:
        return {}
    out: dict[int, list[dict]] = {}
    for tid, rows in track_df.sort_values("t_sec").groupby("track_id", sort=True):
        out[int(tid)] = status_segments(rows["t_sec"].to_numpy(), rows["status"].tolist())
    return out


def _sum_dur(segments: list[dict], label: str) -> float:
    return sum(s["duration_sec"] for s in segments if s["label"] == label)


def track_metrics(track_id: int, segments: list[dict], idle_burst_thr: float) -> dict:
    total = max(sum(s["duration_sec"] for s in segments), 1e-8)
    working = _sum_dur(segments, "working")
    idle = _sum_dur(segments, "idle")

    transitions = max(len(segments) - 1, 0)
    transitions_per_min = transitions / (total / 60.0)

    idle_bursts = [s for s in segments if s["label"] == "idle" and s["duration_sec"] >= idle_burst_thr]

    return {
        "track_id": track_id,
        "first_seen_sec": segments[0]["start_sec"] if segments else 0.0,
        "last_seen_sec": segments[-1]["end_sec"] if segments else 0.0,
        "total_time_sec": total,
        "working_sec": working,
        "idle_sec": idle,
        "working_pct": working / total,
        "idle_pct": idle / total,
        "transitions_per_min": transitions_per_min,
        "idle_burst_count": len(idle_bursts),
        "idle_burst_total_sec": sum(s["duration_sec"] for s in idle_bursts),
    }


def session_summary(counts_df: pd.DataFrame) -> dict:
    """Aggregate the per-frame counts table (t_sec, total, working, idle)."""
    if counts_df.empty:
        return {
            "frames_processed": 0,
            "duration_sec": 0.0,
            "peak_people": 0,
            "mean_people": 0.0,
            "mean_working_share": 0.0,
        }
    occupied = counts_df[counts_df["total"] > 0]
    share = (occupied["working"] / occupied["total"]).mean() if not occupied.empty else 0.0
    return {
        "frames_processed": int(len(counts_df)),
        "duration_sec": float(counts_df["t_sec"].max() - counts_df["t_sec"].min()),
        "peak_people": int(counts_df["total"].max()),
        "mean_people": float(counts_df["total"].mean()),
        "mean_working_share": float(share),
    }


def generate_insights(metric: dict) -> list[str]:
    insights = []
    if metric["working_pct"] > 0.65:
        insights.append("Sustained hand activity for most of the time on screen.")
    if metric["idle_pct"] > 0.5:
        insights.append("Idle for more than half of the time on screen.")
    if metric["transitions_per_min"] > 6:
        insights.append("Frequent working/idle switches suggest intermittent activity.")
    if metric["idle_burst_count"] > 0:
        insights.append(f"{metric['idle_burst_count']} long idle stretch(es).")
    return insights
