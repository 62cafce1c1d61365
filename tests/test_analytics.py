from __future__ import annotations

import numpy as np
import pandas as pd
import pytest

from workpose.analytics import (
    generate_insights,
    session_summary,
    status_segments,
    track_metrics,
    track_segments,
)
from workpose.report import session_report


def test_status_segments_split_on_label_change():
    t = np.array([0.0, 0.5, 1.0, 1.5, 2.0])
    segs = status_segments(t, ["idle", "idle", "working", "working", "idle"])
    assert [(s["label"], s["start_sec"], s["end_sec"]) for s in segs] == [
        ("idle", 0.0, 1.0),
        ("working", 1.0, 2.0),
        ("idle", 2.0, 2.5),
    ]
    assert segs[1]["observations"] == 2


def test_status_segments_empty():
    assert status_segments(np.array([]), []) == []


def test_track_segments_groups_by_track():
    df = pd.DataFrame(
        {
            "t_sec": [0.0, 0.0, 0.5, 0.5, 1.0],
            "track_id": [1, 2, 1, 2, 1],
            "status": ["idle", "idle", "working", "idle", "working"],
        }
    )
    segs = track_segments(df)
    assert sorted(segs) == [1, 2]
    assert [s["label"] for s in segs[1]] == ["idle", "working"]
    assert [s["label"] for s in segs[2]] == ["idle"]


def test_track_metrics_shares_and_bursts():
    segs = [
        {"label": "working", "start_sec": 0.0, "end_sec": 30.0, "duration_sec": 30.0},
        {"label": "idle", "start_sec": 30.0, "end_sec": 40.0, "duration_sec": 10.0},
    ]
    m = track_metrics(7, segs, idle_burst_thr=5.0)
    assert m["track_id"] == 7
    assert m["working_pct"] == pytest.approx(0.75)
    assert m["idle_pct"] == pytest.approx(0.25)
    assert m["idle_burst_count"] == 1
    assert m["transitions_per_min"] == pytest.approx(1.5)
    assert "Sustained hand activity for most of the time on screen." in generate_insights(m)


def test_session_summary():
    counts = pd.DataFrame(
        {"t_sec": [0.0, 0.5, 1.0], "total": [2, 0, 1], "working": [1, 0, 1], "idle": [1, 0, 0]}
    )
    s = session_summary(counts)
    assert s["frames_processed"] == 3
    assert s["peak_people"] == 2
    assert s["duration_sec"] == pytest.approx(1.0)
    assert s["mean_working_share"] == pytest.approx(0.75)


def test_session_summary_empty_and_report():
    s = session_summary(pd.DataFrame(columns=["t_sec", "total", "working", "idle"]))
    assert s["frames_processed"] == 0
    assert "No frames were processed." in session_report(s, [])
