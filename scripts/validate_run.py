from __future__ import annotations

import json
import sys
from pathlib import Path

run_dir = Path(sys.argv[1]) if len(sys.argv) > 1 else Path("outputs/runs/latest")
frame_counts = run_dir / "frame_counts.csv"
track_predictions = run_dir / "track_predictions.csv"
segments = run_dir / "segments.json"
metrics = run_dir / "metrics.json"

for path in [frame_counts, track_predictions, segments, metrics]:
    if not path.exists():
        raise SystemExit(f"Missing required artifact: {path}")

metrics_data = json.loads(metrics.read_text())
for key in ["summary", "tracks"]:
    if key not in metrics_data:
        raise SystemExit(f"metrics.json missing key: {key}")
for track in metrics_data["tracks"]:
    for key in ["track_id", "working_pct", "idle_pct"]:
        if key not in track:
            raise SystemExit(f"metrics.json track entry missing key: {key}")

print(f"Validation OK: {len(metrics_data['tracks'])} track(s), core artifacts present.")
