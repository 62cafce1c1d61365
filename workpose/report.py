from __future__ import annotations


def session_report(summary: dict, metrics: list[dict], source: str = "") -> str:
    lines = ["# Activity Report", ""]
    if source:
        lines.extend([f"Source: `{source}`", ""])

    lines.append("## Summary")
    if not summary.get("frames_processed"):
        lines.append("No frames were processed.")
        return "\n".join(lines)
    lines.append(f"- Frames processed: **{summary['frames_processed']}** over {summary['duration_sec']:.1f}s.")
    lines.append(f"- People on screen: peak **{summary['peak_people']}**, mean {summary['mean_people']:.2f}.")
    lines.append(f"- Average working share per frame: **{summary['mean_working_share'] * 100:.1f}%**.")

    lines.extend(["", "## People"])
    if not metrics:
        lines.append("No tracks were observed.")
    ranked = sorted(metrics, key=lambda m: m["working_pct"], reverse=True)
    for m in ranked:
        lines.append(
            f"- Track #{m['track_id']} ({m['first_seen_sec']:.1f}s-{m['last_seen_sec']:.1f}s): "
            f"working {m['working_pct'] * 100:.1f}%, idle {m['idle_pct'] * 100:.1f}%, "
            f"{m['idle_burst_count']} idle burst(s)"
        )
        for insight in m.get("insights", []):
            lines.append(f"  - {insight}")
    return "\n".join(lines)
