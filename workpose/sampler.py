from __future__ import annotations

from .records import Detection, Sample, Track


def record_sample(
    track: Track,
    detection: Detection,
    now_t: float,
    interval_s: float = 0.5,
    window_s: float = 3.0,
) -> bool:
    """Append a wrist sample to *track* if *interval_s* has passed, then trim to *window_s*.

    Returns True when a sample was recorded.
    """
    if now_t < track.last_sample_time:
        # time went backwards; history no longer lines up with the clock
        track.samples.clear()
        track.last_sample_time = float("-inf")

    sampled = False
    if now_t - track.last_sample_time >= interval_s:
        track.samples.append(
            Sample(timestamp=now_t, left_wrist=detection.left_wrist, right_wrist=detection.right_wrist)
        )
        track.last_sample_time = now_t
        sampled = True

    cutoff = now_t - window_s
    track.samples = [s for s in track.samples if s.timestamp >= cutoff]
    return sampled
