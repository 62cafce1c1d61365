from __future__ import annotations

from typing import Iterator, Optional

from .records import Box, Point, Track


class TrackRegistry:
    """Live tracks keyed by id. Ids are handed out in increasing order and never reused."""

    def __init__(self) -> None:
        self.tracks: dict[int, Track] = {}
        self._next_id = 1

    def __len__(self) -> int:
        return len(self.tracks)

    def __contains__(self, track_id: int) -> bool:
        return track_id in self.tracks

    def __iter__(self) -> Iterator[Track]:
        return iter(list(self.tracks.values()))

    def get(self, track_id: int) -> Optional[Track]:
        return self.tracks.get(track_id)

    def create(self, box: Box, center: Point, timestamp: float) -> int:
        tid = self._next_id
        self._next_id += 1
        self.tracks[tid] = Track(id=tid, last_box=box, last_center=center, last_update_time=timestamp)
        return tid

    def upsert(self, track_id: int, box: Box, center: Point, timestamp: float) -> Track:
        tr = self.tracks.get(track_id)
        if tr is None:
            tr = Track(id=track_id, last_box=box, last_center=center, last_update_time=timestamp)
            self.tracks[track_id] = tr
            self._next_id = max(self._next_id, track_id + 1)
            return tr
        tr.last_box = box
        tr.last_center = center
        tr.last_update_time = timestamp
        return tr

    def expire(self, now_t: float, threshold_s: float = 2.0) -> list[int]:
        stale = [tid for tid, tr in self.tracks.items() if (now_t - tr.last_update_time) > threshold_s]
        for tid in stale:
            self.tracks.pop(tid, None)
        return stale

    def clear(self) -> None:
        # id counter is kept so ids stay unique across a reset
        self.tracks.clear()
