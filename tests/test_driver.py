from __future__ import annotations

import dataclasses

import numpy as np
import pytest

from workpose.decode import LEFT_WRIST
from workpose.driver import DriverState, FrameDriver
from workpose.records import StatusCounts, TrackStatus

from conftest import RecordingObserver, ScriptedModel, build_block, build_row, keep_all


def _person(cx: float, wrist_x: float, cy: float = 130.0) -> np.ndarray:
    # 40 x 100 box, confident left wrist
    return build_row(cx, cy, 40, 100, score=0.9, keypoints={LEFT_WRIST: (wrist_x, 120, 0.9)})


def _driver(model, config, **kw) -> FrameDriver:
    return FrameDriver(model, dedup=keep_all, config=config, **kw)


def test_two_frame_scenario_yields_one_working_track(config):
    model = ScriptedModel(build_block(_person(100, 90)), build_block(_person(102, 115)))
    driver = _driver(model, config)

    first = driver.step(0.0, frame=None)
    assert first.counts == StatusCounts(total=1, working=0, idle=1)
    assert first.items[0].box.x1 == 80 and first.items[0].box.y2 == 180

    second = driver.step(0.5, frame=None)
    assert len(driver.registry) == 1
    assert second.items[0].track_id == first.items[0].track_id
    assert second.items[0].status == TrackStatus.WORKING
    assert second.counts == StatusCounts(total=1, working=1, idle=0)


def test_same_timestamp_is_processed_once(config):
    model = ScriptedModel(build_block(_person(100, 90)))
    driver = _driver(model, config)
    assert driver.step(1.0) is not None
    assert driver.step(1.0) is None
    assert model.calls == 1
    assert driver.state == DriverState.IDLE_WAITING


@pytest.mark.parametrize("flags", [{"paused": True}, {"ended": True}])
def test_paused_or_ended_source_is_a_no_op(config, flags):
    model = ScriptedModel(build_block(_person(100, 90)))
    driver = _driver(model, config)
    assert driver.step(0.0, **flags) is None
    assert model.calls == 0
    # the timestamp was not consumed
    assert driver.step(0.0) is not None


def test_inference_failure_skips_frame_without_touching_tracks(config):
    calls = {"n": 0}

    def flaky(frame):
        calls["n"] += 1
        if calls["n"] == 2:
            raise RuntimeError("inference blew up")
        return ScriptedModel(build_block(_person(100, 90)))(frame)

    driver = _driver(flaky, config)
    driver.step(0.0)
    before = dataclasses.replace(driver.registry.get(1), samples=list(driver.registry.get(1).samples))

    assert driver.step(0.3) is None
    assert driver.registry.get(1) == before
    assert driver.state == DriverState.IDLE_WAITING

    assert driver.step(0.6) is not None
    assert driver.registry.get(1).last_update_time == 0.6


def test_malformed_block_is_skipped(config):
    model = ScriptedModel(np.zeros((4, 7), dtype=np.float32))
    driver = _driver(model, config)
    assert driver.step(0.0) is None
    assert len(driver.registry) == 0


def test_stop_halts_processing_and_clears_overlay(config):
    observer = RecordingObserver()
    model = ScriptedModel(build_block(_person(100, 90)))
    driver = _driver(model, config, observer=observer)
    driver.step(0.0)
    assert len(observer.results) == 1

    driver.stop()
    assert observer.cleared == 1
    assert driver.step(0.5) is None
    assert model.calls == 1


def test_counts_cover_every_detection_in_decode_order(config):
    block = build_block(_person(100, 90), _person(400, 390), _person(700, 690))
    driver = _driver(ScriptedModel(block), config)
    result = driver.step(0.0)
    assert [it.track_id for it in result.items] == [1, 2, 3]
    assert result.counts == StatusCounts(total=3, working=0, idle=3)


def test_empty_frame_reports_zero_counts(config):
    driver = _driver(ScriptedModel(build_block()), config)
    result = driver.step(0.0)
    assert result.counts == StatusCounts()
    assert result.items == ()


def test_stale_tracks_expire_before_matching(config):
    model = ScriptedModel(build_block(_person(100, 90)), build_block(), build_block(_person(100, 90)))
    driver = _driver(model, config)
    driver.step(0.0)
    driver.step(2.5)
    assert len(driver.registry) == 0
    result = driver.step(2.6)
    assert result.items[0].track_id == 2


def test_rewind_resets_tracks_but_not_ids(config):
    model = ScriptedModel(build_block(_person(100, 90)))
    driver = _driver(model, config)
    driver.step(5.0)
    result = driver.step(1.0)
    assert result is not None
    assert [t.id for t in driver.registry] == [2]


def test_rewind_reset_survives_a_failed_rewound_frame(config):
    block = build_block(_person(100, 90))

    def fails_at_two(frame):
        if frame == 2.0:
            raise RuntimeError("inference blew up")
        return ScriptedModel(block)(frame)

    driver = _driver(fails_at_two, config)
    assert driver.step(10.0, frame=10.0) is not None
    assert driver.step(2.0, frame=2.0) is None
    assert [t.id for t in driver.registry] == [1]

    assert driver.step(2.1, frame=2.1) is not None
    assert [t.id for t in driver.registry] == [2]
    assert not driver.reset_pending


def test_rewind_without_reset_keeps_matching(config):
    cfg = dataclasses.replace(config, reset_on_rewind=False)
    driver = _driver(ScriptedModel(build_block(_person(100, 90))), cfg)
    driver.step(5.0)
    result = driver.step(4.8)
    assert result.items[0].track_id == 1
    assert [s.timestamp for s in driver.registry.get(1).samples] == [4.8]


def test_max_detections_caps_decoded_anchors(config):
    cfg = dataclasses.replace(config, max_detections=2)
    block = build_block(_person(100, 90), _person(400, 390), _person(700, 690))
    result = _driver(ScriptedModel(block), cfg).step(0.0)
    assert result.counts.total == 2


def test_invalid_config_is_rejected(config):
    with pytest.raises(ValueError):
        FrameDriver(ScriptedModel(build_block()), config=dataclasses.replace(config, window_seconds=-1.0))
