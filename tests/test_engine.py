"""Tests for ride expansion, fixture loading and playback control."""

from __future__ import annotations

import json
import random
import threading
import time

import pytest

from subalarm.analysis.config import SimulationConfig
from subalarm.analysis.types import SimulationSegment
from subalarm.simulation.engine import Playback, SimulationEngine, expand, tick_count
from subalarm.simulation.fixtures import FALLBACK_SEGMENTS, FixtureError, load_segments


def instant_engine(**kwargs) -> SimulationEngine:
    return SimulationEngine(SimulationConfig.instant(seed=7), **kwargs)


def test_fallback_ride_has_150_ticks_and_finishes_once():
    events = []
    finished = instant_engine().run(
        lambda s: events.append("sample"),
        lambda: events.append("finish"),
    )
    assert finished
    assert events.count("sample") == 150
    assert events.count("finish") == 1
    assert events[-1] == "finish"


@pytest.mark.parametrize("duration, ticks", [(2.0, 20), (0.26, 3), (1.04, 10), (0.0, 0)])
def test_tick_count(duration, ticks):
    assert tick_count(SimulationSegment("p", 0.0, 0.0, -1.0, duration)) == ticks


def test_expand_noise_is_bounded_to_x_and_y():
    segments = [SimulationSegment("Accel", 0.4, 0.1, -1.0, 3.0)]
    samples = list(expand(segments, SimulationConfig(), random.Random(3)))
    assert len(samples) == 30
    for s in samples:
        assert abs(s.x - 0.4) <= 0.01
        assert abs(s.y - 0.1) <= 0.01
        assert s.z == -1.0
    assert len({s.x for s in samples}) > 1


def test_expand_timestamps_step_by_tick():
    samples = list(expand(FALLBACK_SEGMENTS[:1], SimulationConfig(), random.Random(0)))
    gaps = {(b.timestamp - a.timestamp).total_seconds() for a, b in zip(samples, samples[1:])}
    assert gaps == {0.1}


def test_seeded_engines_repeat_the_same_noise():
    a = [s.x for s in instant_engine().stream()]
    b = [s.x for s in instant_engine().stream()]
    assert a == b


def test_playback_is_not_restartable():
    playback = instant_engine().stream()
    assert len(list(playback)) == 150
    assert playback.finished
    assert list(playback) == []


def test_new_stream_cancels_the_active_one():
    engine = instant_engine()
    first = engine.stream()
    next(first)
    second = engine.stream()
    assert first.cancelled
    assert list(first) == []
    assert engine.active
    assert len(list(second)) == 150


def test_stop_inside_callback_ends_delivery():
    engine = instant_engine()
    samples, finishes = [], []

    def on_sample(s):
        samples.append(s)
        if len(samples) == 10:
            engine.stop()
            engine.stop()

    assert not engine.run(on_sample, lambda: finishes.append(True))
    assert len(samples) == 10
    assert finishes == []
    assert not engine.active


def test_stop_from_another_thread_silences_callbacks():
    engine = SimulationEngine(SimulationConfig(tick_interval=0.01, seed=1))
    samples, finishes = [], []
    started = threading.Event()

    def on_sample(s):
        samples.append(s)
        if len(samples) >= 3:
            started.set()

    playback = engine.start(on_sample, lambda: finishes.append(True))
    assert started.wait(timeout=5)
    engine.stop()
    delivered = len(samples)
    time.sleep(0.1)
    engine.join(timeout=5)

    assert len(samples) == delivered < 150
    assert finishes == []
    assert playback.cancelled


def test_stop_without_playback_is_safe():
    engine = instant_engine()
    engine.stop()
    engine.stop()
    assert not engine.active


def test_playback_waits_between_ticks():
    playback = Playback(iter(range(3)), interval=0.02)
    t0 = time.monotonic()
    assert list(playback) == [0, 1, 2]
    assert time.monotonic() - t0 >= 0.06
    assert playback.delivered == 3


def test_fixture_segments_are_used(tmp_path):
    fixture = tmp_path / "simulation_data.json"
    fixture.write_text(json.dumps([
        {"phase": "Stopped", "x": 0, "y": 0, "z": -1.0, "duration": 1.0},
        {"phase": "Accel", "x": 0.5, "y": 0.1, "z": -1.0, "duration": 0.5},
    ]))
    assert load_segments(fixture)[1] == SimulationSegment("Accel", 0.5, 0.1, -1.0, 0.5)
    assert len(list(instant_engine(fixture=fixture).stream())) == 15


@pytest.mark.parametrize(
    "content",
    [
        "not json",
        json.dumps({"phase": "Stopped"}),
        json.dumps([{"phase": "Stopped", "x": 0, "y": 0, "z": -1.0, "duration": -1}]),
        json.dumps([{"phase": "Stopped", "x": "fast", "y": 0, "z": -1.0, "duration": 1}]),
    ],
)
def test_malformed_fixture_falls_back(tmp_path, content):
    fixture = tmp_path / "bad.json"
    fixture.write_text(content)
    with pytest.raises(FixtureError):
        load_segments(fixture)
    assert instant_engine(fixture=fixture).segments() == list(FALLBACK_SEGMENTS)


def test_missing_or_empty_fixture_falls_back(tmp_path):
    assert instant_engine(fixture=tmp_path / "nope.json").segments() == list(FALLBACK_SEGMENTS)
    empty = tmp_path / "empty.json"
    empty.write_text("[]")
    assert instant_engine(fixture=empty).segments() == list(FALLBACK_SEGMENTS)


def test_explicit_segments_win_over_fixture(tmp_path):
    ride = [SimulationSegment("Cruise", 0.2, 0.1, -1.0, 1.0)]
    assert instant_engine(fixture=tmp_path / "nope.json").segments(ride) == ride
