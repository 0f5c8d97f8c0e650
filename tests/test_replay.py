"""Tests for re-classifying recorded sessions."""

from __future__ import annotations

import random
from datetime import datetime

import pytest

from subalarm.analysis.config import SimulationConfig
from subalarm.analysis.replay import ReplayPipeline
from subalarm.analysis.types import MotionState
from subalarm.simulation.engine import expand
from subalarm.simulation.fixtures import FALLBACK_SEGMENTS
from subalarm.storage.recorder import Recorder, RecordingError

S = MotionState


@pytest.fixture
def recording(tmp_path):
    recorder = Recorder()
    start = datetime(2024, 5, 1, 8, 0)
    samples = list(expand(FALLBACK_SEGMENTS, SimulationConfig(noise=0.0), random.Random(0), start))
    for i, sample in enumerate(samples):
        recorder.add_sample(sample, 1010.0, "recorded")
        if i == 75:
            recorder.add_marker("DOOR_CLOSED", 1010.0)
    return recorder.export(tmp_path)


def test_replay_recovers_ride(recording):
    result = ReplayPipeline().run(recording)
    assert result.samples == 150
    assert result.markers == 1
    assert result.states == [
        S.UNKNOWN, S.STOPPED, S.ACCELERATING, S.CRUISING, S.DECELERATING, S.STOPPED,
    ]
    assert result.station_count == 1
    assert result.final_state == S.STOPPED


def test_replay_keeps_recorded_times(recording):
    result = ReplayPipeline().run(recording)
    times = [t.sample.timestamp for t in result.transitions]
    assert times == sorted(times)


def test_replay_missing_file(tmp_path):
    with pytest.raises(RecordingError):
        ReplayPipeline().run(tmp_path / "missing.json")
