"""Simulated rides through the classifier and station counter."""

from __future__ import annotations

import pytest

from subalarm.analysis.classifier import MotionClassifier
from subalarm.analysis.config import SimulationConfig
from subalarm.analysis.stations import StationCounter
from subalarm.analysis.types import MotionState, SimulationSegment
from subalarm.simulation.engine import SimulationEngine
from helpers import collapse

S = MotionState

STOP = SimulationSegment("Stopped", 0.0, 0.0, -1.0, 2.0)
ACCEL = SimulationSegment("Accel", 0.5, 0.1, -1.0, 3.0)
CRUISE = SimulationSegment("Cruise", 0.2, 0.1, -1.0, 5.0)
DECEL = SimulationSegment("Decel", 0.45, 0.05, -1.0, 3.0)

ONE_STATION = [S.UNKNOWN, S.STOPPED, S.ACCELERATING, S.CRUISING, S.DECELERATING, S.STOPPED]


def ride(segments, cfg: SimulationConfig):
    classifier = MotionClassifier()
    counter = StationCounter()
    classifier.subscribe(counter)
    states = [classifier.current_state]
    finished = SimulationEngine(cfg).run(
        lambda s: states.append(classifier.process(s)),
        lambda: None,
        segments,
    )
    assert finished
    return collapse(states), counter.count


def test_builtin_ride_without_noise():
    states, stations = ride(None, SimulationConfig(tick_interval=0.0, noise=0.0))
    assert states == ONE_STATION
    assert stations == 1


@pytest.mark.parametrize("seed", [0, 1, 2, 3, 4])
def test_noisy_ride_with_clear_margins(seed):
    states, stations = ride(
        [STOP, ACCEL, CRUISE, DECEL, STOP],
        SimulationConfig.instant(seed=seed),
    )
    assert states == ONE_STATION
    assert stations == 1


def test_two_stations():
    states, stations = ride(
        [STOP, ACCEL, CRUISE, DECEL, STOP, ACCEL, CRUISE, DECEL, STOP],
        SimulationConfig.instant(seed=11),
    )
    assert states == ONE_STATION + ONE_STATION[2:]
    assert stations == 2


def test_gentle_braking_still_counts():
    states, stations = ride(
        [STOP, ACCEL, CRUISE, STOP],
        SimulationConfig.instant(seed=5),
    )
    assert states == [S.UNKNOWN, S.STOPPED, S.ACCELERATING, S.CRUISING, S.STOPPED]
    assert stations == 1


def test_aborted_departure_is_not_a_station():
    states, stations = ride([STOP, ACCEL, STOP], SimulationConfig.instant(seed=5))
    assert states == [S.UNKNOWN, S.STOPPED, S.ACCELERATING, S.STOPPED]
    assert stations == 0
