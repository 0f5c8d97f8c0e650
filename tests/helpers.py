"""Shared sample builders for the test suite."""

from __future__ import annotations

from subalarm.analysis.classifier import MotionClassifier
from subalarm.analysis.types import AccelerationSample, MotionState

# deviations from 1 g well inside each band
STILL = 0.0
VIBRATION = 0.05
PUSH = 0.2
JOSTLE = 0.6


def sample(delta: float) -> AccelerationSample:
    """Sample whose magnitude deviates from 1 g by exactly `delta`."""
    return AccelerationSample(0.0, 0.0, -(1.0 + delta))


def feed(classifier: MotionClassifier, delta: float, ticks: int) -> list[MotionState]:
    return [classifier.process(sample(delta)) for _ in range(ticks)]


def collapse(states: list[MotionState]) -> list[MotionState]:
    """Drop consecutive repeats."""
    out: list[MotionState] = []
    for s in states:
        if not out or out[-1] != s:
            out.append(s)
    return out


def classifier_in(state: MotionState) -> MotionClassifier:
    """Classifier driven into `state` through real samples."""
    classifier = MotionClassifier()
    if state == MotionState.UNKNOWN:
        return classifier
    feed(classifier, STILL, 17)
    if state == MotionState.STOPPED:
        return classifier
    feed(classifier, PUSH, 17)
    if state == MotionState.ACCELERATING:
        return classifier
    feed(classifier, VIBRATION, 17)
    if state == MotionState.CRUISING:
        return classifier
    feed(classifier, PUSH, 17)
    assert classifier.current_state == MotionState.DECELERATING
    return classifier
