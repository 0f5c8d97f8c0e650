# subalarm/analysis/types.py

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class MotionState(str, Enum):
    """
    Motion phase of the vehicle carrying the device.
    """
    UNKNOWN = "unknown"
    STOPPED = "stopped"
    ACCELERATING = "accelerating"
    CRUISING = "cruising"
    DECELERATING = "decelerating"


@dataclass(frozen=True)
class AccelerationSample:
    """
    Single tri-axial accelerometer reading.

    Parameters
    ----------
    x : float
        Acceleration along the device x axis, in g.
    y : float
        Acceleration along the device y axis, in g.
    z : float
        Acceleration along the device z axis, in g.
    timestamp : datetime
        Wall-clock time the reading was taken.
    """
    x: float
    y: float
    z: float
    timestamp: datetime = field(default_factory=datetime.now)

    @property
    def magnitude(self) -> float:
        return math.sqrt(self.x ** 2 + self.y ** 2 + self.z ** 2)


@dataclass(frozen=True)
class SimulationSegment:
    """
    One phase of a synthetic ride, held at a constant acceleration.

    Parameters
    ----------
    phase : str
        Informational label (e.g. "Accel"); never read by the classifier.
    x, y, z : float
        Target acceleration vector, in g.
    duration : float
        Length of the segment in seconds.
    """
    phase: str
    x: float
    y: float
    z: float
    duration: float


@dataclass(frozen=True)
class Transition:
    """
    A confirmed change of motion state.
    """
    previous: MotionState
    current: MotionState
    sample: AccelerationSample
