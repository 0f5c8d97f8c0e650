# subalarm/analysis/config.py

from dataclasses import dataclass
from typing import Optional

@dataclass(frozen=True)
class ClassifierConfig:
    """
    Configuration for the motion-phase classifier.

    All thresholds are deviations (in g) of the acceleration magnitude from
    the resting gravity baseline.

    Attributes
    ----------
    stop_threshold
        Deviation at or below which the vehicle is considered stopped.
    accel_threshold
        Deviation above which a propulsive (or braking) force is present.
    ignore_threshold
        Deviation above which the sample is treated as handling noise
        (device picked up, walking) and skipped.
    confirm_ticks
        Number of consecutive ticks an instantaneous state must be exceeded
        before it is confirmed.
    gravity
        Resting magnitude of the acceleration vector, in g.
    """
    stop_threshold:   float = 0.02
    accel_threshold:  float = 0.08
    ignore_threshold: float = 0.4
    confirm_ticks:    int   = 15
    gravity:          float = 1.0

    @classmethod
    def subway(cls):
        """Preset for heavy rail (default thresholds)."""
        return cls()

    @classmethod
    def sensitive(cls):
        """Preset for light rail and trams (gentler forces, quicker phases)."""
        return cls(
            stop_threshold=0.015,
            accel_threshold=0.06,
            ignore_threshold=0.4,
            confirm_ticks=10,
        )


@dataclass(frozen=True)
class SimulationConfig:
    """
    Configuration for synthetic stream generation and playback.

    Attributes
    ----------
    tick_interval
        Seconds between delivered samples during playback.
    ticks_per_second
        Samples generated per second of segment duration.
    noise
        Half-width (g) of the uniform jitter added to x and y.
    seed
        Optional seed for a reproducible noise stream.
    """
    tick_interval:    float         = 0.1
    ticks_per_second: int           = 10
    noise:            float         = 0.01
    seed:             Optional[int] = None

    @classmethod
    def instant(cls, seed: Optional[int] = None):
        """Preset for offline runs: no pacing between samples."""
        return cls(tick_interval=0.0, seed=seed)
