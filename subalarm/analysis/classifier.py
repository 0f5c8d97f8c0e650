"""
Classify a periodic accelerometer stream into debounced vehicle motion phases.

Each sample goes through two stages:
- Stage 1: instantaneous classification from the deviation of the acceleration
  magnitude from the gravity baseline
- Stage 2: debounce, where an instantaneous state has to persist for more than
  `confirm_ticks` ticks and form an allowed (current, instantaneous) pair in
  TRANSITIONS before it becomes the confirmed state
"""

from __future__ import annotations
from typing import Callable, Optional

from subalarm.analysis.config import ClassifierConfig
from subalarm.analysis.types import AccelerationSample, MotionState, Transition
from subalarm.utils.log import get_logger

logger = get_logger(__name__)

TransitionListener = Callable[[Transition], None]

# -----------------------------------------------------------------------------
# Allowed confirmed transitions: (current, instantaneous) -> new current.
# Pairs not listed leave the confirmed state unchanged.
TRANSITIONS: dict[tuple[MotionState, MotionState], MotionState] = {
    (MotionState.STOPPED,      MotionState.ACCELERATING): MotionState.ACCELERATING,
    (MotionState.ACCELERATING, MotionState.CRUISING):     MotionState.CRUISING,
    (MotionState.CRUISING,     MotionState.DECELERATING): MotionState.DECELERATING,
    (MotionState.DECELERATING, MotionState.STOPPED):      MotionState.STOPPED,
    # smooth running: braking too gentle to register as deceleration
    (MotionState.CRUISING,     MotionState.STOPPED):      MotionState.STOPPED,
    (MotionState.ACCELERATING, MotionState.STOPPED):      MotionState.STOPPED,
    # speeding up again while braking
    (MotionState.DECELERATING, MotionState.CRUISING):     MotionState.CRUISING,
    # first observation settles the initial state
    **{(MotionState.UNKNOWN, s): s for s in MotionState},
}
# -----------------------------------------------------------------------------


def deviation(sample: AccelerationSample, gravity: float = 1.0) -> float:
    """
    Absolute deviation (in g) of the sample magnitude from resting gravity.
    """
    return abs(sample.magnitude - gravity)


def instantaneous_state(
    sample: AccelerationSample,
    current: MotionState,
    cfg: ClassifierConfig,
) -> Optional[MotionState]:
    """
    Classify a single sample, using the confirmed state as context.

    Parameters
    ----------
    sample
        The accelerometer reading to classify.
    current
        Last confirmed state; disambiguates acceleration from deceleration,
        since both show up as the same magnitude deviation.
    cfg
        Classifier thresholds.

    Returns
    -------
    Optional[MotionState]
        The instantaneous state, or None when the sample is handling noise
        and must not take part in debouncing.
    """
    delta = deviation(sample, cfg.gravity)

    if delta > cfg.ignore_threshold:
        return None
    if delta > cfg.accel_threshold:
        if current in (MotionState.STOPPED, MotionState.UNKNOWN):
            return MotionState.ACCELERATING
        if current in (MotionState.CRUISING, MotionState.ACCELERATING):
            return MotionState.DECELERATING
        return MotionState.ACCELERATING
    if delta > cfg.stop_threshold:
        return MotionState.CRUISING
    return MotionState.STOPPED


def confirm(
    current: MotionState,
    instantaneous: MotionState,
    run_length: int,
    confirm_ticks: int,
) -> tuple[MotionState, int]:
    """
    Decide the confirmed state after a debounce step.

    Parameters
    ----------
    current
        Last confirmed state.
    instantaneous
        Instantaneous state of the current tick.
    run_length
        Consecutive ticks `instantaneous` has been observed, already counting
        this tick.
    confirm_ticks
        Run length that has to be exceeded before a transition is attempted.

    Returns
    -------
    tuple[MotionState, int]
        New confirmed state and new run length. The run length restarts at 0
        only when the confirmed state actually changed; a disallowed pair keeps
        re-evaluating to a no-op on every following tick.
    """
    if run_length <= confirm_ticks:
        return current, run_length
    new_state = TRANSITIONS.get((current, instantaneous), current)
    if new_state != current:
        return new_state, 0
    return current, run_length


class MotionClassifier:
    """
    Stateful, single-threaded classifier turning samples into confirmed states.

    Callers must serialize calls to `process`; no locking is done here.
    """
    def __init__(self, cfg: ClassifierConfig | None = None) -> None:
        self.cfg = cfg or ClassifierConfig.subway()
        self._listeners: list[TransitionListener] = []
        self._current = MotionState.UNKNOWN
        self._pending = MotionState.UNKNOWN
        self._run_length = 0

    @property
    def current_state(self) -> MotionState:
        return self._current

    @property
    def pending_state(self) -> MotionState:
        return self._pending

    @property
    def pending_run_length(self) -> int:
        return self._run_length

    def subscribe(self, listener: TransitionListener) -> Callable[[], None]:
        """
        Register a callback fired on every confirmed transition.

        Returns a function that removes the listener again.
        """
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def process(self, sample: AccelerationSample) -> MotionState:
        """
        Feed one sample and return the (possibly unchanged) confirmed state.
        """
        instant = instantaneous_state(sample, self._current, self.cfg)
        if instant is None:
            logger.debug(
                "Ignoring handling noise: deviation %.3fg",
                deviation(sample, self.cfg.gravity),
            )
            return self._current

        if instant == self._pending:
            self._run_length += 1
        else:
            self._pending = instant
            self._run_length = 0

        previous = self._current
        self._current, self._run_length = confirm(
            previous, instant, self._run_length, self.cfg.confirm_ticks
        )
        if self._current != previous:
            logger.info("Motion state %s -> %s", previous.value, self._current.value)
            transition = Transition(previous, self._current, sample)
            for listener in list(self._listeners):
                listener(transition)
        return self._current

    def reset(self) -> None:
        """
        Drop all hysteresis state, e.g. when monitoring stops.
        """
        self._current = MotionState.UNKNOWN
        self._pending = MotionState.UNKNOWN
        self._run_length = 0
