"""
Count station stops from confirmed motion transitions.
"""

from subalarm.analysis.types import MotionState, Transition
from subalarm.utils.log import get_logger

logger = get_logger(__name__)

# states that mean the vehicle was actually travelling
IN_TRANSIT = frozenset({MotionState.CRUISING, MotionState.DECELERATING})


class StationCounter:
    """
    Number of stations the vehicle has stopped at.

    A stop counts only when the vehicle comes to rest from Cruising or
    Decelerating, so the first Unknown -> Stopped settle and a stop after an
    aborted start are never counted.
    """
    def __init__(self) -> None:
        self.count = 0

    def on_transition(self, previous: MotionState, current: MotionState) -> bool:
        """
        Observe a confirmed transition; return True if it counted as a stop.
        """
        if current != MotionState.STOPPED or previous not in IN_TRANSIT:
            return False
        self.count += 1
        logger.info("Arrived at station #%d", self.count)
        return True

    def __call__(self, transition: Transition) -> None:
        # usable directly as a MotionClassifier listener
        self.on_transition(transition.previous, transition.current)

    def reset(self) -> None:
        self.count = 0
