"""
Re-run a recorded session through a fresh classifier.

- Pass 0: load and validate the exported records
- Pass 1: drop manual markers
- Pass 2: classify every remaining sample, collecting confirmed transitions
- Pass 3: count stations from the transitions
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

from subalarm.analysis.classifier import MotionClassifier
from subalarm.analysis.config import ClassifierConfig
from subalarm.analysis.stations import StationCounter
from subalarm.analysis.types import AccelerationSample, MotionState, Transition
from subalarm.storage.recorder import is_marker, load_recording
from subalarm.utils.log import get_logger
from subalarm.utils.validate import SensorRecord

logger = get_logger(__name__)


@dataclass
class ReplayResult:
    """
    Outcome of a replay.

    Parameters
    ----------
    samples : int
        Number of samples classified (markers excluded).
    markers : int
        Number of marker rows skipped.
    transitions : list[Transition]
        Confirmed transitions in stream order.
    station_count : int
        Stops counted from the transitions.
    final_state : MotionState
        Confirmed state after the last sample.
    """
    samples: int = 0
    markers: int = 0
    transitions: list[Transition] = field(default_factory=list)
    station_count: int = 0
    final_state: MotionState = MotionState.UNKNOWN

    @property
    def states(self) -> list[MotionState]:
        """Confirmed-state sequence, starting from Unknown."""
        return [MotionState.UNKNOWN] + [t.current for t in self.transitions]


def _parse_timestamp(value: str, day: datetime) -> datetime:
    try:
        t = datetime.strptime(value, "%H:%M:%S.%f")
    except ValueError:
        return day
    return day.replace(hour=t.hour, minute=t.minute, second=t.second, microsecond=t.microsecond)


class ReplayPipeline:
    """
    Stateful pipeline classifying the rows of one recording.
    """
    def __init__(self, cfg: ClassifierConfig | None = None) -> None:
        self.cfg = cfg or ClassifierConfig.subway()

    def run(self, path: str | Path) -> ReplayResult:
        logger.info("Replaying %s", path)
        records = load_recording(path)
        logger.info(f"Loaded {len(records)} records")
        result = self.replay(records)
        logger.info(
            f"Replayed {result.samples} samples, skipped {result.markers} markers, "
            f"{len(result.transitions)} transitions, {result.station_count} stations"
        )
        return result

    def replay(self, records: list[SensorRecord]) -> ReplayResult:
        classifier = MotionClassifier(self.cfg)
        stations = StationCounter()
        result = ReplayResult()
        classifier.subscribe(result.transitions.append)
        classifier.subscribe(stations)

        day = datetime.now().replace(hour=0, minute=0, second=0, microsecond=0)
        for record in records:
            if is_marker(record):
                result.markers += 1
                continue
            classifier.process(AccelerationSample(
                record.x, record.y, record.z, _parse_timestamp(record.timestamp, day)
            ))
            result.samples += 1

        result.station_count = stations.count
        result.final_state = classifier.current_state
        return result
