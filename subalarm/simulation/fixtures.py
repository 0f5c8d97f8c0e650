"""
Simulation fixture loading: read ride segments from a JSON file.
"""

import json
from pathlib import Path

from pydantic import ValidationError

from subalarm.analysis.types import SimulationSegment
from subalarm.utils.validate import SegmentRecord

# Stopped -> Accel -> Cruise -> Decel -> Stopped, 15 s in total
FALLBACK_SEGMENTS: tuple[SimulationSegment, ...] = (
    SimulationSegment("Stopped", 0.0,  0.0,  -1.0, 2.0),
    SimulationSegment("Accel",   0.4,  0.1,  -1.0, 3.0),
    SimulationSegment("Cruise",  0.2,  0.1,  -1.0, 5.0),
    SimulationSegment("Decel",   0.45, 0.05, -1.0, 3.0),
    SimulationSegment("Stopped", 0.0,  0.0,  -1.0, 2.0),
)


class FixtureError(ValueError):
    """
    Raised when a fixture file is missing, unreadable or malformed.
    """


def to_segment(record: SegmentRecord) -> SimulationSegment:
    return SimulationSegment(record.phase, record.x, record.y, record.z, record.duration)


def load_segments(path: str | Path) -> list[SimulationSegment]:
    """
    Load ride segments from a JSON fixture.

    Parameters
    ----------
    path
        File holding a JSON list of {phase, x, y, z, duration} objects.

    Returns
    -------
    list[SimulationSegment]
        Segments in file order.

    Raises
    ------
    FixtureError
        If the file cannot be read, is not JSON, or a row fails validation.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise FixtureError(f"cannot read fixture {path}: {e}") from e

    if not isinstance(raw, list):
        raise FixtureError(f"fixture {path} must hold a JSON list of segments")
    try:
        return [to_segment(SegmentRecord.model_validate(row)) for row in raw]
    except ValidationError as e:
        raise FixtureError(f"invalid segment in {path}: {e}") from e
