"""
Pydantic schemas to validate fixtures, recordings and API payloads.
"""

from typing import Optional
from pydantic import BaseModel, Field


class SegmentRecord(BaseModel):
    """
    One segment of a simulation fixture file.
    """
    phase: str = ""
    x: float
    y: float
    z: float
    duration: float = Field(ge=0)

class SensorRecord(BaseModel):
    """
    One row of a recorded session: a processed sample or a manual marker.
    """
    timestamp: str
    pressure: float
    x: float
    y: float
    z: float
    status: str

class SampleIn(BaseModel):
    """
    Accelerometer reading pushed by a live source.
    """
    x: float
    y: float
    z: float

class PressureIn(BaseModel):
    pressure: float

class MarkerIn(BaseModel):
    label: str = Field(min_length=1)

class SimulateIn(BaseModel):
    """
    Optional inline segments for a simulation run; None means the fallback ride.
    """
    segments: Optional[list[SegmentRecord]] = None

class MonitorStatus(BaseModel):
    """
    Snapshot of the monitor as exposed to consumers.
    """
    state: str
    status: str
    message: str
    station_count: int
    updating: bool
    simulating: bool
    recording: bool
    pressure: float
    deviation: float
    export_path: Optional[str] = None
