"""
Session monitor: wires a sample source or the simulation engine through the
classifier into the station counter and the recorder.
"""

import threading
from pathlib import Path
from typing import Iterable, Optional

from subalarm.analysis.classifier import MotionClassifier, deviation
from subalarm.analysis.config import ClassifierConfig, SimulationConfig
from subalarm.analysis.stations import StationCounter
from subalarm.analysis.types import AccelerationSample, MotionState, SimulationSegment, Transition
from subalarm.simulation.engine import SimulationEngine
from subalarm.sources import PushSource, SampleSource
from subalarm.storage.recorder import Recorder, RecordingError
from subalarm.utils.log import get_logger
from subalarm.utils.validate import MonitorStatus

logger = get_logger(__name__)

# (status label, message) shown for each confirmed state
STATUS_LABELS: dict[MotionState, tuple[str, str]] = {
    MotionState.UNKNOWN:      ("Analyzing...",            "Analyzing data..."),
    MotionState.STOPPED:      ("Stopped",                 "Stopped at a station."),
    MotionState.ACCELERATING: ("Departing (accelerating)", "Departing for the next station."),
    MotionState.CRUISING:     ("Running (cruising)",      "Moving at a steady speed."),
    MotionState.DECELERATING: ("Arriving (decelerating)", "Arriving at the next station soon."),
}


class MotionMonitor:
    """
    Owns one classifier and everything that reacts to its output.

    Live updates and simulation are mutually exclusive: a simulation only runs
    while live updates are off, and starts by stopping the live source.

    `process` may run on the simulation thread while requests call `reset` or
    the recording methods, so all of them hold `_lock`. The engine is never
    stopped while `_lock` is held: its delivery thread takes the playback lock
    first and `_lock` second.
    """
    def __init__(
        self,
        source: SampleSource | None = None,
        classifier_cfg: ClassifierConfig | None = None,
        simulation_cfg: SimulationConfig | None = None,
        fixture: str | Path | None = None,
        export_dir: str | Path | None = None,
    ) -> None:
        self.source = source if source is not None else PushSource()
        self.classifier = MotionClassifier(classifier_cfg)
        self.stations = StationCounter()
        self.engine = SimulationEngine(simulation_cfg, fixture)
        self.recorder = Recorder()
        self.export_dir = export_dir
        self._lock = threading.RLock()
        self.classifier.subscribe(self._on_transition)

        self.updating = False
        self.simulating = False
        self.recording = False
        self.pressure = 0.0
        self.deviation = 0.0
        self.status = "Idle"
        self.message = "Ready."
        self.export_path: Optional[Path] = None

    @property
    def state(self) -> MotionState:
        return self.classifier.current_state

    @property
    def station_count(self) -> int:
        return self.stations.count

    # -- lifecycle -------------------------------------------------------------

    def start_updates(self) -> None:
        with self._lock:
            if self.updating:
                return
            if not self.source.available:
                logger.warning("Accelerometer unavailable; live updates not started")
                self.message = "Accelerometer unavailable."
                return
            logger.info("Starting live updates")
            self.updating = True
            self.status = "Preparing..."
            self.message = "Stabilizing sensors..."
            self.source.start(self.process)

    def stop_updates(self) -> None:
        self.source.stop()
        self.engine.stop()
        with self._lock:
            self.updating = False
            self.simulating = False
            self.status = "Monitoring stopped"
            self.message = "Monitoring has ended."
            self.classifier.reset()
            if self.recording:
                self.stop_recording()

    def run_simulation(
        self,
        segments: Optional[Iterable[SimulationSegment]] = None,
        background: bool = True,
    ) -> bool:
        """
        Drive the classifier from a synthetic ride; no-op while updating.

        Returns True if a simulation was started. With `background=False` the
        ride plays on the calling thread and this returns once it is over.
        """
        with self._lock:
            if self.updating:
                return False
            logger.info("Starting simulation (background=%s)", background)
            self.updating = True
            self.simulating = True
            self.status = "Simulation started"
            self.message = "Loading simulated data..."
        self.source.stop()

        if background:
            self.engine.start(self.process, self.stop_updates, segments)
        else:
            self.engine.run(self.process, self.stop_updates, segments)
        return True

    def reset(self) -> None:
        """
        Clear classifier and station count between sessions.

        Waits for a sample being processed on another thread to finish.
        """
        with self._lock:
            self.classifier.reset()
            self.stations.reset()

    # -- sample path -----------------------------------------------------------

    def process(self, sample: AccelerationSample) -> MotionState:
        with self._lock:
            self.deviation = deviation(sample, self.classifier.cfg.gravity)
            state = self.classifier.process(sample)
            self.status, message = STATUS_LABELS[state]
            if state != MotionState.STOPPED:
                self.message = message
            if self.recording:
                self.recorder.add_sample(sample, self.pressure, self.status)
            return state

    def update_pressure(self, hpa: float) -> None:
        with self._lock:
            self.pressure = hpa

    def _on_transition(self, transition: Transition) -> None:
        if transition.current == MotionState.STOPPED:
            self.message = STATUS_LABELS[MotionState.STOPPED][1]
        self.stations.on_transition(transition.previous, transition.current)

    # -- recording -------------------------------------------------------------

    def toggle_recording(self) -> None:
        with self._lock:
            if self.recording:
                self.stop_recording()
            else:
                self.start_recording()

    def start_recording(self, start_updates: bool = True) -> None:
        with self._lock:
            self.recording = True
            self.export_path = None
            self.recorder.clear()
            self.message = "Recording started."
            if start_updates and not self.updating:
                self.start_updates()

    def stop_recording(self) -> Optional[Path]:
        """
        Stop recording and export the session; failures end up in `message`.
        """
        with self._lock:
            self.recording = False
            self.message = "Writing recording..."
            try:
                self.export_path = self.recorder.export(self.export_dir)
            except RecordingError as e:
                logger.warning("Recording not saved: %s", e)
                self.message = f"Failed to save recording: {e}"
                return None
            self.message = "Recording saved."
            return self.export_path

    def add_marker(self, label: str) -> bool:
        """
        Tag a manual event in the recording; ignored when not recording.
        """
        with self._lock:
            if not self.recording:
                return False
            self.recorder.add_marker(label, self.pressure)
            self.message = f"Marker saved: {label}"
            return True

    def snapshot(self) -> MonitorStatus:
        with self._lock:
            return MonitorStatus(
                state=self.state.value,
                status=self.status,
                message=self.message,
                station_count=self.station_count,
                updating=self.updating,
                simulating=self.simulating,
                recording=self.recording,
                pressure=self.pressure,
                deviation=self.deviation,
                export_path=str(self.export_path) if self.export_path else None,
            )
