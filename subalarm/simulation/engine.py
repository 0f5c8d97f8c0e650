"""
Synthesize accelerometer streams from ride segments and replay them at the
sampling cadence of a live sensor.

A `Playback` is a single-use iterator: it yields each generated sample once,
waits `tick_interval` seconds before every tick, and ends either when the
samples run out (finished) or when `stop()` is called (cancelled).
"""

from __future__ import annotations
import random
import threading
from datetime import datetime, timedelta
from pathlib import Path
from typing import Callable, Iterable, Iterator, Optional

from subalarm.analysis.config import SimulationConfig
from subalarm.analysis.types import AccelerationSample, SimulationSegment
from subalarm.simulation.fixtures import FALLBACK_SEGMENTS, FixtureError, load_segments
from subalarm.utils.log import get_logger

logger = get_logger(__name__)

SampleCallback = Callable[[AccelerationSample], None]
FinishCallback = Callable[[], None]


def tick_count(segment: SimulationSegment, ticks_per_second: int = 10) -> int:
    return round(segment.duration * ticks_per_second)


def expand(
    segments: Iterable[SimulationSegment],
    cfg: SimulationConfig,
    rng: random.Random,
    start: Optional[datetime] = None,
) -> Iterator[AccelerationSample]:
    """
    Lazily expand segments into per-tick samples.

    Each tick holds the segment's vector with independent uniform jitter of
    +/- `cfg.noise` on x and y; z is left as given.
    """
    start = start or datetime.now()
    step = timedelta(seconds=1 / cfg.ticks_per_second)
    i = 0
    for segment in segments:
        for _ in range(tick_count(segment, cfg.ticks_per_second)):
            yield AccelerationSample(
                x=segment.x + rng.uniform(-cfg.noise, cfg.noise),
                y=segment.y + rng.uniform(-cfg.noise, cfg.noise),
                z=segment.z,
                timestamp=start + i * step,
            )
            i += 1


class Playback:
    """
    Single-use, cancellable, paced pass over a sample stream.
    """
    def __init__(self, samples: Iterator[AccelerationSample], interval: float) -> None:
        self._samples = samples
        self._interval = interval
        self._cancel = threading.Event()
        # held while a callback runs, so stop() returns only between callbacks
        self._lock = threading.RLock()
        self.delivered = 0
        self.finished = False

    @property
    def cancelled(self) -> bool:
        return self._cancel.is_set()

    @property
    def active(self) -> bool:
        return not (self.finished or self.cancelled)

    def __iter__(self) -> Playback:
        return self

    def __next__(self) -> AccelerationSample:
        if not self.active:
            raise StopIteration
        if self._interval > 0 and self._cancel.wait(self._interval):
            raise StopIteration
        try:
            sample = next(self._samples)
        except StopIteration:
            self.finished = True
            raise
        if self.cancelled:
            raise StopIteration
        self.delivered += 1
        return sample

    def deliver(self, on_sample: SampleCallback, on_finish: FinishCallback) -> bool:
        """
        Drive callbacks until the stream ends or is cancelled.

        Returns True if the stream ran to completion and `on_finish` fired.
        """
        for sample in self:
            with self._lock:
                if self.cancelled:
                    return False
                on_sample(sample)
        with self._lock:
            if not self.finished or self.cancelled:
                return False
            on_finish()
            return True

    def stop(self) -> None:
        """
        Cancel playback. Idempotent; safe to call from inside a callback.
        """
        with self._lock:
            self._cancel.set()


class SimulationEngine:
    """
    Produces synthetic rides; at most one playback is active at a time.
    """
    def __init__(
        self,
        cfg: SimulationConfig | None = None,
        fixture: str | Path | None = None,
    ) -> None:
        self.cfg = cfg or SimulationConfig()
        self.fixture = fixture
        self._rng = random.Random(self.cfg.seed)
        self._playback: Optional[Playback] = None
        self._thread: Optional[threading.Thread] = None

    @property
    def active(self) -> bool:
        return self._playback is not None and self._playback.active

    def segments(self, segments: Optional[Iterable[SimulationSegment]] = None) -> list[SimulationSegment]:
        """
        Resolve the ride to simulate: explicit segments, then the fixture file,
        then the built-in fallback ride.
        """
        if segments:
            return list(segments)
        if self.fixture is not None:
            try:
                loaded = load_segments(self.fixture)
            except FixtureError as e:
                logger.warning("%s; using built-in ride", e)
            else:
                if loaded:
                    logger.info("Loaded %d segments from %s", len(loaded), self.fixture)
                    return loaded
                logger.warning("Fixture %s is empty; using built-in ride", self.fixture)
        return list(FALLBACK_SEGMENTS)

    def stream(self, segments: Optional[Iterable[SimulationSegment]] = None) -> Playback:
        """
        Start a new playback, cancelling the active one, and return it.
        """
        self.stop()
        ride = self.segments(segments)
        total = sum(tick_count(s, self.cfg.ticks_per_second) for s in ride)
        logger.info("Simulating %d segments (%d ticks)", len(ride), total)
        self._playback = Playback(expand(ride, self.cfg, self._rng), self.cfg.tick_interval)
        return self._playback

    def run(
        self,
        on_sample: SampleCallback,
        on_finish: FinishCallback,
        segments: Optional[Iterable[SimulationSegment]] = None,
    ) -> bool:
        """
        Play a ride on the calling thread. Returns True if it finished.
        """
        return self.stream(segments).deliver(on_sample, on_finish)

    def start(
        self,
        on_sample: SampleCallback,
        on_finish: FinishCallback,
        segments: Optional[Iterable[SimulationSegment]] = None,
    ) -> Playback:
        """
        Play a ride on a background thread and return its playback handle.
        """
        playback = self.stream(segments)
        self._thread = threading.Thread(
            target=playback.deliver,
            args=(on_sample, on_finish),
            name="subalarm-simulation",
            daemon=True,
        )
        self._thread.start()
        return playback

    def join(self, timeout: Optional[float] = None) -> None:
        """
        Wait for the background playback thread, if any.
        """
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)

    def stop(self) -> None:
        """
        Cancel the active playback. No callback fires after this returns.
        """
        if self._playback is not None:
            self._playback.stop()
