"""
Live sample sources feeding the monitor.
"""

from datetime import datetime
from typing import Callable, Optional, Protocol

from subalarm.analysis.types import AccelerationSample
from subalarm.utils.log import get_logger

logger = get_logger(__name__)

SampleCallback = Callable[[AccelerationSample], None]


class SampleSource(Protocol):
    """
    Anything delivering accelerometer samples at roughly 10 Hz while started.

    `start` while started and `stop` while stopped are no-ops. A source whose
    hardware is unavailable silently never delivers.
    """
    @property
    def available(self) -> bool: ...

    @property
    def started(self) -> bool: ...

    def start(self, callback: SampleCallback) -> None: ...

    def stop(self) -> None: ...


class PushSource:
    """
    Source fed from outside, e.g. by the HTTP API or a test.
    """
    def __init__(self, available: bool = True) -> None:
        self._available = available
        self._callback: Optional[SampleCallback] = None

    @property
    def available(self) -> bool:
        return self._available

    @property
    def started(self) -> bool:
        return self._callback is not None

    def start(self, callback: SampleCallback) -> None:
        if self.started:
            return
        if not self._available:
            logger.warning("Accelerometer unavailable; not starting updates")
            return
        self._callback = callback

    def stop(self) -> None:
        self._callback = None

    def push(self, x: float, y: float, z: float, timestamp: datetime | None = None) -> bool:
        """
        Deliver one reading; returns False if the source is not started.
        """
        if self._callback is None:
            return False
        self._callback(AccelerationSample(x, y, z, timestamp or datetime.now()))
        return True
