"""
Append-only session recorder, exported as a JSON artifact.
"""

import json
import tempfile
from datetime import datetime
from pathlib import Path
from typing import Iterator

from pydantic import ValidationError

from subalarm.analysis.types import AccelerationSample
from subalarm.utils.log import get_logger
from subalarm.utils.validate import SensorRecord

logger = get_logger(__name__)

MARKER_PREFIX = "MARKER: "


class RecordingError(Exception):
    """
    Raised when a recording cannot be encoded, written or read back.
    """


def format_timestamp(ts: datetime) -> str:
    return ts.strftime("%H:%M:%S.") + f"{ts.microsecond // 1000:03d}"


def export_filename(now: datetime) -> str:
    return f"SubwayData_{now.strftime('%Y%m%d_%H%M%S')}.json"


class Recorder:
    """
    Collects processed samples and manual markers for one session.
    """
    def __init__(self) -> None:
        self._records: list[SensorRecord] = []

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[SensorRecord]:
        return iter(self._records)

    def clear(self) -> None:
        self._records.clear()

    def add_sample(self, sample: AccelerationSample, pressure: float, status: str) -> SensorRecord:
        record = SensorRecord(
            timestamp=format_timestamp(sample.timestamp),
            pressure=pressure,
            x=sample.x,
            y=sample.y,
            z=sample.z,
            status=status,
        )
        self._records.append(record)
        return record

    def add_marker(self, label: str, pressure: float, when: datetime | None = None) -> SensorRecord:
        """
        Append a manually tagged event; the vector fields are zeroed.
        """
        record = SensorRecord(
            timestamp=format_timestamp(when or datetime.now()),
            pressure=pressure,
            x=0.0,
            y=0.0,
            z=0.0,
            status=f"{MARKER_PREFIX}{label}",
        )
        self._records.append(record)
        return record

    def export(self, outdir: str | Path | None = None, now: datetime | None = None) -> Path:
        """
        Write all records as pretty-printed JSON and return the file path.

        Parameters
        ----------
        outdir
            Target directory; defaults to the system temp directory.
        now
            Time used for the file name; defaults to the current time.

        Raises
        ------
        RecordingError
            If the records cannot be encoded or the file cannot be written.
        """
        target = Path(outdir) if outdir is not None else Path(tempfile.gettempdir())
        path = target / export_filename(now or datetime.now())
        try:
            payload = json.dumps([r.model_dump() for r in self._records], indent=2)
            path.write_text(payload, encoding="utf-8")
        except (OSError, TypeError, ValueError) as e:
            logger.error("Failed to export recording: %s", e)
            raise RecordingError(f"failed to write {path}: {e}") from e
        logger.info("Exported %d records to %s", len(self._records), path)
        return path


def load_recording(path: str | Path) -> list[SensorRecord]:
    """
    Read an exported recording back into records.

    Raises
    ------
    RecordingError
        If the file cannot be read or does not match the record schema.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = json.load(f)
        return [SensorRecord.model_validate(row) for row in raw]
    except (OSError, json.JSONDecodeError, TypeError, ValidationError) as e:
        raise RecordingError(f"cannot load recording {path}: {e}") from e


def is_marker(record: SensorRecord) -> bool:
    return record.status.startswith(MARKER_PREFIX)
