"""
Logging utilities for the subalarm toolkit.

Provides unified structured logging:
- pretty console output via Rich
- structured (JSON) file output to `record.log` when a session is recorded
  (`subalarm simulate --record DIR`)
"""

import logging
import sys
import json
from pathlib import Path

from rich.logging import RichHandler


class JSONFormatter(logging.Formatter):
    """
    Formatter that serializes log records to JSON.
    """
    def format(self, record: logging.LogRecord) -> str:
        log_record = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level":     record.levelname,
            "logger":    record.name,
            "message":   record.getMessage(),
        }
        return json.dumps(log_record)


def records_session(argv: list[str]) -> bool:
    """True if `argv` carries `--record DIR` or `--record=DIR`."""
    return any(a == "--record" or a.startswith("--record=") for a in argv[1:])


def get_logger(name: str, level: int | str = logging.INFO) -> logging.Logger:
    """
    Return a configured logger for the given name.

    Attaches:
    - a RichHandler for console output
    - when the CLI runs with `--record`, a FileHandler writing JSON logs
      to {cwd}/record.log

    Parameters
    ----------
    name
        Logger name (typically __name__).
    level
        Log level (int or string), defaults to INFO.

    Returns
    -------
    logging.Logger
        Configured logger instance.
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)

    if not logger.handlers:
        # Console via Rich
        console_handler = RichHandler(rich_tracebacks=True)
        console_handler.setLevel(level)
        logger.addHandler(console_handler)

        # File output for recorded sessions, as structured JSON
        if records_session(sys.argv):
            log_path = Path.cwd() / "record.log"
            file_handler = logging.FileHandler(log_path, mode="a", encoding="utf-8")
            file_handler.setLevel(level)
            file_handler.setFormatter(JSONFormatter())
            logger.addHandler(file_handler)

    return logger
