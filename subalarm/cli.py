#!/usr/bin/env python3
"""
CLI entry point for the subalarm toolkit.

Defines the following commands:
  subalarm simulate [--fixture FILE] [--realtime] [--seed N] [--record DIR] [--sensitive]
  subalarm replay FILE [--sensitive]
  subalarm serve [--port 8000]
  subalarm version
"""

import sys
from argparse import ArgumentParser, Namespace
from importlib.metadata import PackageNotFoundError, version as _get_version

import uvicorn

from subalarm.utils.log import get_logger
from subalarm.monitor import MotionMonitor
from subalarm.server import create_app
from subalarm.analysis.config import ClassifierConfig, SimulationConfig
from subalarm.analysis.replay import ReplayPipeline
from subalarm.storage.recorder import RecordingError

logger = get_logger(__name__)


def _classifier_config(sensitive: bool) -> ClassifierConfig:
    return ClassifierConfig.sensitive() if sensitive else ClassifierConfig.subway()


def simulate(
    fixture: str | None,
    realtime: bool,
    seed: int | None,
    record: str | None,
    sensitive: bool,
) -> None:
    """
    Play a synthetic ride through the classifier.

    Parameters
    ----------
    fixture
        Optional JSON fixture of ride segments; the built-in ride is used
        when missing or malformed.
    realtime
        Pace samples at the live 0.1 s cadence instead of as fast as possible.
    seed
        Seed for the noise generator.
    record
        Directory to export the recorded session into.
    sensitive
        Use the light-rail classifier preset.
    """
    logger.info("Simulate: fixture=%s, realtime=%s, seed=%s, record=%s", fixture, realtime, seed, record)
    sim_cfg = SimulationConfig(seed=seed) if realtime else SimulationConfig.instant(seed)
    monitor = MotionMonitor(
        classifier_cfg=_classifier_config(sensitive),
        simulation_cfg=sim_cfg,
        fixture=fixture,
        export_dir=record,
    )
    if record is not None:
        monitor.start_recording(start_updates=False)
    monitor.run_simulation(background=False)
    logger.info("Simulation finished: %d station(s)", monitor.station_count)
    if monitor.export_path is not None:
        logger.info("Recording written to %s", monitor.export_path)
    elif record is not None:
        logger.error(monitor.message)
        sys.exit(1)


def replay(path: str, sensitive: bool) -> None:
    """
    Re-classify a recorded session and report its transitions.

    Parameters
    ----------
    path
        Recording exported by `simulate --record` or the server.
    sensitive
        Use the light-rail classifier preset.
    """
    logger.info("Replay: path=%s", path)
    try:
        result = ReplayPipeline(_classifier_config(sensitive)).run(path)
    except RecordingError as e:
        logger.error("%s", e)
        sys.exit(1)
    for t in result.transitions:
        logger.info("%s  %s -> %s", t.sample.timestamp.time(), t.previous.value, t.current.value)
    logger.info("Final state %s, %d station(s)", result.final_state.value, result.station_count)


def serve(port: int) -> None:
    """
    Spin up FastAPI+Uvicorn to expose a live monitor.

    Parameters
    ----------
    port
        Port on which to serve HTTP.
    """
    logger.info("Serve: port=%d", port)
    app = create_app()
    uvicorn.run(app, host="127.0.0.1", port=port)

def version() -> None:
    """
    Print the installed subalarm package version.
    """
    try:
        ver = _get_version("subalarm")
    except PackageNotFoundError:
        ver = "unknown"
    logger.info("subalarm version %s", ver)


def parse_args(argv: list[str] | None = None) -> Namespace:
    """
    Parse command-line arguments and return the populated namespace.
    """
    parser = ArgumentParser(prog="subalarm")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # subalarm simulate
    p = subparsers.add_parser("simulate", help="Run a simulated ride.")
    p.add_argument("--fixture", type=str, help="JSON file of ride segments.")
    p.add_argument(
        "--realtime", action="store_true", help="Pace samples at 10 Hz."
    )
    p.add_argument("--seed", type=int, help="Seed for the sensor noise.")
    p.add_argument("--record", type=str, help="Export the session into this directory.")
    p.add_argument("--sensitive", action="store_true", help="Light-rail thresholds.")

    # subalarm replay
    p = subparsers.add_parser("replay", help="Re-classify a recorded session.")
    p.add_argument("path", type=str, help="Recorded JSON file.")
    p.add_argument("--sensitive", action="store_true", help="Light-rail thresholds.")

    # subalarm serve
    p = subparsers.add_parser("serve", help="Serve via FastAPI + Uvicorn.")
    p.add_argument(
        "--port", type=int, default=8000, help="Port number to serve on."
    )

    # subalarm version
    subparsers.add_parser("version", help="Show subalarm version and exit.")

    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    """
    Entry point: dispatch to the selected subcommand.
    """
    args = parse_args(argv)
    match args.command:
        case "simulate":
            simulate(args.fixture, args.realtime, args.seed, args.record, args.sensitive)
        case "replay":
            replay(args.path, args.sensitive)
        case "serve":
            serve(args.port)
        case "version":
            version()
        case _:
            sys.exit(1)


if __name__ == "__main__":
    main()
