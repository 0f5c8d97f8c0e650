# subalarm/server.py
"""
FastAPI server for the subalarm CLI.

Exposes a `MotionMonitor` to a remote sensor feed and to display clients.
"""

from fastapi import FastAPI, HTTPException, Request
from starlette.responses import JSONResponse

from subalarm.analysis.types import MotionState
from subalarm.monitor import MotionMonitor
from subalarm.simulation.fixtures import to_segment
from subalarm.sources import PushSource
from subalarm.utils.log import get_logger
from subalarm.utils.validate import MarkerIn, MonitorStatus, PressureIn, SampleIn, SimulateIn

logger = get_logger(__name__)


def create_app(monitor: MotionMonitor | None = None) -> FastAPI:
    """
    Build a FastAPI instance bound to a single monitor.
    """
    app = FastAPI()
    if monitor is None:
        monitor = MotionMonitor(source=PushSource())
    app.state.monitor = monitor

    @app.get("/api/status", response_class=JSONResponse)
    async def status() -> JSONResponse:
        return JSONResponse(status_code=200, content={"status": "ok"})

    @app.get("/api/state", response_model=MonitorStatus)
    async def get_state(request: Request):
        return request.app.state.monitor.snapshot()

    @app.post("/api/start", response_model=MonitorStatus)
    async def start(request: Request):
        monitor = request.app.state.monitor
        monitor.start_updates()
        return monitor.snapshot()

    @app.post("/api/stop", response_model=MonitorStatus)
    async def stop(request: Request):
        monitor = request.app.state.monitor
        monitor.stop_updates()
        return monitor.snapshot()

    @app.post("/api/reset", response_model=MonitorStatus)
    async def reset(request: Request):
        monitor = request.app.state.monitor
        monitor.reset()
        return monitor.snapshot()

    @app.post("/api/sample", response_class=JSONResponse)
    async def push_sample(request: Request, sample: SampleIn) -> JSONResponse:
        """
        Feed one live reading; rejected unless live updates are running.
        """
        monitor = request.app.state.monitor
        source = monitor.source
        if not isinstance(source, PushSource) or not source.push(sample.x, sample.y, sample.z):
            raise HTTPException(status_code=409, detail="live updates are not running")
        return JSONResponse(
            status_code=200,
            content={"state": monitor.state.value, "station_count": monitor.station_count},
        )

    @app.post("/api/pressure", response_class=JSONResponse)
    async def push_pressure(request: Request, body: PressureIn) -> JSONResponse:
        request.app.state.monitor.update_pressure(body.pressure)
        return JSONResponse(status_code=200, content={"pressure": body.pressure})

    @app.post("/api/simulate", response_model=MonitorStatus)
    async def simulate(request: Request, body: SimulateIn | None = None):
        monitor = request.app.state.monitor
        segments = None
        if body is not None and body.segments:
            segments = [to_segment(s) for s in body.segments]
        if not monitor.run_simulation(segments):
            raise HTTPException(status_code=409, detail="monitor is already updating")
        return monitor.snapshot()

    @app.post("/api/recording", response_model=MonitorStatus)
    async def toggle_recording(request: Request):
        monitor = request.app.state.monitor
        monitor.toggle_recording()
        return monitor.snapshot()

    @app.post("/api/marker", response_model=MonitorStatus)
    async def add_marker(request: Request, marker: MarkerIn):
        monitor = request.app.state.monitor
        if not monitor.add_marker(marker.label):
            raise HTTPException(status_code=409, detail="not recording")
        return monitor.snapshot()

    @app.get("/api/states", response_class=JSONResponse)
    async def list_states() -> JSONResponse:
        return JSONResponse(status_code=200, content={"states": [s.value for s in MotionState]})

    return app
