from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import Response

from models.status import EngineStatus
from pipeline.engine import MonitorEngine
from runtime.errors import AcquisitionError, ModelLoadError, NotReadyError
from ..api_models import AttendanceLogResponse, StatusResponse, ToggleRequest
from ..state import FrameCache

router = APIRouter()


def get_engine(request: Request) -> MonitorEngine:
    return request.app.state.engine


def get_frame_cache(request: Request) -> FrameCache:
    return request.app.state.frame_cache


def _status_payload(status: EngineStatus) -> dict:
    return status.to_dict()


@router.get("/status", response_model=StatusResponse)
def status(engine: MonitorEngine = Depends(get_engine)):
    """
    Snapshot of the live count, rate, rolling average and (when enabled)
    the attendance log. Poll it once per display refresh or slower.
    """
    return _status_payload(engine.status())


@router.get("/attendance", response_model=AttendanceLogResponse)
def attendance(engine: MonitorEngine = Depends(get_engine)):
    tracker = engine.session.attendance
    return {
        "enabled": tracker.enabled,
        "events": [e.to_dict() for e in tracker.events()],
    }


@router.put("/attendance", response_model=StatusResponse)
def set_attendance(body: ToggleRequest, engine: MonitorEngine = Depends(get_engine)):
    engine.set_attendance_enabled(body.enabled)
    return _status_payload(engine.status())


@router.put("/overlay", response_model=StatusResponse)
def set_overlay(body: ToggleRequest, engine: MonitorEngine = Depends(get_engine)):
    engine.set_overlay_enabled(body.enabled)
    return _status_payload(engine.status())


@router.post("/camera/start", response_model=StatusResponse)
async def start_camera(engine: MonitorEngine = Depends(get_engine)):
    try:
        await engine.start()
    except (NotReadyError, ModelLoadError) as e:
        raise HTTPException(status_code=409, detail=str(e))
    except AcquisitionError as e:
        raise HTTPException(status_code=503, detail=str(e))
    logging.info("Camera started via API")
    return _status_payload(engine.status())


@router.post("/camera/stop", response_model=StatusResponse)
async def stop_camera(
    engine: MonitorEngine = Depends(get_engine),
    frame_cache: FrameCache = Depends(get_frame_cache),
):
    await engine.stop()
    frame_cache.clear()
    logging.info("Camera stopped via API")
    return _status_payload(engine.status())


@router.post("/model/load", response_model=StatusResponse)
async def load_model(engine: MonitorEngine = Depends(get_engine)):
    """Retry loading the estimator after a failed startup load."""
    try:
        await engine.initialize()
    except ModelLoadError as e:
        raise HTTPException(status_code=503, detail=str(e))
    return _status_payload(engine.status())


@router.get("/frame.jpg")
def latest_frame(frame_cache: FrameCache = Depends(get_frame_cache)):
    """Most recent annotated preview frame."""
    jpeg = frame_cache.get_jpeg()
    if jpeg is None:
        raise HTTPException(status_code=404, detail="No frame available")
    return Response(content=jpeg, media_type="image/jpeg")
