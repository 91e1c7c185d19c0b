"""
FastAPI application factory for the classroom monitor.

Routes:
- /api/status            -> live count, rate, rolling average, attendance log
- /api/attendance        -> attendance log; PUT toggles tracking
- /api/overlay           -> PUT toggles overlay drawing
- /api/camera/start|stop -> camera commands
- /api/model/load        -> retry estimator loading
- /api/frame.jpg         -> latest annotated preview frame
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from models.status import EngineState
from pipeline.engine import MonitorEngine
from runtime.errors import MonitorError
from .routes import api
from .state import FrameCache


def create_app(
    engine: MonitorEngine,
    frame_cache: Optional[FrameCache] = None,
    autostart: bool = False,
) -> FastAPI:
    """
    Create the FastAPI app around an engine.

    The app lifespan loads the estimator on startup (a failure is logged and
    reported through /api/status so the caller can retry), optionally starts
    the camera, and stops the engine on shutdown.
    """
    frame_cache = frame_cache or FrameCache()

    def publish_frame(frame_data, sample, events):
        frame_cache.set_frame(frame_data.frame, engine.status())

    engine.add_callback(publish_frame)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if engine.state is EngineState.IDLE:
            try:
                await engine.initialize()
                if autostart:
                    await engine.start()
            except MonitorError as e:
                logging.error(f"Engine startup failed: {e}")
        try:
            yield
        finally:
            await engine.shutdown()

    app = FastAPI(
        title="Classroom Monitor",
        version="0.1.0",
        description="Live face counting with rolling metrics and attendance events",
        lifespan=lifespan,
    )
    app.state.engine = engine
    app.state.frame_cache = frame_cache

    # CORS for a separately served dashboard
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["http://localhost:5173", "http://127.0.0.1:5173"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(api.router, prefix="/api")
    return app
