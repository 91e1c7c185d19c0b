"""
Monitoring engine for the classroom monitor.

This module drives the per-frame loop: read a frame from the camera, run
the detector adapter on it, and feed the resulting sample into the session's
metrics aggregator and attendance tracker. One tick runs at a time on the
event loop; the next tick is only scheduled once the previous detection has
resolved and its effects have been applied. Camera calls and estimator
calls run in worker threads, one at a time per device.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Tuple

from detection import DetectorAdapter, create_estimator_from_config
from models.attendance_event import AttendanceEvent
from models.config import Config
from models.frame import FrameData
from models.sample import Region, Sample
from models.status import EngineState, EngineStatus
from observation import ObservationSource, create_source_from_config
from runtime.errors import AcquisitionError, DetectionError, ModelLoadError, NotReadyError
from runtime.workers import WorkerSlot
from .session import MonitorSession, SessionConfig

TickCallback = Callable[[FrameData, Sample, List[AttendanceEvent]], None]


@dataclass
class EngineConfig:
    """
    Configuration for the monitoring engine.

    Attributes:
        tick_interval: Seconds to wait before requesting the next tick
            (0 yields to the event loop and continues immediately).
        reset_on_restart: Drop session history when the camera restarts.
        overlay: Initial value of the overlay display flag.
        stats_log_interval: Seconds between status log messages.
        max_consecutive_failures: Frame read failures in a row before the
            loop gives up and the engine stops (0 = never).
    """
    tick_interval: float = 0.0
    reset_on_restart: bool = False
    overlay: bool = True
    stats_log_interval: float = 60.0
    max_consecutive_failures: int = 30

    @classmethod
    def from_config(cls, config: Config) -> "EngineConfig":
        pipeline = config.pipeline
        return cls(
            tick_interval=pipeline.tick_interval,
            reset_on_restart=pipeline.reset_on_restart,
            overlay=pipeline.overlay,
            stats_log_interval=pipeline.stats_log_interval,
            max_consecutive_failures=pipeline.max_consecutive_failures,
        )


@dataclass
class EngineStats:
    """Runtime statistics for the engine."""
    frames_processed: int = 0
    detection_failures: int = 0
    frame_read_failures: int = 0
    consecutive_failures: int = 0
    start_time: float = field(default_factory=time.time)
    last_stats_log_time: float = field(default_factory=time.time)


@dataclass
class _TickLoop:
    """The running tick task and the token that cancels it."""
    task: asyncio.Task
    token: asyncio.Event
    generation: int


class MonitorEngine:
    """
    Loop driver: Idle -> Loading -> Ready -> Running <-> Stopped.

    The engine:
    - Loads the estimator (initialize)
    - Acquires the camera and ticks until stopped (start / stop)
    - Applies each sample to the session's aggregator and attendance tracker
    - Exposes a per-tick status snapshot for presentation

    Example:
        engine = MonitorEngine(source, DetectorAdapter(estimator), MonitorSession())
        await engine.initialize()
        await engine.start()
        ...
        await engine.stop()
    """

    def __init__(
        self,
        source: ObservationSource,
        detector: DetectorAdapter,
        session: Optional[MonitorSession] = None,
        config: Optional[EngineConfig] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.source = source
        self.detector = detector
        self.session = session or MonitorSession()
        self.config = config or EngineConfig()
        self.stats = EngineStats()
        self._clock = clock
        self._state = EngineState.IDLE
        self._loop: Optional[_TickLoop] = None
        self._generation = 0
        self._command_lock = asyncio.Lock()
        self._camera_calls = WorkerSlot("camera")
        self._overlay_enabled = self.config.overlay
        self._face_count = 0
        self._regions: Tuple[Region, ...] = ()
        self._last_error: Optional[str] = None
        self._callbacks: List[TickCallback] = []

    @property
    def state(self) -> EngineState:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._state is EngineState.RUNNING

    @property
    def overlay_enabled(self) -> bool:
        return self._overlay_enabled

    def add_callback(self, callback: TickCallback) -> None:
        """
        Add a callback to be called after each applied tick.

        Args:
            callback: Function taking (frame_data, sample, events).
        """
        self._callbacks.append(callback)

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    async def initialize(self) -> None:
        """
        Load the estimator.

        Raises:
            ModelLoadError: If loading fails; the engine returns to idle.
        """
        async with self._command_lock:
            if self._state is not EngineState.IDLE:
                logging.warning(f"initialize() ignored in state {self._state.value}")
                return

            self._set_state(EngineState.LOADING)
            try:
                await self.detector.load()
            except ModelLoadError as e:
                self._last_error = str(e)
                self._set_state(EngineState.IDLE)
                logging.error(f"Error loading model: {e}")
                raise
            self._set_state(EngineState.READY)
            logging.info("Detection model loaded")

    async def start(self) -> None:
        """
        Acquire the camera and start ticking.

        Raises:
            NotReadyError: If the estimator has not finished loading.
            AcquisitionError: If the camera cannot be opened; state is unchanged.
        """
        async with self._command_lock:
            if self._state is EngineState.RUNNING:
                return
            if self._state not in (EngineState.READY, EngineState.STOPPED) or not self.detector.is_loaded:
                raise NotReadyError("Detection model is not loaded yet")

            try:
                await self._camera_calls.run(self.source.open)
            except Exception as e:
                self._last_error = f"Could not access camera: {e}"
                logging.error(self._last_error)
                raise AcquisitionError(self._last_error) from e

            if self._state is EngineState.STOPPED and self.config.reset_on_restart:
                self.session.reset()
                self.stats = EngineStats()
                logging.info("Session history reset on restart")

            self._generation += 1
            token = asyncio.Event()
            task = asyncio.create_task(
                self._run(self._generation, token),
                name=f"monitor-tick-loop-{self._generation}",
            )
            self._loop = _TickLoop(task=task, token=token, generation=self._generation)
            self.stats.start_time = time.time()
            self._last_error = None
            self._set_state(EngineState.RUNNING)

    async def stop(self) -> None:
        """
        Cancel the pending tick, wait for the loop to exit and release the
        camera once any read in flight has returned. A detection still in
        flight is abandoned and its result is never applied; the next
        detection waits for it to finish.
        """
        async with self._command_lock:
            loop, self._loop = self._loop, None
            if loop is not None:
                loop.token.set()
                loop.task.cancel()
                try:
                    await asyncio.wait({loop.task})
                finally:
                    await self._release_camera()
            if self._state is EngineState.RUNNING:
                self._enter_stopped()

    def request_stop(self) -> None:
        """Signal the loop to exit after the current tick (usable from callbacks)."""
        if self._loop is not None:
            self._loop.token.set()

    async def wait_stopped(self) -> None:
        """Block until the current tick loop has exited."""
        loop = self._loop
        if loop is not None:
            await asyncio.wait({loop.task})

    async def shutdown(self) -> None:
        """Stop if running; used on application exit."""
        await self.stop()
        logging.info("Monitoring engine shut down")

    def set_attendance_enabled(self, enabled: bool) -> None:
        self.session.attendance.set_enabled(enabled)

    def set_overlay_enabled(self, enabled: bool) -> None:
        """Presentation-only flag; has no effect on counting."""
        self._overlay_enabled = enabled

    # ------------------------------------------------------------------
    # Status
    # ------------------------------------------------------------------

    def status(self) -> EngineStatus:
        """Snapshot of everything presentation reads once per tick."""
        metrics = self.session.metrics
        attendance = self.session.attendance
        return EngineStatus(
            state=self._state,
            face_count=self._face_count,
            instantaneous_rate=metrics.instantaneous_rate,
            average_count=metrics.average_count,
            is_active=self.is_running,
            attendance_enabled=attendance.enabled,
            overlay_enabled=self._overlay_enabled,
            attendance_log=attendance.events() if attendance.enabled else [],
            regions=list(self._regions),
            last_error=self._last_error,
            frames_processed=self.stats.frames_processed,
            detection_failures=self.stats.detection_failures,
        )

    # ------------------------------------------------------------------
    # Tick loop
    # ------------------------------------------------------------------

    async def _run(self, generation: int, token: asyncio.Event) -> None:
        logging.info(f"Detection loop started: source={self.source.source_id}")
        try:
            while not token.is_set():
                await self._tick(generation, token)
                self._handle_periodic_tasks()
                # Request the next tick
                await asyncio.sleep(self.config.tick_interval)
        except Exception as e:
            self._last_error = f"Detection loop error: {e}"
            logging.exception(self._last_error)
        finally:
            await self._release_camera()
            if generation == self._generation and self._state is EngineState.RUNNING:
                self._enter_stopped()
            logging.info("Detection loop stopped")

    async def _tick(self, generation: int, token: asyncio.Event) -> None:
        """Run one detection and apply it unless the session has moved on."""
        frame_data = await self._camera_calls.run(self.source.read)
        if frame_data is None:
            self.stats.frame_read_failures += 1
            self.stats.consecutive_failures += 1
            limit = self.config.max_consecutive_failures
            if limit and self.stats.consecutive_failures >= limit:
                self._last_error = f"Too many consecutive frame read failures ({self.stats.consecutive_failures})"
                logging.error(self._last_error)
                token.set()
            return
        self.stats.consecutive_failures = 0

        now = self._clock()
        try:
            sample = await self.detector.detect(frame_data.frame, now)
        except DetectionError as e:
            if self._is_stale(generation, token):
                return
            self.stats.detection_failures += 1
            self._last_error = str(e)
            logging.warning(f"Detection failed, skipping tick: {e}")
            return

        if self._is_stale(generation, token):
            logging.debug("Discarding detection result from a stopped session")
            return

        self._apply(frame_data, sample)

    def _apply(self, frame_data: FrameData, sample: Sample) -> None:
        _, event = self.session.apply(sample)
        self._face_count = sample.count
        self._regions = sample.regions
        self.stats.frames_processed += 1

        events = [event] if event is not None else []
        for callback in self._callbacks:
            try:
                callback(frame_data, sample, events)
            except Exception as e:
                logging.warning(f"Callback error: {e}")

    def _is_stale(self, generation: int, token: asyncio.Event) -> bool:
        return token.is_set() or generation != self._generation

    def _handle_periodic_tasks(self) -> None:
        now = time.time()
        if now - self.stats.last_stats_log_time >= self.config.stats_log_interval:
            status = self.status()
            logging.info(
                f"Engine stats: frames={self.stats.frames_processed}, "
                f"detection_failures={self.stats.detection_failures}, "
                f"fps={status.instantaneous_rate}, avg_count={status.average_count}"
            )
            self.stats.last_stats_log_time = now

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _release_camera(self) -> None:
        # A read abandoned by a cancelled tick is still using the device
        await self._camera_calls.settle()
        try:
            self.source.close()
        except Exception as e:
            logging.warning(f"Error closing source: {e}")

    def _enter_stopped(self) -> None:
        self._face_count = 0
        self._regions = ()
        self._set_state(EngineState.STOPPED)

    def _set_state(self, state: EngineState) -> None:
        if state is not self._state:
            logging.info(f"Engine state: {self._state.value} -> {state.value}")
        self._state = state


def create_engine_from_config(config: Config) -> MonitorEngine:
    """
    Factory function to create a MonitorEngine from the typed config.

    Args:
        config: Full application config (see Config.from_dict).
    """
    source = create_source_from_config(config.camera, source_id="classroom-camera")
    estimator = create_estimator_from_config(config.detection)
    session = MonitorSession(SessionConfig.from_config(config))
    return MonitorEngine(
        source=source,
        detector=DetectorAdapter(estimator),
        session=session,
        config=EngineConfig.from_config(config),
    )
