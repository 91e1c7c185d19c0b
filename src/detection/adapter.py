"""
Detector adapter.

Wraps the opaque estimator and turns its output for one frame into a
Sample. This is the only place estimator exceptions are caught; they leave
as DetectionError (or ModelLoadError while loading) so the loop driver can
decide what to do.
"""

from __future__ import annotations

import logging
from typing import Any, List

import numpy as np

from models.sample import Region, Sample
from runtime.errors import DetectionError, ModelLoadError
from runtime.workers import WorkerSlot
from .base import Estimator


class DetectorAdapter:
    """
    Calls the estimator once per tick and normalizes its output.

    Blocking estimators run in a worker thread so the event loop keeps
    servicing stop requests while inference is in flight; at most one call
    is in flight at any time, even across a stop and restart. Estimators whose
    methods are coroutines are awaited directly.

    Example:
        adapter = DetectorAdapter(HaarFaceEstimator(HaarEstimatorConfig()))
        await adapter.load()
        sample = await adapter.detect(frame_data.frame, now=time.time())
    """

    def __init__(self, estimator: Estimator):
        self._estimator = estimator
        self._worker = WorkerSlot("estimator")
        self._loaded = False

    @property
    def estimator(self) -> Estimator:
        return self._estimator

    @property
    def is_loaded(self) -> bool:
        return self._loaded

    async def load(self) -> None:
        """Load the estimator; failures raise ModelLoadError."""
        try:
            await self._worker.run(self._estimator.load)
        except Exception as e:
            raise ModelLoadError(f"Failed to load detection model: {e}") from e
        self._loaded = True

    async def detect(self, frame: np.ndarray, now: float) -> Sample:
        """
        Run the estimator once on a frame.

        Calls never overlap: if an earlier call was abandoned by a stopped
        loop, this one waits for it to return first.

        Args:
            frame: Pixel data for the current tick.
            now: Timestamp to stamp on the resulting sample.

        Raises:
            DetectionError: If the estimator raises or returns something
                that cannot be read as a list of regions.
        """
        try:
            predictions = await self._worker.run(self._estimator.estimate, frame)
            regions = self.normalize(predictions)
        except Exception as e:
            logging.debug(f"Estimator failure: {e!r}")
            raise DetectionError(f"Face estimation failed: {e}") from e
        return Sample.from_regions(regions, observed_at=now)

    @staticmethod
    def normalize(predictions: Any) -> List[Region]:
        """Convert estimator output into regions; None means no faces."""
        if predictions is None:
            return []
        return [Region.from_prediction(p) for p in predictions]
