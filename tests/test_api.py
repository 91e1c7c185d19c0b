"""
Tests for the REST API served around the monitoring engine.
"""

import time

import cv2
import numpy as np
import pytest
from fastapi.testclient import TestClient

from detection import DetectorAdapter
from fakes import CountingEstimator, FakeCamera
from pipeline.engine import EngineConfig, MonitorEngine
from pipeline.session import MonitorSession
from web import state
from web.app import create_app
from web.state import FrameCache


def build_engine(estimator=None, camera=None) -> MonitorEngine:
    return MonitorEngine(
        source=camera or FakeCamera(),
        detector=DetectorAdapter(estimator or CountingEstimator(count=2)),
        session=MonitorSession(),
        config=EngineConfig(tick_interval=0.001),
    )


def poll(client, predicate, timeout: float = 3.0) -> dict:
    """GET /api/status until predicate(body) holds."""
    deadline = time.monotonic() + timeout
    while True:
        body = client.get("/api/status").json()
        if predicate(body):
            return body
        if time.monotonic() > deadline:
            raise AssertionError(f"Status never matched: {body}")
        time.sleep(0.01)


@pytest.fixture
def engine():
    return build_engine()


@pytest.fixture
def encodes(monkeypatch):
    """Record every JPEG encode while still producing real output."""
    calls = []
    real_imencode = cv2.imencode

    def counting_imencode(ext, image, *args):
        calls.append(ext)
        return real_imencode(ext, image, *args)

    monkeypatch.setattr(state.cv2, "imencode", counting_imencode)
    return calls


@pytest.fixture
def client(engine):
    with TestClient(create_app(engine)) as c:
        yield c


class TestStatus:
    def test_ready_after_startup(self, client):
        resp = client.get("/api/status")
        assert resp.status_code == 200
        body = resp.json()
        assert body["state"] == "ready"
        assert body["face_count"] == 0
        assert body["count_label"] == "No students detected"
        assert body["is_active"] is False
        assert body["attendance_log"] == []

    def test_autostart(self):
        engine = build_engine()
        with TestClient(create_app(engine, autostart=True)) as c:
            body = poll(c, lambda b: b["frames_processed"] > 0)
            assert body["state"] == "running"


class TestCamera:
    def test_start_and_stop(self, client):
        resp = client.post("/api/camera/start")
        assert resp.status_code == 200
        assert resp.json()["state"] == "running"

        body = poll(client, lambda b: b["frames_processed"] >= 2)
        assert body["face_count"] == 2
        assert body["count_label"] == "2 students detected"
        assert body["average_count"] == 2.0
        assert len(body["regions"]) == 2

        frame = client.get("/api/frame.jpg")
        assert frame.status_code == 200
        assert frame.headers["content-type"] == "image/jpeg"

        resp = client.post("/api/camera/stop")
        assert resp.status_code == 200
        body = resp.json()
        assert body["state"] == "stopped"
        assert body["face_count"] == 0
        assert client.get("/api/frame.jpg").status_code == 404

    def test_camera_unavailable(self):
        engine = build_engine(camera=FakeCamera(fail_open=True))
        with TestClient(create_app(engine)) as c:
            resp = c.post("/api/camera/start")
            assert resp.status_code == 503
            assert "Could not access camera" in resp.json()["detail"]
            assert c.get("/api/status").json()["state"] == "ready"

    def test_start_without_model(self):
        engine = build_engine(estimator=CountingEstimator(fail_load=True))
        with TestClient(create_app(engine)) as c:
            status = c.get("/api/status").json()
            assert status["state"] == "idle"
            assert "weights not found" in status["last_error"]

            assert c.post("/api/camera/start").status_code == 409
            assert c.post("/api/model/load").status_code == 503

    def test_no_frame_before_start(self, client):
        assert client.get("/api/frame.jpg").status_code == 404


class TestToggles:
    def test_attendance_toggle(self, client, engine):
        resp = client.put("/api/attendance", json={"enabled": True})
        assert resp.status_code == 200
        assert resp.json()["attendance_enabled"] is True

        client.post("/api/camera/start")
        poll(client, lambda b: len(b["attendance_log"]) == 1)

        resp = client.get("/api/attendance")
        body = resp.json()
        assert body["enabled"] is True
        assert body["events"][0]["kind"] == "appeared"
        assert body["events"][0]["count"] == 2
        assert body["events"][0]["label"] == "2 students"

        resp = client.put("/api/attendance", json={"enabled": False})
        assert resp.json()["attendance_log"] == []
        assert engine.session.attendance.enabled is False

    def test_overlay_toggle(self, client, engine):
        resp = client.put("/api/overlay", json={"enabled": False})
        assert resp.status_code == 200
        assert resp.json()["overlay_enabled"] is False
        assert engine.overlay_enabled is False

    def test_toggle_requires_body(self, client):
        assert client.put("/api/overlay", json={}).status_code == 422


class TestFrameCache:
    def test_encodes_only_when_requested(self, encodes):
        cache = FrameCache()
        for _ in range(5):
            cache.set_frame(np.zeros((48, 64, 3), dtype=np.uint8))
        assert encodes == []

        jpeg = cache.get_jpeg()
        assert jpeg[:2] == b"\xff\xd8"
        assert cache.get_jpeg() is jpeg
        assert len(encodes) == 1

        cache.set_frame(np.zeros((48, 64, 3), dtype=np.uint8))
        assert cache.get_jpeg() is not jpeg
        assert len(encodes) == 2

    def test_status_overlay_drawn_on_request(self, engine):
        cache = FrameCache()
        frame = np.zeros((48, 64, 3), dtype=np.uint8)
        cache.set_frame(frame, engine.status())
        assert cache.get_jpeg() is not None
        # The camera buffer itself is never drawn on
        assert not frame.any()

    def test_clear(self):
        cache = FrameCache()
        cache.set_frame(np.zeros((48, 64, 3), dtype=np.uint8))
        cache.clear()
        assert cache.get_jpeg() is None

    def test_ticks_do_not_encode_frames(self, encodes, client):
        client.post("/api/camera/start")
        poll(client, lambda b: b["frames_processed"] >= 5)
        assert encodes == []

        assert client.get("/api/frame.jpg").status_code == 200
        assert len(encodes) == 1
