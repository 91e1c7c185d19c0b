"""
Smoke tests for typed models and adapters.
"""

import time
from datetime import datetime
from types import SimpleNamespace

import numpy as np
import pytest

from models.attendance_event import AttendanceEvent, EventKind
from models.config import Config, DetectionConfig, YoloConfig
from models.frame import FrameData
from models.sample import Region, Sample
from models.status import EngineState, EngineStatus, describe_count


class TestRegion:
    def test_properties(self):
        region = Region(x1=100, y1=100, x2=200, y2=150)
        assert region.width == 100
        assert region.height == 50
        assert region.top_left == (100, 100)
        assert region.bottom_right == (200, 150)

    def test_as_int_tuple(self):
        region = Region(x1=10.5, y1=20.5, x2=30.5, y2=40.5)
        assert region.as_int_tuple() == (10, 20, 30, 40)

    def test_from_corner_mapping(self):
        region = Region.from_prediction({"topLeft": [10, 20], "bottomRight": [50, 80]})
        assert region.as_int_tuple() == (10, 20, 50, 80)
        assert region.confidence is None

    def test_from_mapping_with_probability(self):
        region = Region.from_prediction({
            "topLeft": [0, 0],
            "bottomRight": [5, 5],
            "probability": [0.93],
        })
        assert region.confidence == pytest.approx(0.93)

    def test_from_object(self):
        pred = SimpleNamespace(x1=1, y1=2, x2=3, y2=4, confidence=0.5)
        region = Region.from_prediction(pred)
        assert region.as_int_tuple() == (1, 2, 3, 4)
        assert region.confidence == 0.5

    def test_from_sequence(self):
        region = Region.from_prediction(np.array([1.0, 2.0, 3.0, 4.0]))
        assert region.as_int_tuple() == (1, 2, 3, 4)

    def test_to_dict(self):
        d = Region(1, 2, 3, 4, confidence=0.8).to_dict()
        assert d == {"top_left": [1, 2], "bottom_right": [3, 4], "confidence": 0.8}


class TestSample:
    def test_from_regions(self):
        regions = [Region(0, 0, 1, 1), Region(2, 2, 3, 3)]
        sample = Sample.from_regions(regions, observed_at=12.0)
        assert sample.count == 2
        assert sample.observed_at == 12.0
        assert isinstance(sample.regions, tuple)

    def test_empty(self):
        assert Sample.from_regions([], observed_at=1.0).count == 0

    def test_negative_count_rejected(self):
        with pytest.raises(ValueError):
            Sample(count=-1, observed_at=1.0)


class TestEventKind:
    def test_classify(self):
        assert EventKind.classify(0, 2) is EventKind.APPEARED
        assert EventKind.classify(3, 1) is EventKind.DISAPPEARED
        assert EventKind.classify(2, 2) is EventKind.CHANGE

    def test_values(self):
        assert EventKind.APPEARED.value == "appeared"
        assert EventKind.DISAPPEARED.value == "disappeared"


class TestAttendanceEvent:
    def test_label(self):
        assert AttendanceEvent(0.0, 1, EventKind.APPEARED).label == "1 student"
        assert AttendanceEvent(0.0, 0, EventKind.DISAPPEARED).label == "0 students"
        assert AttendanceEvent(0.0, 4, EventKind.APPEARED).label == "4 students"

    def test_to_dict(self):
        ts = 1_700_000_000.0
        d = AttendanceEvent(ts, 2, EventKind.APPEARED).to_dict()
        assert d["count"] == 2
        assert d["kind"] == "appeared"
        assert d["time"] == datetime.fromtimestamp(ts).strftime("%H:%M:%S")


class TestEngineStatus:
    def test_describe_count(self):
        assert describe_count(0) == "No students detected"
        assert describe_count(1) == "1 student detected"
        assert describe_count(3) == "3 students detected"

    def test_to_dict(self):
        status = EngineStatus(
            state=EngineState.RUNNING,
            face_count=2,
            instantaneous_rate=15,
            average_count=1.7,
            is_active=True,
            attendance_enabled=True,
            attendance_log=[AttendanceEvent(1.0, 2, EventKind.APPEARED)],
            regions=[Region(0, 0, 10, 10)],
        )
        d = status.to_dict()
        assert d["state"] == "running"
        assert d["count_label"] == "2 students detected"
        assert d["average_count"] == 1.7
        assert len(d["attendance_log"]) == 1
        assert d["regions"][0]["bottom_right"] == [10, 10]


class TestFrameData:
    def test_capture(self):
        frame = np.zeros((480, 640, 3), dtype=np.uint8)
        before = time.time()
        fd = FrameData.capture(frame, frame_index=3, source_id="cam")
        assert fd.size == (640, 480)
        assert fd.frame_index == 3
        assert fd.captured_at >= before
        assert fd.mirrored is False


class TestConfig:
    def test_defaults(self):
        config = Config()
        assert config.detection.backend == "haar"
        assert config.metrics.window_size == 30
        assert config.attendance.log_capacity == 10
        assert config.attendance.enabled is False

    def test_from_dict(self, valid_config):
        config = Config.from_dict(valid_config)
        assert config.camera.resolution == (1280, 720)
        assert config.detection.haar.min_neighbors == 5
        assert config.detection.yolo is None
        assert config.web.host == "127.0.0.1"

    def test_round_trip(self, valid_config):
        d = Config.from_dict(valid_config).to_dict()
        again = Config.from_dict(d)
        assert again == Config.from_dict(valid_config)

    def test_yolo_section(self):
        det = DetectionConfig.from_dict({"backend": "yolo", "yolo": {"model": "face.pt", "classes": [0]}})
        assert det.yolo == YoloConfig(model="face.pt", conf_threshold=0.25, classes=[0])
        assert det.to_dict()["yolo"]["classes"] == [0]

    def test_yaml_values_are_coerced(self):
        config = Config.from_dict({
            "camera": {"resolution": [320, 240], "fps": None},
            "detection": {"haar": {"min_size": [40, 40]}},
            "pipeline": {"tick_interval": 1, "max_consecutive_failures": 0},
        })
        assert config.camera.resolution == (320, 240)
        assert config.camera.fps is None
        assert config.detection.haar.min_size == (40, 40)
        assert isinstance(config.pipeline.tick_interval, float)
        assert config.pipeline.max_consecutive_failures == 0
