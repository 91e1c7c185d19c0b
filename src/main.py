"""
Classroom Monitor: live face counting with attendance events.

Loads the layered configuration, builds the monitoring engine and either
serves the REST API (default) or runs headless until interrupted.

Usage:
    python src/main.py --config config/config.yaml --display

Arguments:
    --config: Path to configuration file
    --display: Open a local preview window with overlays
    --no-web: Run headless without the REST API
    --attendance: Start with attendance tracking switched on
    --start: Start the camera as soon as the model is loaded
"""

import argparse
import asyncio
import logging
import os
import sys
from typing import Any, Dict, List, Optional, Tuple

import cv2
import uvicorn
import yaml

from models.config import Config
from ops.logging import setup_logging
from pipeline.engine import MonitorEngine, create_engine_from_config
from pipeline.overlay import draw_overlays
from runtime.errors import MonitorError
from web.app import create_app

VALID_LOG_LEVELS = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge override into base and return base."""
    for key, value in (override or {}).items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value
    return base


def _config_layers(config_path: str) -> List[str]:
    """Files merged by load_config, lowest precedence first."""
    config_dir = os.path.dirname(config_path)
    layers = [
        os.path.join(config_dir, "default.yaml"),
        os.path.join(config_dir, "config.yaml"),
    ]
    if os.path.abspath(config_path) not in {os.path.abspath(p) for p in layers}:
        layers.append(config_path)
    return layers


def load_config(config_path: str) -> Dict[str, Any]:
    """
    Load the layered configuration.

    `default.yaml` next to config_path is read first, then the local
    `config.yaml` overrides, then config_path itself if it names some other
    file. Missing layers are skipped. Exits the process if a layer cannot be
    parsed.
    """
    merged: Dict[str, Any] = {}
    for path in _config_layers(config_path):
        if not os.path.exists(path):
            continue
        try:
            with open(path, "r") as f:
                layer = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            logging.error(f"Failed to load configuration from {path}: {e}")
            sys.exit(1)
        _deep_merge(merged, layer)
    return merged


def _is_positive_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


def _check_camera(camera: Dict[str, Any]) -> Optional[str]:
    if 'device_id' not in camera:
        return "Missing camera.device_id"
    device_id = camera['device_id']
    if isinstance(device_id, bool) or not isinstance(device_id, (int, str)):
        return "camera.device_id must be a device index or a stream URL / video path"
    if isinstance(device_id, int) and device_id < 0:
        return "camera.device_id index must be non-negative"
    if 'resolution' in camera:
        resolution = camera['resolution']
        if not isinstance(resolution, list) or len(resolution) != 2:
            return "camera.resolution must be a list of [width, height]"
        if not all(_is_positive_int(x) for x in resolution):
            return "camera.resolution values must be positive integers"
    if 'fps' in camera and not _is_positive_int(camera['fps']):
        return "camera.fps must be a positive integer"
    if camera.get('backend', 'opencv') != 'opencv':
        return "camera.backend must be: opencv"
    return None


def _check_detection(detection: Dict[str, Any]) -> Optional[str]:
    backend = detection.get('backend', 'haar')
    if backend not in ('haar', 'yolo'):
        return "detection.backend must be one of: haar, yolo"
    if backend == 'yolo':
        yolo_cfg = detection.get('yolo', {}) or {}
        if not isinstance(yolo_cfg.get('model'), str) or not yolo_cfg.get('model'):
            return "detection.yolo.model is required when detection.backend is 'yolo'"
        threshold = yolo_cfg.get('conf_threshold', 0.25)
        if not isinstance(threshold, (int, float)) or not 0 <= threshold <= 1:
            return "detection.yolo.conf_threshold must be between 0 and 1"
    haar_cfg = detection.get('haar', {}) or {}
    scale_factor = haar_cfg.get('scale_factor', 1.1)
    if not isinstance(scale_factor, (int, float)) or scale_factor <= 1.0:
        return "detection.haar.scale_factor must be greater than 1.0"
    if 'min_neighbors' in haar_cfg and not _is_positive_int(haar_cfg['min_neighbors']):
        return "detection.haar.min_neighbors must be a positive integer"
    return None


def _check_session(config: Dict[str, Any]) -> Optional[str]:
    metrics = config.get('metrics', {}) or {}
    if 'window_size' in metrics and not _is_positive_int(metrics['window_size']):
        return "metrics.window_size must be a positive integer"
    attendance = config.get('attendance', {}) or {}
    if 'log_capacity' in attendance and not _is_positive_int(attendance['log_capacity']):
        return "attendance.log_capacity must be a positive integer"
    pipeline = config.get('pipeline', {}) or {}
    tick_interval = pipeline.get('tick_interval', 0.0)
    if not isinstance(tick_interval, (int, float)) or tick_interval < 0:
        return "pipeline.tick_interval must be a non-negative number"
    return None


def validate_config(config: Dict[str, Any]) -> Tuple[bool, Optional[str]]:
    """
    Validate configuration structure and values.

    Args:
        config: Merged configuration dictionary

    Returns:
        Tuple of (is_valid, error_message)
    """
    for section in ('camera', 'detection', 'log_path', 'log_level'):
        if section not in config:
            return False, f"Missing required configuration section: {section}"

    error = (
        _check_camera(config['camera'] or {})
        or _check_detection(config['detection'] or {})
        or _check_session(config)
    )
    if error:
        return False, error

    web = config.get('web', {}) or {}
    if 'port' in web and (not _is_positive_int(web['port']) or web['port'] > 65535):
        return False, "web.port must be between 1 and 65535"

    if config['log_level'] not in VALID_LOG_LEVELS:
        return False, f"log_level must be one of: {', '.join(VALID_LOG_LEVELS)}"

    return True, None


def attach_display(engine: MonitorEngine) -> None:
    """Show each tick in an OpenCV window; 'q' stops the loop."""

    def show(frame_data, sample, events):
        cv2.imshow("Classroom Monitor", draw_overlays(frame_data.frame, engine.status()))
        key = cv2.waitKey(1) & 0xFF
        if key == ord('q'):
            engine.request_stop()

    engine.add_callback(show)


async def run_headless(engine: MonitorEngine) -> None:
    """Load, start and tick until the loop ends or the process is interrupted."""
    try:
        await engine.initialize()
        await engine.start()
        await engine.wait_stopped()
    finally:
        await engine.shutdown()


def main():
    """Main application function."""
    parser = argparse.ArgumentParser(description='Classroom Monitor - live face counting')
    parser.add_argument('--config', type=str, default='config/config.yaml',
                        help='Path to configuration file')
    parser.add_argument('--display', action='store_true',
                        help='Open a local preview window')
    parser.add_argument('--no-web', action='store_true',
                        help='Run headless without the REST API')
    parser.add_argument('--attendance', action='store_true',
                        help='Start with attendance tracking enabled')
    parser.add_argument('--start', action='store_true',
                        help='Start the camera once the model is loaded')
    args = parser.parse_args()

    config = load_config(args.config)
    if args.attendance:
        config.setdefault('attendance', {})['enabled'] = True

    is_valid, error_msg = validate_config(config)
    if not is_valid:
        logging.error(f"Configuration validation failed: {error_msg}")
        sys.exit(1)

    settings = Config.from_dict(config)
    setup_logging(settings.log_path, settings.log_level)
    logging.info("Starting Classroom Monitor")

    engine = create_engine_from_config(settings)
    if args.display:
        attach_display(engine)

    try:
        if args.no_web or not settings.web.enabled:
            asyncio.run(run_headless(engine))
        else:
            uvicorn.run(
                create_app(engine, autostart=args.start or settings.pipeline.autostart),
                host=settings.web.host,
                port=settings.web.port,
                log_level="info",
            )
    except KeyboardInterrupt:
        logging.info("Interrupted by user")
    except MonitorError as e:
        logging.error(f"Classroom Monitor failed: {e}")
        sys.exit(1)
    finally:
        if args.display:
            cv2.destroyAllWindows()
        logging.info("Classroom Monitor stopped")


if __name__ == "__main__":
    main()
