"""Default configuration values for Spotlight Remote."""

from __future__ import annotations

DEFAULT_CONFIG: dict[str, dict[str, object]] = {
    "relay": {
        "host": "0.0.0.0",
        "port": 3001,
        "path": "/",
        "send_queue_size": 32,
    },
    "client": {
        "relay_url": "ws://localhost:3001/",
        "sensor_mode": "orientation",
        "sensitivity": 2.0,
        "ease": 0.15,
        "sample_interval_ms": 32,
        "publish_interval_ms": 100,
        "frame_rate": 60,
        "calibration_attempts": 3,
        "send_queue_size": 64,
        "include_diagnostics": True,
    },
    "display": {
        "width": 1920,
        "height": 1080,
    },
    "logging": {
        "level": "info",
        "file": "",
    },
}
