"""
Pytest configuration and shared fixtures.
"""

import os
import sys

import numpy as np
import pytest

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))


def make_tensor(records):
    """Build a 1x1xNx7 float32 detection tensor from 7-field records."""
    arr = np.array(records, dtype=np.float32).reshape(-1, 7)
    return arr.reshape(1, 1, -1, 7)


class StubDetector:
    """Detector returning a fixed tensor and remembering what it saw."""

    def __init__(self, tensor=None):
        self.tensor = tensor if tensor is not None else np.zeros((1, 1, 0, 7), dtype=np.float32)
        self.calls = 0

    def forward(self, frame):
        self.calls += 1
        return self.tensor


@pytest.fixture
def checkerboard():
    """100x100 BGR frame alternating 0/255 per pixel; blurs to mid-grey everywhere."""
    yy, xx = np.indices((100, 100))
    board = (((xx + yy) % 2) * 255).astype(np.uint8)
    return np.dstack([board, board, board])


@pytest.fixture
def noise_frame():
    rng = np.random.default_rng(1234)
    return rng.integers(0, 256, size=(120, 160, 3), dtype=np.uint8)


@pytest.fixture
def temp_config_dir(tmp_path):
    """Create a temporary config directory with default.yaml."""
    config_dir = tmp_path / "config"
    config_dir.mkdir()

    default_yaml = config_dir / "default.yaml"
    default_yaml.write_text("""
camera:
  device_id: 0

detection:
  model: "models/face.caffemodel"
  config: "models/deploy.prototxt"
  backend: "default"
  target: "cpu"
  confidence_threshold: 0.5

blur:
  kernel_size: 75
  sigma: 0
  border: "default"

output:
  display: true
  record: false

log_path: "logs/test.log"
log_level: "INFO"
""")

    return config_dir


@pytest.fixture
def valid_config():
    """Return a valid configuration dictionary."""
    return {
        "camera": {
            "device_id": 0,
            "resolution": [640, 480],
            "fps": 30,
        },
        "detection": {
            "model": "models/face.caffemodel",
            "config": "models/deploy.prototxt",
            "backend": "default",
            "target": "cpu",
            "confidence_threshold": 0.5,
            "input_size": [300, 300],
        },
        "blur": {
            "kernel_size": 75,
            "sigma": 0,
            "border": "default",
        },
        "output": {
            "display": False,
            "record": False,
            "fps": 30,
        },
        "log_path": "logs/test.log",
        "log_level": "INFO",
    }
