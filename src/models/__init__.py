"""
Typed models for the background blur application.
"""

from .frame import FrameData
from .detection import Detection, BoundingBox
from .config import (
    Config,
    CameraConfig,
    DetectionConfig,
    BlurConfig,
    OutputConfig,
)

__all__ = [
    # Frame
    "FrameData",
    # Detection
    "Detection",
    "BoundingBox",
    # Config
    "Config",
    "CameraConfig",
    "DetectionConfig",
    "BlurConfig",
    "OutputConfig",
]
