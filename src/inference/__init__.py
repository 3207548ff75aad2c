"""
Detector backends producing raw SSD detection tensors.
"""

from .backend import Detector
from .dnn_backend import DnnDetector, DnnDetectorConfig, parse_net_backend, parse_net_target

__all__ = [
    "Detector",
    "DnnDetector",
    "DnnDetectorConfig",
    "parse_net_backend",
    "parse_net_target",
]
