"""
Privacy layer: decode detector output and blur everything but the faces.
"""

from .decoder import decode_detections, RECORD_SIZE, DEFAULT_CONFIDENCE_THRESHOLD
from .compositor import PrivacyCompositor, RegionSnapshot, blur_background, BORDER_TYPES

__all__ = [
    "decode_detections",
    "RECORD_SIZE",
    "DEFAULT_CONFIDENCE_THRESHOLD",
    "PrivacyCompositor",
    "RegionSnapshot",
    "blur_background",
    "BORDER_TYPES",
]
