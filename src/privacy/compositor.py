"""
Privacy compositor: blur the whole frame except the detected regions.

Each kept region is copied out of the frame before blurring and written back
afterwards, so the blur never leaks into the restored pixels. Snapshots are
restored in detection order; where boxes overlap the later detection wins.

Running the compositor twice on its own output keeps the regions unchanged
but blurs the background a second time. It is not idempotent.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

import cv2
import numpy as np

from models.config import BlurConfig
from models.detection import BoundingBox, Detection

BORDER_TYPES: Dict[str, int] = {
    "default": cv2.BORDER_DEFAULT,
    "reflect_101": cv2.BORDER_REFLECT_101,
    "reflect": cv2.BORDER_REFLECT,
    "replicate": cv2.BORDER_REPLICATE,
    "constant": cv2.BORDER_CONSTANT,
}


@dataclass
class RegionSnapshot:
    """Unblurred pixels under one detection box."""
    bbox: BoundingBox
    pixels: np.ndarray


class PrivacyCompositor:
    """
    Snapshot -> blur -> restore, in place on a single frame.

    Not reentrant: callers must not run it concurrently on the same buffer.

    Example:
        compositor = PrivacyCompositor(BlurConfig())
        compositor.apply(frame, detections)
    """

    def __init__(self, config: Optional[BlurConfig] = None):
        config = config or BlurConfig()
        if config.kernel_size <= 0 or config.kernel_size % 2 == 0:
            raise ValueError(
                f"blur.kernel_size must be a positive odd integer, got {config.kernel_size}"
            )
        if config.border not in BORDER_TYPES:
            raise ValueError(
                f"blur.border must be one of: {', '.join(BORDER_TYPES)}, got {config.border!r}"
            )
        self.config = config
        self._ksize = (config.kernel_size, config.kernel_size)
        self._border = BORDER_TYPES[config.border]

    def capture(self, frame: np.ndarray, detections: Sequence[Detection]) -> List[RegionSnapshot]:
        """Copy the pixels under every non-empty detection box."""
        height, width = frame.shape[:2]
        snapshots: List[RegionSnapshot] = []
        for det in detections:
            bbox = det.bbox.clip(width, height)
            if bbox.is_empty:
                logging.debug(f"Skipping empty region {det.bbox.as_tuple()}")
                continue
            rows, cols = bbox.slices()
            snapshots.append(RegionSnapshot(bbox=bbox, pixels=frame[rows, cols].copy()))
        return snapshots

    def blur(self, frame: np.ndarray) -> None:
        """Gaussian-blur the entire frame into its own buffer."""
        frame[...] = cv2.GaussianBlur(
            frame, self._ksize, self.config.sigma, borderType=self._border
        )

    def restore(self, frame: np.ndarray, snapshots: Sequence[RegionSnapshot]) -> None:
        """Write snapshots back in order; later snapshots overwrite earlier ones."""
        for snap in snapshots:
            rows, cols = snap.bbox.slices()
            frame[rows, cols] = snap.pixels

    def apply(self, frame: np.ndarray, detections: Sequence[Detection]) -> List[RegionSnapshot]:
        """
        Blur the frame in place except for the detection boxes.

        Returns:
            The snapshots that were restored, one per non-empty box.
        """
        snapshots = self.capture(frame, detections)
        self.blur(frame)
        self.restore(frame, snapshots)
        return snapshots


def blur_background(
    frame: np.ndarray,
    detections: Sequence[Detection],
    config: Optional[BlurConfig] = None,
) -> np.ndarray:
    """Convenience wrapper around PrivacyCompositor.apply; returns the frame."""
    PrivacyCompositor(config).apply(frame, detections)
    return frame
