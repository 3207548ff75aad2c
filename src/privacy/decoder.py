"""
Decoder for raw SSD-style detection tensors.

The OpenCV DNN face detectors produce an output blob of shape 1x1xNx7 where
each of the N records is

    [batch_id, class_id, confidence, left, top, right, bottom]

with the four box fields normalized to [0, 1] relative to the frame size.
"""

from __future__ import annotations

from typing import List, Optional

import numpy as np

from models.detection import BoundingBox, Detection

RECORD_SIZE = 7

BATCH_ID = 0
CLASS_ID = 1
CONFIDENCE = 2
LEFT = 3
TOP = 4
RIGHT = 5
BOTTOM = 6

DEFAULT_CONFIDENCE_THRESHOLD = 0.5


def decode_detections(
    tensor: Optional[np.ndarray],
    frame_width: int,
    frame_height: int,
    confidence_threshold: float = DEFAULT_CONFIDENCE_THRESHOLD,
    clamp_origin: bool = True,
) -> List[Detection]:
    """
    Parse a raw detection tensor into pixel-space detections.

    Records are returned in tensor order. A record is kept only when its
    confidence is strictly greater than the threshold. A trailing partial
    record is ignored.

    Args:
        tensor: Network output of any shape; read as a flat float sequence.
        frame_width: Width of the frame the detections refer to.
        frame_height: Height of the frame the detections refer to.
        confidence_threshold: Records at or below this score are dropped.
        clamp_origin: Also clamp left/top (and the lower bound of right/bottom)
            into the frame. When False only right <= W and bottom <= H are
            enforced.

    Returns:
        List of Detection objects. Inverted boxes are passed through as-is.
    """
    if tensor is None:
        return []

    flat = np.asarray(tensor, dtype=np.float32).reshape(-1)
    usable = flat.size - flat.size % RECORD_SIZE

    # Products are float32, matching the tensor precision.
    width = np.float32(frame_width)
    height = np.float32(frame_height)

    detections: List[Detection] = []
    for i in range(0, usable, RECORD_SIZE):
        record = flat[i:i + RECORD_SIZE]
        confidence = float(record[CONFIDENCE])
        if not confidence > confidence_threshold:
            continue

        left = int(record[LEFT] * width)
        top = int(record[TOP] * height)
        right = int(record[RIGHT] * width)
        bottom = int(record[BOTTOM] * height)

        right = min(right, frame_width)
        bottom = min(bottom, frame_height)
        if clamp_origin:
            left = min(max(left, 0), frame_width)
            top = min(max(top, 0), frame_height)
            right = max(right, 0)
            bottom = max(bottom, 0)

        detections.append(
            Detection(
                bbox=BoundingBox(x1=left, y1=top, x2=right, y2=bottom),
                confidence=confidence,
                class_id=int(record[CLASS_ID]),
                batch_id=int(record[BATCH_ID]),
            )
        )

    return detections
