"""
Detection models for face detection results.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass(frozen=True)
class BoundingBox:
    """
    An axis-aligned box in integer pixel coordinates.

    x2/y2 are exclusive, so a box covers frame[y1:y2, x1:x2].

    Attributes:
        x1: Left edge x coordinate.
        y1: Top edge y coordinate.
        x2: Right edge x coordinate.
        y2: Bottom edge y coordinate.
    """
    x1: int
    y1: int
    x2: int
    y2: int

    @property
    def width(self) -> int:
        return self.x2 - self.x1

    @property
    def height(self) -> int:
        return self.y2 - self.y1

    @property
    def is_empty(self) -> bool:
        """True for zero-area and inverted boxes."""
        return self.width <= 0 or self.height <= 0

    def as_tuple(self) -> Tuple[int, int, int, int]:
        """Return as (x1, y1, x2, y2) tuple."""
        return (self.x1, self.y1, self.x2, self.y2)

    def clip(self, width: int, height: int) -> "BoundingBox":
        """Intersect with the frame rectangle [0, width] x [0, height]."""
        return BoundingBox(
            x1=min(max(self.x1, 0), width),
            y1=min(max(self.y1, 0), height),
            x2=min(max(self.x2, 0), width),
            y2=min(max(self.y2, 0), height),
        )

    def slices(self) -> Tuple[slice, slice]:
        """Return (rows, cols) slices for indexing an (H, W, C) array."""
        return slice(self.y1, self.y2), slice(self.x1, self.x2)


@dataclass(frozen=True)
class Detection:
    """
    A single face (or object) kept by the detection decoder.

    Attributes:
        bbox: Bounding box in pixel coordinates.
        confidence: Detection confidence score (0-1).
        class_id: Class ID reported by the detector.
        batch_id: Index of the input image within the blob batch.
    """
    bbox: BoundingBox
    confidence: float = 1.0
    class_id: Optional[int] = None
    batch_id: Optional[int] = None

    @property
    def x1(self) -> int:
        return self.bbox.x1

    @property
    def y1(self) -> int:
        return self.bbox.y1

    @property
    def x2(self) -> int:
        return self.bbox.x2

    @property
    def y2(self) -> int:
        return self.bbox.y2

    @classmethod
    def from_xyxy(
        cls,
        x1: int,
        y1: int,
        x2: int,
        y2: int,
        confidence: float = 1.0,
        class_id: Optional[int] = None,
    ) -> "Detection":
        """Create Detection from x1, y1, x2, y2 coordinates."""
        return cls(
            bbox=BoundingBox(x1=x1, y1=y1, x2=x2, y2=y2),
            confidence=confidence,
            class_id=class_id,
        )
