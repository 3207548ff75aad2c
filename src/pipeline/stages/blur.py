"""
Blur stage: detect faces, then blur everything else in the frame.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional

from inference.backend import Detector
from models.config import BlurConfig, DetectionConfig
from models.detection import Detection
from models.frame import FrameData
from privacy.compositor import PrivacyCompositor
from privacy.decoder import DEFAULT_CONFIDENCE_THRESHOLD, decode_detections


@dataclass
class BlurStageConfig:
    """
    Attributes:
        confidence_threshold: Records at or below this score are blurred.
        clamp_origin: Clamp left/top into the frame as well as right/bottom.
    """
    confidence_threshold: float = DEFAULT_CONFIDENCE_THRESHOLD
    clamp_origin: bool = True


class BlurStage:
    """
    Per-frame processing: forward -> decode -> snapshot/blur/restore.

    process() is blocking and not reentrant; it mutates frame_data.frame in
    place and must finish before the next frame is handed in.

    Example:
        stage = BlurStage(detector, PrivacyCompositor(BlurConfig()))
        detections = stage.process(frame_data)
    """

    def __init__(
        self,
        detector: Detector,
        compositor: PrivacyCompositor,
        config: Optional[BlurStageConfig] = None,
    ):
        self._detector = detector
        self._compositor = compositor
        self._config = config or BlurStageConfig()

    @property
    def detector(self) -> Detector:
        return self._detector

    def process(self, frame_data: FrameData) -> List[Detection]:
        """
        Blur the background of one frame in place.

        Returns:
            The detections that passed the confidence threshold.
        """
        frame = frame_data.frame
        tensor = self._detector.forward(frame)
        detections = decode_detections(
            tensor,
            frame_data.width,
            frame_data.height,
            confidence_threshold=self._config.confidence_threshold,
            clamp_origin=self._config.clamp_origin,
        )
        snapshots = self._compositor.apply(frame, detections)
        if len(snapshots) != len(detections):
            logging.debug(
                f"[BLUR] frame={frame_data.frame_index} "
                f"skipped {len(detections) - len(snapshots)} empty region(s)"
            )
        return detections


def create_blur_stage(
    detection_cfg: DetectionConfig,
    blur_cfg: BlurConfig,
    detector: Detector,
) -> BlurStage:
    """Factory: build a BlurStage from the typed detection and blur sections."""
    stage_config = BlurStageConfig(
        confidence_threshold=detection_cfg.confidence_threshold,
        clamp_origin=detection_cfg.clamp_origin,
    )
    return BlurStage(detector, PrivacyCompositor(blur_cfg), stage_config)
