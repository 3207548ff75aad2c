"""
OpenCV-based observation source.

Supports:
- webcams (device_id as int, or a numeric string such as "0")
- video files (device_id as file path)
- network streams (device_id as URL)
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

import cv2

from models.frame import FrameData
from .base import ObservationSource, ObservationConfig


def parse_device_id(device_id: Union[int, str]) -> Union[int, str]:
    """Numeric strings from the command line select a camera index."""
    if isinstance(device_id, str) and device_id.strip().isdigit():
        return int(device_id.strip())
    return device_id


@dataclass
class OpenCVSourceConfig(ObservationConfig):
    """
    Configuration for cv2.VideoCapture sources.

    Attributes:
        device_id: Camera index, file path or stream URL.
        max_retries: Attempts to open the device before giving up.
        retry_delay: Seconds between open attempts.
    """
    device_id: Union[int, str] = 0
    max_retries: int = 3
    retry_delay: float = 1.0

    @classmethod
    def from_camera_config(cls, camera_cfg: Dict[str, Any], source_id: str = "camera") -> "OpenCVSourceConfig":
        """Adapter: Create OpenCVSourceConfig from the camera section of config.yaml."""
        resolution = camera_cfg.get("resolution")
        if resolution:
            resolution = tuple(resolution)

        return cls(
            source_id=source_id,
            resolution=resolution,
            fps=camera_cfg.get("fps"),
            device_id=parse_device_id(camera_cfg.get("device_id", 0)),
            max_retries=camera_cfg.get("max_retries", 3),
        )


class OpenCVSource(ObservationSource):
    """
    Wraps cv2.VideoCapture and yields FrameData until the device closes.

    Example:
        config = OpenCVSourceConfig(device_id=0)
        with OpenCVSource(config) as source:
            for frame_data in source:
                process(frame_data.frame)
    """

    def __init__(self, config: OpenCVSourceConfig):
        super().__init__(config)
        self._opencv_config = config
        self._cap: Optional[cv2.VideoCapture] = None

    @property
    def device_id(self) -> Union[int, str]:
        return parse_device_id(self._opencv_config.device_id)

    @property
    def is_camera(self) -> bool:
        return isinstance(self.device_id, int)

    def open(self) -> None:
        if self._is_open:
            return

        attempts = max(1, self._opencv_config.max_retries)
        for attempt in range(1, attempts + 1):
            self._cap = cv2.VideoCapture(self.device_id)
            if self._cap.isOpened():
                break
            self._cap.release()
            self._cap = None
            if attempt < attempts:
                logging.warning(
                    f"Failed to open video device {self.device_id} "
                    f"(attempt {attempt}/{attempts}), retrying..."
                )
                time.sleep(self._opencv_config.retry_delay)
        else:
            raise RuntimeError(f"Error opening video capture device: {self.device_id}")

        if self.is_camera and self._opencv_config.resolution:
            w, h = self._opencv_config.resolution
            self._cap.set(cv2.CAP_PROP_FRAME_WIDTH, w)
            self._cap.set(cv2.CAP_PROP_FRAME_HEIGHT, h)
        if self.is_camera and self._opencv_config.fps:
            self._cap.set(cv2.CAP_PROP_FPS, self._opencv_config.fps)

        self._is_open = True
        self._frame_index = 0
        logging.info(f"Start reading device: {self.device_id}")

    def read(self) -> Optional[FrameData]:
        """Return the next frame, or None when the device is closed."""
        if not self._is_open or self._cap is None:
            return None

        ok, frame = self._cap.read()
        if not ok or frame is None:
            logging.info(f"Device closed: {self.device_id}")
            return None

        self._frame_index += 1
        return FrameData.from_numpy(
            frame,
            timestamp=time.time(),
            frame_index=self._frame_index,
            source=self.source_id,
        )

    def close(self) -> None:
        if self._cap is not None:
            self._cap.release()
            self._cap = None
        self._is_open = False


def create_source_from_config(camera_cfg: Dict[str, Any], source_id: str = "camera") -> OpenCVSource:
    """Factory: build an OpenCVSource from the camera config section."""
    return OpenCVSource(OpenCVSourceConfig.from_camera_config(camera_cfg or {}, source_id=source_id))
