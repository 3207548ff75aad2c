"""
Pipeline engine for the background blur application.

Reads frames from an ObservationSource, blurs everything but the detected
faces, and hands the result to the display window, the recorder and any
registered callbacks.
"""

from __future__ import annotations

import logging
import os
import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

import cv2

from inference.backend import Detector
from inference.dnn_backend import DnnDetector, DnnDetectorConfig
from models.config import Config, DetectionConfig
from models.detection import Detection
from models.frame import FrameData
from observation import ObservationSource, create_source_from_config
from pipeline.stages.blur import BlurStage, create_blur_stage


@dataclass
class PipelineConfig:
    """
    Configuration for the pipeline engine.

    Attributes:
        display: Show frames in a cv2 window; any key quits.
        window_name: Title of the display window.
        record: Write processed frames to a video file.
        output_dir: Directory for recorded videos.
        record_fps: Frame rate written into recorded videos.
        stats_log_interval: Seconds between status log messages.
    """
    display: bool = True
    window_name: str = "DNN Face Blurring"
    record: bool = False
    output_dir: str = "output/video"
    record_fps: int = 30
    stats_log_interval: float = 60.0


@dataclass
class PipelineStats:
    """Runtime statistics for the pipeline."""
    frame_count: int = 0
    skipped_frames: int = 0
    detection_count: int = 0
    start_time: float = field(default_factory=time.time)
    last_stats_log_time: float = field(default_factory=time.time)

    @property
    def fps(self) -> float:
        elapsed = time.time() - self.start_time
        return self.frame_count / elapsed if elapsed > 0 else 0.0


class PipelineEngine:
    """
    Main processing loop.

    Frames are processed strictly one at a time; each FrameData is owned by
    the loop iteration that read it and is not retained afterwards.

    Example:
        source = OpenCVSource(OpenCVSourceConfig(device_id=0))
        stage = BlurStage(detector, PrivacyCompositor())
        engine = PipelineEngine(source, stage, PipelineConfig())
        engine.run()
    """

    def __init__(
        self,
        source: ObservationSource,
        stage: BlurStage,
        config: PipelineConfig,
    ):
        self.source = source
        self.stage = stage
        self.config = config
        self.stats = PipelineStats()
        self._running = False
        self._video_writer: Optional[cv2.VideoWriter] = None
        self._output_path: Optional[str] = None
        self._callbacks: List[Callable[[FrameData, List[Detection]], None]] = []

    @property
    def output_path(self) -> Optional[str]:
        return self._output_path

    def add_callback(self, callback: Callable[[FrameData, List[Detection]], None]) -> None:
        """
        Add a callback to be called after each frame is processed.

        Args:
            callback: Function taking (frame_data, detections) as arguments.
        """
        self._callbacks.append(callback)

    def run(self) -> None:
        """
        Run the main processing loop until end-of-stream, a key press in the
        display window, or stop().
        """
        self._running = True
        self.stats = PipelineStats()

        try:
            self.source.open()
            logging.info(f"Pipeline started: source={self.source.source_id}")

            while self._running:
                frame_data = self.source.read()
                if frame_data is None:
                    logging.info("End of stream")
                    break

                if frame_data.is_empty:
                    self.stats.skipped_frames += 1
                    continue

                detections = self._process_frame(frame_data)

                for callback in self._callbacks:
                    try:
                        callback(frame_data, detections)
                    except Exception as e:
                        logging.warning(f"Callback error: {e}")

                if self.config.display:
                    if not self._handle_display(frame_data):
                        break

                self._handle_periodic_tasks()

        except KeyboardInterrupt:
            logging.info("Pipeline interrupted by user")
        except Exception as e:
            logging.exception(f"Pipeline error: {e}")
        finally:
            self._cleanup()

    def stop(self) -> None:
        """Signal the pipeline to stop after the current frame."""
        self._running = False

    def _process_frame(self, frame_data: FrameData) -> List[Detection]:
        self.stats.frame_count += 1

        detections = self.stage.process(frame_data)
        self.stats.detection_count += len(detections)

        if self.config.record:
            if self._video_writer is None:
                self._setup_recording(frame_data.width, frame_data.height)
            self._video_writer.write(frame_data.frame)

        return detections

    def _handle_display(self, frame_data: FrameData) -> bool:
        """
        Show the frame.

        Returns False if the user pressed any key.
        """
        cv2.imshow(self.config.window_name, frame_data.frame)
        return cv2.waitKey(1) < 0

    def _handle_periodic_tasks(self) -> None:
        now = time.time()
        if now - self.stats.last_stats_log_time >= self.config.stats_log_interval:
            logging.info(
                f"Pipeline stats: frames={self.stats.frame_count}, "
                f"faces={self.stats.detection_count}, fps={self.stats.fps:.1f}"
            )
            self.stats.last_stats_log_time = now

    def _setup_recording(self, width: int, height: int) -> None:
        """Open a video writer sized to the first processed frame."""
        os.makedirs(self.config.output_dir, exist_ok=True)

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        self._output_path = os.path.join(self.config.output_dir, f"blur_{timestamp}.avi")

        fourcc = cv2.VideoWriter_fourcc(*'XVID')
        self._video_writer = cv2.VideoWriter(
            self._output_path, fourcc, self.config.record_fps, (width, height), True
        )
        logging.info(f"Video recording started: {self._output_path}")

    def _cleanup(self) -> None:
        self._running = False

        try:
            self.source.close()
        except Exception as e:
            logging.warning(f"Error closing source: {e}")

        if self._video_writer is not None:
            self._video_writer.release()
            self._video_writer = None
            logging.info(f"Video saved: {self._output_path}")

        if self.config.display:
            cv2.destroyAllWindows()

        logging.info(
            f"Pipeline stopped: frames={self.stats.frame_count}, "
            f"faces={self.stats.detection_count}"
        )


def create_detector_from_config(detection_cfg: DetectionConfig) -> DnnDetector:
    """Factory: load the OpenCV DNN face detector named in the detection section."""
    width, height = detection_cfg.input_size or [300, 300]
    return DnnDetector(
        DnnDetectorConfig(
            model=detection_cfg.model,
            config=detection_cfg.config,
            backend=detection_cfg.backend,
            target=detection_cfg.target,
            input_size=(int(width), int(height)),
        )
    )


def create_engine_from_config(
    config: Dict[str, Any],
    detector: Optional[Detector] = None,
    display: Optional[bool] = None,
    record: Optional[bool] = None,
) -> PipelineEngine:
    """
    Factory function to create a PipelineEngine from the app config dict.

    Args:
        config: Full application config dict.
        detector: Detector to use; a DnnDetector is loaded from config if None.
        display: Overrides output.display when not None.
        record: Overrides output.record when not None.
    """
    app_cfg = Config.from_dict(config)

    source = create_source_from_config(app_cfg.camera.to_dict(), source_id="main-camera")

    if detector is None:
        detector = create_detector_from_config(app_cfg.detection)
    stage = create_blur_stage(app_cfg.detection, app_cfg.blur, detector)

    output = app_cfg.output
    pipeline_config = PipelineConfig(
        display=output.display if display is None else display,
        window_name=output.window_name,
        record=output.record if record is None else record,
        output_dir=output.output_dir,
        record_fps=output.fps,
    )

    return PipelineEngine(source, stage, pipeline_config)
