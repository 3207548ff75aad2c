"""
Typed configuration models matching the YAML config structure.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union


@dataclass
class CameraConfig:
    """Video source configuration."""
    device_id: Union[int, str] = 0
    resolution: Optional[List[int]] = None
    fps: Optional[int] = None

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "CameraConfig":
        """Adapter: Create from config dictionary."""
        return cls(
            device_id=d.get("device_id", 0),
            resolution=d.get("resolution"),
            fps=d.get("fps"),
        )

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {"device_id": self.device_id}
        if self.resolution is not None:
            d["resolution"] = self.resolution
        if self.fps is not None:
            d["fps"] = self.fps
        return d


@dataclass
class DetectionConfig:
    """Face detector configuration."""
    model: str = ""
    config: str = ""
    backend: str = "default"
    target: str = "cpu"
    confidence_threshold: float = 0.5
    input_size: List[int] = field(default_factory=lambda: [300, 300])
    clamp_origin: bool = True

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "DetectionConfig":
        return cls(
            model=d.get("model", "") or "",
            config=d.get("config", "") or "",
            backend=d.get("backend", "default"),
            target=d.get("target", "cpu"),
            confidence_threshold=d.get("confidence_threshold", 0.5),
            input_size=d.get("input_size", [300, 300]),
            clamp_origin=d.get("clamp_origin", True),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "model": self.model,
            "config": self.config,
            "backend": self.backend,
            "target": self.target,
            "confidence_threshold": self.confidence_threshold,
            "input_size": self.input_size,
            "clamp_origin": self.clamp_origin,
        }


@dataclass
class BlurConfig:
    """
    Background blur configuration.

    Attributes:
        kernel_size: Gaussian kernel extent in pixels (odd, square).
        sigma: Gaussian sigma; 0 lets OpenCV derive it from kernel_size.
        border: Border extension name (see privacy.compositor.BORDER_TYPES).
    """
    kernel_size: int = 75
    sigma: float = 0.0
    border: str = "default"

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "BlurConfig":
        return cls(
            kernel_size=d.get("kernel_size", 75),
            sigma=d.get("sigma", 0.0),
            border=d.get("border", "default"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kernel_size": self.kernel_size,
            "sigma": self.sigma,
            "border": self.border,
        }


@dataclass
class OutputConfig:
    """Display and recording sinks."""
    display: bool = True
    window_name: str = "DNN Face Blurring"
    record: bool = False
    output_dir: str = "output/video"
    fps: int = 30

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "OutputConfig":
        return cls(
            display=d.get("display", True),
            window_name=d.get("window_name", "DNN Face Blurring"),
            record=d.get("record", False),
            output_dir=d.get("output_dir", "output/video"),
            fps=d.get("fps", 30),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "display": self.display,
            "window_name": self.window_name,
            "record": self.record,
            "output_dir": self.output_dir,
            "fps": self.fps,
        }


@dataclass
class Config:
    """
    Complete application configuration.

    This is a typed representation of the YAML config structure.
    """
    camera: CameraConfig = field(default_factory=CameraConfig)
    detection: DetectionConfig = field(default_factory=DetectionConfig)
    blur: BlurConfig = field(default_factory=BlurConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    log_path: str = "logs/background_blur.log"
    log_level: str = "INFO"

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Config":
        """Adapter: Create Config from raw dictionary (e.g., from load_config)."""
        return cls(
            camera=CameraConfig.from_dict(d.get("camera") or {}),
            detection=DetectionConfig.from_dict(d.get("detection") or {}),
            blur=BlurConfig.from_dict(d.get("blur") or {}),
            output=OutputConfig.from_dict(d.get("output") or {}),
            log_path=d.get("log_path", "logs/background_blur.log"),
            log_level=d.get("log_level", "INFO"),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert back to dictionary."""
        return {
            "camera": self.camera.to_dict(),
            "detection": self.detection.to_dict(),
            "blur": self.blur.to_dict(),
            "output": self.output.to_dict(),
            "log_path": self.log_path,
            "log_level": self.log_level,
        }
