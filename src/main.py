"""
DNN background blur.

Blurs everything in a video stream except detected faces, somewhat like
video-conferencing background blur. Works with either the Caffe face
detector or the TensorFlow SSD object detection models included with
OpenCV 4.

Usage:
    python src/main.py --config config/config.yaml
    python src/main.py --source 0 \
        --model res10_300x300_ssd_iter_140000.caffemodel \
        --model-config deploy.prototxt

Arguments:
    --config: Path to configuration file
    --source: Camera index, video file or stream URL
    --model: Model weights (.caffemodel or .pb)
    --model-config: Model config (.prototxt or .pbtxt)
    --backend: DNN backend (default, halide, openvino, opencv, vulkan, cuda)
    --target: DNN target (cpu, fp32, fp16, vpu, vulkan, fpga, cuda, cudafp16)
    --no-display: Run without a preview window
    --record: Record blurred video output
"""

import os
import sys
import argparse
import logging
from typing import Any, Dict, Optional, Tuple

import yaml

from models.config import Config
from ops.logging import setup_logging
from pipeline.engine import create_engine_from_config
from privacy.compositor import BORDER_TYPES


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge override into base and return base."""
    for k, v in (override or {}).items():
        if isinstance(v, dict) and isinstance(base.get(k), dict):
            _deep_merge(base[k], v)
        else:
            base[k] = v
    return base


def load_config(config_path: str) -> Dict[str, Any]:
    """
    Load configuration with layering:
    - `config/default.yaml` (checked in)
    - `config/config.yaml` (local overrides)
    - plus any explicitly provided `--config` path (treated as overrides)
    """
    try:
        base_path = os.path.join(os.path.dirname(config_path), "default.yaml")
        base_cfg: Dict[str, Any] = {}
        if os.path.exists(base_path):
            with open(base_path, "r") as f:
                base_cfg = yaml.safe_load(f) or {}

        local_overrides_path = os.path.join(os.path.dirname(config_path), "config.yaml")
        local_cfg: Dict[str, Any] = {}
        if os.path.exists(local_overrides_path):
            with open(local_overrides_path, "r") as f:
                local_cfg = yaml.safe_load(f) or {}

        merged = _deep_merge(base_cfg, local_cfg)

        if os.path.exists(config_path) and os.path.abspath(config_path) != os.path.abspath(local_overrides_path):
            with open(config_path, "r") as f:
                explicit_cfg = yaml.safe_load(f) or {}
            merged = _deep_merge(merged, explicit_cfg)

        return merged
    except Exception as e:
        logging.error(f"Failed to load configuration: {e}")
        sys.exit(1)


def apply_cli_overrides(config: Dict[str, Any], args: argparse.Namespace) -> Dict[str, Any]:
    """Command-line flags win over YAML values."""
    camera = config.setdefault("camera", {})
    detection = config.setdefault("detection", {})
    output = config.setdefault("output", {})

    if getattr(args, "source", None) is not None:
        camera["device_id"] = args.source
    if getattr(args, "model", None):
        detection["model"] = args.model
    if getattr(args, "model_config", None):
        detection["config"] = args.model_config
    if getattr(args, "backend", None):
        detection["backend"] = args.backend
    if getattr(args, "target", None):
        detection["target"] = args.target
    if getattr(args, "no_display", False):
        output["display"] = False
    if getattr(args, "record", False):
        output["record"] = True
    if getattr(args, "log_level", None):
        config["log_level"] = args.log_level
    return config


def validate_config(config: Dict[str, Any]) -> Tuple[bool, Optional[str]]:
    """
    Validate configuration structure and values.

    Args:
        config: Configuration dictionary

    Returns:
        Tuple of (is_valid, error_message)
    """
    required_sections = ['camera', 'detection', 'log_path', 'log_level']
    for section in required_sections:
        if section not in config:
            return False, f"Missing required configuration section: {section}"

    camera = config.get('camera') or {}
    if 'device_id' not in camera:
        return False, "Missing camera.device_id"
    if not isinstance(camera['device_id'], (int, str)) or isinstance(camera['device_id'], bool):
        return False, "camera.device_id must be an integer (index) or string (path/URL)"
    if isinstance(camera['device_id'], int) and camera['device_id'] < 0:
        return False, "camera.device_id integer must be non-negative"

    resolution = camera.get('resolution')
    if resolution is not None:
        if not isinstance(resolution, list) or len(resolution) != 2:
            return False, "camera.resolution must be a list of [width, height]"
        if not all(isinstance(x, int) and x > 0 for x in resolution):
            return False, "camera.resolution values must be positive integers"

    detection = config.get('detection') or {}
    model = detection.get('model')
    if not isinstance(model, str) or not model:
        return False, "detection.model is required (path to .caffemodel or .pb)"
    if 'config' in detection and detection['config'] is not None and not isinstance(detection['config'], str):
        return False, "detection.config must be a string"
    threshold = detection.get('confidence_threshold', 0.5)
    if not isinstance(threshold, (int, float)) or not (0 <= threshold <= 1):
        return False, "detection.confidence_threshold must be between 0 and 1"
    input_size = detection.get('input_size', [300, 300])
    if not isinstance(input_size, list) or len(input_size) != 2 or not all(
        isinstance(x, int) and x > 0 for x in input_size
    ):
        return False, "detection.input_size must be a list of two positive integers"

    blur = config.get('blur') or {}
    kernel_size = blur.get('kernel_size', 75)
    if not isinstance(kernel_size, int) or kernel_size <= 0 or kernel_size % 2 == 0:
        return False, "blur.kernel_size must be a positive odd integer"
    if blur.get('border', 'default') not in BORDER_TYPES:
        return False, f"blur.border must be one of: {', '.join(BORDER_TYPES)}"
    sigma = blur.get('sigma', 0)
    if not isinstance(sigma, (int, float)) or sigma < 0:
        return False, "blur.sigma must be a non-negative number"

    output = config.get('output') or {}
    fps = output.get('fps', 30)
    if not isinstance(fps, int) or fps <= 0:
        return False, "output.fps must be a positive integer"

    valid_log_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
    if config['log_level'] not in valid_log_levels:
        return False, f"log_level must be one of: {', '.join(valid_log_levels)}"

    return True, None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='DNN background blur')
    parser.add_argument('--config', type=str, default='config/config.yaml',
                        help='Path to configuration file')
    parser.add_argument('--source', type=str, default=None,
                        help='Camera index, video file or stream URL')
    parser.add_argument('--model', type=str, default=None,
                        help='Model weights (.caffemodel or .pb)')
    parser.add_argument('--model-config', type=str, default=None,
                        help='Model config (.prototxt or .pbtxt)')
    parser.add_argument('--backend', type=str, default=None,
                        help='DNN backend name')
    parser.add_argument('--target', type=str, default=None,
                        help='DNN target device name')
    parser.add_argument('--no-display', action='store_true',
                        help='Disable the preview window')
    parser.add_argument('--record', action='store_true',
                        help='Record blurred video output')
    parser.add_argument('--log-level', type=str, default=None,
                        help='Override log_level from config')
    return parser


def main(argv=None):
    """Main application function."""
    args = build_parser().parse_args(argv)

    config = load_config(args.config)
    apply_cli_overrides(config, args)

    is_valid, error_msg = validate_config(config)
    if not is_valid:
        logging.error(f"Configuration validation failed: {error_msg}")
        sys.exit(1)

    setup_logging(config['log_path'], config['log_level'])
    logging.info("Starting DNN background blur")
    logging.debug(f"Effective config: {Config.from_dict(config).to_dict()}")

    try:
        engine = create_engine_from_config(config)
    except (RuntimeError, ValueError) as e:
        logging.error(f"Failed to start pipeline: {e}")
        sys.exit(1)

    engine.run()

    logging.info("DNN background blur stopped")


if __name__ == "__main__":
    main()
