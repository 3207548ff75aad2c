"""
OpenCV DNN detector backend.

Works with the Caffe face detector shipped with OpenCV
(res10_300x300_ssd_iter_140000.caffemodel + deploy.prototxt) and with
TensorFlow SSD object detection graphs (frozen_inference_graph.pb + .pbtxt).
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Tuple

import cv2
import numpy as np

from .backend import Detector

# Attribute names on cv2.dnn; not every OpenCV build exports all of them.
NET_BACKENDS = {
    "default": "DNN_BACKEND_DEFAULT",
    "halide": "DNN_BACKEND_HALIDE",
    "openvino": "DNN_BACKEND_INFERENCE_ENGINE",
    "opencv": "DNN_BACKEND_OPENCV",
    "vulkan": "DNN_BACKEND_VKCOM",
    "cuda": "DNN_BACKEND_CUDA",
}

NET_TARGETS = {
    "cpu": "DNN_TARGET_CPU",
    "fp32": "DNN_TARGET_OPENCL",
    "fp16": "DNN_TARGET_OPENCL_FP16",
    "vpu": "DNN_TARGET_MYRIAD",
    "vulkan": "DNN_TARGET_VULKAN",
    "fpga": "DNN_TARGET_FPGA",
    "cuda": "DNN_TARGET_CUDA",
    "cudafp16": "DNN_TARGET_CUDA_FP16",
}


def parse_net_backend(name: str) -> int:
    """Map a backend name to its cv2.dnn constant (default backend if unknown)."""
    key = (name or "default").strip().lower()
    attr = NET_BACKENDS.get(key)
    if attr is None or not hasattr(cv2.dnn, attr):
        logging.warning(f"Unknown or unsupported DNN backend '{name}', using default")
        attr = NET_BACKENDS["default"]
    return getattr(cv2.dnn, attr)


def parse_net_target(name: str) -> int:
    """Map a target name to its cv2.dnn constant (CPU if unknown)."""
    key = (name or "cpu").strip().lower()
    attr = NET_TARGETS.get(key)
    if attr is None or not hasattr(cv2.dnn, attr):
        logging.warning(f"Unknown or unsupported DNN target '{name}', using cpu")
        attr = NET_TARGETS["cpu"]
    return getattr(cv2.dnn, attr)


@dataclass(frozen=True)
class BlobParams:
    scale: float
    mean: Tuple[float, float, float]
    swap_rb: bool


CAFFE_BLOB = BlobParams(scale=1.0, mean=(104.0, 177.0, 123.0), swap_rb=False)
TENSORFLOW_BLOB = BlobParams(scale=1.0 / 127.5, mean=(127.5, 127.5, 127.5), swap_rb=True)


def blob_params_for_model(model_path: str) -> BlobParams:
    """Caffe models take raw BGR minus mean; TensorFlow SSDs take RGB in [-1, 1]."""
    if os.path.splitext(model_path)[1].lower() == ".caffemodel":
        return CAFFE_BLOB
    return TENSORFLOW_BLOB


@dataclass(frozen=True)
class DnnDetectorConfig:
    model: str
    config: str = ""
    backend: str = "default"
    target: str = "cpu"
    input_size: Tuple[int, int] = field(default=(300, 300))


class DnnDetector(Detector):
    def __init__(self, cfg: DnnDetectorConfig):
        self.cfg = cfg
        self._net = cv2.dnn.readNet(cfg.model, cfg.config)
        if self._net.empty():
            raise RuntimeError(f"Error reading network model from: {cfg.model} {cfg.config}")

        self._net.setPreferableBackend(parse_net_backend(cfg.backend))
        self._net.setPreferableTarget(parse_net_target(cfg.target))
        self.blob_params = blob_params_for_model(cfg.model)

        logging.info(
            f"DNN model loaded: model={cfg.model}, backend={cfg.backend}, target={cfg.target}"
        )

    def forward(self, frame: np.ndarray) -> np.ndarray:
        p = self.blob_params
        blob = cv2.dnn.blobFromImage(
            frame,
            p.scale,
            tuple(self.cfg.input_size),
            p.mean,
            swapRB=p.swap_rb,
            crop=False,
        )
        self._net.setInput(blob)
        return self._net.forward()
