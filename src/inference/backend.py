"""
Detector interface.

A detector turns a BGR frame into the raw detection tensor of an SSD-style
network (records of [batch_id, class_id, confidence, left, top, right, bottom],
box fields normalized to [0, 1]). Decoding happens in privacy.decoder.
"""

from __future__ import annotations

from typing import Protocol

import numpy as np


class Detector(Protocol):
    def forward(self, frame: np.ndarray) -> np.ndarray:
        ...
