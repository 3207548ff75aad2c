"""
Logging setup.
"""

from __future__ import annotations

import logging
import os
from typing import List


def setup_logging(log_path: str, log_level: str) -> None:
    """Log to stderr and, when log_path is set, to that file."""
    handlers: List[logging.Handler] = [logging.StreamHandler()]
    if log_path:
        log_dir = os.path.dirname(log_path)
        if log_dir and not os.path.exists(log_dir):
            os.makedirs(log_dir)
        handlers.insert(0, logging.FileHandler(log_path))

    logging.basicConfig(
        level=getattr(logging, log_level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=handlers,
        force=True,
    )
