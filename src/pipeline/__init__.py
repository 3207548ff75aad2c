"""
Pipeline module for the background blur application.

The pipeline orchestrates the per-frame flow:
- Frame acquisition from observation sources
- Face detection and background blur (via BlurStage)
- Display, recording and callbacks
"""

from .engine import PipelineEngine, PipelineConfig, PipelineStats, create_engine_from_config
from .stages.blur import BlurStage, BlurStageConfig, create_blur_stage

__all__ = [
    "PipelineEngine",
    "PipelineConfig",
    "PipelineStats",
    "create_engine_from_config",
    "BlurStage",
    "BlurStageConfig",
    "create_blur_stage",
]
