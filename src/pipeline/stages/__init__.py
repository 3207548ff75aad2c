"""
Pipeline stages for the background blur application.
"""

from .blur import BlurStage, BlurStageConfig

__all__ = ["BlurStage", "BlurStageConfig"]
