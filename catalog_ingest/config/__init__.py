"""
Configuration loading.
"""

from .settings import PipelineSettings, load_settings

__all__ = ["PipelineSettings", "load_settings"]
