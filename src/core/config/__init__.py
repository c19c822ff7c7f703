"""
Pipeline configuration loading.
"""

from .pipeline_config import DEFAULT_BATCH_SIZE, PipelineConfig, load_config

__all__ = [
    "PipelineConfig",
    "load_config",
    "DEFAULT_BATCH_SIZE",
]
