"""
Batch processing of image files through a tile session.
"""

from .runner import UpscaleRunner, RunnerConfig, BatchResult

__all__ = [
    "UpscaleRunner",
    "RunnerConfig",
    "BatchResult",
]
