"""
Core infrastructure module.
- Configuration management
- Ring buffer used by the pose history and cloud point buffers
"""

from .config import (
    ReckoningConfig,
    GridConfig,
    EstimatorConfig,
    ScanConfig,
    CloudConfig,
    LandmarkConfig,
    FrameNames,
    Bounds,
    load_config,
)
from .ring_buffer import RingBuffer

__all__ = [
    'ReckoningConfig',
    'GridConfig',
    'EstimatorConfig',
    'ScanConfig',
    'CloudConfig',
    'LandmarkConfig',
    'FrameNames',
    'Bounds',
    'load_config',
    'RingBuffer',
]
