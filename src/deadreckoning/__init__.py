"""
deadreckoning - localization and occupancy mapping for a mobile robot.

Fuses odometry, IMU heading, laser scans, depth clouds and camera landmark
detections into a pose estimate with history and two occupancy grids (one
per ranging sensor).

Usage:
    from deadreckoning import DeadReckoning, RecordingPublisher

    node = DeadReckoning(RecordingPublisher(), simulation=True)
    node.on_scan(scan)
"""

from .core import ReckoningConfig, load_config
from .interface import IReckoningPublisher, RecordingPublisher
from .mapping import Grid, GridPoint, GridAllocationError, GridFusionPipeline
from .localization import (
    PositionEstimator, PoseHistory, StampedPose,
    LandmarkLocalizer, LandmarkRecord
)
from .perception import ScanBucketizer, CloudToScanProjector
from .reckoning import DeadReckoning

__version__ = "0.1.0"

__all__ = [
    'DeadReckoning',
    'ReckoningConfig',
    'load_config',
    'IReckoningPublisher',
    'RecordingPublisher',
    'Grid',
    'GridPoint',
    'GridAllocationError',
    'GridFusionPipeline',
    'PositionEstimator',
    'PoseHistory',
    'StampedPose',
    'LandmarkLocalizer',
    'LandmarkRecord',
    'ScanBucketizer',
    'CloudToScanProjector',
]
