"""
Messages and output interface.

The same node runs against the real transport or the simulation through
these interfaces.
"""

from .messages import (
    Quaternion,
    VelocityCommand,
    Odometry,
    ImuReading,
    LaserScan,
    PointCloud,
    LandmarkDetection,
    LandmarkDetections,
    OccupancyUpdate,
    GridSnapshot,
    StampedFrame,
)

from .publisher import (
    IReckoningPublisher,
    RecordingPublisher,
)

__all__ = [
    # Messages
    'Quaternion',
    'VelocityCommand',
    'Odometry',
    'ImuReading',
    'LaserScan',
    'PointCloud',
    'LandmarkDetection',
    'LandmarkDetections',
    'OccupancyUpdate',
    'GridSnapshot',
    'StampedFrame',
    # Publishers
    'IReckoningPublisher',
    'RecordingPublisher',
]
