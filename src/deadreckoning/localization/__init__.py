"""
Localization module.

Components:
- PositionEstimator: Current pose from commands (simulation) or IMU + odometry
- PoseHistory: Stamped poses for time-correct lookups
- LandmarkLocalizer: World positions of camera landmarks
- Transforms: Pose type and angle helpers
"""

from .transforms import (
    StampedPose,
    mod_angle,
    cround,
    project
)

from .pose_history import PoseHistory

from .position_estimator import (
    PositionEstimator,
    OdometryCalibration
)

from .landmark_localizer import (
    LandmarkLocalizer,
    LandmarkRecord
)

__all__ = [
    'StampedPose',
    'mod_angle',
    'cround',
    'project',
    'PoseHistory',
    'PositionEstimator',
    'OdometryCalibration',
    'LandmarkLocalizer',
    'LandmarkRecord',
]
