"""
Position Estimator

Keeps the current robot pose in the world frame.

Two modes, chosen at construction:
- Simulation: dead reckoning from velocity commands (exact circular-arc
  integration of the previous command over the elapsed time)
- Real: heading from the IMU, position from wheel odometry, both
  calibrated on their first sample so the estimate continues from the pose
  held at that moment

In real mode every odometry sample is appended to the pose history, which
serves time-correct lookups for delayed observations (landmarks).
"""

import logging
import math
import time
from dataclasses import dataclass
from typing import Callable, Optional

from ..core.config import EstimatorConfig
from ..interface.messages import Quaternion
from .pose_history import PoseHistory
from .transforms import StampedPose, mod_angle

logger = logging.getLogger(__name__)


@dataclass
class OdometryCalibration:
    """Frozen transform from the odometry frame to the world frame."""
    dx: float
    dy: float
    dheading: float

    def apply(self, x: float, y: float):
        cos_h = math.cos(self.dheading)
        sin_h = math.sin(self.dheading)
        return (x * cos_h - y * sin_h + self.dx,
                x * sin_h + y * cos_h + self.dy)


class PositionEstimator:
    """
    Robot pose estimator.

    Usage:
        estimator = PositionEstimator(simulation=True)

        # Simulation: on each velocity command
        estimator.on_velocity_command(0.2, 0.1)

        # Real robot: on each sensor message
        estimator.on_imu(imu.orientation)
        estimator.on_odometry(odom.x, odom.y, odom.orientation, odom.stamp)

        pose = estimator.pose
        past = estimator.pose_for_time(t)
    """

    def __init__(
        self,
        config: Optional[EstimatorConfig] = None,
        simulation: bool = False,
        clock: Callable[[], float] = time.time
    ):
        self.config = config or EstimatorConfig()
        self._simulation = simulation
        self._clock = clock

        x, y, heading = (self.config.simulation_start if simulation
                         else self.config.real_start)
        self._pose = StampedPose(x, y, mod_angle(heading), clock())

        self._linear_speed = 0.0
        self._angular_speed = 0.0

        # Set on first IMU / odometry sample
        self._imu_offset: Optional[float] = None
        self._odom_calibration: Optional[OdometryCalibration] = None

        self._history = PoseHistory(self.config.history_size)

    @property
    def simulation(self) -> bool:
        return self._simulation

    @property
    def pose(self) -> StampedPose:
        """Copy of the current pose."""
        return self._pose.copy()

    @property
    def linear_speed(self) -> float:
        return self._linear_speed

    @property
    def angular_speed(self) -> float:
        return self._angular_speed

    @property
    def history(self) -> PoseHistory:
        return self._history

    @property
    def is_calibrated(self) -> bool:
        """True once both the IMU and odometry offsets are known."""
        return self._imu_offset is not None and self._odom_calibration is not None

    def set_pose(self, x: float, y: float, heading: float, t: Optional[float] = None):
        """Override the held pose (before calibration, or for a reset)."""
        self._pose = StampedPose(x, y, mod_angle(heading), self._clock() if t is None else t)

    # ------------------------------------------------------------------
    # Simulation
    # ------------------------------------------------------------------

    def on_velocity_command(self, linear: float, angular: float, stamp: Optional[float] = None):
        """
        Handle a velocity command.

        In simulation, first moves the pose along the previous command for the
        time elapsed since the last update, then stores the new command.

        Args:
            linear: Forward speed (m/s)
            angular: Rotation speed (rad/s)
            stamp: Command time (default: clock)
        """
        t = self._clock() if stamp is None else stamp
        if not (math.isfinite(linear) and math.isfinite(angular) and math.isfinite(t)):
            logger.debug("Skipping non-finite velocity command (%s, %s) at %s", linear, angular, t)
            return

        if self._simulation:
            self._integrate(t - self._pose.t)
            self._pose.t = t
            self._history.push(self._pose)

        self._linear_speed = linear
        self._angular_speed = angular

    def _integrate(self, dt: float):
        pose = self._pose
        v = self._linear_speed
        w = self._angular_speed

        if abs(w) > self.config.arc_epsilon:
            r = v / w
            delta = w * dt
            pose.x += r * (math.sin(pose.heading + delta) - math.sin(pose.heading))
            pose.y -= r * (math.cos(pose.heading + delta) - math.cos(pose.heading))
            pose.heading = mod_angle(pose.heading + delta)
        else:
            pose.x += v * dt * math.cos(pose.heading)
            pose.y += v * dt * math.sin(pose.heading)

    # ------------------------------------------------------------------
    # Real sensors
    # ------------------------------------------------------------------

    def on_imu(self, orientation: Quaternion):
        """Update the heading from the IMU orientation (real mode only)."""
        if self._simulation:
            return

        angle = orientation.yaw
        if not math.isfinite(angle):
            logger.debug("Skipping IMU sample with non-finite orientation %s", orientation)
            return

        if self._imu_offset is None:
            self._imu_offset = self._pose.heading - angle
            logger.info("IMU calibrated, heading offset %.3f rad", self._imu_offset)
        self._pose.heading = mod_angle(angle + self._imu_offset)

    def on_odometry(self, x: float, y: float, orientation: Quaternion, stamp: float):
        """
        Update the position from wheel odometry (real mode only).

        Args:
            x, y: Position in the odometry frame
            orientation: Orientation in the odometry frame
            stamp: Measurement time
        """
        if self._simulation:
            return

        yaw = orientation.yaw
        if not (math.isfinite(x) and math.isfinite(y) and math.isfinite(yaw) and math.isfinite(stamp)):
            logger.debug("Skipping non-finite odometry sample (%s, %s, yaw %s)", x, y, yaw)
            return

        if self._odom_calibration is None:
            dheading = self._pose.heading - yaw
            cos_h = math.cos(dheading)
            sin_h = math.sin(dheading)
            self._odom_calibration = OdometryCalibration(
                dx=self._pose.x - (x * cos_h - y * sin_h),
                dy=self._pose.y - (x * sin_h + y * cos_h),
                dheading=dheading
            )
            logger.info("Odometry calibrated: %s", self._odom_calibration)

        self._pose.x, self._pose.y = self._odom_calibration.apply(x, y)
        self._pose.t = stamp
        self._history.push(self._pose)

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def pose_for_time(self, t: float) -> StampedPose:
        """
        Pose of the robot at a given time.

        In simulation the current pose is returned. On the real robot the
        history entry closest to t is used, or the current pose while the
        history is still empty.
        """
        if self._simulation:
            return self.pose

        pose = self._history.pose_for_time(t)
        return pose if pose is not None else self.pose
