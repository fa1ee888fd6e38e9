#!/usr/bin/env python3
"""
Tests for the position estimator in both modes.
"""

import math
import unittest

from deadreckoning.core import EstimatorConfig
from deadreckoning.interface import Quaternion
from deadreckoning.localization import PositionEstimator


class TestSimulationMode(unittest.TestCase):

    def setUp(self):
        self.now = 0.0
        self.estimator = PositionEstimator(simulation=True, clock=lambda: self.now)
        self.estimator.set_pose(0.0, 0.0, 0.0, t=0.0)

    def test_initial_pose(self):
        estimator = PositionEstimator(simulation=True, clock=lambda: 5.0)
        pose = estimator.pose
        self.assertEqual(pose.to_tuple(), (2.0, 2.0, 0.0))
        self.assertEqual(pose.t, 5.0)

    def test_straight_line(self):
        """Test one second at 1 m/s moves one meter forward."""
        self.estimator.on_velocity_command(1.0, 0.0, stamp=0.0)
        self.estimator.on_velocity_command(1.0, 0.0, stamp=1.0)

        pose = self.estimator.pose
        self.assertAlmostEqual(pose.x, 1.0)
        self.assertAlmostEqual(pose.y, 0.0)
        self.assertAlmostEqual(pose.heading, 0.0)
        self.assertEqual(pose.t, 1.0)

    def test_arc(self):
        """Test a quarter turn follows the circle of radius v/w."""
        self.estimator.on_velocity_command(1.0, math.pi / 2, stamp=0.0)
        self.estimator.on_velocity_command(0.0, 0.0, stamp=1.0)

        r = 1.0 / (math.pi / 2)
        pose = self.estimator.pose
        self.assertAlmostEqual(pose.x, r, places=6)
        self.assertAlmostEqual(pose.y, r, places=6)
        self.assertAlmostEqual(pose.heading, math.pi / 2, places=6)

    def test_rotation_in_place(self):
        self.estimator.on_velocity_command(0.0, -1.0, stamp=0.0)
        self.estimator.on_velocity_command(0.0, 0.0, stamp=1.0)

        pose = self.estimator.pose
        self.assertAlmostEqual(pose.x, 0.0)
        self.assertAlmostEqual(pose.y, 0.0)
        self.assertAlmostEqual(pose.heading, 2 * math.pi - 1.0)

    def test_uses_previous_command(self):
        """Test the new command only applies from its own stamp on."""
        self.estimator.on_velocity_command(2.0, 0.0, stamp=1.0)
        pose = self.estimator.pose
        self.assertAlmostEqual(pose.x, 0.0)
        self.assertEqual(self.estimator.linear_speed, 2.0)

    def test_default_stamp_from_clock(self):
        self.estimator.on_velocity_command(1.0, 0.0)
        self.now = 2.0
        self.estimator.on_velocity_command(1.0, 0.0)
        self.assertAlmostEqual(self.estimator.pose.x, 2.0)

    def test_history_filled(self):
        self.estimator.on_velocity_command(1.0, 0.0, stamp=0.0)
        self.estimator.on_velocity_command(1.0, 0.0, stamp=1.0)
        self.assertEqual(len(self.estimator.history), 2)

    def test_non_finite_command_skipped(self):
        self.estimator.on_velocity_command(1.0, 0.0, stamp=0.0)
        self.estimator.on_velocity_command(math.nan, 0.0, stamp=0.5)
        self.estimator.on_velocity_command(1.0, math.inf, stamp=0.5)
        self.estimator.on_velocity_command(1.0, 0.0, stamp=1.0)

        pose = self.estimator.pose
        self.assertAlmostEqual(pose.x, 1.0)
        self.assertAlmostEqual(pose.heading, 0.0)
        self.assertEqual(self.estimator.linear_speed, 1.0)

    def test_sensors_ignored(self):
        self.estimator.on_imu(Quaternion.from_yaw(1.0))
        self.estimator.on_odometry(5.0, 5.0, Quaternion.from_yaw(1.0), 1.0)
        self.assertEqual(self.estimator.pose.to_tuple(), (0.0, 0.0, 0.0))
        self.assertFalse(self.estimator.is_calibrated)

    def test_pose_for_time_is_current(self):
        self.estimator.on_velocity_command(1.0, 0.0, stamp=0.0)
        self.estimator.on_velocity_command(1.0, 0.0, stamp=1.0)
        self.assertAlmostEqual(self.estimator.pose_for_time(0.0).x, 1.0)


class TestRealMode(unittest.TestCase):

    def setUp(self):
        self.estimator = PositionEstimator(simulation=False, clock=lambda: 0.0)

    def test_initial_pose(self):
        pose = self.estimator.pose
        self.assertAlmostEqual(pose.x, 0.0)
        self.assertAlmostEqual(pose.y, 0.0)
        self.assertAlmostEqual(pose.heading, math.pi / 2)

    def test_imu_calibration(self):
        """Test the first IMU sample keeps the held heading."""
        self.estimator.on_imu(Quaternion.from_yaw(0.3))
        self.assertAlmostEqual(self.estimator.pose.heading, math.pi / 2)

        self.estimator.on_imu(Quaternion.from_yaw(0.5))
        self.assertAlmostEqual(self.estimator.pose.heading, math.pi / 2 + 0.2)

    def test_odometry_calibration(self):
        """Test odometry displacements are rotated into the world frame."""
        self.estimator.on_odometry(5.0, 1.0, Quaternion.from_yaw(0.0), 1.0)
        pose = self.estimator.pose
        self.assertAlmostEqual(pose.x, 0.0)
        self.assertAlmostEqual(pose.y, 0.0)

        self.estimator.on_odometry(6.0, 1.0, Quaternion.from_yaw(0.0), 2.0)
        pose = self.estimator.pose
        self.assertAlmostEqual(pose.x, 0.0)
        self.assertAlmostEqual(pose.y, 1.0)
        self.assertEqual(pose.t, 2.0)

    def test_calibrated_after_both(self):
        self.estimator.on_imu(Quaternion.from_yaw(0.0))
        self.assertFalse(self.estimator.is_calibrated)
        self.estimator.on_odometry(0.0, 0.0, Quaternion.from_yaw(0.0), 1.0)
        self.assertTrue(self.estimator.is_calibrated)

    def test_non_finite_odometry_skipped(self):
        self.estimator.on_odometry(math.nan, 0.0, Quaternion(), 1.0)
        self.assertEqual(len(self.estimator.history), 0)
        self.assertFalse(self.estimator.is_calibrated)

    def test_non_finite_odometry_orientation_skipped(self):
        """Test a bad first orientation does not freeze a broken calibration."""
        self.estimator.on_odometry(1.0, 1.0, Quaternion(math.nan, 0.0, 0.0, 1.0), 1.0)
        self.assertEqual(len(self.estimator.history), 0)

        self.estimator.on_odometry(5.0, 1.0, Quaternion.from_yaw(0.0), 2.0)
        self.estimator.on_odometry(6.0, 1.0, Quaternion.from_yaw(0.0), 3.0)
        pose = self.estimator.pose
        self.assertAlmostEqual(pose.x, 0.0)
        self.assertAlmostEqual(pose.y, 1.0)
        self.assertEqual(len(self.estimator.history), 2)

    def test_non_finite_imu_skipped(self):
        self.estimator.on_imu(Quaternion(math.nan, 0.0, 0.0, 1.0))
        self.assertAlmostEqual(self.estimator.pose.heading, math.pi / 2)

        self.estimator.on_imu(Quaternion.from_yaw(0.2))
        self.estimator.on_imu(Quaternion(0.0, 0.0, 0.0, math.nan))
        self.estimator.on_imu(Quaternion.from_yaw(0.5))
        self.assertAlmostEqual(self.estimator.pose.heading, math.pi / 2 + 0.3)

    def test_velocity_commands_do_not_move(self):
        self.estimator.on_velocity_command(1.0, 1.0, stamp=10.0)
        self.assertAlmostEqual(self.estimator.pose.x, 0.0)
        self.assertEqual(self.estimator.angular_speed, 1.0)

    def test_pose_for_time_uses_history(self):
        for stamp, x in ((1.0, 0.0), (2.0, 1.0), (3.0, 2.0)):
            self.estimator.on_odometry(x, 0.0, Quaternion.from_yaw(math.pi / 2), stamp)

        # Identity calibration: odometry yaw matches the start heading
        self.assertAlmostEqual(self.estimator.pose_for_time(1.2).x, 0.0)
        self.assertAlmostEqual(self.estimator.pose_for_time(1.8).x, 1.0)
        self.assertAlmostEqual(self.estimator.pose_for_time(9.0).x, 2.0)

    def test_pose_for_time_empty_history(self):
        pose = self.estimator.pose_for_time(5.0)
        self.assertAlmostEqual(pose.heading, math.pi / 2)

    def test_custom_start(self):
        config = EstimatorConfig(real_start=(1.0, 2.0, -math.pi / 2))
        estimator = PositionEstimator(config, simulation=False, clock=lambda: 0.0)
        self.assertAlmostEqual(estimator.pose.heading, 3 * math.pi / 2)


if __name__ == "__main__":
    unittest.main()
