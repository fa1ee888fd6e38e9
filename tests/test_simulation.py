#!/usr/bin/env python3
"""
Tests for the simulation helpers, and the node running against them.
"""

import math
import unittest

import numpy as np

from deadreckoning import DeadReckoning, RecordingPublisher, ReckoningConfig
from deadreckoning.interface import LaserScan, VelocityCommand
from deadreckoning.localization import StampedPose
from deadreckoning.simulation import (
    Environment, ScanSimulator, ScanSimulatorConfig, DepthSimulator,
    MarkerSimulator, build_local_map, create_room_env, create_corridor_env
)


class TestEnvironment(unittest.TestCase):

    def test_raycast_wall(self):
        env = create_room_env()
        self.assertAlmostEqual(env.raycast(5.0, 5.0, 0.0), 5.0)
        self.assertAlmostEqual(env.raycast(5.0, 5.0, -math.pi / 2), 5.0)

    def test_raycast_cylinder(self):
        env = Environment()
        env.add_cylinder(3.0, 0.0, 0.5)
        self.assertAlmostEqual(env.raycast(0.0, 0.0, 0.0), 2.5)

    def test_raycast_box(self):
        env = Environment()
        env.add_box(3.0, 0.0, 2.0, 2.0)
        self.assertAlmostEqual(env.raycast(0.0, 0.0, 0.0), 2.0)

    def test_raycast_miss(self):
        env = Environment()
        self.assertEqual(env.raycast(0.0, 0.0, 0.0, max_range=7.0), 7.0)

    def test_visibility(self):
        env = create_room_env()
        self.assertTrue(env.is_visible(5.0, 5.0, 9.0, 5.0))
        # Post at (6, 3) blocks the view
        self.assertFalse(env.is_visible(6.0, 1.0, 6.0, 5.0))

    def test_corridor(self):
        env = create_corridor_env()
        self.assertEqual((env.width, env.height), (10.0, 3.0))
        self.assertIn(0, env.markers)


class TestSensorSimulators(unittest.TestCase):

    def setUp(self):
        self.env = create_room_env()
        self.pose = StampedPose(5.0, 5.0, 0.0)

    def test_scan(self):
        lidar = ScanSimulator(self.env, ScanSimulatorConfig(noise_std=0.0))
        scan = lidar.scan(self.pose, stamp=2.0)

        self.assertEqual(len(scan.ranges), 360)
        self.assertEqual(scan.stamp, 2.0)
        self.assertAlmostEqual(scan.ranges[180], 5.0)
        self.assertAlmostEqual(scan.ranges[0], 5.0)

    def test_backward_scan(self):
        config = ScanSimulatorConfig(noise_std=0.0, mounted_backward=True)
        scan = ScanSimulator(self.env, config).scan(StampedPose(8.0, 5.0, 0.0))
        self.assertAlmostEqual(scan.ranges[180], 8.0)

    def test_noise_is_seeded(self):
        a = ScanSimulator(self.env, seed=3).scan(self.pose)
        b = ScanSimulator(self.env, seed=3).scan(self.pose)
        np.testing.assert_array_equal(a.ranges, b.ranges)

    def test_depth_cloud(self):
        depth = DepthSimulator(self.env, invalid_rate=0.0, seed=1)
        cloud = depth.cloud(self.pose)
        self.assertEqual(cloud.points.shape[1], 3)
        self.assertEqual(len(cloud.points), 120 * 5)
        self.assertTrue(np.all(cloud.points[:, 2] > 0))

    def test_markers(self):
        markers = MarkerSimulator(self.env)
        detections = markers.detect(StampedPose(8.0, 5.0, 0.0), stamp=1.0)

        self.assertEqual([d.id for d in detections.detections], [1])
        detection = detections.detections[0]
        self.assertAlmostEqual(detection.dx, 0.0)
        self.assertAlmostEqual(detection.dz, 1.95)


class TestLocalMap(unittest.TestCase):

    def test_single_ray(self):
        scan = LaserScan(0.0, 0.0, 0.1, [1.0])
        update = build_local_map(scan, StampedPose(0.0, 0.0, 0.0), resolution=0.05, size=80)
        cells = update.data.reshape(80, 80)

        self.assertEqual(cells[40, 60], 100)
        self.assertEqual(cells[40, 50], 0)
        self.assertEqual(cells[40, 40], 0)
        self.assertEqual(cells[0, 0], -1)

    def test_out_of_reach_ray_is_free(self):
        scan = LaserScan(0.0, 0.0, 0.1, [math.inf])
        update = build_local_map(scan, StampedPose(0.0, 0.0, math.pi / 2), size=20)
        cells = update.data.reshape(20, 20)
        self.assertEqual(cells[15, 10], 0)
        self.assertEqual(int(np.sum(cells == 100)), 0)


class TestNodeInRoom(unittest.TestCase):
    """The node fed by the simulators, as in the simulation script."""

    def setUp(self):
        self.now = 100.0
        self.env = create_room_env()
        config = ReckoningConfig()
        config.estimator.simulation_start = (8.5, 5.0, 0.0)
        self.node = DeadReckoning(RecordingPublisher(), simulation=True, config=config,
                                  clock=lambda: self.now)

    def test_wall_mapped(self):
        lidar = ScanSimulator(self.env, ScanSimulatorConfig(noise_std=0.0))
        processed = self.node.on_scan(lidar.scan(self.node.pose, self.now))
        accepted = self.node.on_local_map_scan(build_local_map(processed, self.node.pose))

        self.assertGreater(accepted, 0)
        self.assertAlmostEqual(self.node.scan_grid.get(10.0, 5.0), 1.0)
        self.assertAlmostEqual(self.node.scan_grid.get(9.0, 5.0), 0.0)

    def test_marker_localized(self):
        markers = MarkerSimulator(self.env)
        self.node.on_markers(markers.detect(self.node.pose, self.now))

        record = self.node.markers.get(1)
        self.assertAlmostEqual(record.x, 9.95)
        self.assertAlmostEqual(record.y, 5.0)

    def test_drive(self):
        for i in range(1, 11):
            self.now = 100.0 + i * 0.1
            self.node.on_velocity_command(VelocityCommand(-0.5, 0.0), stamp=self.now)
        self.assertLess(self.node.pose.x, 8.5)


if __name__ == "__main__":
    unittest.main()
