#!/usr/bin/env python3
"""Tests for the message types."""

import math
import unittest

import numpy as np

from deadreckoning.interface import LaserScan, OccupancyUpdate, PointCloud, Quaternion


class TestQuaternion(unittest.TestCase):

    def test_identity(self):
        self.assertEqual(Quaternion().yaw, 0.0)

    def test_from_yaw(self):
        for yaw in (0.5, -1.2, math.pi / 2, 3.0):
            self.assertAlmostEqual(Quaternion.from_yaw(yaw).yaw, yaw)

    def test_yaw_only_matches_asin(self):
        q = Quaternion.from_yaw(0.8)
        self.assertAlmostEqual(q.yaw, 2 * math.asin(q.z))


class TestLaserScan(unittest.TestCase):

    def test_copy_is_deep(self):
        scan = LaserScan(0.0, 1.0, 0.5, [1.0, 2.0, 3.0], stamp=4.0)
        copy = scan.copy(frame_id="other")
        copy.ranges[0] = 9.0

        self.assertEqual(scan.ranges[0], 1.0)
        self.assertEqual(copy.frame_id, "other")
        self.assertEqual(scan.frame_id, "")
        self.assertEqual(copy.stamp, 4.0)

    def test_ranges_as_array(self):
        scan = LaserScan(0.0, 1.0, 0.5, [1, 2])
        self.assertEqual(scan.ranges.dtype, np.float64)


class TestOccupancyUpdate(unittest.TestCase):

    def test_flattened(self):
        update = OccupancyUpdate(2, 2, 0.05, [[0, 100], [-1, 50]])
        self.assertEqual(update.data.tolist(), [0, 100, -1, 50])

    def test_wrong_size(self):
        with self.assertRaises(ValueError):
            OccupancyUpdate(3, 2, 0.05, [0] * 5)


class TestPointCloud(unittest.TestCase):

    def test_shape(self):
        self.assertEqual(PointCloud([]).points.shape, (0, 3))
        self.assertEqual(PointCloud([1.0, 2.0, 3.0]).points.shape, (1, 3))


if __name__ == "__main__":
    unittest.main()
