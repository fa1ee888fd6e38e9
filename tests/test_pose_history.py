#!/usr/bin/env python3
"""Tests for the pose history and the pose helpers."""

import math
import unittest

from deadreckoning.localization import PoseHistory, StampedPose, cround, mod_angle, project


class TestPoseHistory(unittest.TestCase):

    def setUp(self):
        self.history = PoseHistory(capacity=100)
        for t in range(1, 11):
            self.history.push(StampedPose(float(t), 0.0, 0.0, float(t)))

    def test_closest_earlier(self):
        self.assertEqual(self.history.pose_for_time(4.4).t, 4.0)

    def test_closest_later(self):
        self.assertEqual(self.history.pose_for_time(4.6).t, 5.0)

    def test_tie_goes_to_later(self):
        self.assertEqual(self.history.pose_for_time(4.5).t, 5.0)

    def test_exact_match(self):
        self.assertEqual(self.history.pose_for_time(7.0).t, 7.0)

    def test_older_than_history(self):
        self.assertEqual(self.history.pose_for_time(0.0).t, 1.0)

    def test_newer_than_history(self):
        self.assertEqual(self.history.pose_for_time(20.0).t, 10.0)

    def test_returns_copy(self):
        pose = self.history.pose_for_time(3.0)
        pose.x = 99.0
        self.assertEqual(self.history.pose_for_time(3.0).x, 3.0)

    def test_push_copies(self):
        pose = StampedPose(0.0, 0.0, 0.0, 11.0)
        self.history.push(pose)
        pose.x = 5.0
        self.assertEqual(self.history.latest().x, 0.0)

    def test_empty(self):
        self.assertIsNone(PoseHistory(10).pose_for_time(1.0))

    def test_capacity(self):
        history = PoseHistory(capacity=3)
        for t in range(5):
            history.push(StampedPose(0.0, 0.0, 0.0, float(t)))
        self.assertEqual(len(history), 3)
        self.assertEqual(history.oldest().t, 2.0)
        self.assertEqual(history.latest().t, 4.0)

    def test_invalid_poses_skipped(self):
        history = PoseHistory(capacity=3)
        history.push(StampedPose(math.nan, 0.0, 0.0, 1.0))
        history.push(StampedPose(1.0, 0.0, 0.0, 2.0))
        self.assertEqual([p.t for p in history], [2.0])


class TestTransforms(unittest.TestCase):

    def test_mod_angle(self):
        self.assertAlmostEqual(mod_angle(-math.pi / 2), 3 * math.pi / 2)
        self.assertAlmostEqual(mod_angle(5 * math.pi), math.pi)
        self.assertEqual(mod_angle(2 * math.pi), 0.0)
        self.assertEqual(mod_angle(0.0), 0.0)

    def test_mod_angle_range(self):
        for a in (-1e-17, -7.0, 7.0, 1e6):
            angle = mod_angle(a)
            self.assertGreaterEqual(angle, 0.0)
            self.assertLess(angle, 2 * math.pi)

    def test_cround(self):
        self.assertEqual(cround(2.5), 3)
        self.assertEqual(cround(-2.5), -3)
        self.assertEqual(cround(0.5), 1)
        self.assertEqual(cround(2.4999), 2)
        self.assertEqual(cround(-0.2), 0)

    def test_project(self):
        x, y = project(1.0, math.pi / 2, StampedPose(1.0, 1.0, 0.0))
        self.assertAlmostEqual(x, 1.0)
        self.assertAlmostEqual(y, 2.0)

    def test_project_with_heading(self):
        x, y = project(2.0, 0.0, StampedPose(0.0, 0.0, math.pi))
        self.assertAlmostEqual(x, -2.0)
        self.assertAlmostEqual(y, 0.0)

    def test_distance(self):
        self.assertAlmostEqual(StampedPose(0, 0, 0).distance_to(StampedPose(3, 4, 1)), 5.0)


if __name__ == "__main__":
    unittest.main()
