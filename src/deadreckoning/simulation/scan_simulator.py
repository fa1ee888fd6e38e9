"""
Sensor simulators.

Generate the messages the robot's sensors would produce at a given pose in
a virtual environment: laser scans, depth clouds and marker detections.
"""

import math
import random
from dataclasses import dataclass
from typing import List, Optional

import numpy as np

from ..interface.messages import (
    LandmarkDetection, LandmarkDetections, LaserScan, PointCloud
)
from ..localization.transforms import StampedPose
from .environment import Environment


@dataclass
class ScanSimulatorConfig:
    """Laser simulator parameters."""
    num_points: int = 360          # Points per scan
    range_min: float = 0.02        # m
    range_max: float = 12.0        # m
    noise_std: float = 0.01        # Gaussian noise (m)
    mounted_backward: bool = False # Laser faces the back of the robot


class ScanSimulator:
    """
    Laser scanner in a virtual environment.

    Usage:
        lidar = ScanSimulator(create_room_env(), seed=1)
        scan = lidar.scan(pose, stamp=time.time())
    """

    def __init__(self, environment: Environment,
                 config: Optional[ScanSimulatorConfig] = None,
                 seed: Optional[int] = None):
        self.env = environment
        self.config = config or ScanSimulatorConfig()
        self._rng = random.Random(seed)

    def scan(self, pose: StampedPose, stamp: float = 0.0) -> LaserScan:
        cfg = self.config
        increment = 2 * math.pi / cfg.num_points
        mount = math.pi if cfg.mounted_backward else 0.0

        ranges = []
        for i in range(cfg.num_points):
            angle = -math.pi + i * increment
            distance = self.env.raycast(pose.x, pose.y, angle + pose.heading + mount, cfg.range_max)
            if distance < cfg.range_max and cfg.noise_std > 0:
                distance = max(cfg.range_min, distance + self._rng.gauss(0, cfg.noise_std))
            ranges.append(distance)

        return LaserScan(
            angle_min=-math.pi,
            angle_max=-math.pi + (cfg.num_points - 1) * increment,
            angle_increment=increment,
            ranges=ranges,
            range_min=cfg.range_min,
            range_max=cfg.range_max,
            stamp=stamp,
            frame_id="laser",
            scan_time=0.1
        )


class DepthSimulator:
    """
    Depth camera in a virtual environment.

    Produces points in camera axes (x right, y down, z forward), with a few
    rows above and below the horizontal slice and some invalid (NaN) pixels
    like a real sensor.
    """

    def __init__(self, environment: Environment, fov_deg: float = 29.0,
                 columns: int = 120, rows=(-0.8, -0.2, 0.0, 0.2, 0.8),
                 max_range: float = 12.0, invalid_rate: float = 0.05,
                 seed: Optional[int] = None):
        self.env = environment
        self.fov = math.radians(fov_deg)
        self.columns = columns
        self.rows = rows
        self.max_range = max_range
        self.invalid_rate = invalid_rate
        self._rng = random.Random(seed)

    def cloud(self, pose: StampedPose, stamp: float = 0.0) -> PointCloud:
        points = []
        for i in range(self.columns):
            bearing = -self.fov + 2 * self.fov * i / max(1, self.columns - 1)
            distance = self.env.raycast(pose.x, pose.y, bearing + pose.heading, self.max_range)
            if distance >= self.max_range:
                continue

            x = -distance * math.sin(bearing)
            z = distance * math.cos(bearing)
            for y in self.rows:
                if self._rng.random() < self.invalid_rate:
                    points.append((math.nan, math.nan, math.nan))
                else:
                    points.append((x, y, z))

        return PointCloud(points=np.array(points, dtype=np.float64).reshape(-1, 3), stamp=stamp)


class MarkerSimulator:
    """Marker detector: markers in the camera field of view and in sight."""

    def __init__(self, environment: Environment, fov_deg: float = 29.0,
                 max_range: float = 6.0):
        self.env = environment
        self.fov = math.radians(fov_deg)
        self.max_range = max_range

    def detect(self, pose: StampedPose, stamp: float = 0.0) -> LandmarkDetections:
        detections: List[LandmarkDetection] = []
        for marker_id, (mx, my) in sorted(self.env.markers.items()):
            distance = math.hypot(mx - pose.x, my - pose.y)
            bearing = math.atan2(my - pose.y, mx - pose.x) - pose.heading
            bearing = math.atan2(math.sin(bearing), math.cos(bearing))

            if distance > self.max_range or abs(bearing) > self.fov:
                continue
            # Stop just short of the wall the marker hangs on
            if not self.env.is_visible(pose.x, pose.y,
                                       pose.x + (distance - 0.1) * math.cos(bearing + pose.heading),
                                       pose.y + (distance - 0.1) * math.sin(bearing + pose.heading)):
                continue

            detections.append(LandmarkDetection(
                id=marker_id,
                dx=-distance * math.sin(bearing),
                dz=distance * math.cos(bearing)
            ))

        return LandmarkDetections(detections=detections, stamp=stamp)
