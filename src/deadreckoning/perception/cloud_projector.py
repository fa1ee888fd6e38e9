"""
Point cloud to laser scan.

Slices a depth camera point cloud horizontally and keeps the closest point
per bearing, producing a narrow synthetic scan that the scan bucketizer
handles like a native one.

Camera axes: x right, y down, z forward. Scan angles are counter-clockwise,
so a point on the right (x > 0) gets a negative bearing.
"""

import math
from typing import Optional

import numpy as np

from ..core.config import CloudConfig
from ..interface.messages import LaserScan, PointCloud


class CloudToScanProjector:
    """
    Synthetic scan from a point cloud.

    Usage:
        projector = CloudToScanProjector()
        scan = projector.project(cloud)
    """

    def __init__(self, config: Optional[CloudConfig] = None):
        self.config = config or CloudConfig()

        self.angle_min = -math.radians(self.config.fov_deg)
        self.angle_max = math.radians(self.config.fov_deg)
        self.angle_increment = math.radians(self.config.angle_precision_deg)
        self.n_ranges = int(math.ceil(
            round((self.angle_max - self.angle_min) / self.angle_increment, 9)
        ))

    def project(self, cloud: PointCloud) -> LaserScan:
        """
        Build the scan.

        Args:
            cloud: Points in camera axes, may contain NaN

        Returns:
            LaserScan with infinity where no point was kept
        """
        cfg = self.config
        ranges = np.full(self.n_ranges, np.inf)
        points = cloud.points

        if len(points):
            x, y, z = points[:, 0], points[:, 1], points[:, 2]

            with np.errstate(invalid='ignore'):
                distance = np.hypot(x, z)
                angle = -np.arctan2(x, z)

                mask = np.all(np.isfinite(points), axis=1)
                mask &= np.abs(y) <= cfg.half_thickness
                mask &= (distance >= cfg.range_min) & (distance <= cfg.range_max)
                mask &= (angle >= self.angle_min) & (angle <= self.angle_max)

            if np.any(mask):
                index = np.rint((angle[mask] - self.angle_min) / self.angle_increment).astype(int)
                index = np.clip(index, 0, self.n_ranges - 1)
                np.minimum.at(ranges, index, distance[mask])

        return LaserScan(
            angle_min=self.angle_min,
            angle_max=self.angle_max,
            angle_increment=self.angle_increment,
            ranges=ranges,
            range_min=cfg.range_min,
            range_max=cfg.range_max,
            stamp=cloud.stamp,
            time_increment=0.0,
            scan_time=cfg.scan_time
        )
