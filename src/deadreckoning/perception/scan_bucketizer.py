"""
Scan Bucketizer

Turns range scans into a fixed-resolution range table (one bucket per
angle_precision_deg around the robot) and a rolling buffer of scan end
points in world coordinates.
"""

import math
from typing import List, Optional, Tuple

import numpy as np

from ..core.config import ScanConfig
from ..core.ring_buffer import RingBuffer
from ..interface.messages import LaserScan
from ..localization.position_estimator import PositionEstimator
from ..localization.transforms import cround, mod_angle, project


class ScanBucketizer:
    """
    Range table and cloud points for one ranging sensor.

    Usage:
        bucketizer = ScanBucketizer(estimator)
        processed = bucketizer.process(scan, invert=True)

        front = bucketizer.range_at(0.0)
        points = bucketizer.cloud_points()
    """

    def __init__(self, estimator: PositionEstimator, config: Optional[ScanConfig] = None):
        self.estimator = estimator
        self.config = config or ScanConfig()

        # NaN = bucket never observed
        self._ranges = np.full(self.config.n_buckets, np.nan)
        self._cloud: RingBuffer[Tuple[float, float]] = RingBuffer(self.config.cloud_points)

    @property
    def n_buckets(self) -> int:
        return len(self._ranges)

    @property
    def ranges(self) -> np.ndarray:
        """Copy of the range table."""
        return self._ranges.copy()

    def bucket(self, angle: float) -> int:
        """Bucket index of an angle (radians, robot frame)."""
        index = cround(math.degrees(mod_angle(angle)) / self.config.angle_precision_deg)
        return index % self.n_buckets

    def range_at(self, angle: float) -> float:
        return float(self._ranges[self.bucket(angle)])

    def cloud_points(self) -> List[Tuple[float, float]]:
        """Stored end points, oldest first."""
        return list(self._cloud)

    def process(self, scan: LaserScan, invert: bool = False) -> LaserScan:
        """
        Process a range scan.

        Args:
            scan: Raw scan (not modified)
            invert: Sensor faces the back of the robot (rotate by 180 deg)

        Returns:
            Copy of the scan with out-of-range values replaced by infinity
        """
        output = scan.copy()
        ranges = output.ranges
        pose = self.estimator.pose

        too_far = ~np.isfinite(ranges) | (ranges > self.config.max_range) | (ranges >= scan.range_max)
        ranges[too_far] = np.inf

        seen = set()
        for i, r in enumerate(ranges.tolist()):
            angle = mod_angle(scan.angle_min + i * scan.angle_increment)
            if invert:
                angle = mod_angle(angle + math.pi)

            index = self.bucket(angle)
            if index not in seen:
                seen.add(index)
                self._ranges[index] = r
            elif r < self._ranges[index]:
                self._ranges[index] = r

            if not math.isinf(r):
                self._cloud.put(i, project(r, angle, pose))

        self._cloud.advance(len(ranges))
        return output
