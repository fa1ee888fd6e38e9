"""
Simulated local mapper.

Stands in for the external local mapping node: rasterizes a processed scan
into a small robot-centred occupancy map, world-axis aligned, with 100 at
hit cells, 0 along the free part of each ray and -1 elsewhere.
"""

import math

import numpy as np

from ..interface.messages import LaserScan, OccupancyUpdate
from ..localization.transforms import StampedPose


def build_local_map(
    scan: LaserScan,
    pose: StampedPose,
    invert: bool = False,
    resolution: float = 0.05,
    size: int = 80
) -> OccupancyUpdate:
    """
    Rasterize a scan around the robot.

    Args:
        scan: Processed scan (infinity = no return)
        pose: Robot pose when the scan was taken
        invert: Scan angles point towards the back of the robot
        resolution: Meters per cell
        size: Map is size x size cells, robot in the middle

    Returns:
        OccupancyUpdate ready for the grid fusion pipeline
    """
    data = np.full((size, size), -1, dtype=np.int16)
    center = size // 2
    reach = center * resolution

    for i, r in enumerate(scan.ranges.tolist()):
        angle = scan.angle_min + i * scan.angle_increment + pose.heading
        if invert:
            angle += math.pi
        hit = math.isfinite(r) and r <= reach
        length = r if hit else reach
        cos_a, sin_a = math.cos(angle), math.sin(angle)

        steps = int(length / resolution)
        for s in range(steps):
            col = center + int(round(s * cos_a))
            row = center + int(round(s * sin_a))
            if 0 <= row < size and 0 <= col < size and data[row, col] < 0:
                data[row, col] = 0

        if hit:
            col = center + int(round(r * cos_a / resolution))
            row = center + int(round(r * sin_a / resolution))
            if 0 <= row < size and 0 <= col < size:
                data[row, col] = 100

    return OccupancyUpdate(
        width=size,
        height=size,
        resolution=resolution,
        data=data,
        stamp=scan.stamp
    )
