"""
Messages exchanged with the outside world.

Plain dataclasses with the fields the node consumes and produces. The
transport (ROS topics, sockets, recorded logs) converts to and from these.
"""

import math
from dataclasses import dataclass, field, replace
from typing import List, Optional

import numpy as np


@dataclass
class Quaternion:
    """Orientation as a unit quaternion."""
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0
    w: float = 1.0

    @property
    def yaw(self) -> float:
        """Rotation around the vertical axis (radians)."""
        return math.atan2(2.0 * (self.w * self.z + self.x * self.y),
                          1.0 - 2.0 * (self.y * self.y + self.z * self.z))

    @staticmethod
    def from_yaw(yaw: float) -> 'Quaternion':
        return Quaternion(0.0, 0.0, math.sin(yaw / 2), math.cos(yaw / 2))


@dataclass
class VelocityCommand:
    """Commanded velocity."""
    linear: float = 0.0     # m/s, forward
    angular: float = 0.0    # rad/s, counter-clockwise


@dataclass
class Odometry:
    """Wheel odometry in the odometry frame."""
    x: float
    y: float
    orientation: Quaternion = field(default_factory=Quaternion)
    stamp: float = 0.0


@dataclass
class ImuReading:
    """Inertial orientation."""
    orientation: Quaternion = field(default_factory=Quaternion)
    stamp: float = 0.0


@dataclass
class LaserScan:
    """Angular range scan (sensor frame, counter-clockwise angles)."""
    angle_min: float
    angle_max: float
    angle_increment: float
    ranges: np.ndarray
    range_min: float = 0.0
    range_max: float = float('inf')
    stamp: float = 0.0
    frame_id: str = ""
    time_increment: float = 0.0
    scan_time: float = 0.0

    def __post_init__(self):
        self.ranges = np.asarray(self.ranges, dtype=np.float64)

    def copy(self, **changes) -> 'LaserScan':
        """Deep copy (ranges included), optionally changing fields."""
        changes.setdefault('ranges', self.ranges.copy())
        return replace(self, **changes)


@dataclass
class PointCloud:
    """Unordered 3D points in camera axes (x right, y down, z forward)."""
    points: np.ndarray
    stamp: float = 0.0

    def __post_init__(self):
        self.points = np.asarray(self.points, dtype=np.float64).reshape(-1, 3)


@dataclass
class LandmarkDetection:
    """One landmark seen by a camera: lateral offset and forward depth."""
    id: int
    dx: float
    dz: float
    stamp: Optional[float] = None   # Defaults to the message stamp


@dataclass
class LandmarkDetections:
    """All landmarks of one category seen in one frame."""
    detections: List[LandmarkDetection] = field(default_factory=list)
    stamp: float = 0.0


@dataclass
class OccupancyUpdate:
    """
    Coarse robot-centred occupancy map from the local mapping collaborator.

    data is row-major (height rows of width cells), values 0-100 or -1 for
    unknown.
    """
    width: int
    height: int
    resolution: float
    data: np.ndarray
    stamp: float = 0.0

    def __post_init__(self):
        self.data = np.asarray(self.data, dtype=np.int16).reshape(-1)
        if self.data.size != self.width * self.height:
            raise ValueError(
                f"Occupancy data has {self.data.size} cells, "
                f"expected {self.width}x{self.height}"
            )


@dataclass
class GridSnapshot:
    """Published grid: column-major probabilities, -1 for unknown."""
    data: np.ndarray
    width: int
    height: int
    scale: float            # Meters per cell
    x: float                # World x of cell (0, 0)
    y: float                # World y of cell (0, 0)


@dataclass
class StampedFrame:
    """Position of a named frame in its parent frame."""
    parent: str
    child: str
    x: float
    y: float
    heading: float = 0.0
    stamp: float = 0.0
