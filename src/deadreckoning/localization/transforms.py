"""
Pose and angle helpers.

Conventions:
- X = forward (front of robot)
- Y = left
- Angles are counter-clockwise from X axis
- Headings are kept in [0, 2*pi)
"""

import math
from dataclasses import dataclass, replace
from typing import Tuple


def mod_angle(rad: float) -> float:
    """Normalize angle to [0, 2*pi)."""
    angle = math.fmod(rad, 2 * math.pi)
    if angle < 0:
        angle += 2 * math.pi
    # Tiny negative inputs land exactly on 2*pi
    return 0.0 if angle >= 2 * math.pi else angle


def cround(value: float) -> int:
    """Round half away from zero."""
    return int(math.floor(abs(value) + 0.5)) * (1 if value >= 0 else -1)


def project(distance: float, angle: float, pose: 'StampedPose') -> Tuple[float, float]:
    """World position of a point seen at (distance, angle) from a pose."""
    world_angle = angle + pose.heading
    return (distance * math.cos(world_angle) + pose.x,
            distance * math.sin(world_angle) + pose.y)


@dataclass
class StampedPose:
    """2D pose (position + heading) at a given time."""
    x: float
    y: float
    heading: float  # Radians, [0, 2*pi)
    t: float = 0.0

    def is_valid(self) -> bool:
        return math.isfinite(self.x) and math.isfinite(self.y) and math.isfinite(self.heading)

    def copy(self) -> 'StampedPose':
        return replace(self)

    def to_tuple(self) -> Tuple[float, float, float]:
        return (self.x, self.y, self.heading)

    def distance_to(self, other: 'StampedPose') -> float:
        """Euclidean distance to another pose."""
        return math.hypot(self.x - other.x, self.y - other.y)
