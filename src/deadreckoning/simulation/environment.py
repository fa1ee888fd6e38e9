"""
Virtual environment for simulation.

Walls, boxes and posts to ray cast against, plus camera landmarks
(markers) at known positions. World coordinates match the grid bounds:
the room spans [0, width] x [0, height].
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple


class ObstacleType(Enum):
    """Obstacle shapes."""
    WALL = "wall"           # Segment (x, y) -> (x2, y2)
    BOX = "box"             # Rotated rectangle
    CYLINDER = "cylinder"   # Post


@dataclass
class Obstacle:
    """
    Obstacle in the environment.

    WALL: (x, y) -> (x2, y2)
    BOX: center (x, y), width, height, rotation
    CYLINDER: center (x, y), radius
    """
    obstacle_type: ObstacleType
    x: float
    y: float
    x2: Optional[float] = None
    y2: Optional[float] = None
    width: Optional[float] = None
    height: Optional[float] = None
    rotation: float = 0.0
    radius: Optional[float] = None

    def intersect_ray(self, origin_x: float, origin_y: float, angle: float) -> Optional[float]:
        """
        Distance along a ray to this obstacle.

        Returns:
            Distance, or None if the ray misses
        """
        if self.obstacle_type == ObstacleType.WALL:
            return _intersect_segment(origin_x, origin_y, angle, self.x, self.y, self.x2, self.y2)
        if self.obstacle_type == ObstacleType.CYLINDER:
            return self._intersect_circle(origin_x, origin_y, angle)
        if self.obstacle_type == ObstacleType.BOX:
            return self._intersect_box(origin_x, origin_y, angle)
        return None

    def _intersect_circle(self, ox: float, oy: float, angle: float) -> Optional[float]:
        dx = math.cos(angle)
        dy = math.sin(angle)
        fx = ox - self.x
        fy = oy - self.y

        b = 2 * (fx * dx + fy * dy)
        c = fx * fx + fy * fy - self.radius * self.radius

        discriminant = b * b - 4 * c
        if discriminant < 0:
            return None

        sqrt_disc = math.sqrt(discriminant)
        for t in ((-b - sqrt_disc) / 2, (-b + sqrt_disc) / 2):
            if t > 0.001:
                return t
        return None

    def _intersect_box(self, ox: float, oy: float, angle: float) -> Optional[float]:
        corners = self.corners()
        hits = [
            _intersect_segment(ox, oy, angle, *corners[i], *corners[(i + 1) % 4])
            for i in range(4)
        ]
        hits = [h for h in hits if h is not None]
        return min(hits) if hits else None

    def corners(self) -> List[Tuple[float, float]]:
        """Box corners in world coordinates."""
        w, h = self.width / 2, self.height / 2
        cos_r = math.cos(self.rotation)
        sin_r = math.sin(self.rotation)
        return [
            (px * cos_r - py * sin_r + self.x, px * sin_r + py * cos_r + self.y)
            for px, py in ((-w, -h), (w, -h), (w, h), (-w, h))
        ]


def _intersect_segment(ox, oy, angle, x1, y1, x2, y2) -> Optional[float]:
    """Ray / segment intersection distance."""
    dx = math.cos(angle)
    dy = math.sin(angle)
    sx = x2 - x1
    sy = y2 - y1

    denom = dx * sy - dy * sx
    if abs(denom) < 1e-10:
        return None  # Parallel

    t = ((x1 - ox) * sy - (y1 - oy) * sx) / denom
    u = ((x1 - ox) * dy - (y1 - oy) * dx) / denom

    if t > 0.001 and 0 <= u <= 1:
        return t
    return None


@dataclass
class Environment:
    """Simulated room with obstacles and markers."""
    obstacles: List[Obstacle] = field(default_factory=list)
    markers: Dict[int, Tuple[float, float]] = field(default_factory=dict)
    width: float = 10.0
    height: float = 10.0

    def add_wall(self, x1: float, y1: float, x2: float, y2: float):
        self.obstacles.append(Obstacle(ObstacleType.WALL, x1, y1, x2, y2))

    def add_box(self, x: float, y: float, width: float, height: float, rotation: float = 0.0):
        self.obstacles.append(Obstacle(
            ObstacleType.BOX, x, y,
            width=width, height=height, rotation=rotation
        ))

    def add_cylinder(self, x: float, y: float, radius: float):
        self.obstacles.append(Obstacle(ObstacleType.CYLINDER, x, y, radius=radius))

    def add_marker(self, marker_id: int, x: float, y: float):
        self.markers[marker_id] = (x, y)

    def add_boundary_walls(self):
        """Walls around [0, width] x [0, height]."""
        w, h = self.width, self.height
        self.add_wall(0, 0, w, 0)
        self.add_wall(w, 0, w, h)
        self.add_wall(w, h, 0, h)
        self.add_wall(0, h, 0, 0)

    def raycast(self, origin_x: float, origin_y: float, angle: float,
                max_range: float = 12.0) -> float:
        """
        Distance to the first obstacle along a ray.

        Returns:
            Distance, or max_range if nothing is hit
        """
        min_dist = max_range
        for obstacle in self.obstacles:
            dist = obstacle.intersect_ray(origin_x, origin_y, angle)
            if dist is not None and dist < min_dist:
                min_dist = dist
        return min_dist

    def is_visible(self, origin_x: float, origin_y: float, x: float, y: float) -> bool:
        """True if nothing blocks the line of sight to (x, y)."""
        distance = math.hypot(x - origin_x, y - origin_y)
        angle = math.atan2(y - origin_y, x - origin_x)
        return self.raycast(origin_x, origin_y, angle, distance + 1.0) >= distance - 1e-6


def create_room_env() -> Environment:
    """10 x 10 m room with furniture and markers on the walls."""
    env = Environment(width=10.0, height=10.0)
    env.add_boundary_walls()

    env.add_box(7.0, 7.0, 1.5, 1.0, 0.0)      # Table
    env.add_box(2.5, 7.5, 1.0, 2.0, 0.3)      # Shelf
    env.add_cylinder(6.0, 3.0, 0.2)           # Post

    env.add_marker(0, 9.95, 2.0)
    env.add_marker(1, 9.95, 5.0)
    env.add_marker(2, 5.0, 9.95)
    env.add_marker(3, 0.05, 5.0)
    return env


def create_corridor_env() -> Environment:
    """Narrow 10 x 3 m corridor with a few obstacles."""
    env = Environment(width=10.0, height=3.0)
    env.add_boundary_walls()

    env.add_box(3.0, 2.2, 0.8, 0.8, 0.2)
    env.add_cylinder(6.0, 0.8, 0.15)

    env.add_marker(0, 9.95, 1.5)
    return env
