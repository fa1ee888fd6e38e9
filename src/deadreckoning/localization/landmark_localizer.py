"""
Landmark Localizer

Places camera detections (markers, friends) in the world frame, using the
robot pose at the time the image was taken rather than the current one.
"""

import logging
import math
from dataclasses import dataclass
from typing import List, Optional

from ..interface.messages import LandmarkDetections
from .position_estimator import PositionEstimator
from .transforms import project

logger = logging.getLogger(__name__)


@dataclass
class LandmarkRecord:
    """Last known world position of a landmark."""
    id: int
    x: float
    y: float
    t: float
    visible: bool = False


class LandmarkLocalizer:
    """
    World positions for one category of landmarks.

    Each id has one slot, overwritten on every detection. The visible flags
    describe the latest detection message only.

    Usage:
        markers = LandmarkLocalizer(estimator, "marker", 256)
        markers.update(detections)
        for record in markers.visible():
            print(record.id, record.x, record.y)
    """

    def __init__(self, estimator: PositionEstimator, category: str, capacity: int):
        if capacity < 0:
            raise ValueError(f"capacity must not be negative, got {capacity}")
        self.estimator = estimator
        self.category = category
        self._records: List[Optional[LandmarkRecord]] = [None] * capacity

    @property
    def capacity(self) -> int:
        return len(self._records)

    def update(self, message: LandmarkDetections) -> int:
        """
        Process one detection message.

        Returns:
            Number of landmarks placed
        """
        for record in self._records:
            if record is not None:
                record.visible = False

        placed = 0
        for detection in message.detections:
            if not 0 <= detection.id < self.capacity:
                logger.debug("Skipping %s id %d (valid: 0-%d)",
                             self.category, detection.id, self.capacity - 1)
                continue
            if (not (math.isfinite(detection.dx) and math.isfinite(detection.dz))
                    or detection.dx == detection.dz == 0):
                logger.debug("Skipping %s id %d with invalid offset (%s, %s)",
                             self.category, detection.id, detection.dx, detection.dz)
                continue

            if detection.dz == 0:
                # Straight to the side of the camera
                angle = -math.copysign(math.pi / 2, detection.dx)
            else:
                angle = -math.atan(detection.dx / detection.dz)
            distance = math.hypot(detection.dx, detection.dz)

            stamp = message.stamp if detection.stamp is None else detection.stamp
            pose = self.estimator.pose_for_time(stamp)
            x, y = project(distance, angle, pose)

            self._records[detection.id] = LandmarkRecord(
                id=detection.id, x=x, y=y, t=stamp, visible=True
            )
            placed += 1

        return placed

    def get(self, landmark_id: int) -> Optional[LandmarkRecord]:
        if not 0 <= landmark_id < self.capacity:
            return None
        return self._records[landmark_id]

    def known(self) -> List[LandmarkRecord]:
        """Every landmark seen at least once."""
        return [r for r in self._records if r is not None]

    def visible(self) -> List[LandmarkRecord]:
        """Landmarks present in the latest detection message."""
        return [r for r in self._records if r is not None and r.visible]
