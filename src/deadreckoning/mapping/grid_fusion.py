"""
Grid Fusion Pipeline

Writes coarse, robot-centred occupancy updates from the local mapping
collaborator into the world grids and publishes the result.

One grid per ranging source ("scan", "depth"); updates from a source only
touch that source's grid.
"""

import logging
import time
from typing import Callable, Dict, Iterable, Optional

import numpy as np

from ..interface.messages import GridSnapshot, OccupancyUpdate
from ..interface.publisher import IReckoningPublisher
from ..localization.position_estimator import PositionEstimator
from .grid import Grid

logger = logging.getLogger(__name__)


class GridFusionPipeline:
    """
    Occupancy updates -> world grids.

    Usage:
        pipeline = GridFusionPipeline(
            estimator,
            {"scan": scan_grid, "depth": depth_grid},
            publisher,
            channels={"scan": "scan_grid", "depth": "depth_grid"}
        )
        pipeline.apply("scan", occupancy_update)
    """

    def __init__(
        self,
        estimator: PositionEstimator,
        grids: Dict[str, Grid],
        publisher: Optional[IReckoningPublisher] = None,
        channels: Optional[Dict[str, str]] = None,
        clock: Callable[[], float] = time.time
    ):
        self.estimator = estimator
        self.publisher = publisher
        self._grids = dict(grids)
        self._channels = dict(channels or {})
        self._clock = clock

        self.rejected: Dict[str, int] = {source: 0 for source in self._grids}

    @property
    def sources(self) -> Iterable[str]:
        return self._grids.keys()

    def grid(self, source: str) -> Grid:
        return self._grids[source]

    def snapshot(self, source: str) -> GridSnapshot:
        return self._grids[source].snapshot()

    def apply(self, source: str, update: OccupancyUpdate) -> int:
        """
        Fuse one occupancy update into the grid of a source.

        Cell (col, row) of the update lands at
        pose + ((col - width // 2) * resolution, (row - height // 2) * resolution).

        Args:
            source: Grid name
            update: Robot-centred occupancy (row-major, 0-100, -1 unknown)

        Returns:
            Number of points accepted by the grid
        """
        grid = self._grids[source]
        pose = self.estimator.pose
        t = self._clock()

        cells = update.data.reshape(update.height, update.width)
        rows, cols = np.nonzero(cells >= 0)

        accepted = 0
        rejected = 0
        for row, col in zip(rows.tolist(), cols.tolist()):
            fx = pose.x + (col - update.width // 2) * update.resolution
            fy = pose.y + (row - update.height // 2) * update.resolution
            if grid.add_point(fx, fy, t, float(cells[row, col]) / 100.0):
                accepted += 1
            else:
                rejected += 1

        if rejected:
            self.rejected[source] += rejected
            logger.debug("%s grid: %d points outside the grid", source, rejected)

        self._publish(source)
        return accepted

    def _publish(self, source: str):
        if self.publisher is None:
            return
        channel = self._channels.get(source, source)
        self.publisher.publish_grid(channel, self.snapshot(source))
