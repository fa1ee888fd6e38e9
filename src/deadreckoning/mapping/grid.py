"""
Probabilistic Grid

Quantized 2D map of obstacle probabilities over world coordinates.

Features:
- Cells hold the latest evidence with its timestamp; evidence older than
  the grid's time-to-live reads as unknown
- Same-instant evidence from several sources is fused as independent
  detections, newer evidence replaces older evidence
- Optional growth when a point falls outside the covered region

Cells live in (width, height) numpy arrays indexed [ix, iy], so the
flattened store is column-major: cell (ix, iy) lives at ix * height + iy.
"""

import logging
import math
import time
from dataclasses import dataclass
from typing import Callable, Optional, Tuple

import numpy as np

from ..interface.messages import GridSnapshot
from ..localization.transforms import cround

logger = logging.getLogger(__name__)

UNKNOWN = -1.0


class GridAllocationError(MemoryError):
    """The cell store of a grid could not be allocated."""


@dataclass
class GridPoint:
    """Evidence stored in one cell."""
    x: float
    y: float
    t: float        # Timestamp (s)
    p: float        # Obstacle probability [0, 1]


class Grid:
    """
    Time-decaying occupancy grid.

    Bounds are kept as integer cell numbers (world coordinate / precision),
    so min_x, max_x, min_y and max_y are always exact multiples of the
    precision.

    Usage:
        grid = Grid(precision=0.05, ttl=120.0, min_x=0, max_x=10, min_y=0, max_y=10)

        grid.add_point(1.02, 3.51, time.time(), 0.8)
        p = grid.get(1.0, 3.5)          # 0.8, or -1 when unknown

        data, width, height, precision = grid.get_all()
    """

    def __init__(
        self,
        precision: float,
        ttl: float,
        min_x: float,
        max_x: float,
        min_y: float,
        max_y: float,
        resizeable: bool = False,
        fusion_tolerance: float = 0.0,
        resize_margin: int = 1,
        clock: Callable[[], float] = time.time
    ):
        """
        Initialize grid.

        Args:
            precision: Meters per cell
            ttl: Seconds after which a cell reads unknown
            min_x, max_x, min_y, max_y: Covered region (quantized to cells)
            resizeable: Grow to include outside points instead of rejecting them
            fusion_tolerance: Max timestamp gap for probability fusion (0 = exact)
            resize_margin: Cells added beyond an outside point when growing
            clock: Source of the current time (s)
        """
        if precision <= 0:
            raise ValueError(f"precision must be positive, got {precision}")
        if ttl < 0:
            raise ValueError(f"ttl must not be negative, got {ttl}")
        if min_x > max_x or min_y > max_y:
            raise ValueError(
                f"Inverted bounds: x [{min_x}, {max_x}], y [{min_y}, {max_y}]"
            )
        if resize_margin < 0:
            raise ValueError("resize_margin must not be negative")

        self._precision = float(precision)
        self._ttl = float(ttl)
        self._resizeable = resizeable
        self._fusion_tolerance = float(fusion_tolerance)
        self._resize_margin = int(resize_margin)
        self._clock = clock

        self._min_ix = self._cell(min_x)
        self._max_ix = self._cell(max_x)
        self._min_iy = self._cell(min_y)
        self._max_iy = self._cell(max_y)

        # Probability, timestamp and presence of each cell
        self._p, self._t, self._occupied = self._allocate(self.width, self.height)

    # ------------------------------------------------------------------
    # Geometry
    # ------------------------------------------------------------------

    @property
    def precision(self) -> float:
        return self._precision

    @property
    def ttl(self) -> float:
        return self._ttl

    @property
    def resizeable(self) -> bool:
        return self._resizeable

    @property
    def min_x(self) -> float:
        return self._precision * self._min_ix

    @property
    def max_x(self) -> float:
        return self._precision * self._max_ix

    @property
    def min_y(self) -> float:
        return self._precision * self._min_iy

    @property
    def max_y(self) -> float:
        return self._precision * self._max_iy

    @property
    def width(self) -> int:
        return self._max_ix - self._min_ix + 1

    @property
    def height(self) -> int:
        return self._max_iy - self._min_iy + 1

    @property
    def size(self) -> int:
        return self.width * self.height

    def quantize(self, value: float) -> float:
        """Snap a coordinate to the nearest cell center."""
        return self._precision * self._cell(value)

    def _cell(self, value: float) -> int:
        return cround(value / self._precision)

    def _index(self, cx: int, cy: int) -> Optional[Tuple[int, int]]:
        """Array indices of absolute cell numbers, None when outside."""
        if not (self._min_ix <= cx <= self._max_ix and self._min_iy <= cy <= self._max_iy):
            return None
        return cx - self._min_ix, cy - self._min_iy

    @staticmethod
    def _allocate(width: int, height: int) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        try:
            return (np.zeros((width, height), dtype=np.float64),
                    np.zeros((width, height), dtype=np.float64),
                    np.zeros((width, height), dtype=bool))
        except (MemoryError, OverflowError, ValueError) as e:
            raise GridAllocationError(
                f"Unable to allocate grid of {width}x{height} cells"
            ) from e

    # ------------------------------------------------------------------
    # Updates
    # ------------------------------------------------------------------

    def add_point(self, x: float, y: float, t: float, p: float) -> bool:
        """
        Add evidence at a world position.

        Args:
            x, y: World position (meters)
            t: Timestamp of the evidence (s)
            p: Obstacle probability [0, 1]

        Returns:
            False if the position is not finite or is outside a
            non-resizeable grid
        """
        if not (math.isfinite(x) and math.isfinite(y)):
            logger.debug("Skipping non-finite grid point (%s, %s)", x, y)
            return False

        cx = self._cell(x)
        cy = self._cell(y)

        index = self._index(cx, cy)
        if index is None:
            if not self._resizeable:
                return False
            self._grow(cx, cy)
            index = self._index(cx, cy)

        if self._occupied[index] and abs(self._t[index] - t) <= self._fusion_tolerance:
            p = 1.0 - (1.0 - self._p[index]) * (1.0 - p)

        self._p[index] = p
        self._t[index] = t
        self._occupied[index] = True
        return True

    def add(self, point: GridPoint) -> bool:
        return self.add_point(point.x, point.y, point.t, point.p)

    def _grow(self, cx: int, cy: int):
        """Extend the bounds to include cell (cx, cy) and move every stored cell."""
        min_ix, max_ix = self._min_ix, self._max_ix
        min_iy, max_iy = self._min_iy, self._max_iy

        if cx < min_ix:
            min_ix = cx - self._resize_margin
        elif cx > max_ix:
            max_ix = cx + self._resize_margin

        if cy < min_iy:
            min_iy = cy - self._resize_margin
        elif cy > max_iy:
            max_iy = cy + self._resize_margin

        new_width = max_ix - min_ix + 1
        new_height = max_iy - min_iy + 1
        p, t, occupied = self._allocate(new_width, new_height)

        sx = self._min_ix - min_ix
        sy = self._min_iy - min_iy
        width, height = self.width, self.height
        p[sx:sx + width, sy:sy + height] = self._p
        t[sx:sx + width, sy:sy + height] = self._t
        occupied[sx:sx + width, sy:sy + height] = self._occupied

        logger.debug(
            "Grid resized from %dx%d to %dx%d",
            width, height, new_width, new_height
        )

        self._p, self._t, self._occupied = p, t, occupied
        self._min_ix, self._max_ix = min_ix, max_ix
        self._min_iy, self._max_iy = min_iy, max_iy

    def clear(self):
        """Forget every stored point."""
        self._occupied[:] = False

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def _fresh(self, now: float) -> np.ndarray:
        """Mask of cells holding unexpired evidence."""
        return self._occupied & (now - self._t <= self._ttl)

    def get(self, x: float, y: float) -> float:
        """
        Probability at a world position.

        Returns:
            Stored probability, or -1 if empty, outside or expired
        """
        if not (math.isfinite(x) and math.isfinite(y)):
            return UNKNOWN

        index = self._index(self._cell(x), self._cell(y))
        if index is None or not self._occupied[index]:
            return UNKNOWN
        if self._clock() - self._t[index] > self._ttl:
            return UNKNOWN
        return float(self._p[index])

    def get_all(self) -> Tuple[np.ndarray, int, int, float]:
        """
        Snapshot of the whole grid.

        Returns:
            (column-major probabilities with -1 for unknown, width, height, precision)
        """
        data = np.where(self._fresh(self._clock()), self._p, UNKNOWN).ravel()
        return data, self.width, self.height, self._precision

    def snapshot(self) -> GridSnapshot:
        """Snapshot with the world position of cell (0, 0)."""
        data, width, height, scale = self.get_all()
        return GridSnapshot(
            data=data,
            width=width,
            height=height,
            scale=scale,
            x=self.min_x,
            y=self.min_y
        )

    def occupied_count(self) -> int:
        """Number of cells holding a point, expired or not."""
        return int(np.count_nonzero(self._occupied))

    # ------------------------------------------------------------------
    # Copy
    # ------------------------------------------------------------------

    def copy(self) -> 'Grid':
        """Empty grid with the same configuration and bounds."""
        return Grid(
            self._precision, self._ttl,
            self.min_x, self.max_x, self.min_y, self.max_y,
            resizeable=self._resizeable,
            fusion_tolerance=self._fusion_tolerance,
            resize_margin=self._resize_margin,
            clock=self._clock
        )

    __copy__ = copy

    def __repr__(self) -> str:
        return (f"Grid({self.width}x{self.height}, precision={self._precision}, "
                f"x=[{self.min_x:.3f}, {self.max_x:.3f}], "
                f"y=[{self.min_y:.3f}, {self.max_y:.3f}])")
