"""
Mapping module

Components:
- Grid: Time-decaying probabilistic occupancy grid
- GridFusionPipeline: Occupancy updates into per-source grids

Usage:
    from deadreckoning.mapping import Grid, GridFusionPipeline

    grid = Grid(0.05, 120.0, 0, 10, 0, 10)
    grid.add_point(1.0, 2.0, t, 0.9)
"""

from .grid import (
    Grid,
    GridPoint,
    GridAllocationError,
    UNKNOWN
)

from .grid_fusion import GridFusionPipeline

__all__ = [
    'Grid',
    'GridPoint',
    'GridAllocationError',
    'UNKNOWN',
    'GridFusionPipeline',
]
