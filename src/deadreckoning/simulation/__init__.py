"""
Simulation module for running the node on a PC without hardware.

Components:
- Environment: Virtual room with obstacles and markers
- ScanSimulator / DepthSimulator / MarkerSimulator: Sensor messages at a pose
- build_local_map: Stand-in for the local mapping node
"""

from .environment import (
    Environment,
    Obstacle,
    ObstacleType,
    create_room_env,
    create_corridor_env
)
from .scan_simulator import (
    ScanSimulator,
    ScanSimulatorConfig,
    DepthSimulator,
    MarkerSimulator
)
from .local_map import build_local_map

__all__ = [
    'Environment',
    'Obstacle',
    'ObstacleType',
    'create_room_env',
    'create_corridor_env',
    'ScanSimulator',
    'ScanSimulatorConfig',
    'DepthSimulator',
    'MarkerSimulator',
    'build_local_map',
]
