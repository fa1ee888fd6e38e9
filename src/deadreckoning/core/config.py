"""
Configuration

All tunable parameters of the reckoning node, grouped per component.
Defaults reproduce the values the node has always run with; a YAML file
can override any of them:

    grid:
      precision: 0.05
      ttl: 120.0
    scan:
      max_range: 12.0
    bounds:
      min_x: -5.0
      max_x: 5.0

Usage:
    config = load_config("reckoning.yaml")
    node = DeadReckoning(publisher, simulation=True, config=config)
"""

import math
from dataclasses import dataclass, field, fields
from typing import Any, Dict, Optional, Tuple

import yaml


@dataclass
class GridConfig:
    """Occupancy grid parameters."""
    precision: float = 0.05             # Meters per cell
    ttl: float = 120.0                  # Seconds before a cell reads unknown
    resizeable: bool = False            # Grow instead of rejecting outside points
    fusion_tolerance: float = 0.0       # Max timestamp gap (s) for probability fusion
    resize_margin: int = 1              # Extra cells added beyond a point on growth


@dataclass
class EstimatorConfig:
    """Position estimator parameters."""
    history_size: int = 1000            # Poses kept for time lookups
    arc_epsilon: float = 1e-5           # |angular| below this integrates a straight line
    simulation_start: Tuple[float, float, float] = (2.0, 2.0, 0.0)
    real_start: Tuple[float, float, float] = (0.0, 0.0, math.pi / 2)


@dataclass
class ScanConfig:
    """Range table / cloud point buffer parameters."""
    angle_precision_deg: float = 0.1    # Width of one range bucket
    max_range: float = 15.0             # Longer ranges are stored as infinity
    cloud_points: int = 1000            # Capacity of the rolling cloud buffer

    @property
    def n_buckets(self) -> int:
        return int(math.ceil(360.0 / self.angle_precision_deg))


@dataclass
class CloudConfig:
    """Point cloud to synthetic scan projection parameters."""
    fov_deg: float = 30.0               # Half field of view
    angle_precision_deg: float = 0.1
    range_min: float = 0.45
    range_max: float = 15.0
    half_thickness: float = 0.5         # Keep points with |y| below this
    scan_time: float = 1.0 / 30.0


@dataclass
class LandmarkConfig:
    """Landmark table sizes."""
    markers: int = 256
    friends: int = 3


@dataclass
class FrameNames:
    """Names of published frames and channels."""
    world: str = "world"
    localmap_scan: str = "localmap_pos_scan"
    localmap_depth: str = "localmap_pos_depth"
    robot: str = "deadreckoning_robotpos"
    scan_grid: str = "deadreckoning_scangridpos"
    depth_grid: str = "deadreckoning_depthgridpos"
    marker: str = "deadreckoning_markerpos"
    friend: str = "deadreckoning_friendpos"
    scan_grid_channel: str = "scan_grid"
    depth_grid_channel: str = "depth_grid"


@dataclass
class Bounds:
    """World region covered by the grids at startup (meters)."""
    min_x: float = 0.0
    max_x: float = 10.0
    min_y: float = 0.0
    max_y: float = 10.0


@dataclass
class ReckoningConfig:
    """Complete node configuration."""
    grid: GridConfig = field(default_factory=GridConfig)
    estimator: EstimatorConfig = field(default_factory=EstimatorConfig)
    scan: ScanConfig = field(default_factory=ScanConfig)
    cloud: CloudConfig = field(default_factory=CloudConfig)
    landmarks: LandmarkConfig = field(default_factory=LandmarkConfig)
    frames: FrameNames = field(default_factory=FrameNames)
    bounds: Bounds = field(default_factory=Bounds)
    tick_rate: float = 10.0             # Frame broadcast rate (Hz)

    def validate(self):
        """Raise ValueError on parameters no component can work with."""
        if self.grid.precision <= 0:
            raise ValueError(f"grid.precision must be positive, got {self.grid.precision}")
        if self.grid.ttl < 0:
            raise ValueError(f"grid.ttl must not be negative, got {self.grid.ttl}")
        if self.grid.resize_margin < 0:
            raise ValueError("grid.resize_margin must not be negative")
        if self.estimator.history_size < 1:
            raise ValueError("estimator.history_size must be at least 1")
        if self.scan.angle_precision_deg <= 0 or self.cloud.angle_precision_deg <= 0:
            raise ValueError("angle_precision_deg must be positive")
        if self.scan.cloud_points < 1:
            raise ValueError("scan.cloud_points must be at least 1")
        if self.cloud.range_min > self.cloud.range_max:
            raise ValueError("cloud.range_min is greater than cloud.range_max")
        if self.landmarks.markers < 0 or self.landmarks.friends < 0:
            raise ValueError("landmark table sizes must not be negative")
        if self.bounds.min_x > self.bounds.max_x or self.bounds.min_y > self.bounds.max_y:
            raise ValueError("bounds are inverted")
        if self.tick_rate <= 0:
            raise ValueError("tick_rate must be positive")

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'ReckoningConfig':
        """Build a configuration from nested dicts (one section per component)."""
        config = cls()
        data = dict(data or {})

        sections = {f.name for f in fields(cls)} - {'tick_rate'}
        unknown = set(data) - sections - {'tick_rate'}
        if unknown:
            raise ValueError(f"Unknown configuration sections: {sorted(unknown)}")

        if 'tick_rate' in data:
            config.tick_rate = float(data['tick_rate'])

        for name in sections:
            values = data.get(name)
            if values is None:
                continue
            if not isinstance(values, dict):
                raise ValueError(f"Section '{name}' must be a mapping")
            setattr(config, name, _build_section(getattr(config, name), values, name))

        config.validate()
        return config


def _build_section(default, values: Dict[str, Any], section: str):
    known = {f.name: f for f in fields(default)}
    unknown = set(values) - set(known)
    if unknown:
        raise ValueError(f"Unknown keys in '{section}': {sorted(unknown)}")

    kwargs = {}
    for key, value in values.items():
        current = getattr(default, key)
        if isinstance(current, tuple):
            value = tuple(float(v) for v in value)
            if len(value) != len(current):
                raise ValueError(f"'{section}.{key}' needs {len(current)} values")
        kwargs[key] = value
    return type(default)(**{**{k: getattr(default, k) for k in known}, **kwargs})


def load_config(path: Optional[str] = None) -> ReckoningConfig:
    """
    Load configuration from a YAML file.

    Args:
        path: YAML file; None returns the defaults

    Returns:
        Validated ReckoningConfig
    """
    if path is None:
        return ReckoningConfig()

    with open(path, 'r') as f:
        data = yaml.safe_load(f)

    if data is not None and not isinstance(data, dict):
        raise ValueError(f"{path}: top level must be a mapping")
    return ReckoningConfig.from_dict(data)
