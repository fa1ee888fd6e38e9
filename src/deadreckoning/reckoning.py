"""
Dead reckoning node.

Wires the estimator, the range processing, the landmark tables and the two
occupancy grids to the sensor callbacks, and broadcasts the world frames at
a fixed rate.

The transport calls the on_* methods when messages arrive and runs
reckon() (or tick() from its own loop). Every callback and tick holds the
same lock, so updates never overlap even with a multi-threaded transport.
"""

import logging
import math
import threading
import time
from typing import Callable, List, Optional

from .core.config import ReckoningConfig
from .interface.messages import (
    ImuReading, LandmarkDetections, LaserScan, OccupancyUpdate,
    Odometry, PointCloud, StampedFrame, VelocityCommand
)
from .interface.publisher import IReckoningPublisher
from .localization.landmark_localizer import LandmarkLocalizer
from .localization.position_estimator import PositionEstimator
from .localization.transforms import StampedPose, mod_angle
from .mapping.grid import Grid
from .mapping.grid_fusion import GridFusionPipeline
from .perception.cloud_projector import CloudToScanProjector
from .perception.scan_bucketizer import ScanBucketizer

logger = logging.getLogger(__name__)

SCAN = "scan"
DEPTH = "depth"


class DeadReckoning:
    """
    Localization and mapping node.

    Usage:
        node = DeadReckoning(publisher, simulation=True)

        # From the transport:
        node.on_scan(scan)
        node.on_velocity_command(VelocityCommand(0.2, 0.0))
        node.on_local_map_scan(update)

        # Main loop (returns when stop is set)
        stop = threading.Event()
        node.reckon(stop)
    """

    def __init__(
        self,
        publisher: IReckoningPublisher,
        simulation: bool = False,
        config: Optional[ReckoningConfig] = None,
        clock: Callable[[], float] = time.time
    ):
        """
        Initialize the node.

        Args:
            publisher: Output transport
            simulation: Dead reckoning from commands instead of IMU + odometry
            config: Parameters (defaults if None)
            clock: Source of the current time (s)
        """
        self.config = config or ReckoningConfig()
        self.config.validate()
        self.publisher = publisher
        self.simulation = simulation
        self._clock = clock
        self._lock = threading.RLock()

        cfg = self.config
        self.estimator = PositionEstimator(cfg.estimator, simulation, clock)

        self.scan_ranges = ScanBucketizer(self.estimator, cfg.scan)
        self.depth_ranges = ScanBucketizer(self.estimator, cfg.scan)
        self.projector = CloudToScanProjector(cfg.cloud)

        self.markers = LandmarkLocalizer(self.estimator, "marker", cfg.landmarks.markers)
        self.friends = LandmarkLocalizer(self.estimator, "friend", cfg.landmarks.friends)

        scan_grid = Grid(
            cfg.grid.precision, cfg.grid.ttl,
            cfg.bounds.min_x, cfg.bounds.max_x, cfg.bounds.min_y, cfg.bounds.max_y,
            resizeable=cfg.grid.resizeable,
            fusion_tolerance=cfg.grid.fusion_tolerance,
            resize_margin=cfg.grid.resize_margin,
            clock=clock
        )
        self.fusion = GridFusionPipeline(
            self.estimator,
            {SCAN: scan_grid, DEPTH: scan_grid.copy()},
            publisher,
            channels={SCAN: cfg.frames.scan_grid_channel, DEPTH: cfg.frames.depth_grid_channel},
            clock=clock
        )

        self.ticks = 0
        logger.info("Dead reckoning ready (%s mode, grid %r)",
                    "simulation" if simulation else "real", scan_grid)

    @property
    def pose(self) -> StampedPose:
        return self.estimator.pose

    @property
    def scan_grid(self) -> Grid:
        return self.fusion.grid(SCAN)

    @property
    def depth_grid(self) -> Grid:
        return self.fusion.grid(DEPTH)

    # ------------------------------------------------------------------
    # Pose sources
    # ------------------------------------------------------------------

    def on_velocity_command(self, command: VelocityCommand, stamp: Optional[float] = None):
        with self._lock:
            self.estimator.on_velocity_command(command.linear, command.angular, stamp)

    def on_odometry(self, odom: Odometry):
        with self._lock:
            self.estimator.on_odometry(odom.x, odom.y, odom.orientation, odom.stamp)

    def on_imu(self, imu: ImuReading):
        with self._lock:
            self.estimator.on_imu(imu.orientation)

    # ------------------------------------------------------------------
    # Range sources
    # ------------------------------------------------------------------

    def on_scan(self, scan: LaserScan) -> LaserScan:
        """Process a laser scan and forward it to the local mapper."""
        with self._lock:
            # The real laser points towards the back of the robot
            processed = self.scan_ranges.process(scan, invert=not self.simulation)
            processed.frame_id = self.config.frames.localmap_scan
            self.publisher.publish_scan(self.config.frames.localmap_scan, processed)
            return processed

    def on_point_cloud(self, cloud: PointCloud) -> LaserScan:
        """Turn a depth cloud into a scan, process it and forward it."""
        with self._lock:
            scan = self.projector.project(cloud)
            processed = self.depth_ranges.process(scan, invert=False)
            processed.frame_id = self.config.frames.localmap_depth
            self.publisher.publish_scan(self.config.frames.localmap_depth, processed)
            return processed

    def on_local_map_scan(self, update: OccupancyUpdate) -> int:
        with self._lock:
            return self.fusion.apply(SCAN, update)

    def on_local_map_depth(self, update: OccupancyUpdate) -> int:
        with self._lock:
            return self.fusion.apply(DEPTH, update)

    # ------------------------------------------------------------------
    # Landmarks
    # ------------------------------------------------------------------

    def on_markers(self, detections: LandmarkDetections) -> int:
        with self._lock:
            return self.markers.update(detections)

    def on_friends(self, detections: LandmarkDetections) -> int:
        with self._lock:
            return self.friends.update(detections)

    # ------------------------------------------------------------------
    # Frames
    # ------------------------------------------------------------------

    def frames(self) -> List[StampedFrame]:
        """World position of the robot, local map sensors, grids and landmarks."""
        with self._lock:
            names = self.config.frames
            world = names.world
            now = self._clock()
            pose = self.estimator.pose

            scan_heading = pose.heading if self.simulation else mod_angle(pose.heading + math.pi)
            frames = [
                StampedFrame(world, names.localmap_scan, pose.x, pose.y, scan_heading, now),
            ]
            if not self.simulation:
                frames.append(StampedFrame(world, names.localmap_depth, pose.x, pose.y, pose.heading, now))
            frames.append(StampedFrame(world, names.robot, pose.x, pose.y, pose.heading, now))

            frames.append(StampedFrame(world, names.scan_grid, self.scan_grid.min_x, self.scan_grid.min_y, 0.0, now))
            if not self.simulation:
                frames.append(StampedFrame(world, names.depth_grid, self.depth_grid.min_x, self.depth_grid.min_y, 0.0, now))

            for prefix, table in ((names.marker, self.markers), (names.friend, self.friends)):
                for record in table.known():
                    frames.append(StampedFrame(world, f"{prefix}_{record.id}", record.x, record.y, 0.0, now))

            return frames

    def tick(self):
        """One iteration of the main loop: broadcast every frame."""
        with self._lock:
            self.publisher.publish_frames(self.frames())
            self.ticks += 1

    def reckon(self, stop: Optional[threading.Event] = None, max_ticks: Optional[int] = None):
        """
        Broadcast frames at tick_rate until stop is set.

        Args:
            stop: Set by the caller to end the loop after the current tick
            max_ticks: Also end after this many ticks
        """
        stop = stop or threading.Event()
        period = 1.0 / self.config.tick_rate
        count = 0

        logger.info("Starting reckoning at %.1f Hz", self.config.tick_rate)
        while not stop.is_set():
            start = time.monotonic()
            self.tick()
            count += 1
            if max_ticks is not None and count >= max_ticks:
                break

            elapsed = time.monotonic() - start
            stop.wait(max(0.0, period - elapsed))

        logger.info("Reckoning stopped after %d ticks", count)
