"""
Output interface of the reckoning node.

The transport implements IReckoningPublisher; RecordingPublisher keeps the
messages in memory for the simulation and the tests.
"""

from abc import ABC, abstractmethod
from collections import defaultdict
from typing import Dict, List, Optional

from .messages import LaserScan, GridSnapshot, StampedFrame


class IReckoningPublisher(ABC):
    """Abstract output of the reckoning node."""

    @abstractmethod
    def publish_scan(self, channel: str, scan: LaserScan):
        """Publish a processed range scan."""
        pass

    @abstractmethod
    def publish_grid(self, channel: str, snapshot: GridSnapshot):
        """Publish a grid snapshot."""
        pass

    @abstractmethod
    def publish_frames(self, frames: List[StampedFrame]):
        """Broadcast frame positions."""
        pass


class RecordingPublisher(IReckoningPublisher):
    """Keeps the last message per channel and counts everything."""

    def __init__(self):
        self.scans: Dict[str, LaserScan] = {}
        self.grids: Dict[str, GridSnapshot] = {}
        self.frames: Dict[str, StampedFrame] = {}
        self.counts: Dict[str, int] = defaultdict(int)

    def publish_scan(self, channel: str, scan: LaserScan):
        self.scans[channel] = scan
        self.counts[channel] += 1

    def publish_grid(self, channel: str, snapshot: GridSnapshot):
        self.grids[channel] = snapshot
        self.counts[channel] += 1

    def publish_frames(self, frames: List[StampedFrame]):
        for frame in frames:
            self.frames[frame.child] = frame
        self.counts['frames'] += 1

    def frame(self, name: str) -> Optional[StampedFrame]:
        return self.frames.get(name)
