"""
Pose history with nearest-time lookup.
"""

from typing import Iterator, Optional

from ..core.ring_buffer import RingBuffer
from .transforms import StampedPose


class PoseHistory:
    """
    Last N stamped poses, oldest first.

    Usage:
        history = PoseHistory(capacity=1000)
        history.push(pose)
        pose = history.pose_for_time(detection_stamp)
    """

    def __init__(self, capacity: int = 1000):
        self._buffer: RingBuffer[StampedPose] = RingBuffer(capacity)

    @property
    def capacity(self) -> int:
        return self._buffer.capacity

    def push(self, pose: StampedPose):
        self._buffer.push(pose.copy())

    def latest(self) -> Optional[StampedPose]:
        return self._buffer.latest()

    def oldest(self) -> Optional[StampedPose]:
        return self._buffer.oldest()

    def clear(self):
        self._buffer.clear()

    def __iter__(self) -> Iterator[StampedPose]:
        return (pose for pose in self._buffer if pose.is_valid())

    def __len__(self) -> int:
        return len(self._buffer)

    def pose_for_time(self, t: float) -> Optional[StampedPose]:
        """
        Pose closest to a time.

        Walks from the oldest pose to the first one stamped at or after t and
        returns whichever of it and its predecessor is closer to t (the later
        one on ties). Times older than the history get the oldest pose, times
        newer than the history get the latest one.

        Returns:
            Copy of the pose, or None if the history is empty
        """
        previous = None
        for pose in self:
            if pose.t >= t:
                if previous is None or t - previous.t >= pose.t - t:
                    return pose.copy()
                return previous.copy()
            previous = pose

        return previous.copy() if previous is not None else None
