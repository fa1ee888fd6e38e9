"""
Perception module for range sensor processing.

Components:
- ScanBucketizer: Range table + world cloud points from a scan
- CloudToScanProjector: Synthetic scan from a depth point cloud
"""

from .scan_bucketizer import ScanBucketizer
from .cloud_projector import CloudToScanProjector

__all__ = [
    'ScanBucketizer',
    'CloudToScanProjector',
]
