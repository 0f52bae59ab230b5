"""Hand detection and keypoint extraction module."""

from .landmarks import HandDetection, DetectionLoader, landmarks_from_points
from .keypoints import (
    extract_keypoints,
    extract_keypoints_dynamic,
    extract_hand_keypoints_static,
    HAND_SIZE,
    FRAME_SIZE,
)
from .live_detector import LiveHandDetector, LiveDetectionConfig

__all__ = [
    "HandDetection",
    "DetectionLoader",
    "landmarks_from_points",
    "extract_keypoints",
    "extract_keypoints_dynamic",
    "extract_hand_keypoints_static",
    "HAND_SIZE",
    "FRAME_SIZE",
    "LiveHandDetector",
    "LiveDetectionConfig",
]
