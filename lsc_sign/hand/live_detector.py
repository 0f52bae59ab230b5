"""
Live Hand Detection via MediaPipe

Runs MediaPipe Hands on camera or video frames and returns the per-frame
hand detections the keypoint processor consumes.

    - Video mode (static_image_mode=False) for temporal tracking
    - Frame sampling with configurable stride
    - Optional handedness flip for mirrored front cameras

References:
    - Zhang et al. (2020), MediaPipe Hands: On-device Real-time Hand Tracking

Usage:
    from lsc_sign.hand.live_detector import LiveHandDetector

    detector = LiveHandDetector()
    for frame, hands in detector.iter_frames(0):
        ...
"""

import cv2
import numpy as np
from typing import Iterator, List, Optional, Tuple, Union
from dataclasses import dataclass

try:
    import mediapipe as mp
except ImportError:
    mp = None

from .landmarks import HandDetection
from ..utils.logging_utils import get_logger

logger = get_logger(__name__)


@dataclass
class LiveDetectionConfig:
    """Configuration for live hand detection."""
    model_complexity: int = 1           # 0 = lite, 1 = full
    max_num_hands: int = 2
    min_detection_confidence: float = 0.5
    min_tracking_confidence: float = 0.5
    frame_stride: int = 1               # process every N-th frame
    static_image_mode: bool = False
    flip_handedness: bool = False       # MediaPipe labels assume a mirrored image

    @classmethod
    def from_config(cls, detection) -> 'LiveDetectionConfig':
        """Build from a ``DetectionConfig`` section."""
        return cls(
            model_complexity=detection.model_complexity,
            max_num_hands=detection.max_num_hands,
            min_detection_confidence=detection.min_detection_confidence,
            min_tracking_confidence=detection.min_tracking_confidence,
            frame_stride=max(1, detection.frame_stride),
            flip_handedness=detection.flip_handedness,
        )


class LiveHandDetector:
    """
    Detect hands frame by frame using MediaPipe Hands.

    Coordinates are MediaPipe's normalised [0, 1] image coordinates.
    Frames without hands yield an empty list.
    """

    def __init__(self, config: Optional[LiveDetectionConfig] = None):
        if mp is None:
            raise ImportError(
                "mediapipe is required for live hand detection. "
                "Install with: pip install mediapipe"
            )
        self.config = config or LiveDetectionConfig()
        cfg = self.config
        self._hands = mp.solutions.hands.Hands(
            static_image_mode=cfg.static_image_mode,
            max_num_hands=cfg.max_num_hands,
            model_complexity=cfg.model_complexity,
            min_detection_confidence=cfg.min_detection_confidence,
            min_tracking_confidence=cfg.min_tracking_confidence,
        )

    def detect(self, frame: np.ndarray) -> List[HandDetection]:
        """
        Detect hands on a single BGR frame.

        Args:
            frame: BGR image as read by OpenCV

        Returns:
            List of HandDetection (0, 1 or 2 entries)
        """
        # MediaPipe expects RGB
        frame_rgb = cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)
        results = self._hands.process(frame_rgb)

        detections = []
        if results.multi_hand_landmarks and results.multi_handedness:
            for hand_lm, hand_info in zip(
                results.multi_hand_landmarks, results.multi_handedness
            ):
                classification = hand_info.classification[0]
                arr = np.array(
                    [[lm.x, lm.y, lm.z] for lm in hand_lm.landmark],
                    dtype=np.float32,
                )  # (21, 3)
                hand = HandDetection(
                    handedness=classification.label,
                    landmarks=arr,
                    score=float(classification.score),
                )
                if self.config.flip_handedness:
                    hand = hand.flipped()
                detections.append(hand)

        return detections

    def iter_frames(
        self,
        source: Union[int, str],
        max_frames: Optional[int] = None,
    ) -> Iterator[Tuple[np.ndarray, List[HandDetection]]]:
        """
        Read a camera or video and yield ``(frame, detections)``.

        Args:
            source: camera index or path to a video file
            max_frames: stop after this many processed frames (None = all)
        """
        cap = cv2.VideoCapture(source)
        if not cap.isOpened():
            raise IOError(f"Cannot open video source: {source}")

        stride = max(1, self.config.frame_stride)
        frame_idx = 0
        processed = 0
        try:
            while max_frames is None or processed < max_frames:
                ret, frame = cap.read()
                if not ret:
                    break

                if frame_idx % stride == 0:
                    yield frame, self.detect(frame)
                    processed += 1

                frame_idx += 1
        finally:
            cap.release()

        logger.debug(f"Read {frame_idx} frames from {source}, processed {processed}")

    def close(self):
        self._hands.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
