"""
Hand Detections

Per-frame hand detection type and loader for recorded detection files.

MediaPipe 21-Keypoint Structure:
    0: Wrist
    1-4: Thumb (CMC, MCP, IP, TIP)
    5-8: Index (MCP, PIP, DIP, TIP)
    9-12: Middle (MCP, PIP, DIP, TIP)
    13-16: Ring (MCP, PIP, DIP, TIP)
    17-20: Pinky (MCP, PIP, DIP, TIP)

Recorded files hold one entry per camera frame, each entry being the list
of hands seen in that frame:

    [
        [{"handedness": "Right", "keypoints": [{"x": .., "y": .., "z": ..}, ...]}],
        [],
        ...
    ]

Usage:
    from lsc_sign.hand.landmarks import DetectionLoader

    loader = DetectionLoader()
    frames = loader.load("path/to/detections.json")
"""

import json
import numpy as np
from pathlib import Path
from typing import Any, Dict, List, Optional, Union
from dataclasses import dataclass


NUM_LANDMARKS = 21
LEFT = 'Left'
RIGHT = 'Right'


@dataclass
class HandDetection:
    """One detected hand in a single frame."""
    handedness: str  # 'Left' or 'Right'
    landmarks: np.ndarray  # Shape (21, 3) - (x, y, z) normalised coordinates
    score: float = 1.0

    @property
    def side(self) -> str:
        """Canonical side label ('Left', 'Right' or '' when unknown)."""
        label = (self.handedness or '').strip().lower()
        if label == 'left':
            return LEFT
        if label == 'right':
            return RIGHT
        return ''

    def flipped(self) -> 'HandDetection':
        """Same landmarks with the side label swapped."""
        other = {LEFT: RIGHT, RIGHT: LEFT}.get(self.side, self.handedness)
        return HandDetection(handedness=other, landmarks=self.landmarks, score=self.score)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'handedness': self.handedness,
            'score': float(self.score),
            'keypoints': [
                {'x': float(x), 'y': float(y), 'z': float(z)}
                for x, y, z in self.landmarks
            ]
        }


def landmarks_from_points(points: Any) -> np.ndarray:
    """
    Build a (21, 3) landmark array from a list of points.

    Points may be dicts with x/y/z keys or sequences. Missing or
    non-numeric coordinates become 0, short lists are zero-padded and
    points past the 21st are ignored.
    """
    landmarks = np.zeros((NUM_LANDMARKS, 3), dtype=np.float32)

    if isinstance(points, np.ndarray):
        points = points.tolist()
    if not isinstance(points, (list, tuple)):
        return landmarks

    for i, point in enumerate(points[:NUM_LANDMARKS]):
        if isinstance(point, dict):
            coords = [point.get('x'), point.get('y'), point.get('z')]
        elif isinstance(point, (list, tuple)):
            coords = list(point[:3]) + [None] * (3 - len(point[:3]))
        else:
            coords = [getattr(point, 'x', None), getattr(point, 'y', None), getattr(point, 'z', None)]
        landmarks[i] = [_coord(c) for c in coords]

    return landmarks


def _coord(value: Any) -> float:
    try:
        value = float(value)
    except (TypeError, ValueError):
        return 0.0
    return value if np.isfinite(value) else 0.0


class DetectionLoader:
    """
    Loads and saves recorded per-frame hand detections.

    Supports:
    - list of frames, each a list of {handedness, keypoints} hands
    - {"frames": [...]} wrapper
    - per-frame dicts keyed by 'left'/'right'/'left_hand'/'right_hand'
    """

    def load(self, path: Union[str, Path]) -> List[List[HandDetection]]:
        """
        Load detections from a JSON file.

        Args:
            path: Path to JSON file

        Returns:
            One list of HandDetection per recorded frame
        """
        path = Path(path)

        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)

        return self.parse(data)

    def parse(self, data: Union[Dict, List]) -> List[List[HandDetection]]:
        """Parse decoded JSON data into per-frame detections."""
        if isinstance(data, dict):
            data = data.get('frames', [])
        if not isinstance(data, list):
            return []

        return [self.parse_frame(frame_data) for frame_data in data]

    def parse_frame(self, frame_data: Any) -> List[HandDetection]:
        """Parse a single frame's hands. Unreadable hands are skipped."""
        hands = []

        if isinstance(frame_data, list):
            for hand_data in frame_data:
                hand = self._parse_hand(hand_data)
                if hand is not None:
                    hands.append(hand)

        elif isinstance(frame_data, dict):
            if 'hands' in frame_data:
                return self.parse_frame(frame_data['hands'])

            for side in (LEFT, RIGHT):
                key = side.lower()
                hand_data = (frame_data.get(f'{key}_hand')
                             or frame_data.get(key)
                             or frame_data.get(side))
                if hand_data is None:
                    continue
                if isinstance(hand_data, dict):
                    hand_data = dict(hand_data, handedness=side)
                else:
                    hand_data = {'handedness': side, 'keypoints': hand_data}
                hand = self._parse_hand(hand_data)
                if hand is not None:
                    hands.append(hand)

        return hands

    def _parse_hand(self, hand_data: Any) -> Optional[HandDetection]:
        if not isinstance(hand_data, dict):
            return None

        label = hand_data.get('handedness', hand_data.get('label', ''))
        if not isinstance(label, str):
            return None

        points = hand_data.get('keypoints', hand_data.get('landmarks'))
        score = hand_data.get('score', 1.0)

        return HandDetection(
            handedness=label,
            landmarks=landmarks_from_points(points),
            score=_coord(score)
        )

    def save(self, frames: List[List[HandDetection]], path: Union[str, Path]):
        """Write detections in the list-of-frames format."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, 'w', encoding='utf-8') as f:
            json.dump([[hand.to_dict() for hand in frame] for frame in frames], f)
