"""
Keypoint Extraction

Flattens per-frame hand detections into the fixed-length vectors the
letter and word predictors consume.

Layouts:
    dual-hand (126): left hand x,y,z * 21, then right hand x,y,z * 21
    single-hand (63): right hand, or the left hand mirrored in x

Usage:
    from lsc_sign.hand.keypoints import extract_keypoints

    frame_vector = extract_keypoints(hands)  # (126,)
"""

import numpy as np
from typing import Optional, Sequence

from .landmarks import HandDetection, LEFT, RIGHT, NUM_LANDMARKS


HAND_SIZE = NUM_LANDMARKS * 3            # 63
FRAME_SIZE = 2 * HAND_SIZE               # 126


def find_hand(hands: Optional[Sequence[HandDetection]], side: str) -> Optional[HandDetection]:
    """Return the first detection labelled with ``side``, if any."""
    for hand in hands or ():
        if hand is not None and hand.side == side:
            return hand
    return None


def _flatten(hand: HandDetection) -> np.ndarray:
    landmarks = np.asarray(hand.landmarks, dtype=np.float32)
    if landmarks.shape != (NUM_LANDMARKS, 3):
        # Malformed arrays are padded/truncated rather than rejected
        fixed = np.zeros((NUM_LANDMARKS, 3), dtype=np.float32)
        flat = landmarks.reshape(-1)[:HAND_SIZE]
        fixed.reshape(-1)[:flat.size] = flat
        landmarks = fixed
    return np.nan_to_num(landmarks, nan=0.0, posinf=0.0, neginf=0.0).reshape(-1)


def extract_keypoints(hands: Optional[Sequence[HandDetection]]) -> np.ndarray:
    """
    Dual-hand frame vector.

    Args:
        hands: Detections for the current frame (0, 1 or 2 entries)

    Returns:
        Array of shape (126,); slots of absent hands are zero
    """
    keypoints = np.zeros(FRAME_SIZE, dtype=np.float32)

    left = find_hand(hands, LEFT)
    if left is not None:
        keypoints[:HAND_SIZE] = _flatten(left)

    right = find_hand(hands, RIGHT)
    if right is not None:
        keypoints[HAND_SIZE:] = _flatten(right)

    return keypoints


def extract_keypoints_dynamic(hands: Optional[Sequence[HandDetection]]) -> np.ndarray:
    """Frame vector for the word predictor (same layout as extract_keypoints)."""
    return extract_keypoints(hands)


def extract_hand_keypoints_static(hands: Optional[Sequence[HandDetection]]) -> np.ndarray:
    """
    Single-hand vector for the letter predictor.

    The letter model is trained on right hands, so the right hand wins.
    A lone left hand is mirrored by negating x.

    Returns:
        Array of shape (63,); zeros when neither side is found
    """
    right = find_hand(hands, RIGHT)
    if right is not None:
        return _flatten(right)

    left = find_hand(hands, LEFT)
    if left is not None:
        keypoints = _flatten(left).reshape(NUM_LANDMARKS, 3).copy()
        keypoints[:, 0] = -keypoints[:, 0]
        return keypoints.reshape(-1)

    return np.zeros(HAND_SIZE, dtype=np.float32)
