"""
Display Overlay

Draws the processor state, detected hands and the running sentence on
camera frames for the live preview.

Usage:
    from lsc_sign.display.overlay import draw_hand, draw_state_overlay

    frame = draw_state_overlay(frame, session.system_state, session.sentence_text())
"""

import cv2
import numpy as np
from typing import Optional, Sequence

from ..gesture.state import SystemState
from ..hand.landmarks import HandDetection, LEFT


# MediaPipe hand connections
HAND_CONNECTIONS = [
    (0, 1), (1, 2), (2, 3), (3, 4),  # Thumb
    (0, 5), (5, 6), (6, 7), (7, 8),  # Index
    (0, 9), (9, 10), (10, 11), (11, 12),  # Middle
    (0, 13), (13, 14), (14, 15), (15, 16),  # Ring
    (0, 17), (17, 18), (18, 19), (19, 20),  # Pinky
    (5, 9), (9, 13), (13, 17)  # Palm
]

FINGERTIP_INDICES = [4, 8, 12, 16, 20]


def _bgr(rgb) -> tuple:
    r, g, b = rgb
    return (int(b), int(g), int(r))


def draw_hand(frame: np.ndarray, hand: HandDetection, connections: bool = True) -> np.ndarray:
    """
    Draw one hand's landmarks on a BGR frame.

    Landmarks are normalised, so they are scaled by the frame size.

    Returns:
        Annotated copy of the frame
    """
    result = frame.copy()
    h, w = result.shape[:2]
    pts = [(int(x * w), int(y * h)) for x, y, _ in np.asarray(hand.landmarks)]

    bone_color = (200, 200, 200)
    tip_color = (255, 128, 0) if hand.side == LEFT else (0, 128, 255)

    if connections:
        for start, end in HAND_CONNECTIONS:
            cv2.line(result, pts[start], pts[end], bone_color, 2)

    for i, pt in enumerate(pts):
        if i in FINGERTIP_INDICES:
            cv2.circle(result, pt, 6, tip_color, -1)
        else:
            cv2.circle(result, pt, 3, (100, 100, 100), -1)

    return result


def draw_state_overlay(
    frame: np.ndarray,
    state: SystemState,
    sentence: str = "",
    hands: Optional[Sequence[HandDetection]] = None
) -> np.ndarray:
    """
    Draw the status bar (mode + details) and the sentence line.

    Args:
        frame: BGR image
        state: Processor snapshot from ``get_system_state``
        sentence: Text shown along the bottom edge
        hands: Optional detections to draw as well

    Returns:
        Annotated copy of the frame
    """
    result = frame.copy()
    for hand in hands or ():
        result = draw_hand(result, hand)

    h, w = result.shape[:2]
    color = _bgr(state.color)

    overlay = result.copy()
    cv2.rectangle(overlay, (0, 0), (w, 60), (0, 0, 0), -1)
    cv2.addWeighted(overlay, 0.5, result, 0.5, 0, result)
    cv2.rectangle(result, (0, 0), (w, 6), color, -1)

    cv2.putText(result, state.mode.value, (10, 28),
                cv2.FONT_HERSHEY_SIMPLEX, 0.7, color, 2)
    # Hershey fonts have no accented glyphs
    cv2.putText(result, _ascii(state.details), (10, 52),
                cv2.FONT_HERSHEY_SIMPLEX, 0.5, (255, 255, 255), 1)

    if sentence:
        cv2.rectangle(result, (0, h - 40), (w, h), (0, 0, 0), -1)
        cv2.putText(result, _ascii(sentence), (10, h - 12),
                    cv2.FONT_HERSHEY_SIMPLEX, 0.8, (255, 255, 255), 2)

    return result


def _ascii(text: str) -> str:
    table = str.maketrans("áéíóúÁÉÍÓÚñÑ¿¡", "aeiouAEIOUnN?!")
    return text.translate(table).encode("ascii", "replace").decode("ascii")
