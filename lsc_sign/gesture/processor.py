"""
Keypoints Processor

Stateful facade over the pure gesture state machine. The host calls
``process_frame`` once per camera tick, checks the two readiness
predicates, runs the matching predictor and then calls
``activate_cooldown``.

Usage:
    from lsc_sign.gesture.processor import KeypointsProcessor

    processor = KeypointsProcessor(config.processing)
    processor.process_frame(hands)
    if processor.can_predict_static():
        features = processor.get_static_prediction_data(hands)
"""

import numpy as np
from typing import Optional, Sequence

from ..hand.keypoints import extract_hand_keypoints_static
from ..hand.landmarks import HandDetection
from ..utils.config import ProcessingConfig
from ..utils.logging_utils import get_logger
from . import state as sm
from .sequence import normalize_sequence

logger = get_logger(__name__)


class KeypointsProcessor:
    """
    Buffers per-frame keypoints and decides when a letter pose has
    stabilised or a word gesture has finished.

    Owned by a single caller; not safe to share between threads.
    """

    def __init__(self, config: Optional[ProcessingConfig] = None):
        """
        Args:
            config: Processing thresholds (defaults when omitted)
        """
        self.config = config or ProcessingConfig()
        self.state = sm.ProcessorState()

        logger.debug(
            f"KeypointsProcessor ready (static={self.config.static_frames_required}, "
            f"dynamic_min={self.config.dynamic_min_frames}, "
            f"cooldown={self.config.prediction_cooldown})"
        )

    @property
    def sequence_buffer(self):
        return self.state.sequence_buffer

    @property
    def static_counter(self) -> int:
        return self.state.static_counter

    @property
    def cooldown_counter(self) -> int:
        return self.state.cooldown_counter

    @property
    def hands_present(self) -> bool:
        return self.state.hands_present

    @property
    def hands_were_present(self) -> bool:
        return self.state.hands_were_present

    def process_frame(self, hands: Optional[Sequence[HandDetection]]) -> sm.FrameSignals:
        """Advance the state machine by one frame and return its signals."""
        self.state, signals = sm.advance(self.state, hands, self.config)
        return signals

    def can_predict_static(self) -> bool:
        return sm.can_predict_static(self.state, self.config)

    def can_predict_dynamic(self) -> bool:
        return sm.can_predict_dynamic(self.state, self.config)

    def get_static_prediction_data(
        self,
        hands: Optional[Sequence[HandDetection]]
    ) -> Optional[np.ndarray]:
        """
        Letter predictor input for the current frame.

        Returns:
            (63,) vector scaled by its maximum, or None when there is no
            usable hand signal
        """
        if not hands:
            return None

        keypoints = extract_hand_keypoints_static(hands)
        max_val = float(np.max(keypoints))
        if not np.isfinite(max_val) or max_val <= 0:
            return None

        return (keypoints / max_val).astype(np.float32)

    def get_dynamic_prediction_data(self) -> Optional[np.ndarray]:
        """
        Word predictor input built from the buffered gesture.

        Returns:
            (model_frames, 126) sequence, or None when the buffer is too short
        """
        buffer = self.state.sequence_buffer
        if len(buffer) < self.config.dynamic_min_frames:
            return None

        normalized = normalize_sequence(np.stack(buffer), self.config.model_frames)
        logger.debug(
            f"Dynamic sequence: {len(buffer)} -> {normalized.shape[0]} frames "
            f"x {normalized.shape[1]} keypoints"
        )
        return normalized

    def activate_cooldown(self):
        self.state = sm.activate_cooldown(self.state, self.config)

    def reset_dynamic_state(self):
        self.state = sm.reset_dynamic_state(self.state)

    def get_system_state(self) -> sm.SystemState:
        return sm.describe(self.state, self.config)

    def clear_all(self):
        """Drop every counter, flag and buffered frame."""
        self.state = sm.ProcessorState()
        logger.debug("Processor cleared")
