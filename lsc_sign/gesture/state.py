"""
Gesture State Machine

Explicit per-frame state of the keypoint processor and the pure
transition functions over it. Every function returns a new state; nothing
here mutates its input.

Modes:
    WAITING        no hands yet, or the episode was reset
    ACCUMULATING   hands present and moving
    STATIC_READY   hands held still for ``static_frames_required`` frames
    DYNAMIC_READY  hands left after a long enough motion sequence
    COOLDOWN       predictions suppressed after a result

Usage:
    from lsc_sign.gesture.state import ProcessorState, advance

    state = ProcessorState()
    state, signals = advance(state, hands, config.processing)
    if signals.can_predict_static:
        ...
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional, Sequence, Tuple

import numpy as np

from ..hand.keypoints import extract_keypoints
from ..hand.landmarks import HandDetection
from ..utils.config import ProcessingConfig
from .sequence import calculate_movement


class GestureMode(str, Enum):
    WAITING = "WAITING"
    ACCUMULATING = "ACCUMULATING"
    STATIC_READY = "STATIC_READY"
    DYNAMIC_READY = "DYNAMIC_READY"
    COOLDOWN = "COOLDOWN"


# RGB display colours per mode
MODE_COLORS = {
    GestureMode.COOLDOWN: (100, 100, 255),
    GestureMode.STATIC_READY: (0, 255, 0),
    GestureMode.ACCUMULATING: (255, 255, 0),
    GestureMode.DYNAMIC_READY: (255, 0, 0),
    GestureMode.WAITING: (128, 128, 128),
}


@dataclass(frozen=True, eq=False)
class ProcessorState:
    """Snapshot of the processor after a frame."""
    static_counter: int = 0
    cooldown_counter: int = 0
    hands_present: bool = False
    hands_were_present: bool = False
    previous_keypoints: Optional[np.ndarray] = None
    sequence_buffer: Tuple[np.ndarray, ...] = ()

    @property
    def buffer_length(self) -> int:
        return len(self.sequence_buffer)


@dataclass(frozen=True)
class FrameSignals:
    """Readiness signals computed after a transition."""
    movement: float
    can_predict_static: bool
    can_predict_dynamic: bool


@dataclass(frozen=True)
class SystemState:
    """Descriptive snapshot for display."""
    mode: GestureMode
    color: Tuple[int, int, int]
    details: str


def advance(
    state: ProcessorState,
    hands: Optional[Sequence[HandDetection]],
    config: ProcessingConfig
) -> Tuple[ProcessorState, FrameSignals]:
    """
    Apply one frame of hand detections.

    Args:
        state: State before the frame
        hands: Detections for this frame (empty or None when no hands)
        config: Processing thresholds

    Returns:
        (new_state, signals)
    """
    cooldown = max(0, state.cooldown_counter - 1)
    movement = 0.0

    if hands:
        keypoints = extract_keypoints(hands)
        movement = calculate_movement(keypoints, state.previous_keypoints)

        if movement < config.movement_threshold:
            static_counter = state.static_counter + 1
        else:
            static_counter = 0

        # Only the newest max_buffer_frames frames are kept
        limit = max(1, config.max_buffer_frames)
        buffer = state.sequence_buffer[-(limit - 1):] if limit > 1 else ()

        new_state = replace(
            state,
            static_counter=static_counter,
            cooldown_counter=cooldown,
            hands_present=True,
            hands_were_present=True,
            previous_keypoints=keypoints,
            sequence_buffer=buffer + (keypoints,),
        )
    else:
        # Buffer and episode flag survive so a finished motion can be evaluated
        new_state = replace(
            state,
            static_counter=0,
            cooldown_counter=cooldown,
            hands_present=False,
            previous_keypoints=None,
        )

    signals = FrameSignals(
        movement=movement,
        can_predict_static=can_predict_static(new_state, config),
        can_predict_dynamic=can_predict_dynamic(new_state, config),
    )
    return new_state, signals


def can_predict_static(state: ProcessorState, config: ProcessingConfig) -> bool:
    return (
        state.hands_present
        and state.static_counter >= config.static_frames_required
        and state.cooldown_counter == 0
    )


def can_predict_dynamic(state: ProcessorState, config: ProcessingConfig) -> bool:
    return (
        not state.hands_present
        and state.hands_were_present
        and state.buffer_length >= config.dynamic_min_frames
        and state.cooldown_counter == 0
    )


def reset_dynamic_state(state: ProcessorState) -> ProcessorState:
    """End the gesture episode: drop the buffer and the episode flag."""
    return replace(state, hands_were_present=False, sequence_buffer=())


def activate_cooldown(state: ProcessorState, config: ProcessingConfig) -> ProcessorState:
    """
    Start the post-prediction suppression window.

    With hands absent the gesture episode ends; with hands present the
    static counter restarts so the same pose does not fire again.
    """
    state = replace(state, cooldown_counter=config.prediction_cooldown)
    if not state.hands_present:
        state = reset_dynamic_state(state)
    else:
        state = replace(state, static_counter=0)
    return state


def describe(state: ProcessorState, config: ProcessingConfig) -> SystemState:
    """Human-readable mode, colour and detail line for the current state."""
    if state.cooldown_counter > 0:
        mode = GestureMode.COOLDOWN
        details = f"Esperando {state.cooldown_counter} frames..."
    elif state.hands_present:
        if state.static_counter >= config.static_frames_required:
            mode = GestureMode.STATIC_READY
            details = f"Frames estáticos: {state.static_counter} - LISTO PARA PREDICCIÓN"
        else:
            mode = GestureMode.ACCUMULATING
            details = (
                f"Buffer: {state.buffer_length} | "
                f"Estáticos: {state.static_counter}/{config.static_frames_required}"
            )
    elif state.hands_were_present and state.buffer_length >= config.dynamic_min_frames:
        mode = GestureMode.DYNAMIC_READY
        details = f"Secuencia de {state.buffer_length} frames - EVALUANDO"
    else:
        mode = GestureMode.WAITING
        details = "Muestra tus manos para comenzar..."

    return SystemState(mode=mode, color=MODE_COLORS[mode], details=details)
