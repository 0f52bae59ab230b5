"""Gesture state machine and sequence preparation module."""

from .sequence import calculate_movement, normalize_sequence
from .state import (
    GestureMode,
    ProcessorState,
    FrameSignals,
    SystemState,
    advance,
    activate_cooldown,
    reset_dynamic_state,
    describe,
)
from .processor import KeypointsProcessor

__all__ = [
    "calculate_movement",
    "normalize_sequence",
    "GestureMode",
    "ProcessorState",
    "FrameSignals",
    "SystemState",
    "advance",
    "activate_cooldown",
    "reset_dynamic_state",
    "describe",
    "KeypointsProcessor",
]
