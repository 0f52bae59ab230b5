"""Live preview drawing helpers."""

from .overlay import draw_hand, draw_state_overlay

__all__ = [
    "draw_hand",
    "draw_state_overlay",
]
