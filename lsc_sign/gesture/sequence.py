"""
Keypoint Sequence Utilities

Frame-to-frame movement scoring and fixed-length resampling of gesture
sequences for the word predictor.

Usage:
    from lsc_sign.gesture.sequence import normalize_sequence

    model_input = normalize_sequence(buffer, target_length=40)  # (40, 126)
"""

import numpy as np
from scipy.interpolate import interp1d
from typing import Optional, Sequence, Union

ArrayLike = Union[np.ndarray, Sequence[Sequence[float]]]


def calculate_movement(
    current: Optional[np.ndarray],
    previous: Optional[np.ndarray]
) -> float:
    """
    Mean absolute per-coordinate difference between two frame vectors.

    Returns 0.0 when there is no previous frame or the vectors are not
    comparable (different lengths).
    """
    if current is None or previous is None:
        return 0.0

    current = np.asarray(current, dtype=np.float64).reshape(-1)
    previous = np.asarray(previous, dtype=np.float64).reshape(-1)

    if current.size == 0 or current.size != previous.size:
        return 0.0

    return float(np.mean(np.abs(current - previous)))


def normalize_sequence(sequence: ArrayLike, target_length: int) -> np.ndarray:
    """
    Resample a variable-length sequence to exactly ``target_length`` frames.

    Shorter sequences are linearly interpolated at positions
    ``i * (n - 1) / (target - 1)``; longer ones are subsampled with stride
    ``n / target``.

    Args:
        sequence: Shape (n, width) frames
        target_length: Number of output frames

    Returns:
        Array of shape (target_length, width); (0, width) for empty input
    """
    if target_length < 1:
        raise ValueError(f"target_length must be positive, got {target_length}")

    frames = np.asarray(sequence, dtype=np.float32)
    if frames.size == 0:
        width = frames.shape[1] if frames.ndim == 2 else 0
        return np.zeros((0, width), dtype=np.float32)
    if frames.ndim == 1:
        frames = frames[np.newaxis, :]

    n = frames.shape[0]

    if n == target_length:
        return frames.copy()

    if n < target_length:
        if n == 1:
            return np.repeat(frames, target_length, axis=0)

        positions = np.arange(target_length) * (n - 1) / (target_length - 1)
        positions = np.clip(positions, 0, n - 1)
        f = interp1d(np.arange(n), frames, kind='linear', axis=0)
        return f(positions).astype(np.float32)

    # Uniform subsampling
    step = n / target_length
    indices = np.floor(np.arange(target_length) * step).astype(int)
    indices = np.minimum(indices, n - 1)
    return frames[indices].copy()
