"""
Prediction decoding.

Turns a predictor's probability vector into a label, its display text and
an accept/reject decision against a confidence threshold.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Sequence

import numpy as np


@dataclass
class Prediction:
    kind: str                   # 'static' or 'dynamic'
    label: Optional[str]
    text: str
    confidence: float
    accepted: bool


def decode_prediction(
    probabilities: np.ndarray,
    classes: Sequence[str],
    threshold: float,
    words_text: Optional[Dict[str, str]] = None,
    kind: str = "static",
) -> Prediction:
    """
    Pick the most likely class.

    Args:
        probabilities: 1-D probability vector from a predictor.
        classes: Label for each output index.
        threshold: Minimum confidence for the prediction to be accepted.
        words_text: Optional label -> display text mapping.
        kind: Which predictor produced the vector.

    Returns:
        Prediction; an index with no label in ``classes`` is never accepted.
    """
    probs = np.asarray(probabilities, dtype=np.float64).reshape(-1)
    if probs.size == 0:
        raise ValueError("Empty probability vector")

    idx = int(np.argmax(probs))
    confidence = float(probs[idx])

    label = classes[idx] if idx < len(classes) else None
    if label is None:
        return Prediction(kind=kind, label=None, text="", confidence=confidence, accepted=False)

    text = (words_text or {}).get(label, label.upper())
    return Prediction(
        kind=kind,
        label=label,
        text=text,
        confidence=confidence,
        accepted=confidence >= threshold,
    )
