"""Opaque gesture predictors and output decoding."""

from .predictor import Predictor, TorchPredictor
from .decoding import Prediction, decode_prediction

__all__ = [
    "Predictor",
    "TorchPredictor",
    "Prediction",
    "decode_prediction",
]
