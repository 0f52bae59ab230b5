"""
Gesture Predictors

Opaque classifiers for the two gesture kinds. The session only needs
"features in, probability distribution out"; the network behind it is a
TorchScript file or any ``nn.Module``.

    letter predictor: (63,) features       -> (num_letters,)
    word predictor:   (frames, 126) sequence -> (num_words,)

Usage:
    from lsc_sign.inference.predictor import TorchPredictor

    static_predictor = TorchPredictor.load("models/static_letters.pt")
    probs = static_predictor.predict(features)
"""

from pathlib import Path
from typing import Union

import numpy as np
import torch
import torch.nn as nn
import torch.nn.functional as F

from ..utils.logging_utils import get_logger

logger = get_logger(__name__)


class Predictor:
    """Interface: map one feature array to a 1-D probability vector."""

    def predict(self, features: np.ndarray) -> np.ndarray:
        raise NotImplementedError


class TorchPredictor(Predictor):
    """
    Runs a torch module on a single sample.

    A batch axis is added before the forward pass and removed afterwards.
    """

    def __init__(
        self,
        model: nn.Module,
        apply_softmax: bool = False,
        device: Union[str, torch.device] = "cpu"
    ):
        """
        Args:
            model: Module returning (1, num_classes) scores
            apply_softmax: Treat outputs as logits and convert them
            device: Device to run inference on
        """
        self.device = torch.device(device)
        self.model = model.to(self.device)
        self.model.eval()
        self.apply_softmax = apply_softmax

    @classmethod
    def load(
        cls,
        path: Union[str, Path],
        apply_softmax: bool = False,
        device: Union[str, torch.device] = "cpu"
    ) -> 'TorchPredictor':
        """Load a TorchScript model file."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Model file not found: {path}")

        model = torch.jit.load(str(path), map_location=device)
        logger.info(f"Loaded model from {path}")
        return cls(model, apply_softmax=apply_softmax, device=device)

    def predict(self, features: np.ndarray) -> np.ndarray:
        """
        Args:
            features: Single sample without batch axis

        Returns:
            Probabilities of shape (num_classes,)
        """
        x = torch.as_tensor(np.asarray(features, dtype=np.float32), device=self.device)
        x = x.unsqueeze(0)

        with torch.no_grad():
            output = self.model(x)
            if self.apply_softmax:
                output = F.softmax(output, dim=-1)

        return output.reshape(-1).cpu().numpy()
