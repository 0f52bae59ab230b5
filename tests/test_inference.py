"""Tests for predictor and decoding module."""

import pytest
import numpy as np
import torch
import torch.nn as nn
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from lsc_sign.inference.predictor import Predictor, TorchPredictor
from lsc_sign.inference.decoding import Prediction, decode_prediction


class MeanPool(nn.Module):
    """(batch, frames, width) -> (batch, width) by averaging frames."""

    def forward(self, x):
        return x.mean(dim=1)


class TestDecodePrediction:
    """Tests for decode_prediction."""

    def test_accepted(self):
        result = decode_prediction(np.array([0.05, 0.9, 0.05]), ["A", "B", "C"], 0.8)

        assert isinstance(result, Prediction)
        assert result.label == "B"
        assert result.text == "B"
        assert result.confidence == pytest.approx(0.9)
        assert result.accepted

    def test_below_threshold(self):
        result = decode_prediction([0.5, 0.3, 0.2], ["A", "B", "C"], 0.8)

        assert result.label == "A"
        assert not result.accepted

    def test_threshold_is_inclusive(self):
        result = decode_prediction([0.7, 0.3], ["hola", "gracias"], 0.7, kind="dynamic")
        assert result.accepted
        assert result.kind == "dynamic"

    def test_words_text_lookup(self):
        words = {"como_estas": "¿CÓMO ESTÁS?"}

        result = decode_prediction([0.1, 0.9], ["hola", "como_estas"], 0.7, words)
        assert result.text == "¿CÓMO ESTÁS?"

        result = decode_prediction([0.9, 0.1], ["hola", "como_estas"], 0.7, words)
        assert result.text == "HOLA"

    def test_index_without_label(self):
        result = decode_prediction([0.0, 0.1, 0.9], ["A", "B"], 0.5)

        assert result.label is None
        assert not result.accepted

    def test_empty_probabilities(self):
        with pytest.raises(ValueError):
            decode_prediction([], ["A"], 0.5)


class TestTorchPredictor:
    """Tests for TorchPredictor class."""

    def test_base_predictor_is_abstract(self):
        with pytest.raises(NotImplementedError):
            Predictor().predict(np.zeros(3))

    def test_static_shape(self):
        torch.manual_seed(0)
        model = nn.Sequential(nn.Linear(63, 21), nn.Softmax(dim=-1))
        predictor = TorchPredictor(model)

        probs = predictor.predict(np.random.rand(63).astype(np.float32))

        assert probs.shape == (21,)
        assert probs.sum() == pytest.approx(1.0, abs=1e-5)

    def test_sequence_input(self):
        predictor = TorchPredictor(MeanPool())
        sequence = np.ones((40, 6), dtype=np.float32) * np.arange(6)

        probs = predictor.predict(sequence)

        assert probs.shape == (6,)
        assert np.allclose(probs, np.arange(6))

    def test_apply_softmax(self):
        predictor = TorchPredictor(nn.Identity(), apply_softmax=True)

        probs = predictor.predict(np.array([0.0, 0.0, 0.0, 0.0]))

        assert np.allclose(probs, 0.25)

    def test_model_in_eval_mode(self):
        model = nn.Sequential(nn.Linear(4, 2), nn.Dropout(0.5))
        TorchPredictor(model)
        assert not model.training

    def test_load_torchscript(self, tmp_path):
        model = nn.Sequential(nn.Linear(63, 3), nn.Softmax(dim=-1))
        path = tmp_path / "static.pt"
        torch.jit.script(model).save(str(path))

        predictor = TorchPredictor.load(path)
        probs = predictor.predict(np.zeros(63, dtype=np.float32))

        assert probs.shape == (3,)

    def test_load_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            TorchPredictor.load(tmp_path / "missing.pt")


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
