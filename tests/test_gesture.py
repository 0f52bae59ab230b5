"""Tests for gesture state machine and sequence module."""

import pytest
import numpy as np
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from lsc_sign.gesture.sequence import calculate_movement, normalize_sequence
from lsc_sign.gesture.state import (
    GestureMode,
    ProcessorState,
    advance,
    activate_cooldown,
    describe,
)
from lsc_sign.gesture.processor import KeypointsProcessor
from lsc_sign.hand.landmarks import HandDetection
from lsc_sign.utils.config import ProcessingConfig


def make_hand(side='Right', base=0.5):
    idx = np.arange(21, dtype=np.float32)
    landmarks = np.stack([base + idx / 100, base + idx / 200, idx / 1000], axis=1)
    return HandDetection(handedness=side, landmarks=landmarks.astype(np.float32))


@pytest.fixture
def config():
    return ProcessingConfig(
        movement_threshold=0.01,
        static_frames_required=15,
        prediction_cooldown=30,
        min_length_frames=10,
        model_frames=40
    )


class TestCalculateMovement:
    """Tests for movement scoring."""

    def test_identical_vectors(self):
        v = np.random.rand(126)
        assert calculate_movement(v, v.copy()) == 0.0

    def test_symmetric(self):
        rng = np.random.default_rng(0)
        a, b = rng.random(126), rng.random(126)
        assert calculate_movement(a, b) == pytest.approx(calculate_movement(b, a))

    def test_mean_absolute_difference(self):
        a = np.array([0.0, 1.0, 2.0, 3.0])
        b = np.array([1.0, 1.0, 0.0, 3.0])
        assert calculate_movement(a, b) == pytest.approx(0.75)

    def test_not_comparable(self):
        assert calculate_movement(np.ones(4), None) == 0.0
        assert calculate_movement(np.ones(4), np.ones(5)) == 0.0


class TestNormalizeSequence:
    """Tests for fixed-length resampling."""

    @pytest.fixture
    def sequence(self):
        # Frame k is filled with the value k
        return np.repeat(np.arange(10, dtype=np.float32)[:, np.newaxis], 4, axis=1)

    def test_equal_length_unchanged(self, sequence):
        result = normalize_sequence(sequence, 10)
        assert np.array_equal(result, sequence)
        assert result is not sequence

    def test_interpolation(self, sequence):
        result = normalize_sequence(sequence, 40)

        assert result.shape == (40, 4)
        assert np.allclose(result[0], 0)
        assert np.allclose(result[-1], 9)
        # Output i sits at source position i * 9 / 39
        assert np.allclose(result[1], 9 / 39, atol=1e-6)
        assert np.allclose(result[20], 20 * 9 / 39, atol=1e-5)

    def test_subsampling(self, sequence):
        result = normalize_sequence(sequence, 5)

        assert result.shape == (5, 4)
        assert np.allclose(result[:, 0], [0, 2, 4, 6, 8])

    def test_subsampling_uneven_stride(self):
        seq = np.arange(7, dtype=np.float32)[:, np.newaxis]
        result = normalize_sequence(seq, 3)
        assert np.allclose(result[:, 0], [0, 2, 4])

    def test_single_frame_repeated(self):
        result = normalize_sequence([[1.0, 2.0, 3.0]], 6)

        assert result.shape == (6, 3)
        assert np.allclose(result, [1.0, 2.0, 3.0])

    def test_always_target_length(self):
        rng = np.random.default_rng(1)
        for n in (1, 2, 5, 39, 40, 41, 100):
            seq = rng.random((n, 126))
            for target in (1, 5, 40):
                assert normalize_sequence(seq, target).shape == (target, 126)

    def test_list_input(self):
        seq = [[0.0, 0.0], [1.0, 2.0]]
        result = normalize_sequence(seq, 3)
        assert np.allclose(result[1], [0.5, 1.0])

    def test_empty(self):
        assert normalize_sequence(np.zeros((0, 126)), 40).shape == (0, 126)

    def test_invalid_target(self):
        with pytest.raises(ValueError):
            normalize_sequence([[1.0]], 0)


class TestStateTransitions:
    """Tests for the pure transition functions."""

    def test_advance_does_not_mutate(self, config):
        state = ProcessorState()
        new_state, _ = advance(state, [make_hand()], config)

        assert state.buffer_length == 0
        assert new_state.buffer_length == 1
        assert new_state.hands_present
        assert new_state.hands_were_present

    def test_movement_resets_static_counter(self, config):
        state, _ = advance(ProcessorState(), [make_hand(base=0.5)], config)
        state, _ = advance(state, [make_hand(base=0.5)], config)
        assert state.static_counter == 2

        state, signals = advance(state, [make_hand(base=0.7)], config)

        # x and y of the right hand moved by 0.2: 42 of 126 coordinates
        assert signals.movement == pytest.approx(0.2 / 3, rel=1e-4)
        assert state.static_counter == 0

    def test_absence_keeps_buffer(self, config):
        state = ProcessorState()
        for _ in range(3):
            state, _ = advance(state, [make_hand()], config)

        state, signals = advance(state, [], config)

        assert state.static_counter == 0
        assert state.previous_keypoints is None
        assert state.buffer_length == 3
        assert state.hands_were_present
        assert signals.movement == 0.0

    def test_cooldown_decrements_to_zero(self, config):
        state = ProcessorState(cooldown_counter=2)
        state, _ = advance(state, None, config)
        state, _ = advance(state, None, config)
        state, _ = advance(state, None, config)
        assert state.cooldown_counter == 0

    def test_activate_cooldown_with_hands_present(self, config):
        state = ProcessorState(static_counter=20, hands_present=True, hands_were_present=True,
                               sequence_buffer=(np.zeros(126),))
        state = activate_cooldown(state, config)

        assert state.cooldown_counter == 30
        assert state.static_counter == 0
        assert state.buffer_length == 1

    def test_activate_cooldown_with_hands_absent(self, config):
        state = ProcessorState(hands_present=False, hands_were_present=True,
                               sequence_buffer=(np.zeros(126),) * 8)
        state = activate_cooldown(state, config)

        assert state.cooldown_counter == 30
        assert state.buffer_length == 0
        assert not state.hands_were_present


class TestKeypointsProcessor:
    """Tests for KeypointsProcessor class."""

    def test_init(self, config):
        processor = KeypointsProcessor(config)

        assert processor.static_counter == 0
        assert processor.cooldown_counter == 0
        assert len(processor.sequence_buffer) == 0
        assert processor.config.dynamic_min_frames == 5

    def test_static_ready_after_required_frames(self, config):
        processor = KeypointsProcessor(config)
        hands = [make_hand()]

        ready = []
        for _ in range(20):
            processor.process_frame(hands)
            ready.append(processor.can_predict_static())

        assert ready.index(True) == 14  # frame 15
        assert all(ready[14:])
        assert not processor.can_predict_dynamic()

        processor.activate_cooldown()
        assert not processor.can_predict_static()
        assert processor.static_counter == 0

    def test_dynamic_ready_after_hands_leave(self, config):
        processor = KeypointsProcessor(config)

        for i in range(10):
            processor.process_frame([make_hand(base=0.1 + 0.05 * i)])
            assert not processor.can_predict_dynamic()

        dynamic = []
        for _ in range(5):
            processor.process_frame([])
            dynamic.append(processor.can_predict_dynamic())
            assert not processor.can_predict_static()

        assert all(dynamic)
        assert len(processor.sequence_buffer) == 10

        processor.activate_cooldown()

        assert len(processor.sequence_buffer) == 0
        assert not processor.hands_were_present
        assert not processor.can_predict_dynamic()

    def test_short_gesture_not_dynamic(self, config):
        processor = KeypointsProcessor(config)
        for _ in range(4):
            processor.process_frame([make_hand()])
        processor.process_frame([])

        assert not processor.can_predict_dynamic()

    def test_cooldown_blocks_predictions(self, config):
        processor = KeypointsProcessor(config)
        for _ in range(15):
            processor.process_frame([make_hand()])
        processor.activate_cooldown()

        for _ in range(29):
            processor.process_frame([make_hand()])
            assert not processor.can_predict_static()

        processor.process_frame([make_hand()])
        assert processor.cooldown_counter == 0
        assert processor.can_predict_static()

    def test_predicates_never_both_true(self, config):
        rng = np.random.default_rng(42)
        processor = KeypointsProcessor(config)

        for _ in range(500):
            if rng.random() < 0.6:
                hands = [make_hand(base=0.5 + rng.choice([0.0, 0.0, 0.3]))]
            else:
                hands = []
            processor.process_frame(hands)

            static, dynamic = processor.can_predict_static(), processor.can_predict_dynamic()
            assert not (static and dynamic)
            if (static or dynamic) and rng.random() < 0.5:
                processor.activate_cooldown()

    def test_static_prediction_data(self, config):
        processor = KeypointsProcessor(config)
        hand = make_hand()

        features = processor.get_static_prediction_data([hand])

        assert features.shape == (63,)
        assert features.max() == pytest.approx(1.0)
        assert np.allclose(features * hand.landmarks.max(), hand.landmarks.reshape(-1), atol=1e-6)

    def test_static_prediction_data_without_signal(self, config):
        processor = KeypointsProcessor(config)
        empty = HandDetection(handedness='Right', landmarks=np.zeros((21, 3)))

        assert processor.get_static_prediction_data([]) is None
        assert processor.get_static_prediction_data([empty]) is None
        assert processor.get_static_prediction_data([make_hand('Unknown')]) is None

    def test_dynamic_prediction_data(self, config):
        processor = KeypointsProcessor(config)
        assert processor.get_dynamic_prediction_data() is None

        for i in range(12):
            processor.process_frame([make_hand('Left', 0.1), make_hand('Right', 0.2 + 0.01 * i)])

        data = processor.get_dynamic_prediction_data()

        assert data.shape == (40, 126)
        assert np.allclose(data[0], processor.sequence_buffer[0])
        assert np.allclose(data[-1], processor.sequence_buffer[-1])

    def test_system_state_modes(self, config):
        processor = KeypointsProcessor(config)
        assert processor.get_system_state().mode == GestureMode.WAITING

        processor.process_frame([make_hand()])
        state = processor.get_system_state()
        assert state.mode == GestureMode.ACCUMULATING
        assert state.color == (255, 255, 0)

        for _ in range(14):
            processor.process_frame([make_hand()])
        assert processor.get_system_state().mode == GestureMode.STATIC_READY

        processor.process_frame([])
        assert processor.get_system_state().mode == GestureMode.DYNAMIC_READY

        processor.activate_cooldown()
        state = processor.get_system_state()
        assert state.mode == GestureMode.COOLDOWN
        assert "30" in state.details

    def test_describe_is_pure(self, config):
        state = ProcessorState()
        assert describe(state, config).mode == GestureMode.WAITING

    def test_clear_all(self, config):
        processor = KeypointsProcessor(config)
        for _ in range(15):
            processor.process_frame([make_hand()])
        processor.activate_cooldown()

        processor.clear_all()

        assert processor.static_counter == 0
        assert processor.cooldown_counter == 0
        assert not processor.hands_present
        assert not processor.hands_were_present
        assert len(processor.sequence_buffer) == 0

    def test_buffer_bounded_while_spelling(self):
        config = ProcessingConfig(static_frames_required=3, prediction_cooldown=2,
                                  max_buffer_frames=60, model_frames=40)
        processor = KeypointsProcessor(config)

        for i in range(2000):
            hand = make_hand(base=0.5 if (i // 10) % 2 else 0.6)
            processor.process_frame([hand])
            if processor.can_predict_static():
                processor.activate_cooldown()
            assert len(processor.sequence_buffer) <= 60

        assert len(processor.sequence_buffer) == 60
        assert np.array_equal(processor.sequence_buffer[-1], processor.state.previous_keypoints)

        processor.process_frame([])
        data = processor.get_dynamic_prediction_data()
        assert data.shape == (40, 126)

    def test_buffer_keeps_newest_frames(self):
        config = ProcessingConfig(max_buffer_frames=5)
        processor = KeypointsProcessor(config)

        for i in range(8):
            processor.process_frame([make_hand(base=0.1 * i)])

        first = processor.sequence_buffer[0].reshape(2, 21, 3)
        assert len(processor.sequence_buffer) == 5
        assert first[1, 0, 1] == pytest.approx(0.3)

    def test_process_frame_returns_signals(self, config):
        processor = KeypointsProcessor(config)
        signals = processor.process_frame([make_hand()])

        assert signals.movement == 0.0
        assert not signals.can_predict_static
        assert not signals.can_predict_dynamic

    def test_reset_dynamic_state(self, config):
        processor = KeypointsProcessor(config)
        for _ in range(6):
            processor.process_frame([make_hand()])

        processor.reset_dynamic_state()

        assert len(processor.sequence_buffer) == 0
        assert not processor.hands_were_present


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
