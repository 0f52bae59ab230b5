"""
Sign-to-Text Session

Drives the keypoint processor frame by frame, invokes the letter and word
predictors when the processor signals readiness, and keeps the running
sentence.

Usage:
    from lsc_sign.translator import SignToTextSession

    session = SignToTextSession.from_config(config)
    for frame, hands in detector.iter_frames(0):
        prediction = session.process_frame(hands)
    print(session.sentence_text())
"""

from typing import Callable, List, Optional, Sequence

from .gesture.processor import KeypointsProcessor
from .gesture.state import SystemState
from .hand.landmarks import HandDetection
from .inference.decoding import Prediction, decode_prediction
from .inference.predictor import Predictor, TorchPredictor
from .utils.config import Config
from .utils.logging_utils import get_logger

logger = get_logger(__name__)


class SignToTextSession:
    """
    Host loop around one KeypointsProcessor.

    After every prediction attempt (accepted, rejected or failed) the
    processor cooldown is activated, so a single gesture produces at most
    one prediction.
    """

    def __init__(
        self,
        config: Optional[Config] = None,
        static_predictor: Optional[Predictor] = None,
        dynamic_predictor: Optional[Predictor] = None,
        speak: Optional[Callable[[str], None]] = None
    ):
        """
        Args:
            config: Full configuration (defaults when omitted)
            static_predictor: Letter predictor, (63,) -> probabilities
            dynamic_predictor: Word predictor, (frames, 126) -> probabilities
            speak: Called with the text of every accepted prediction
        """
        self.config = config or Config()
        self.processor = KeypointsProcessor(self.config.processing)
        self.static_predictor = static_predictor
        self.dynamic_predictor = dynamic_predictor
        self.speak = speak

        self._sentence: List[str] = []
        self.frame_count = 0

    @classmethod
    def from_config(
        cls,
        config: Config,
        speak: Optional[Callable[[str], None]] = None
    ) -> 'SignToTextSession':
        """Build a session with predictors loaded from ``config.models``."""
        models = config.models
        static_predictor = None
        dynamic_predictor = None

        if models.static_path:
            static_predictor = TorchPredictor.load(
                models.static_path, apply_softmax=models.apply_softmax, device=models.device
            )
        if models.dynamic_path:
            dynamic_predictor = TorchPredictor.load(
                models.dynamic_path, apply_softmax=models.apply_softmax, device=models.device
            )

        return cls(config, static_predictor, dynamic_predictor, speak=speak)

    @property
    def sentence(self) -> List[str]:
        """Recognised words, newest first."""
        return list(self._sentence)

    @property
    def system_state(self) -> SystemState:
        return self.processor.get_system_state()

    def process_frame(
        self,
        hands: Optional[Sequence[HandDetection]]
    ) -> Optional[Prediction]:
        """
        Feed one frame of detections.

        Returns:
            The prediction made on this frame, if any (accepted or not)
        """
        self.frame_count += 1
        signals = self.processor.process_frame(hands)

        if signals.can_predict_static:
            return self._predict_static(hands)
        if signals.can_predict_dynamic:
            return self._predict_dynamic()
        return None

    def _predict_static(self, hands) -> Optional[Prediction]:
        features = self.processor.get_static_prediction_data(hands)
        if features is None:
            # Nothing usable in this frame; keep waiting on the held pose
            return None

        recognition = self.config.recognition
        prediction = self._run(
            self.static_predictor, features, recognition.static_classes,
            recognition.static_threshold, "static"
        )
        self.processor.activate_cooldown()
        return prediction

    def _predict_dynamic(self) -> Optional[Prediction]:
        features = self.processor.get_dynamic_prediction_data()
        prediction = None

        if features is not None:
            recognition = self.config.recognition
            prediction = self._run(
                self.dynamic_predictor, features, recognition.dynamic_classes,
                recognition.dynamic_threshold, "dynamic"
            )

        # The finished episode is consumed either way
        self.processor.activate_cooldown()
        return prediction

    def _run(
        self,
        predictor: Optional[Predictor],
        features,
        classes: Sequence[str],
        threshold: float,
        kind: str
    ) -> Optional[Prediction]:
        if predictor is None:
            logger.debug(f"No {kind} predictor configured, skipping")
            return None

        try:
            probabilities = predictor.predict(features)
            prediction = decode_prediction(
                probabilities, classes, threshold,
                words_text=self.config.recognition.words_text, kind=kind
            )
        except Exception:
            logger.exception(f"{kind} prediction failed at frame {self.frame_count}")
            return None

        logger.info(
            f"[{kind.upper()}] {prediction.text or '?'} "
            f"({prediction.confidence * 100:.2f}%)"
            f"{'' if prediction.accepted else ' - rejected'}"
        )

        if prediction.accepted:
            self._push(prediction.text)

        return prediction

    def _push(self, text: str):
        limit = self.config.recognition.max_sentence_words
        self._sentence = [text] + self._sentence[:max(0, limit - 1)]

        if self.speak is not None:
            try:
                self.speak(text)
            except Exception:
                logger.exception(f"Speech output failed for '{text}'")

    def sentence_text(self) -> str:
        """Sentence in reading order (oldest word first)."""
        return " ".join(reversed(self._sentence))

    def speak_sentence(self) -> Optional[str]:
        """Send the whole sentence to the speech hook."""
        text = self.sentence_text()
        if not text or self.speak is None:
            return None

        try:
            self.speak(text)
        except Exception:
            logger.exception("Speech output failed for the sentence")
            return None
        return text

    def clear_sentence(self):
        self._sentence = []
        logger.info("Sentence cleared")

    def reset(self):
        """Stop the current gesture episode and drop all processor state."""
        self.processor.clear_all()
        self.frame_count = 0
