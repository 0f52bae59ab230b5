"""
LSC Sign-to-Text Pipeline

Main entry point: runs a recognition session over a camera, a video file
or a recorded detections JSON.

Usage:
    python -m lsc_sign.pipeline --config configs/default.yaml --input 0 --display --speak
    python -m lsc_sign.pipeline --input recording.json --static-model letters.pt
"""

import argparse
import json
import logging
from dataclasses import asdict
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from tqdm import tqdm

from .hand.landmarks import DetectionLoader, HandDetection
from .inference.decoding import Prediction
from .translator import SignToTextSession
from .utils.config import Config, config_to_dict, load_config, merge_configs
from .utils.logging_utils import setup_logging, get_logger

logger = get_logger(__name__)


def apply_overrides(
    config: Config,
    static_model: Optional[str] = None,
    dynamic_model: Optional[str] = None,
    speak: bool = False
) -> Config:
    """Return ``config`` with command-line overrides layered on top."""
    overrides: Dict = {}
    if static_model:
        overrides.setdefault('models', {})['static_path'] = static_model
    if dynamic_model:
        overrides.setdefault('models', {})['dynamic_path'] = dynamic_model
    if speak:
        overrides['speech'] = {'enabled': True}

    if not overrides:
        return config
    return Config.from_dict(merge_configs(config_to_dict(config), overrides))


def build_session(config: Config) -> SignToTextSession:
    """Session with predictors from config and speech output when enabled."""
    speak = None
    if config.speech.enabled:
        from .speech import SpeechEngine
        speak = SpeechEngine.from_config(config).speak
    return SignToTextSession.from_config(config, speak=speak)


def run_recorded(
    session: SignToTextSession,
    frames: Sequence[Sequence[HandDetection]],
    show_progress: bool = True
) -> List[Dict]:
    """
    Replay recorded detections through a session.

    Returns:
        One record per prediction made (frame index + prediction fields)
    """
    records = []
    iterator = tqdm(frames, desc="Replaying", disable=not show_progress)
    for frame_idx, hands in enumerate(iterator):
        prediction = session.process_frame(hands)
        if prediction is not None:
            records.append(_record(frame_idx, prediction))
    return records


def run_live(
    session: SignToTextSession,
    source,
    config: Config,
    display: bool = False,
    max_frames: Optional[int] = None
) -> List[Dict]:
    """
    Run a session on a camera index or video path with MediaPipe.

    Preview keys: q quits, c clears the sentence, s speaks it.
    """
    import cv2
    from .display.overlay import draw_state_overlay
    from .hand.live_detector import LiveHandDetector, LiveDetectionConfig

    records = []
    delay = max(1, int(config.processing.frame_interval_ms))

    with LiveHandDetector(LiveDetectionConfig.from_config(config.detection)) as detector:
        for frame_idx, (frame, hands) in enumerate(detector.iter_frames(source, max_frames)):
            prediction = session.process_frame(hands)
            if prediction is not None:
                records.append(_record(frame_idx, prediction))

            if display:
                preview = draw_state_overlay(
                    frame, session.system_state, session.sentence_text(), hands
                )
                cv2.imshow("LSC", preview)
                key = cv2.waitKey(delay) & 0xFF
                if key == ord('q'):
                    break
                if key == ord('c'):
                    session.clear_sentence()
                if key == ord('s'):
                    session.speak_sentence()

    if display:
        cv2.destroyAllWindows()

    return records


def _record(frame_idx: int, prediction: Prediction) -> Dict:
    record = asdict(prediction)
    record['frame'] = frame_idx
    return record


def _parse_source(value: str):
    return int(value) if value.isdigit() else value


def main():
    """Main entry point for CLI."""
    parser = argparse.ArgumentParser(
        description="Colombian Sign Language (LSC) to text"
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Configuration file (built-in defaults when omitted)"
    )
    parser.add_argument(
        "--input",
        type=str,
        default="0",
        help="Camera index, video file or recorded detections (.json)"
    )
    parser.add_argument(
        "--static-model",
        type=str,
        default=None,
        help="TorchScript letter model (overrides config)"
    )
    parser.add_argument(
        "--dynamic-model",
        type=str,
        default=None,
        help="TorchScript word model (overrides config)"
    )
    parser.add_argument(
        "--output",
        type=str,
        default=None,
        help="Write predictions to this JSON file"
    )
    parser.add_argument(
        "--max-frames",
        type=int,
        default=None,
        help="Stop after this many frames"
    )
    parser.add_argument(
        "--display",
        action="store_true",
        help="Show the live preview window"
    )
    parser.add_argument(
        "--speak",
        action="store_true",
        help="Speak accepted letters and words (needs pyttsx3)"
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Verbose output"
    )

    args = parser.parse_args()

    recorded = args.input.lower().endswith(".json")
    setup_logging(
        level=logging.DEBUG if args.verbose else logging.INFO,
        tqdm_compatible=recorded
    )

    config = load_config(args.config) if args.config else Config()
    config = apply_overrides(
        config, args.static_model, args.dynamic_model, speak=args.speak
    )

    logger.info("LSC Sign-to-Text Pipeline")
    logger.info(f"Config: {args.config or 'defaults'}")
    logger.info(f"Input: {args.input}")

    session = build_session(config)

    if recorded:
        frames = DetectionLoader().load(args.input)
        if args.max_frames:
            frames = frames[:args.max_frames]
        records = run_recorded(session, frames)
    else:
        records = run_live(
            session, _parse_source(args.input), config,
            display=args.display, max_frames=args.max_frames
        )

    accepted = sum(1 for r in records if r['accepted'])
    logger.info(f"Frames: {session.frame_count} | Predictions: {len(records)} | Accepted: {accepted}")
    logger.info(f"Sentence: {session.sentence_text()}")

    if args.output:
        output_path = Path(args.output)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, 'w', encoding='utf-8') as f:
            json.dump({
                'sentence': session.sentence_text(),
                'predictions': records
            }, f, indent=2, ensure_ascii=False)
        logger.info(f"Predictions saved to: {output_path}")


if __name__ == "__main__":
    main()
