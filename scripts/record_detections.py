#!/usr/bin/env python
"""
Detection Recording Script

Runs MediaPipe Hands over one or more videos and stores the per-frame
detections as JSON, so sessions can later be replayed without a camera:

    python -m lsc_sign.pipeline --input data/recordings/hola.json

Usage:
    python scripts/record_detections.py --config configs/default.yaml --videos clips/*.mp4
"""

import argparse
from pathlib import Path
import json
from tqdm import tqdm
import sys

sys.path.insert(0, str(Path(__file__).parent.parent))

from lsc_sign.hand.landmarks import DetectionLoader
from lsc_sign.hand.live_detector import LiveHandDetector, LiveDetectionConfig
from lsc_sign.utils.config import Config, load_config
from lsc_sign.utils.logging_utils import setup_logging, get_logger

logger = get_logger(__name__)


def record_video(
    video_path: Path,
    detection_config: LiveDetectionConfig,
    loader: DetectionLoader,
    output_dir: Path,
    max_frames=None
) -> dict:
    """Record a single video."""
    result = {
        'video': str(video_path),
        'success': False,
        'error': None
    }

    try:
        frames = []
        with LiveHandDetector(detection_config) as detector:
            for _, hands in detector.iter_frames(str(video_path), max_frames):
                frames.append(hands)

        output_path = output_dir / f"{video_path.stem}.json"
        loader.save(frames, output_path)

        result['frames'] = len(frames)
        result['frames_with_hands'] = sum(1 for hands in frames if hands)
        result['output_path'] = str(output_path)
        result['success'] = True

    except (IOError, OSError) as e:
        result['error'] = str(e)
        logger.error(f"Error recording {video_path}: {e}")

    return result


def main():
    parser = argparse.ArgumentParser(description="Record hand detections from videos")
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Configuration file"
    )
    parser.add_argument(
        "--videos",
        type=str,
        nargs="+",
        required=True,
        help="Video files to record"
    )
    parser.add_argument(
        "--output_dir",
        type=str,
        default="./data/recordings",
        help="Output directory"
    )
    parser.add_argument(
        "--max_frames",
        type=int,
        default=None,
        help="Maximum frames per video"
    )

    args = parser.parse_args()

    setup_logging(tqdm_compatible=True)
    config = load_config(args.config) if args.config else Config()
    output_dir = Path(args.output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    detection_config = LiveDetectionConfig.from_config(config.detection)
    loader = DetectionLoader()

    all_results = []
    for video in tqdm(args.videos, desc="Recording"):
        all_results.append(
            record_video(Path(video), detection_config, loader, output_dir, args.max_frames)
        )

    # Summary
    success_count = sum(1 for r in all_results if r['success'])
    logger.info("Recording complete!")
    logger.info(f"Success: {success_count}/{len(all_results)}")

    summary_path = output_dir / "recording_summary.json"
    with open(summary_path, 'w') as f:
        json.dump(all_results, f, indent=2)
    logger.info(f"Summary saved to: {summary_path}")


if __name__ == "__main__":
    main()
