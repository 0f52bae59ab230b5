"""
Configuration Management

Handles loading, merging and saving recognition configuration files.

Usage:
    from lsc_sign.utils.config import load_config

    config = load_config('configs/default.yaml')
"""

import yaml
from pathlib import Path
from typing import Dict, Any, Optional
from dataclasses import dataclass, field


DEFAULT_STATIC_CLASSES = [
    "A", "B", "C", "D", "E", "F", "I", "L", "M",
    "N", "O", "P", "Q", "R", "T", "U", "V", "W", "X", "Y", "K",
]

DEFAULT_DYNAMIC_CLASSES = [
    "gracias",
    "como_estas",
    "hola",
    "Buenos_dias",
    "Buenas_tardes",
    "Buenas_noches",
]

DEFAULT_WORDS_TEXT = {
    "gracias": "GRACIAS",
    "hola": "HOLA",
    "como_estas": "¿CÓMO ESTÁS?",
    "Buenos_dias": "BUENOS DÍAS",
    "Buenas_tardes": "BUENAS TARDES",
    "Buenas_noches": "BUENAS NOCHES",
}


@dataclass
class ProcessingConfig:
    """Keypoint processor configuration."""
    movement_threshold: float = 0.01
    static_frames_required: int = 15
    prediction_cooldown: int = 30
    min_length_frames: int = 10
    model_frames: int = 40
    max_buffer_frames: int = 120
    frame_interval_ms: int = 100

    @property
    def dynamic_min_frames(self) -> int:
        """Minimum buffered frames before a dynamic gesture is evaluated."""
        return max(5, self.min_length_frames // 2)


@dataclass
class RecognitionConfig:
    """Label sets and acceptance thresholds for the two predictors."""
    static_classes: list = field(default_factory=lambda: list(DEFAULT_STATIC_CLASSES))
    dynamic_classes: list = field(default_factory=lambda: list(DEFAULT_DYNAMIC_CLASSES))
    words_text: dict = field(default_factory=lambda: dict(DEFAULT_WORDS_TEXT))
    static_threshold: float = 0.8
    dynamic_threshold: float = 0.7
    max_sentence_words: int = 10


@dataclass
class DetectionConfig:
    """MediaPipe hand detection configuration."""
    model_complexity: int = 1
    max_num_hands: int = 2
    min_detection_confidence: float = 0.5
    min_tracking_confidence: float = 0.5
    frame_stride: int = 1
    flip_handedness: bool = False


@dataclass
class SpeechConfig:
    """Spoken output of recognised text."""
    enabled: bool = False
    rate: float = 0.8                   # multiplier of the engine default
    volume: float = 1.0


@dataclass
class ModelConfig:
    """Predictor model locations."""
    static_path: Optional[str] = None
    dynamic_path: Optional[str] = None
    apply_softmax: bool = False
    device: str = "cpu"


@dataclass
class Config:
    """Main configuration container."""
    project_name: str = "lsc-sign"
    version: str = "1.0.0"
    language: str = "es-ES"

    processing: ProcessingConfig = field(default_factory=ProcessingConfig)
    recognition: RecognitionConfig = field(default_factory=RecognitionConfig)
    detection: DetectionConfig = field(default_factory=DetectionConfig)
    models: ModelConfig = field(default_factory=ModelConfig)
    speech: SpeechConfig = field(default_factory=SpeechConfig)

    @classmethod
    def from_dict(cls, config_dict: Optional[Dict[str, Any]]) -> 'Config':
        """Create Config from dictionary."""
        config = cls()
        config_dict = config_dict or {}

        # Project settings
        project = config_dict.get('project', {})
        config.project_name = project.get('name', config.project_name)
        config.version = project.get('version', config.version)
        config.language = project.get('language', config.language)

        # Processing config
        processing = config_dict.get('processing', {})
        defaults = ProcessingConfig()
        config.processing = ProcessingConfig(
            movement_threshold=processing.get('movement_threshold', defaults.movement_threshold),
            static_frames_required=processing.get('static_frames_required', defaults.static_frames_required),
            prediction_cooldown=processing.get('prediction_cooldown', defaults.prediction_cooldown),
            min_length_frames=processing.get('min_length_frames', defaults.min_length_frames),
            model_frames=processing.get('model_frames', defaults.model_frames),
            max_buffer_frames=processing.get('max_buffer_frames', defaults.max_buffer_frames),
            frame_interval_ms=processing.get('frame_interval_ms', defaults.frame_interval_ms)
        )

        # Recognition config
        recognition = config_dict.get('recognition', {})
        thresholds = recognition.get('thresholds', {})
        config.recognition = RecognitionConfig(
            static_classes=recognition.get('static_classes', list(DEFAULT_STATIC_CLASSES)),
            dynamic_classes=recognition.get('dynamic_classes', list(DEFAULT_DYNAMIC_CLASSES)),
            words_text=recognition.get('words_text', dict(DEFAULT_WORDS_TEXT)),
            static_threshold=thresholds.get('static', 0.8),
            dynamic_threshold=thresholds.get('dynamic', 0.7),
            max_sentence_words=recognition.get('max_sentence_words', 10)
        )

        # Detection config
        detection = config_dict.get('detection', {})
        config.detection = DetectionConfig(
            model_complexity=detection.get('model_complexity', 1),
            max_num_hands=detection.get('max_num_hands', 2),
            min_detection_confidence=detection.get('min_detection_confidence', 0.5),
            min_tracking_confidence=detection.get('min_tracking_confidence', 0.5),
            frame_stride=detection.get('frame_stride', 1),
            flip_handedness=detection.get('flip_handedness', False)
        )

        # Model config
        models = config_dict.get('models', {})
        config.models = ModelConfig(
            static_path=models.get('static_path'),
            dynamic_path=models.get('dynamic_path'),
            apply_softmax=models.get('apply_softmax', False),
            device=models.get('device', 'cpu')
        )

        # Speech config
        speech = config_dict.get('speech', {})
        config.speech = SpeechConfig(
            enabled=speech.get('enabled', False),
            rate=speech.get('rate', 0.8),
            volume=speech.get('volume', 1.0)
        )

        return config


def load_config(config_path: str) -> Config:
    """
    Load configuration from YAML file.

    Args:
        config_path: Path to YAML config file

    Returns:
        Config object
    """
    path = Path(config_path)

    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(path, 'r', encoding='utf-8') as f:
        config_dict = yaml.safe_load(f)

    return Config.from_dict(config_dict)


def merge_configs(base: Dict, override: Dict) -> Dict:
    """
    Merge two config dictionaries.

    Args:
        base: Base configuration
        override: Override values

    Returns:
        Merged configuration
    """
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = merge_configs(result[key], value)
        else:
            result[key] = value

    return result


def config_to_dict(config: Config) -> Dict[str, Any]:
    """Convert a Config back into the nested YAML layout."""
    return {
        'project': {
            'name': config.project_name,
            'version': config.version,
            'language': config.language
        },
        'processing': {
            'movement_threshold': config.processing.movement_threshold,
            'static_frames_required': config.processing.static_frames_required,
            'prediction_cooldown': config.processing.prediction_cooldown,
            'min_length_frames': config.processing.min_length_frames,
            'model_frames': config.processing.model_frames,
            'max_buffer_frames': config.processing.max_buffer_frames,
            'frame_interval_ms': config.processing.frame_interval_ms
        },
        'recognition': {
            'static_classes': config.recognition.static_classes,
            'dynamic_classes': config.recognition.dynamic_classes,
            'words_text': config.recognition.words_text,
            'thresholds': {
                'static': config.recognition.static_threshold,
                'dynamic': config.recognition.dynamic_threshold
            },
            'max_sentence_words': config.recognition.max_sentence_words
        },
        'detection': {
            'model_complexity': config.detection.model_complexity,
            'max_num_hands': config.detection.max_num_hands,
            'min_detection_confidence': config.detection.min_detection_confidence,
            'min_tracking_confidence': config.detection.min_tracking_confidence,
            'frame_stride': config.detection.frame_stride,
            'flip_handedness': config.detection.flip_handedness
        },
        'models': {
            'static_path': config.models.static_path,
            'dynamic_path': config.models.dynamic_path,
            'apply_softmax': config.models.apply_softmax,
            'device': config.models.device
        },
        'speech': {
            'enabled': config.speech.enabled,
            'rate': config.speech.rate,
            'volume': config.speech.volume
        }
    }


def save_config(config: Config, path: str):
    """Save configuration to YAML file."""
    with open(path, 'w', encoding='utf-8') as f:
        yaml.dump(config_to_dict(config), f, default_flow_style=False, allow_unicode=True)
