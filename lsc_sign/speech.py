"""
Speech Output

Speaks recognised letters and words through an offline text-to-speech
engine (pyttsx3).

Usage:
    from lsc_sign.speech import SpeechEngine

    speaker = SpeechEngine.from_config(config)
    session = SignToTextSession.from_config(config, speak=speaker.speak)
"""

from typing import Optional

try:
    import pyttsx3
except ImportError:
    pyttsx3 = None

from .utils.logging_utils import get_logger

logger = get_logger(__name__)


class SpeechEngine:
    """
    Thin wrapper around a pyttsx3 engine.

    The voice is picked by language tag (e.g. 'es-ES' matches voices
    advertising 'es_ES', 'es-es' or just 'es'); the engine default voice
    is kept when none matches.
    """

    def __init__(
        self,
        language: str = "es-ES",
        rate: float = 0.8,
        volume: float = 1.0,
        engine=None
    ):
        """
        Args:
            language: BCP 47 language tag
            rate: Speaking rate as a multiplier of the engine default
            volume: Volume in [0, 1]
            engine: Pre-built pyttsx3-compatible engine
        """
        if engine is None:
            if pyttsx3 is None:
                raise ImportError(
                    "pyttsx3 is required for speech output. "
                    "Install with: pip install pyttsx3"
                )
            engine = pyttsx3.init()

        self.engine = engine
        self.language = language
        self.voice_id = self._select_voice(language)

        if self.voice_id is not None:
            self.engine.setProperty('voice', self.voice_id)
        else:
            logger.warning(f"No voice found for {language}, using engine default")

        base_rate = self.engine.getProperty('rate') or 200
        self.engine.setProperty('rate', int(base_rate * rate))
        self.engine.setProperty('volume', max(0.0, min(1.0, volume)))

    @classmethod
    def from_config(cls, config) -> 'SpeechEngine':
        """Build from a full ``Config`` (language + speech section)."""
        return cls(
            language=config.language,
            rate=config.speech.rate,
            volume=config.speech.volume
        )

    def _select_voice(self, language: str) -> Optional[str]:
        wanted = language.lower().replace('_', '-')
        primary = wanted.split('-')[0]
        fallback = None

        for voice in self.engine.getProperty('voices') or []:
            tags = [self._tag(lang) for lang in (getattr(voice, 'languages', None) or [])]
            tags.append(str(getattr(voice, 'id', '')).lower().replace('_', '-'))

            if any(tag == wanted or tag.endswith('/' + wanted) for tag in tags):
                return voice.id
            if fallback is None and any(
                tag == primary or tag.startswith(primary + '-') or tag.endswith('/' + primary)
                for tag in tags
            ):
                fallback = voice.id

        return fallback

    @staticmethod
    def _tag(lang) -> str:
        # Some drivers report languages as bytes with a leading length byte
        if isinstance(lang, bytes):
            lang = lang.decode('utf-8', errors='ignore').lstrip('\x05\x00')
        return str(lang).lower().replace('_', '-').strip()

    def speak(self, text: str):
        """Speak ``text`` and block until done."""
        if not text:
            return
        logger.debug(f"Speaking: {text}")
        self.engine.say(text)
        self.engine.runAndWait()
