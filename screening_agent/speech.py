"""Speech input/output boundary.

The controller only talks to these two capabilities. Concrete adapters bind
them to whatever speech service is configured, and fall back to no-ops with
a warning when none is.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional, Protocol

from .config import LiveKitConfig, ScreeningConfig
from .livekit_speech import AudioClipQueue, LiveKitRecognizer, LiveKitSynthesizer
from .logs import log_event
from .stt_client import LiveKitSTTClient
from .tts_client import LiveKitTTSClient


class Recognizer(Protocol):
    """Non-continuous, final-results-only speech input."""

    on_result: Callable[[str], None]
    on_error: Callable[[str], None]

    def start(self) -> None:
        ...

    def stop(self) -> None:
        ...


class Synthesizer(Protocol):
    """Speech output. `speak` resolves once playback has finished."""

    on_start: Optional[Callable[[], None]]
    on_end: Optional[Callable[[], None]]

    async def speak(self, text: str) -> None:
        ...

    def cancel(self) -> None:
        ...


def _ignore(*_args) -> None:
    return None


class NullRecognizer:
    """Used when no recognition service is available: never hears anything."""

    def __init__(self) -> None:
        self.on_result: Callable[[str], None] = _ignore
        self.on_error: Callable[[str], None] = _ignore

    def start(self) -> None:
        log_event("SPEECH_RECOGNITION_UNAVAILABLE | start ignored")

    def stop(self) -> None:
        return None


class NullSynthesizer:
    """Used when no synthesis service is available: finishes immediately."""

    def __init__(self) -> None:
        self.on_start: Optional[Callable[[], None]] = None
        self.on_end: Optional[Callable[[], None]] = None

    async def speak(self, text: str) -> None:
        log_event("SPEECH_SYNTHESIS_UNAVAILABLE | speak skipped")
        if self.on_start:
            self.on_start()
        if self.on_end:
            self.on_end()

    def cancel(self) -> None:
        return None


@dataclass
class SpeechIO:
    """One recognizer/synthesizer pair, plus the clip queue when the recognizer takes audio clips."""

    recognizer: Recognizer
    synthesizer: Synthesizer
    clips: Optional[AudioClipQueue] = None

    @classmethod
    def null(cls) -> "SpeechIO":
        return cls(recognizer=NullRecognizer(), synthesizer=NullSynthesizer())

    @classmethod
    def from_env(cls, config: Optional[ScreeningConfig] = None) -> "SpeechIO":
        cfg = LiveKitConfig.from_env()
        if not cfg.is_ready():
            log_event(f"SPEECH_PROVIDER_UNAVAILABLE | missing {', '.join(cfg.missing_required())}")
            return cls.null()

        settings = config or ScreeningConfig.from_env()
        clips = AudioClipQueue()
        return cls(
            recognizer=LiveKitRecognizer(LiveKitSTTClient(cfg.url, cfg.stt_api_key), clips),
            synthesizer=LiveKitSynthesizer(
                LiveKitTTSClient(cfg.url, cfg.tts_api_key),
                words_per_minute=settings.speech_words_per_minute,
            ),
            clips=clips,
        )
