"""Configuration loaders for the screening agent.

All settings come from environment variables. Never hardcode credentials.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

DEFAULT_JOB_TITLE = "Software Developer"
DEFAULT_COMPANY = "Tech Corp"


def _env_str(key: str, default: str = "") -> str:
    return (os.getenv(key, default) or default).strip()


def _env_bool(key: str, default: str = "0") -> bool:
    return _env_str(key, default).lower() in {"1", "true", "yes", "y"}


def _env_int(key: str, default: int) -> int:
    try:
        return int(_env_str(key, str(default)))
    except ValueError:
        return default


def _env_seconds(key: str, default_ms: int) -> float:
    # Delays are configured in milliseconds and never negative.
    return max(0, _env_int(key, default_ms)) / 1000.0


def _normalize_livekit_url(url: str) -> str:
    u = (url or "").strip()
    # requests needs http(s), not ws(s)
    if u.startswith("wss://"):
        return "https://" + u[len("wss://"):]
    if u.startswith("ws://"):
        return "http://" + u[len("ws://"):]
    return u


@dataclass(frozen=True)
class ScreeningConfig:
    """Typed container for conversation and turn-taking settings."""

    job_title: str = DEFAULT_JOB_TITLE
    company: str = DEFAULT_COMPANY
    listen_delay_seconds: float = 0.5
    retry_delay_seconds: float = 1.0
    max_recognition_retries: int = 3
    speech_words_per_minute: int = 160
    data_file: str = ""
    seed_sample_data: bool = True

    @classmethod
    def from_env(cls) -> "ScreeningConfig":
        return cls(
            job_title=_env_str("SCREENING_JOB_TITLE", DEFAULT_JOB_TITLE) or DEFAULT_JOB_TITLE,
            company=_env_str("SCREENING_COMPANY", DEFAULT_COMPANY) or DEFAULT_COMPANY,
            listen_delay_seconds=_env_seconds("SCREENING_LISTEN_DELAY_MS", 500),
            retry_delay_seconds=_env_seconds("SCREENING_RETRY_DELAY_MS", 1000),
            max_recognition_retries=max(0, _env_int("SCREENING_MAX_RECOGNITION_RETRIES", 3)),
            speech_words_per_minute=max(1, _env_int("SCREENING_SPEECH_WPM", 160)),
            data_file=_env_str("SCREENING_DATA_FILE", ""),
            seed_sample_data=_env_bool("SCREENING_SEED_SAMPLE_DATA", "1"),
        )


@dataclass(frozen=True)
class LiveKitConfig:
    """Typed container for LiveKit speech provider configuration."""

    api_key: str
    api_secret: str
    url: str
    # LiveKit Inference uses LIVEKIT_API_KEY for STT/TTS.
    # Optional provider plugin keys override per provider when needed.
    stt_api_key: str
    tts_api_key: str

    @classmethod
    def from_env(cls) -> "LiveKitConfig":
        api_key = _env_str("LIVEKIT_API_KEY")
        return cls(
            api_key=api_key,
            api_secret=_env_str("LIVEKIT_API_SECRET"),
            url=_normalize_livekit_url(_env_str("LIVEKIT_URL")),
            stt_api_key=(_env_str("DEEPGRAM_API_KEY") or api_key),
            tts_api_key=(_env_str("ELEVENLABS_API_KEY") or api_key),
        )

    def missing_required(self) -> list[str]:
        missing = []
        if not self.api_key:
            missing.append("LIVEKIT_API_KEY")
        if not self.api_secret:
            missing.append("LIVEKIT_API_SECRET")
        if not self.url:
            missing.append("LIVEKIT_URL")
        return missing

    def is_ready(self) -> bool:
        return not self.missing_required()
