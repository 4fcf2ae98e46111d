import asyncio
from datetime import datetime

import pytest

from screening_agent.config import ScreeningConfig
from screening_agent.controller import ScreeningVoiceAgent
from screening_agent.speech import SpeechIO

# Monday
FIXED_NOW = datetime(2026, 10, 19, 9, 0)

LIVEKIT_ENV = (
    "LIVEKIT_API_KEY",
    "LIVEKIT_API_SECRET",
    "LIVEKIT_URL",
    "DEEPGRAM_API_KEY",
    "ELEVENLABS_API_KEY",
)


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    monkeypatch.setenv("SCREENING_LOG_DIR", str(tmp_path / "logs"))
    for key in LIVEKIT_ENV:
        monkeypatch.delenv(key, raising=False)
    return tmp_path


def read_logs(tmp_path) -> str:
    return "".join(p.read_text(encoding="utf-8") for p in sorted((tmp_path / "logs").glob("*.log")))


def fixed_clock():
    return FIXED_NOW


class FakeRecognizer:
    """Plays back ("result", text) / ("error", message) events, one per start()."""

    def __init__(self, script=()):
        self.script = list(script)
        self.on_result = lambda text: None
        self.on_error = lambda error: None
        self.starts = 0
        self.stops = 0
        self._handle = None

    def start(self):
        self.starts += 1
        if not self.script:
            return
        kind, value = self.script.pop(0)
        callback = self.on_result if kind == "result" else self.on_error
        self._handle = asyncio.get_running_loop().call_soon(callback, value)

    def stop(self):
        self.stops += 1


class FakeSynthesizer:
    def __init__(self):
        self.on_start = None
        self.on_end = None
        self.spoken = []
        self.cancels = 0

    async def speak(self, text):
        if self.on_start:
            self.on_start()
        self.spoken.append(text)
        await asyncio.sleep(0)
        if self.on_end:
            self.on_end()

    def cancel(self):
        self.cancels += 1


def fast_config(**overrides) -> ScreeningConfig:
    values = dict(listen_delay_seconds=0.0, retry_delay_seconds=0.0, max_recognition_retries=3)
    values.update(overrides)
    return ScreeningConfig(**values)


def make_agent(recognizer=None, synthesizer=None, config=None, **kwargs) -> ScreeningVoiceAgent:
    speech = SpeechIO(recognizer=recognizer or FakeRecognizer(), synthesizer=synthesizer or FakeSynthesizer())
    return ScreeningVoiceAgent(speech=speech, config=config or fast_config(), clock=fixed_clock, **kwargs)
