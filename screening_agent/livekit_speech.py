"""Speech adapters backed by the LiveKit HTTP STT/TTS endpoints.

Audio never flows through this process: the synthesizer receives a playable
URL from TTS and paces itself by the prompt length, and the recognizer
transcribes clip URLs that the caller pushes into an AudioClipQueue (for
example recordings posted to the HTTP app).
"""

from __future__ import annotations

import asyncio
from typing import Callable, Optional

import requests

from .logs import clip, log_event
from .stt_client import LiveKitSTTClient
from .tts_client import LiveKitTTSClient


def _ignore(*_args) -> None:
    return None


class AudioClipQueue:
    """FIFO of recorded answer clips waiting for transcription."""

    def __init__(self) -> None:
        self._queue: "asyncio.Queue[str]" = asyncio.Queue()

    def submit(self, audio_url: str) -> None:
        self._queue.put_nowait(audio_url)

    async def next_clip(self) -> str:
        return await self._queue.get()

    def pending(self) -> int:
        return self._queue.qsize()


class LiveKitSynthesizer:
    def __init__(self, client: LiveKitTTSClient, words_per_minute: int = 160):
        self.client = client
        self.words_per_minute = max(1, int(words_per_minute))
        self.on_start: Optional[Callable[[], None]] = None
        self.on_end: Optional[Callable[[], None]] = None
        self.last_audio_url = ""
        self._stop: Optional[asyncio.Event] = None

    def playback_seconds(self, text: str) -> float:
        return len((text or "").split()) * 60.0 / self.words_per_minute

    async def speak(self, text: str) -> None:
        stop = asyncio.Event()
        self._stop = stop
        try:
            audio_url = await asyncio.to_thread(self.client.synthesize, text)
        except requests.RequestException as exc:
            # A failed prompt counts as spoken so the turn can continue.
            log_event(f"TTS_FAIL | {exc}")
            return
        if stop.is_set():
            return

        self.last_audio_url = audio_url
        log_event(f"TTS_PLAY | url={audio_url} text={clip(text)}")
        if self.on_start:
            self.on_start()
        try:
            await asyncio.wait_for(stop.wait(), timeout=self.playback_seconds(text))
        except asyncio.TimeoutError:
            pass
        finally:
            if self._stop is stop:
                self._stop = None
            if self.on_end:
                self.on_end()

    def cancel(self) -> None:
        if self._stop is not None:
            self._stop.set()


class LiveKitRecognizer:
    def __init__(self, client: LiveKitSTTClient, clips: AudioClipQueue):
        self.client = client
        self.clips = clips
        self.on_result: Callable[[str], None] = _ignore
        self.on_error: Callable[[str], None] = _ignore
        self._task: Optional[asyncio.Task] = None

    @property
    def listening(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.listening:
            return
        self._task = asyncio.get_running_loop().create_task(self._recognize_next())

    def stop(self) -> None:
        task, self._task = self._task, None
        if task is None or task.done():
            return
        try:
            current = asyncio.current_task()
        except RuntimeError:
            current = None
        if task is not current:
            task.cancel()

    async def _recognize_next(self) -> None:
        audio_url = await self.clips.next_clip()
        try:
            text = await asyncio.to_thread(self.client.transcribe_url, audio_url)
        except requests.RequestException as exc:
            self._task = None
            self.on_error(str(exc) or exc.__class__.__name__)
            return

        self._task = None
        if not text:
            self.on_error("no-speech")
            return
        self.on_result(text)
