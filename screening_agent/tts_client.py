"""LiveKit TTS client wrapper (text-to-speech only)."""

from __future__ import annotations

import os

import requests


class LiveKitTTSClient:
    """Synthesizes agent prompts into a playable audio URL."""

    def __init__(self, base_url: str, api_key: str, timeout: float = 20):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self.endpoint = os.getenv("LIVEKIT_TTS_ENDPOINT", "/v1/tts/synthesize")
        self.voice = os.getenv("LIVEKIT_TTS_VOICE", "").strip()

    def synthesize(self, text: str) -> str:
        payload = {"text": (text or "").replace("...", ". ").strip()}
        if self.voice:
            payload["voice"] = self.voice
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        r = requests.post(f"{self.base_url}{self.endpoint}", json=payload, headers=headers, timeout=self.timeout)
        r.raise_for_status()
        data = r.json() if r.content else {}
        return (data.get("audio_url") or "").strip()
