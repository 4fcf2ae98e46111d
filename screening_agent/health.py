"""Readiness report for the speech provider."""

from __future__ import annotations

from typing import Optional

import requests

from .config import LiveKitConfig


def check_speech_health(cfg: Optional[LiveKitConfig] = None, timeout_seconds: int = 5) -> dict:
    """Probe the configured speech service. Never changes session state."""

    cfg = cfg or LiveKitConfig.from_env()
    missing = cfg.missing_required()
    if missing:
        return {
            "ok": False,
            "provider": "livekit",
            "reason": "missing_env",
            "missing": missing,
            "degraded": True,
        }

    # Reachability only; auth problems surface as TTS_FAIL / SPEECH_ERROR at runtime.
    try:
        resp = requests.get(cfg.url, timeout=timeout_seconds)
    except requests.RequestException as exc:
        return {
            "ok": False,
            "provider": "livekit",
            "reason": "unreachable",
            "error": str(exc),
            "url": cfg.url,
            "degraded": True,
        }

    reachable = resp.status_code < 500
    return {
        "ok": reachable,
        "provider": "livekit",
        "reason": "ready" if reachable else "unhealthy",
        "status_code": resp.status_code,
        "url": cfg.url,
        "degraded": not reachable,
    }
