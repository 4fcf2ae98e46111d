"""Append-only event log shared by the agent, the HTTP app and the CLI."""

from __future__ import annotations

import os
from datetime import datetime, timezone
from pathlib import Path

DEFAULT_LOG_DIR = Path(__file__).resolve().parent.parent / "logs"


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def log_dir() -> Path:
    # Read at call time so tests and long-running servers can redirect it.
    raw = (os.getenv("SCREENING_LOG_DIR", "") or "").strip()
    return Path(raw) if raw else DEFAULT_LOG_DIR


def clip(text: str, limit: int = 300) -> str:
    t = (text or "").replace("\n", " ").strip()
    return t if len(t) <= limit else t[:limit] + "..."


def log_event(message: str) -> None:
    d = log_dir()
    d.mkdir(parents=True, exist_ok=True)
    p = d / f"voice-agent-{datetime.now(timezone.utc).strftime('%Y%m%d')}.log"
    with p.open("a", encoding="utf-8") as f:
        f.write(f"[{_now()}] {message}\n")
