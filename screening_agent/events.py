"""Snapshots published to whoever renders the conversation."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional


@dataclass(frozen=True)
class AgentUpdate:
    transcript: List[str]
    listening: bool
    current_step: int
    collected_data: Dict[str, Any] = field(default_factory=dict)
    extracted_data: Optional[Dict[str, Any]] = None
    completed: Optional[bool] = None
    failed: Optional[bool] = None
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Wire shape: optional keys appear only when they carry a value.

        Envelope keys are snake_case like every other JSON payload the app
        returns. Field names inside `collected_data` and `extracted_data` are the
        dialogue data keys (`noticePeriod`, `currentCtc`, ...) and pass through
        unchanged.
        """
        out: Dict[str, Any] = {
            "transcript": list(self.transcript),
            "listening": self.listening,
            "current_step": self.current_step,
            "collected_data": dict(self.collected_data),
        }
        if self.extracted_data is not None:
            out["extracted_data"] = dict(self.extracted_data)
        if self.completed is not None:
            out["completed"] = self.completed
        if self.failed is not None:
            out["failed"] = self.failed
        if self.error is not None:
            out["error"] = self.error
        return out


UpdateCallback = Callable[[AgentUpdate], None]
