"""Voice screening agent.

A fixed four-question screening conversation (interest, notice period,
compensation, interview slot, then confirmation) driven by speech or typed
input. The dialogue core has no speech or storage dependencies; adapters for
both are plugged in at the edges.
"""

from .config import LiveKitConfig, ScreeningConfig
from .controller import ScreeningVoiceAgent
from .dialogue import DialogueEngine, DialogueState, TurnResult
from .events import AgentUpdate
from .health import check_speech_health
from .speech import SpeechIO
from .store import ScreeningStore

__all__ = [
    "AgentUpdate",
    "DialogueEngine",
    "DialogueState",
    "LiveKitConfig",
    "ScreeningConfig",
    "ScreeningStore",
    "ScreeningVoiceAgent",
    "SpeechIO",
    "TurnResult",
    "check_speech_health",
]
