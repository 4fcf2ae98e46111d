"""Turn-taking controller: speak, listen, interpret, speak again.

Voice and typed answers both enter through `submit_utterance`, so the
dialogue engine never knows which one it got. Everything runs on one event
loop; the only suspension points are synthesizer playback, the post-speech
listening delay and the post-error retry delay.
"""

from __future__ import annotations

import asyncio
import json
from datetime import datetime
from typing import Callable, Optional, Set

from .config import ScreeningConfig
from .dialogue import DialogueEngine, JobContext, TurnResult
from .events import AgentUpdate, UpdateCallback
from .logs import clip, log_event
from .speech import SpeechIO


class ScreeningVoiceAgent:
    """Runs one screening conversation against a recognizer/synthesizer pair."""

    def __init__(
        self,
        job_title: Optional[str] = None,
        company: Optional[str] = None,
        speech: Optional[SpeechIO] = None,
        config: Optional[ScreeningConfig] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.config = config or ScreeningConfig.from_env()
        self.speech = speech or SpeechIO.from_env(self.config)
        self.recognizer = self.speech.recognizer
        self.synthesizer = self.speech.synthesizer
        self._clock = clock
        self.engine = DialogueEngine(
            job_title or self.config.job_title,
            company or self.config.company,
            clock=clock,
        )

        self.active = False
        self.listening = False
        self.speaking = False
        self.completed = False
        self.failed = False
        self.recognition_errors = 0
        self.last_update: Optional[AgentUpdate] = None

        self._on_update: Optional[UpdateCallback] = None
        self._listen_task: Optional[asyncio.Task] = None
        self._turn_tasks: Set[asyncio.Task] = set()
        self._closed: Optional[asyncio.Event] = None

        self.recognizer.on_result = self._handle_speech_result
        self.recognizer.on_error = self._handle_speech_error
        self.synthesizer.on_start = self._handle_speech_start
        self.synthesizer.on_end = self._handle_speech_end

    # ----------------- observers -----------------
    @property
    def job_context(self) -> JobContext:
        return self.engine.state.job_context

    def on_update(self, callback: UpdateCallback) -> None:
        self._on_update = callback

    def snapshot(self, **extra) -> AgentUpdate:
        state = self.engine.state
        return AgentUpdate(
            transcript=list(state.transcript),
            listening=self.listening,
            current_step=state.current_step,
            collected_data=dict(state.collected_data),
            **extra,
        )

    def _publish(self, **extra) -> None:
        update = self.snapshot(**extra)
        self.last_update = update
        if self._on_update is None:
            return
        try:
            self._on_update(update)
        except Exception as e:
            log_event(f"UPDATE_CALLBACK_FAIL | {e}")

    # ----------------- controls -----------------
    async def start(self) -> None:
        if self.active or self.completed or self.failed:
            log_event("AGENT_START_IGNORED | session already running or closed")
            return

        self.active = True
        self._closed = asyncio.Event()
        ctx = self.job_context
        log_event(f"AGENT_START | job={ctx.title} company={ctx.company}")
        prompt = self.engine.greet()
        self._publish()
        await self._speak(prompt)

    def stop(self) -> None:
        """Cancel playback and listening. Safe to call at any time, any number of times."""
        self.synthesizer.cancel()
        self._cancel_listen_task()
        was_listening = self.listening
        self.listening = False
        self.recognizer.stop()

        changed = was_listening or self.active or not self.completed
        self.active = False
        self.completed = True
        self._mark_closed()
        if changed:
            log_event(f"AGENT_STOP | step={self.engine.state.current_step}")
            self._publish()

    def reset(self, job_title: Optional[str] = None, company: Optional[str] = None) -> None:
        self.stop()
        ctx = self.job_context
        self.engine = DialogueEngine(job_title or ctx.title, company or ctx.company, clock=self._clock)
        self.completed = False
        self.failed = False
        self.recognition_errors = 0
        log_event(f"AGENT_RESET | job={self.job_context.title} company={self.job_context.company}")
        self._publish()

    async def submit_utterance(self, text: str) -> Optional[TurnResult]:
        """Feed one recognized or typed answer to the dialogue. Blank text is ignored."""
        text = (text or "").strip()
        if not text:
            return None
        if self.completed or self.failed:
            log_event(f"UTTERANCE_IGNORED | session closed text={clip(text)}")
            return None

        self._stop_listening()
        self.recognition_errors = 0
        step = self.engine.state.current_step
        log_event(f"SPEECH_RESULT | step={step} text={clip(text)}")

        result = self.engine.process_response(text)
        self.completed = result.complete
        if result.clarification:
            log_event(f"CLARIFICATION | step={step}")
        self._publish(extracted_data=result.extracted_data)

        if result.complete:
            self.active = False
            self._mark_closed()
            log_event(f"AGENT_COMPLETE | data={json.dumps(self.engine.state.collected_data, default=str)}")
            self._publish(completed=True)
        else:
            await self._speak(result.next_prompt)
        return result

    async def wait_closed(self, timeout: Optional[float] = None) -> bool:
        """Wait until the session completes, fails or is stopped. False on timeout."""
        if self._closed is None:
            return not self.active
        try:
            await asyncio.wait_for(self._closed.wait(), timeout=timeout)
        except asyncio.TimeoutError:
            return False
        return True

    # ----------------- turn loop -----------------
    async def _speak(self, text: str) -> None:
        await self.synthesizer.speak(text)
        if self.active and not self.completed:
            # Debounce so the recognizer does not catch the tail of our own prompt.
            self._schedule_listen(self.config.listen_delay_seconds)

    def _schedule_listen(self, delay: float) -> None:
        self._cancel_listen_task()
        self._listen_task = asyncio.get_running_loop().create_task(self._listen_after(delay))

    async def _listen_after(self, delay: float) -> None:
        await asyncio.sleep(delay)
        self._listen_task = None
        self._start_listening()

    def _cancel_listen_task(self) -> None:
        task, self._listen_task = self._listen_task, None
        if task is not None and not task.done():
            task.cancel()

    def _start_listening(self) -> None:
        if not self.active or self.completed or self.listening:
            return
        self.listening = True
        self.recognizer.start()
        self._publish()

    def _stop_listening(self) -> None:
        self._cancel_listen_task()
        was_listening = self.listening
        self.listening = False
        self.recognizer.stop()
        if was_listening:
            self._publish()

    def _mark_closed(self) -> None:
        if self._closed is not None:
            self._closed.set()

    # ----------------- speech callbacks -----------------
    def _handle_speech_result(self, text: str) -> None:
        task = asyncio.get_running_loop().create_task(self.submit_utterance(text))
        self._turn_tasks.add(task)
        task.add_done_callback(self._turn_tasks.discard)

    def _handle_speech_error(self, error: str) -> None:
        log_event(f"SPEECH_ERROR | {error}")
        self._stop_listening()
        if not self.active or self.completed:
            return

        self.recognition_errors += 1
        if self.recognition_errors > self.config.max_recognition_retries:
            self.failed = True
            self.active = False
            self._mark_closed()
            log_event(f"RECOGNITION_FATAL | errors={self.recognition_errors} last={error}")
            self._publish(failed=True, error=str(error))
            return

        delay = self.config.retry_delay_seconds * (2 ** (self.recognition_errors - 1))
        self._schedule_listen(delay)

    def _handle_speech_start(self) -> None:
        self.speaking = True

    def _handle_speech_end(self) -> None:
        self.speaking = False
