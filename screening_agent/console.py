"""Terminal speech adapters for running a screening without a speech service."""

from __future__ import annotations

import asyncio
from typing import Callable, Iterable, List, Optional

from .dialogue import AGENT_PREFIX


def _ignore(*_args) -> None:
    return None


class ConsoleSynthesizer:
    """Prints prompts instead of speaking them."""

    def __init__(self, write: Callable[[str], None] = print):
        self.write = write
        self.on_start: Optional[Callable[[], None]] = None
        self.on_end: Optional[Callable[[], None]] = None
        self.spoken: List[str] = []

    async def speak(self, text: str) -> None:
        if self.on_start:
            self.on_start()
        self.spoken.append(text)
        self.write(f"{AGENT_PREFIX}{text}")
        if self.on_end:
            self.on_end()

    def cancel(self) -> None:
        return None


class StdinRecognizer:
    """Reads one typed answer per listening window. EOF counts as a recognition error."""

    def __init__(self, prompt: str = "You: "):
        self.prompt = prompt
        self.on_result: Callable[[str], None] = _ignore
        self.on_error: Callable[[str], None] = _ignore
        self._task: Optional[asyncio.Task] = None

    def start(self) -> None:
        if self._task is not None and not self._task.done():
            return
        self._task = asyncio.get_running_loop().create_task(self._read_line())

    def stop(self) -> None:
        task, self._task = self._task, None
        if task is not None and not task.done() and task is not asyncio.current_task():
            task.cancel()

    async def _read_line(self) -> None:
        try:
            line = await asyncio.to_thread(input, self.prompt)
        except EOFError:
            self._task = None
            self.on_error("end-of-input")
            return
        self._task = None
        if line.strip():
            self.on_result(line)
        else:
            self.on_error("no-speech")


class ScriptedRecognizer:
    """Replays a fixed list of answers, one per `start()`; reports an error once exhausted."""

    def __init__(self, answers: Iterable[str]):
        self.answers = list(answers)
        self.on_result: Callable[[str], None] = _ignore
        self.on_error: Callable[[str], None] = _ignore
        self._handle: Optional[asyncio.Handle] = None

    def start(self) -> None:
        if self._handle is not None:
            return
        self._handle = asyncio.get_running_loop().call_soon(self._deliver)

    def stop(self) -> None:
        handle, self._handle = self._handle, None
        if handle is not None:
            handle.cancel()

    def _deliver(self) -> None:
        self._handle = None
        if not self.answers:
            self.on_error("no-speech")
            return
        answer = self.answers.pop(0)
        self.on_result(answer)
