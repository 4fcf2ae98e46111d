"""Fixed-step screening dialogue.

Steps 0-3 ask the scripted questions, step 4 reads back the interview slot for
confirmation, and anything past that is the closed conversation.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from .config import DEFAULT_COMPANY, DEFAULT_JOB_TITLE
from .extractors import (
    UNCLEAR,
    extract_compensation,
    extract_confirmation,
    extract_interest,
    extract_interview_date,
    extract_notice_period,
)

USER_PREFIX = "User: "
AGENT_PREFIX = "Agent: "

CLARIFICATION_LINE = "I'm sorry, I didn't quite catch that."
CONFIRMATION_TEMPLATE = "We've scheduled your interview on {date}. Is that correct?"
CONFIRMATION_FALLBACK_DATE = "the requested date"
CLOSING_MESSAGE = "Thank you for your time. We'll be in touch soon!"

STEP_INTEREST = 0
STEP_NOTICE_PERIOD = 1
STEP_COMPENSATION = 2
STEP_AVAILABILITY = 3
STEP_CONFIRMATION = 4

# Fields whose values must all be unclear before a step is asked again.
CLARIFIED_FIELDS = {
    STEP_NOTICE_PERIOD: ("noticePeriod",),
    STEP_COMPENSATION: ("currentCtc", "expectedCtc"),
    STEP_AVAILABILITY: ("interviewDate",),
}


def build_questions(job_title: str, company: str) -> tuple[str, ...]:
    return (
        f"Hello, this is {company} regarding the {job_title} opportunity. Are you interested in this role?",
        "Great! What is your current notice period?",
        "Can you share your current and expected CTC (Cost to Company)?",
        "When would you be available for an interview next week?",
    )


@dataclass(frozen=True)
class JobContext:
    title: str
    company: str


@dataclass
class DialogueState:
    current_step: int
    job_context: JobContext
    collected_data: Dict[str, Any] = field(default_factory=dict)
    transcript: List[str] = field(default_factory=list)


@dataclass
class TurnResult:
    next_prompt: str
    complete: bool
    extracted_data: Dict[str, Any]
    clarification: bool = False


class DialogueEngine:
    """Owns one DialogueState and advances it one utterance at a time."""

    def __init__(
        self,
        job_title: str = DEFAULT_JOB_TITLE,
        company: str = DEFAULT_COMPANY,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.state = DialogueState(current_step=0, job_context=JobContext(title=job_title, company=company))
        self.questions = build_questions(job_title, company)
        self._clock = clock or datetime.now

    @property
    def complete(self) -> bool:
        return self.state.current_step > len(self.questions)

    def current_prompt(self) -> str:
        step = self.state.current_step
        if step < len(self.questions):
            return self.questions[step]
        if step == len(self.questions):
            date = self.state.collected_data.get("interviewDate") or CONFIRMATION_FALLBACK_DATE
            return CONFIRMATION_TEMPLATE.format(date=date)
        return CLOSING_MESSAGE

    def greet(self) -> str:
        """Return the opening prompt, recording it once in an empty transcript."""
        prompt = self.current_prompt()
        if not self.state.transcript:
            self.state.transcript.append(AGENT_PREFIX + prompt)
        return prompt

    def extract(self, step: int, utterance: str) -> Dict[str, Any]:
        if step == STEP_INTEREST:
            return {"interested": extract_interest(utterance)}
        if step == STEP_NOTICE_PERIOD:
            return {"noticePeriod": extract_notice_period(utterance)}
        if step == STEP_COMPENSATION:
            ctc = extract_compensation(utterance)
            return {"currentCtc": ctc.current, "expectedCtc": ctc.expected}
        if step == STEP_AVAILABILITY:
            return {"interviewDate": extract_interview_date(utterance, today=self._clock())}
        if step == STEP_CONFIRMATION:
            return {"confirmed": extract_confirmation(utterance)}
        return {}

    @staticmethod
    def needs_clarification(step: int, extracted: Dict[str, Any]) -> bool:
        checked = CLARIFIED_FIELDS.get(step)
        if not checked:
            return False
        return all(extracted.get(name) == UNCLEAR for name in checked)

    def process_response(self, utterance: str) -> TurnResult:
        if self.complete:
            return TurnResult(next_prompt=CLOSING_MESSAGE, complete=True, extracted_data={})

        self.greet()
        step = self.state.current_step
        self.state.transcript.append(USER_PREFIX + utterance)

        extracted = self.extract(step, utterance)
        self.state.collected_data.update(extracted)

        if self.needs_clarification(step, extracted):
            self.state.transcript.append(AGENT_PREFIX + CLARIFICATION_LINE)
            return TurnResult(
                next_prompt=self.questions[step],
                complete=False,
                extracted_data=extracted,
                clarification=True,
            )

        self.state.current_step += 1
        next_prompt = self.current_prompt()
        self.state.transcript.append(AGENT_PREFIX + next_prompt)
        return TurnResult(next_prompt=next_prompt, complete=self.complete, extracted_data=extracted)

    def reset(self) -> None:
        self.state.current_step = 0
        self.state.collected_data = {}
        self.state.transcript = []
