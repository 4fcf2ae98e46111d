import pytest

from screening_agent.dialogue import (
    AGENT_PREFIX,
    CLARIFICATION_LINE,
    CLOSING_MESSAGE,
    USER_PREFIX,
    DialogueEngine,
)
from screening_agent.extractors import UNCLEAR

from conftest import fixed_clock

HAPPY_PATH = ["Yes, I'm interested", "1 month", "8 lakh / 12 lakh", "Friday morning", "yes"]


@pytest.fixture
def engine():
    return DialogueEngine("Backend Engineer", "Acme", clock=fixed_clock)


def test_opening_prompt_uses_job_context(engine):
    prompt = engine.current_prompt()
    assert "Acme" in prompt
    assert "Backend Engineer" in prompt
    assert engine.state.current_step == 0
    assert engine.state.transcript == []


def test_greet_records_opening_prompt_once(engine):
    engine.greet()
    engine.greet()
    assert engine.state.transcript == [AGENT_PREFIX + engine.questions[0]]


def test_full_conversation(engine):
    results = [engine.process_response(answer) for answer in HAPPY_PATH]

    assert [r.complete for r in results] == [False, False, False, False, True]
    assert results[-1].next_prompt == CLOSING_MESSAGE
    assert results[3].next_prompt == (
        "We've scheduled your interview on Friday, October 23, 2026 at 10:00 AM. Is that correct?"
    )
    assert engine.complete
    assert engine.state.collected_data == {
        "interested": True,
        "noticePeriod": "1 month",
        "currentCtc": "8 lakh",
        "expectedCtc": "12 lakh",
        "interviewDate": "Friday, October 23, 2026 at 10:00 AM",
        "confirmed": True,
    }


def test_transcript_alternates_and_has_two_lines_per_answer(engine):
    for answer in HAPPY_PATH:
        engine.process_response(answer)

    transcript = engine.state.transcript
    assert len(transcript) == 2 * len(HAPPY_PATH) + 1
    assert transcript[0].startswith(AGENT_PREFIX)
    for i, answer in enumerate(HAPPY_PATH):
        assert transcript[2 * i + 1] == USER_PREFIX + answer
        assert transcript[2 * i + 2].startswith(AGENT_PREFIX)


def test_extracted_data_is_only_the_delta(engine):
    engine.process_response("yes")
    result = engine.process_response("2 weeks")
    assert result.extracted_data == {"noticePeriod": "2 weeks"}


@pytest.mark.parametrize(
    "answers, step, field",
    [
        (["yes"], 1, "noticePeriod"),
        (["yes", "30 days"], 2, "currentCtc"),
        (["yes", "30 days", "10 and 12"], 3, "interviewDate"),
    ],
)
def test_unclear_answer_repeats_the_question(engine, answers, step, field):
    for answer in answers:
        engine.process_response(answer)

    result = engine.process_response("hmm, let me think")

    assert result.clarification
    assert not result.complete
    assert engine.state.current_step == step
    assert result.next_prompt == engine.questions[step]
    assert engine.state.transcript[-1] == AGENT_PREFIX + CLARIFICATION_LINE
    assert engine.state.collected_data[field] == UNCLEAR


def test_partial_compensation_advances(engine):
    engine.process_response("yes")
    engine.process_response("30 days")
    result = engine.process_response("currently 10")
    assert not result.clarification
    assert engine.state.current_step == 3
    assert engine.state.collected_data["expectedCtc"] == UNCLEAR


def test_interest_and_confirmation_never_clarify(engine):
    first = engine.process_response("umm")
    assert not first.clarification
    assert engine.state.collected_data["interested"] is False

    for answer in ["30 days", "10 and 12", "Monday"]:
        engine.process_response(answer)
    last = engine.process_response("umm")
    assert last.complete
    assert engine.state.collected_data["confirmed"] is True


def test_confirmation_prompt_falls_back_without_date(engine):
    engine.state.current_step = 4
    assert engine.current_prompt() == "We've scheduled your interview on the requested date. Is that correct?"


def test_answer_after_completion_is_a_no_op(engine):
    for answer in HAPPY_PATH:
        engine.process_response(answer)
    before = list(engine.state.transcript)

    result = engine.process_response("one more thing")

    assert result.complete
    assert result.next_prompt == CLOSING_MESSAGE
    assert result.extracted_data == {}
    assert engine.state.transcript == before


def test_reset_clears_progress(engine):
    engine.process_response("yes")
    engine.reset()
    assert engine.state.current_step == 0
    assert engine.state.collected_data == {}
    assert engine.state.transcript == []
    assert engine.state.job_context.company == "Acme"
