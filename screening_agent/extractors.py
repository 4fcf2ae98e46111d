"""Lexical extractors that turn one candidate utterance into one typed fact.

Each extractor looks at the raw utterance only. Nothing here knows about
previous turns; the dialogue engine decides what to do with the result.
"""

from __future__ import annotations

import re
from datetime import date, datetime, timedelta
from typing import NamedTuple, Optional, Sequence, Union

UNCLEAR = "unclear"

INTEREST_POSITIVE = ("yes", "yeah", "sure", "interested", "definitely", "absolutely")
INTEREST_NEGATIVE = ("no", "not", "don't", "isn't", "nope")

CONFIRM_POSITIVE = ("yes", "yeah", "correct", "right", "sure", "ok")
CONFIRM_NEGATIVE = ("no", "not", "wrong", "incorrect", "change")

WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday")

DEFAULT_HOUR = 10
AFTERNOON_HOUR = 14
EVENING_HOUR = 17

NOTICE_RE = re.compile(r"(\d+)\s*(days?|weeks?|months?)\b", re.IGNORECASE)
AMOUNT_RE = re.compile(
    r"\d+(?:\.\d+)?(?:\s*(?:k|lakhs?|crores?|millions?)\b)?",
    re.IGNORECASE,
)
TIME_RE = re.compile(r"\b(\d{1,2})(?::(\d{2}))?\s*(am|pm)?\b", re.IGNORECASE)


class Compensation(NamedTuple):
    current: str
    expected: str


def _normalize(text: str) -> str:
    return (text or "").replace("’", "'").lower()


def _has_cue(text: str, cue: str, whole_word: bool = True) -> bool:
    # Cues start a word: "unsure" is not "sure", "know" is not "no".
    # Affirmatives may run on ("okay", "surely"); negatives must stand alone.
    tail = r"(?![\w'])" if whole_word else ""
    return re.search(rf"(?<![\w']){re.escape(cue)}{tail}", text) is not None


def _match_cues(text: str, positive: Sequence[str], negative: Sequence[str]) -> Optional[bool]:
    t = _normalize(text)
    if any(_has_cue(t, cue, whole_word=False) for cue in positive):
        return True
    if any(_has_cue(t, cue) for cue in negative):
        return False
    return None


def extract_interest(text: str) -> bool:
    """Yes/no interest in the role. No cue at all counts as not interested."""
    verdict = _match_cues(text, INTEREST_POSITIVE, INTEREST_NEGATIVE)
    return False if verdict is None else verdict


def extract_confirmation(text: str) -> bool:
    """Yes/no confirmation of the proposed slot. No cue at all counts as confirmed."""
    verdict = _match_cues(text, CONFIRM_POSITIVE, CONFIRM_NEGATIVE)
    return True if verdict is None else verdict


def extract_notice_period(text: str) -> str:
    m = NOTICE_RE.search(text or "")
    if not m:
        return UNCLEAR
    return f"{m.group(1)} {m.group(2).lower()}"


def extract_compensation(text: str) -> Compensation:
    """First two amounts in the utterance, in order: (current, expected)."""
    amounts = [" ".join(m.group(0).split()) for m in AMOUNT_RE.finditer(text or "")]
    return Compensation(
        current=amounts[0] if len(amounts) > 0 else UNCLEAR,
        expected=amounts[1] if len(amounts) > 1 else UNCLEAR,
    )


def next_weekday(today: date, weekday: int) -> date:
    """Next date falling on `weekday` (Monday=0), strictly after `today`."""
    days_ahead = (weekday - today.weekday()) % 7 or 7
    return today + timedelta(days=days_ahead)


def format_long_datetime(dt: datetime) -> str:
    hour12 = dt.hour % 12 or 12
    suffix = "AM" if dt.hour < 12 else "PM"
    return f"{dt:%A}, {dt:%B} {dt.day}, {dt.year} at {hour12}:{dt.minute:02d} {suffix}"


def _slot_hour(text: str) -> int:
    # Slots always start on the hour; "11:30" books 11:00.
    hour = DEFAULT_HOUR
    if "afternoon" in text:
        hour = AFTERNOON_HOUR
    if "evening" in text:
        hour = EVENING_HOUR

    m = TIME_RE.search(text)
    if m:
        explicit = int(m.group(1))
        if explicit <= 23:
            hour = explicit
            if (m.group(3) or "").lower() == "pm" and hour < 12:
                hour += 12
    return hour


def extract_interview_date(text: str, today: Union[date, datetime, None] = None) -> str:
    """Resolve "Monday afternoon" style answers to a concrete long-form slot.

    The slot is the next matching weekday after `today` at 10:00 by default,
    14:00 for "afternoon", 17:00 for "evening", or the hour of an explicit time
    such as "3pm" or "11:30".
    """
    t = _normalize(text)
    if today is None:
        today = date.today()
    elif isinstance(today, datetime):
        today = today.date()

    for index, day in enumerate(WEEKDAYS):
        if day not in t:
            continue
        slot_day = next_weekday(today, index)
        slot = datetime(slot_day.year, slot_day.month, slot_day.day, _slot_hour(t))
        return format_long_datetime(slot)

    return UNCLEAR
