# -*- coding: utf-8 -*-
"""
Quick-add text parser.

Turns free text such as ``"read chapter 5 tomorrow 17:00 1.5h #physics !high"``
into a ParsedTask. Parsing runs as an ordered pipeline of extractors; each one
receives the remaining text and the partial result, and returns both with its
own fragment cut out of the text. Whatever text is left becomes the title.

English and Russian keywords are recognised (``tomorrow``/``завтра``,
``2h``/``2ч``, weekday names and abbreviations).
"""
from __future__ import annotations

import logging
import math
import re
import typing as t
from dataclasses import dataclass, replace
from datetime import datetime, timedelta, timezone

from .config import local_now
from .models import ParsedTask
from .subjects import DEFAULT_CATALOG, SubjectCatalog

logger = logging.getLogger(__name__)

DEFAULT_DUE_OFFSET = timedelta(hours=1)

HOUR_UNITS = frozenset({"h", "hour", "hours", "ч", "час", "часа", "часов"})
MINUTE_UNITS = frozenset({"min", "mins", "minutes", "мин", "минут", "минуты"})

# Longest alternatives first so "hours" is not read as "h" + "ours"
_UNIT_ALTERNATION = "|".join(sorted(HOUR_UNITS | MINUTE_UNITS, key=len, reverse=True))

SUBJECT_TAG_PATTERN = re.compile(r"#(\w+)")

GOAL_CODE_PATTERN = re.compile(
    r"(?<!\d)(?<!\d\.)\d+(?:\.\d+)+(?!\.?\d)"
    rf"(?!\s*(?:{_UNIT_ALTERNATION})\b)",
    re.IGNORECASE,
)

EFFORT_PATTERN = re.compile(
    rf"(?<!\d)(?<!\d\.)(\d+(?:\.\d+)?)\s*({_UNIT_ALTERNATION})\b",
    re.IGNORECASE,
)

HIGH_PRIORITY_PATTERN = re.compile(r"!(?:important|high)(?!\w)", re.IGNORECASE)
LOW_PRIORITY_PATTERN = re.compile(r"!low(?!\w)", re.IGNORECASE)

WEEKDAY_ALIASES: dict[str, int] = {
    "monday": 0, "mon": 0, "понедельник": 0, "пн": 0,
    "tuesday": 1, "tues": 1, "tue": 1, "вторник": 1, "вт": 1,
    "wednesday": 2, "wed": 2, "среда": 2, "среду": 2, "ср": 2,
    "thursday": 3, "thurs": 3, "thu": 3, "четверг": 3, "чт": 3,
    "friday": 4, "fri": 4, "пятница": 4, "пятницу": 4, "пт": 4,
    "saturday": 5, "sat": 5, "суббота": 5, "субботу": 5, "сб": 5,
    "sunday": 6, "sun": 6, "воскресенье": 6, "вс": 6,
}

_TIME = r"(?<!\d)(?P<hour>\d{1,2}):(?P<minute>\d{2})(?!\d)"
_TODAY = r"\b(?:today|сегодня)"
_TOMORROW = r"\b(?:tomorrow|завтра)"
_AT = r"(?:at|в)"
_WEEKDAY = "|".join(sorted(WEEKDAY_ALIASES, key=len, reverse=True))


@dataclass(frozen=True)
class ParseContext:
    """Inputs shared by every extractor in one parse call."""
    now: datetime
    catalog: SubjectCatalog = DEFAULT_CATALOG


Extractor = t.Callable[[str, ParsedTask, ParseContext], tuple[str, ParsedTask]]


def _cut(text: str, match: re.Match[str]) -> str:
    """Remove a matched span, leaving one space at the seam."""
    head = text[: match.start()].rstrip()
    tail = text[match.end():].lstrip()
    return f"{head} {tail}".strip()


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _elapsed_from(moment: datetime, delta: timedelta) -> datetime:
    """``moment`` plus ``delta`` of real time, in ``moment``'s zone.

    Adding to a zone-aware datetime directly moves the wall clock instead.
    """
    return (moment.astimezone(timezone.utc) + delta).astimezone(moment.tzinfo)


def extract_subject(text: str, parsed: ParsedTask, context: ParseContext) -> tuple[str, ParsedTask]:
    """Resolve the first #tag that names a subject in the catalog.

    Tags that name no known subject are left in the text.
    """
    for match in SUBJECT_TAG_PATTERN.finditer(text):
        subject = context.catalog.resolve(match.group(1).lower())
        if subject is not None:
            return _cut(text, match), replace(parsed, subject_id=subject.id)
    return text, parsed


def extract_goal_code(text: str, parsed: ParsedTask, context: ParseContext) -> tuple[str, ParsedTask]:
    """Pick up the first dotted objective code such as 10.3.2.1."""
    match = GOAL_CODE_PATTERN.search(text)
    if not match:
        return text, parsed
    return _cut(text, match), replace(parsed, linked_goal_id=match.group(0))


def _same_day(match: re.Match[str], now: datetime) -> datetime:
    return now


def _next_day(match: re.Match[str], now: datetime) -> datetime:
    return now + timedelta(days=1)


def _next_weekday(match: re.Match[str], now: datetime) -> datetime:
    # Naming today's weekday means a week from today
    target = WEEKDAY_ALIASES[match.group("weekday").lower()]
    days_ahead = (target - now.weekday()) % 7 or 7
    return now + timedelta(days=days_ahead)


@dataclass(frozen=True)
class DatePattern:
    """A due-date phrase and the rule that picks its calendar day."""
    name: str
    regex: re.Pattern[str]
    pick_day: t.Callable[[re.Match[str], datetime], datetime]

    def resolve(self, match: re.Match[str], now: datetime) -> t.Optional[datetime]:
        hour = int(match.group("hour"))
        minute = int(match.group("minute"))
        if not (0 <= hour <= 23 and 0 <= minute <= 59):
            return None
        day = self.pick_day(match, now)
        return day.replace(hour=hour, minute=minute, second=0, microsecond=0)


# First match wins
DATE_PATTERNS: tuple[DatePattern, ...] = (
    DatePattern("today_at", re.compile(rf"{_TODAY}\s+{_AT}\s+{_TIME}", re.IGNORECASE), _same_day),
    DatePattern("tomorrow_at", re.compile(rf"{_TOMORROW}\s+{_AT}\s+{_TIME}", re.IGNORECASE), _next_day),
    DatePattern("tomorrow", re.compile(rf"{_TOMORROW}\s+{_TIME}", re.IGNORECASE), _next_day),
    DatePattern("today", re.compile(rf"{_TODAY}\s+{_TIME}", re.IGNORECASE), _same_day),
    DatePattern(
        "weekday",
        re.compile(rf"\b(?P<weekday>{_WEEKDAY})\s+(?:{_AT}\s+)?{_TIME}", re.IGNORECASE),
        _next_weekday,
    ),
    DatePattern("time_only", re.compile(_TIME), _same_day),
)


def extract_due_date(text: str, parsed: ParsedTask, context: ParseContext) -> tuple[str, ParsedTask]:
    """Match the first date/time phrase; out-of-range clock values do not count."""
    for pattern in DATE_PATTERNS:
        for match in pattern.regex.finditer(text):
            due = pattern.resolve(match, context.now)
            if due is None:
                logger.debug("Ignoring out-of-range time %r", match.group(0))
                continue
            return _cut(text, match), replace(parsed, due_date=due)
    return text, parsed


def extract_effort(text: str, parsed: ParsedTask, context: ParseContext) -> tuple[str, ParsedTask]:
    """Read an effort estimate like 2h, 1.5 hours or 45min, in minutes."""
    match = EFFORT_PATTERN.search(text)
    if not match:
        return text, parsed
    value = float(match.group(1))
    if match.group(2).lower() in HOUR_UNITS:
        value *= 60
    if not math.isfinite(value):
        return text, parsed
    return _cut(text, match), replace(parsed, estimated_effort=_round_half_up(value))


def extract_priority(text: str, parsed: ParsedTask, context: ParseContext) -> tuple[str, ParsedTask]:
    match = HIGH_PRIORITY_PATTERN.search(text)
    if match:
        return _cut(text, match), replace(parsed, priority="high")
    match = LOW_PRIORITY_PATTERN.search(text)
    if match:
        return _cut(text, match), replace(parsed, priority="low")
    return text, parsed


EXTRACTORS: tuple[Extractor, ...] = (
    extract_subject,
    extract_goal_code,
    extract_due_date,
    extract_effort,
    extract_priority,
)


def parse_task_text(
        text: str,
        *,
        now: t.Optional[datetime] = None,
        catalog: SubjectCatalog = DEFAULT_CATALOG,
        extractors: t.Sequence[Extractor] = EXTRACTORS,
) -> t.Optional[ParsedTask]:
    """Parse one line of quick-add text into a ParsedTask.

    Fields that are not mentioned keep their defaults: due in one hour,
    30 minutes of effort, medium priority, no subject and no objective code.

    :param text: Raw user input.
    :param now: Reference time for relative dates; defaults to the local clock.
    :param catalog: Subjects that #tags resolve against.
    :param extractors: Pipeline to run, in order.
    :return: The parsed task, or None for blank input or an internal fault.
    """
    if not text or not text.strip():
        logger.debug("Skipping blank quick-add input")
        return None

    try:
        if now is None:
            now = local_now()
        context = ParseContext(now=now, catalog=catalog)
        remaining = text.strip()
        parsed = ParsedTask(due_date=_elapsed_from(now, DEFAULT_DUE_OFFSET), title=remaining)
        for extractor in extractors:
            remaining, parsed = extractor(remaining, parsed, context)
        # Never leave the title empty when the input was not
        return replace(parsed, title=remaining.strip() or text)
    except Exception:
        logger.exception("Error parsing task text %r", text)
        return None
