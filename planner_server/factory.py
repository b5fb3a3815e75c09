# -*- coding: utf-8 -*-
"""Turns parsed quick-add input into Task entities ready to store."""
from __future__ import annotations

import secrets
import typing as t
from datetime import datetime

from .config import local_now
from .models import ParsedTask, Task


def generate_task_id(now: datetime) -> str:
    """Creation time in milliseconds plus a random suffix, e.g. ``task_1718000000000_3f9a1c2b``."""
    return f"task_{_epoch_millis(now)}_{secrets.token_hex(4)}"


def _epoch_millis(moment: datetime) -> int:
    return int(moment.timestamp() * 1000)


def create_task(
        parsed: ParsedTask,
        *,
        now: t.Optional[datetime] = None,
        id_generator: t.Callable[[datetime], str] = generate_task_id,
) -> Task:
    """Create a new task from parsed data.

    The position is the creation time in milliseconds, so tasks created later
    sort after earlier ones until someone reorders them.

    :param parsed: Output of the quick-add parser.
    :param now: Creation time; defaults to the local clock.
    :param id_generator: Callable producing a unique id from the creation time.
    :return: A new Task.
    """
    if now is None:
        now = local_now()
    return Task(
        id=id_generator(now),
        title=parsed.title,
        subject_id=parsed.subject_id,
        linked_goal_id=parsed.linked_goal_id,
        due_date=parsed.due_date,
        estimated_effort=parsed.estimated_effort,
        status=parsed.status,
        created_at=now,
        updated_at=now,
        position=float(_epoch_millis(now)),
        priority=parsed.priority,
        tags=[parsed.subject_id] if parsed.subject_id else [],
    )
