# -*- coding: utf-8 -*-
"""Quick-add flow: text -> ParsedTask -> Task -> planner store (-> storage)."""
from __future__ import annotations

import logging
import typing as t
from dataclasses import dataclass
from datetime import datetime

from .config import local_now
from .factory import create_task
from .models import Task
from .parser import parse_task_text
from .repository import TaskRepository
from .store import PlannerStore
from .subjects import DEFAULT_CATALOG, SubjectCatalog

logger = logging.getLogger(__name__)

EMPTY_INPUT_ERROR = "Task text is empty."
PARSE_ERROR = "Couldn't parse the task. Please try a different format."


@dataclass
class QuickAddResult:
    """The created task, or an error message for the user."""
    task: t.Optional[Task] = None
    error: t.Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.task is not None


def quick_add(
        text: str,
        store: PlannerStore,
        *,
        catalog: SubjectCatalog = DEFAULT_CATALOG,
        now: t.Optional[datetime] = None,
        repository: t.Optional[TaskRepository] = None,
        user_id: t.Optional[str] = None,
) -> QuickAddResult:
    """Parse ``text``, create a task and add it to the store.

    The task is in the store before the storage collaborator is called, so
    callers can render it right away.

    :param text: Raw quick-add input.
    :param store: Planner store that receives the task.
    :param catalog: Subjects that #tags resolve against.
    :param now: Reference time for parsing and creation; defaults to the local clock.
    :param repository: Optional storage to persist the task to.
    :param user_id: Owner of the task in ``repository``.
    :return: QuickAddResult with either the task or an error.
    """
    text = text.strip()
    if not text:
        return QuickAddResult(error=EMPTY_INPUT_ERROR)

    if now is None:
        now = local_now()
    parsed = parse_task_text(text, now=now, catalog=catalog)
    if parsed is None:
        return QuickAddResult(error=PARSE_ERROR)

    task = create_task(parsed, now=now)
    store.add_task(task)
    logger.info("Quick-added %s %r due %s", task.id, task.title, task.due_date.isoformat())

    if repository is not None and user_id is not None:
        repository.add(user_id, task)
    return QuickAddResult(task=task)
