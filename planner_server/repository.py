# -*- coding: utf-8 -*-
"""
Task storage collaborator.

The real application keeps tasks in a managed document database. The planner
only needs create/read/update/delete keyed by user, described by
TaskRepository. InMemoryTaskRepository is the stand-in used by the services
and tests.
"""
from __future__ import annotations

import logging
import threading
import typing as t
from dataclasses import replace

from .models import Task

logger = logging.getLogger(__name__)


class TaskRepository(t.Protocol):
    """Persistent task storage, keyed by user id."""

    def add(self, user_id: str, task: Task) -> str: ...

    def get(self, user_id: str, task_id: str) -> t.Optional[Task]: ...

    def update(self, user_id: str, task_id: str, updates: t.Mapping[str, t.Any]) -> bool: ...

    def delete(self, user_id: str, task_id: str) -> bool: ...

    def list_tasks(self, user_id: str) -> list[Task]: ...


class InMemoryTaskRepository:
    """Keeps tasks in a dict per user; last write wins."""

    def __init__(self) -> None:
        self._tasks: dict[str, dict[str, Task]] = {}
        self._lock = threading.Lock()

    def add(self, user_id: str, task: Task) -> str:
        with self._lock:
            self._tasks.setdefault(user_id, {})[task.id] = task
        logger.debug("Stored task %s for user %s", task.id, user_id)
        return task.id

    def get(self, user_id: str, task_id: str) -> t.Optional[Task]:
        return self._tasks.get(user_id, {}).get(task_id)

    def update(self, user_id: str, task_id: str, updates: t.Mapping[str, t.Any]) -> bool:
        with self._lock:
            tasks = self._tasks.get(user_id, {})
            if task_id not in tasks:
                return False
            tasks[task_id] = replace(tasks[task_id], **updates)
            return True

    def delete(self, user_id: str, task_id: str) -> bool:
        with self._lock:
            return self._tasks.get(user_id, {}).pop(task_id, None) is not None

    def list_tasks(self, user_id: str) -> list[Task]:
        return list(self._tasks.get(user_id, {}).values())
