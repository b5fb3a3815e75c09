# -*- coding: utf-8 -*-
"""Shared fixtures: a frozen clock and helpers for building tasks."""
import typing as t
from datetime import datetime, timedelta, timezone

import pytest

from planner_server.models import Task
from planner_server.store import PlannerStore

# Wednesday, in a fixed UTC+5 "local" zone
LOCAL_TZ = timezone(timedelta(hours=5))
FROZEN_NOW = datetime(2026, 10, 14, 10, 30, 15, 123000, tzinfo=LOCAL_TZ)


@pytest.fixture
def now() -> datetime:
    return FROZEN_NOW


@pytest.fixture
def store(now: datetime) -> PlannerStore:
    return PlannerStore(clock=lambda: now, first_weekday=0)


@pytest.fixture
def make_task(now: datetime) -> t.Callable[..., Task]:
    """Build a Task with sensible defaults; keyword arguments override fields."""
    counter = {"n": 0}

    def _make(**overrides: t.Any) -> Task:
        counter["n"] += 1
        fields: dict[str, t.Any] = {
            "id": f"task_{counter['n']}",
            "title": f"Task {counter['n']}",
            "due_date": now + timedelta(hours=counter["n"]),
            "created_at": now,
            "updated_at": now,
            "position": float(counter["n"]),
        }
        fields.update(overrides)
        return Task(**fields)

    return _make
