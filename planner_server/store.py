# -*- coding: utf-8 -*-
"""
Planner state container.

PlannerStore is the only writer of planner state. Every operation is a
synchronous transition that swaps in new WeekPlan and task list objects
instead of editing them in place, so a snapshot taken earlier never changes
underneath its reader. A lock serialises transitions for callers that share a
store across threads (one store per user, see StoreRegistry).
"""
from __future__ import annotations

import logging
import threading
import typing as t
from dataclasses import fields, replace
from datetime import date, datetime

from .config import PLANNER_FIRST_WEEKDAY, local_now
from .models import (
    PRIORITIES, TASK_STATUSES, VIEW_MODES, PlannerState, Task, ViewMode, WeekMeta, WeekPlan, start_of_week,
)

logger = logging.getLogger(__name__)

TASK_FIELDS = frozenset(f.name for f in fields(Task))


def week_plan_id(week_start: date) -> str:
    return f"week_{week_start.isoformat()}"


def _validate_updates(task_id: str, updates: t.Mapping[str, t.Any]) -> None:
    unknown = set(updates) - TASK_FIELDS
    if unknown:
        raise ValueError(f"Unknown task fields: {', '.join(sorted(unknown))}")
    if "id" in updates and updates["id"] != task_id:
        raise ValueError("Task id cannot be changed")
    if "status" in updates and updates["status"] not in TASK_STATUSES:
        raise ValueError(f"Invalid status: {updates['status']!r}")
    if "priority" in updates and updates["priority"] not in PRIORITIES:
        raise ValueError(f"Invalid priority: {updates['priority']!r}")


class PlannerStore:
    """Holds the week plan in view plus the planner's view settings."""

    def __init__(
            self,
            state: t.Optional[PlannerState] = None,
            *,
            clock: t.Callable[[], datetime] = local_now,
            first_weekday: t.Optional[int] = None,
    ) -> None:
        self._clock = clock
        self._first_weekday = PLANNER_FIRST_WEEKDAY if first_weekday is None else first_weekday
        if state is None:
            state = PlannerState(current_week_start=start_of_week(clock().date(), self._first_weekday))
        self._state = state
        self._lock = threading.RLock()

    @property
    def state(self) -> PlannerState:
        return self._state

    @property
    def week_plan(self) -> t.Optional[WeekPlan]:
        return self._state.week_plan

    @property
    def first_weekday(self) -> int:
        return self._first_weekday

    def _set(self, **changes: t.Any) -> None:
        self._state = replace(self._state, **changes)

    def get_task(self, task_id: str) -> t.Optional[Task]:
        plan = self._state.week_plan
        if plan is None:
            return None
        for task in plan.tasks:
            if task.id == task_id:
                return task
        return None

    def add_task(self, task: Task) -> WeekPlan:
        """Append a task to the week plan, creating the plan if there is none.

        A new plan starts at the current week with ``meta.total_tasks = 1``.
        The task list is not re-sorted; views sort by position or due date.

        :param task: Task to append.
        :return: The week plan after the append.
        :raises ValueError: If a task with the same id is already planned.
        """
        with self._lock:
            plan = self._state.week_plan
            if plan is None:
                now = self._clock()
                week_start = self._state.current_week_start
                plan = WeekPlan(
                    id=week_plan_id(week_start),
                    created_at=now,
                    updated_at=now,
                    week_start=week_start,
                    meta=WeekMeta(total_tasks=1),
                    tasks=[task],
                )
                logger.info("Started week plan %s", plan.id)
            else:
                if any(existing.id == task.id for existing in plan.tasks):
                    raise ValueError(f"Task {task.id!r} is already in the week plan")
                plan = replace(plan, tasks=[*plan.tasks, task])
            self._set(week_plan=plan)
            logger.debug("Added task %s", task.id)
            return plan

    def update_task(self, task_id: str, updates: t.Mapping[str, t.Any]) -> bool:
        """Merge field updates into one task.

        Other tasks keep their identity and order. Timestamps and position are
        left alone unless they are part of ``updates``.

        :param task_id: Id of the task to change.
        :param updates: Field names of Task mapped to new values.
        :return: True if a task was changed, False if there is no plan or no such task.
        :raises ValueError: For unknown fields, a changed id, or an invalid status/priority.
        """
        _validate_updates(task_id, updates)
        with self._lock:
            plan = self._state.week_plan
            if plan is None:
                return False
            for index, task in enumerate(plan.tasks):
                if task.id == task_id:
                    break
            else:
                logger.debug("update_task: %s not found", task_id)
                return False
            tasks = list(plan.tasks)
            tasks[index] = replace(task, **updates)
            self._set(week_plan=replace(plan, tasks=tasks))
            return True

    def remove_task(self, task_id: str) -> bool:
        """Drop a task from the week plan. Meta counters are not touched.

        :return: True if a task was removed. When nothing matches, the
            existing task list object is kept as is.
        """
        with self._lock:
            plan = self._state.week_plan
            if plan is None or not any(task.id == task_id for task in plan.tasks):
                return False
            tasks = [task for task in plan.tasks if task.id != task_id]
            self._set(week_plan=replace(plan, tasks=tasks))
            logger.debug("Removed task %s", task_id)
            return True

    def set_week_plan(self, plan: t.Optional[WeekPlan]) -> None:
        with self._lock:
            self._set(week_plan=plan)

    def set_view_mode(self, mode: ViewMode) -> None:
        if mode not in VIEW_MODES:
            raise ValueError(f"Invalid view mode: {mode!r}")
        with self._lock:
            self._set(view_mode=mode)

    def set_current_week_start(self, day: date) -> None:
        """Point the planner at the week containing ``day``.

        Loading that week's plan from storage is up to the caller.
        """
        with self._lock:
            self._set(current_week_start=start_of_week(day, self._first_weekday))

    def set_selected_subjects(self, subjects: t.Iterable[str]) -> None:
        with self._lock:
            self._set(selected_subjects=list(subjects))

    def set_show_heatmap(self, show: bool) -> None:
        with self._lock:
            self._set(show_heatmap=bool(show))

    def sync_meta(self) -> t.Optional[WeekMeta]:
        """Recount total/completed tasks and completed study hours from the task list.

        The counters are never refreshed by add/update/remove on their own;
        callers invoke this when they want them to match the tasks. The streak
        is left unchanged.

        :return: The new meta, or None if there is no week plan.
        """
        with self._lock:
            plan = self._state.week_plan
            if plan is None:
                return None
            completed = [task for task in plan.tasks if task.status == "completed"]
            meta = replace(
                plan.meta,
                total_tasks=len(plan.tasks),
                completed_tasks=len(completed),
                total_study_hours=round(sum(task.estimated_effort for task in completed) / 60, 2),
            )
            self._set(week_plan=replace(plan, meta=meta, updated_at=self._clock()))
            return meta


class StoreRegistry:
    """One PlannerStore per user, created on first use."""

    def __init__(self, store_factory: t.Callable[[], PlannerStore] = PlannerStore) -> None:
        self._store_factory = store_factory
        self._stores: dict[str, PlannerStore] = {}
        self._lock = threading.Lock()

    def get(self, user_id: str) -> PlannerStore:
        with self._lock:
            store = self._stores.get(user_id)
            if store is None:
                store = self._store_factory()
                self._stores[user_id] = store
                logger.debug("Created planner store for user %s", user_id)
            return store

    def __contains__(self, user_id: object) -> bool:
        return user_id in self._stores

    def __len__(self) -> int:
        return len(self._stores)
