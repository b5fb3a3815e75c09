"""
Data models for the weekly planner.

This module contains all the dataclasses used to represent subjects, parsed
quick-add input, tasks and the week plan aggregate held by the planner store.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
import typing as t


# Type literals for commonly used values
Priority = t.Literal["low", "medium", "high"]
TaskStatus = t.Literal["pending", "in_progress", "completed"]
ViewMode = t.Literal["calendar", "list", "timeline"]

VIEW_MODES: tuple[str, ...] = t.get_args(ViewMode)
TASK_STATUSES: tuple[str, ...] = t.get_args(TaskStatus)
PRIORITIES: tuple[str, ...] = t.get_args(Priority)


@dataclass(frozen=True)
class Subject:
    """A school subject with its display name, color and icon."""
    id: str
    name: str
    color: str
    icon: str


@dataclass(frozen=True)
class ParsedTask:
    """
    Structured result of parsing one line of quick-add text.

    Transient: it is never persisted and has no identity.
    """
    due_date: datetime
    title: str = ""
    subject_id: str = ""
    linked_goal_id: t.Optional[str] = None  # dotted objective code, e.g. "10.3.2.1"
    estimated_effort: int = 30              # minutes
    priority: Priority = "medium"
    status: TaskStatus = "pending"


@dataclass
class ChecklistItem:
    """A sub-step of a task."""
    id: str
    text: str
    completed: bool = False


@dataclass
class Task:
    """A planned study task."""
    id: str
    title: str
    due_date: datetime
    created_at: datetime
    updated_at: datetime
    position: float             # order key within a day, creation time in ms
    subject_id: str = ""
    linked_goal_id: t.Optional[str] = None
    estimated_effort: int = 30  # minutes
    status: TaskStatus = "pending"
    priority: Priority = "medium"
    tags: list[str] = field(default_factory=list)
    description: str = ""
    pomodoro_count: int = 0
    checklist: list[ChecklistItem] = field(default_factory=list)


@dataclass
class WeekMeta:
    """
    Summary counters of a week plan.

    These are informational and maintained by callers; see PlannerStore.sync_meta.
    """
    streak: int = 0
    total_study_hours: float = 0.0
    completed_tasks: int = 0
    total_tasks: int = 0


@dataclass
class WeekPlan:
    """One week's tasks plus summary metadata."""
    id: str
    created_at: datetime
    updated_at: datetime
    week_start: date
    meta: WeekMeta = field(default_factory=WeekMeta)
    tasks: list[Task] = field(default_factory=list)

    def days(self) -> list[date]:
        """The seven dates of this week, starting at week_start."""
        return [self.week_start + timedelta(days=offset) for offset in range(7)]

    def tasks_on(self, day: date) -> list[Task]:
        """Tasks due on the given day, ordered by position."""
        return sorted(
            (task for task in self.tasks if task.due_date.date() == day),
            key=lambda task: task.position,
        )

    def progress_percent(self) -> float:
        """Share of completed tasks, computed from the task list."""
        if not self.tasks:
            return 0.0
        completed = sum(1 for task in self.tasks if task.status == "completed")
        return completed / len(self.tasks) * 100

    def planned_minutes(self) -> int:
        return sum(task.estimated_effort for task in self.tasks)


@dataclass
class PlannerState:
    """Everything the planner store holds."""
    current_week_start: date
    view_mode: ViewMode = "calendar"
    selected_subjects: list[str] = field(default_factory=list)
    show_heatmap: bool = False
    week_plan: t.Optional[WeekPlan] = None


def start_of_week(day: date, first_weekday: int = 0) -> date:
    """Return the first day of the week containing ``day``.

    :param day: Any date in the week.
    :param first_weekday: 0 for Monday through 6 for Sunday.
    :return: The date the week starts on.
    """
    if isinstance(day, datetime):
        day = day.date()
    return day - timedelta(days=(day.weekday() - first_weekday) % 7)
