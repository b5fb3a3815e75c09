"""
Shared Pydantic models for REST API serialization.

This module contains Pydantic equivalents of the planner dataclasses, plus the
request/response bodies of the planner service, and the converters between
the two representations.
"""
from __future__ import annotations

import typing as t
from dataclasses import asdict
from datetime import date, datetime

from pydantic import BaseModel, Field

from planner_server.models import (
    ChecklistItem as ChecklistItemData,
    ParsedTask as ParsedTaskData,
    PlannerState,
    Priority,
    Subject as SubjectData,
    Task as TaskData,
    TaskStatus,
    ViewMode,
    WeekPlan as WeekPlanData,
)


class Subject(BaseModel):
    """A school subject with its display name, color and icon."""
    id: str
    name: str
    color: str
    icon: str


class ChecklistItem(BaseModel):
    id: str
    text: str
    completed: bool = False


class ParsedTask(BaseModel):
    """Preview of what quick-add would create."""
    title: str
    due_date: datetime
    subject_id: str = ""
    linked_goal_id: t.Optional[str] = None
    estimated_effort: int = 30
    priority: Priority = "medium"
    status: TaskStatus = "pending"


class Task(BaseModel):
    """A planned study task."""
    id: str
    title: str
    due_date: datetime
    created_at: datetime
    updated_at: datetime
    position: float
    subject_id: str = ""
    linked_goal_id: t.Optional[str] = None
    estimated_effort: int = 30
    status: TaskStatus = "pending"
    priority: Priority = "medium"
    tags: list[str] = Field(default_factory=list)
    description: str = ""
    pomodoro_count: int = 0
    checklist: list[ChecklistItem] = Field(default_factory=list)


class WeekMeta(BaseModel):
    streak: int = 0
    total_study_hours: float = 0.0
    completed_tasks: int = 0
    total_tasks: int = 0


class WeekPlan(BaseModel):
    """One week's tasks plus summary metadata."""
    id: str
    created_at: datetime
    updated_at: datetime
    week_start: date
    meta: WeekMeta = Field(default_factory=WeekMeta)
    tasks: list[Task] = Field(default_factory=list)


class PlannerView(BaseModel):
    """View settings of a user's planner."""
    current_week_start: date
    view_mode: ViewMode = "calendar"
    selected_subjects: list[str] = Field(default_factory=list)
    show_heatmap: bool = False


# Request/Response Models for API endpoints
class QuickAddRequest(BaseModel):
    """Request model for parsing or quick-adding a task."""
    text: str


class TaskUpdateRequest(BaseModel):
    """Partial task update; only fields that are sent are applied."""
    title: t.Optional[str] = None
    due_date: t.Optional[datetime] = None
    position: t.Optional[float] = None
    subject_id: t.Optional[str] = None
    linked_goal_id: t.Optional[str] = None
    estimated_effort: t.Optional[int] = None
    status: t.Optional[TaskStatus] = None
    priority: t.Optional[Priority] = None
    tags: t.Optional[list[str]] = None
    description: t.Optional[str] = None
    pomodoro_count: t.Optional[int] = None
    checklist: t.Optional[list[ChecklistItem]] = None


class ViewSettingsRequest(BaseModel):
    """Request model for changing view settings; unset fields stay as they are."""
    view_mode: t.Optional[ViewMode] = None
    current_week_start: t.Optional[date] = None
    selected_subjects: t.Optional[list[str]] = None
    show_heatmap: t.Optional[bool] = None


class WeekPlanResponse(BaseModel):
    """Response model for a user's week plan with figures computed from its tasks."""
    view: PlannerView
    week_plan: t.Optional[WeekPlan] = None
    progress_percent: float = 0.0
    planned_minutes: int = 0


class RemoveTaskResponse(BaseModel):
    removed: bool


def subject_to_model(subject: SubjectData) -> Subject:
    return Subject(**asdict(subject))


def parsed_task_to_model(parsed: ParsedTaskData) -> ParsedTask:
    return ParsedTask(**asdict(parsed))


def task_to_model(task: TaskData) -> Task:
    return Task(**asdict(task))


def week_plan_to_model(plan: WeekPlanData) -> WeekPlan:
    return WeekPlan(**asdict(plan))


def view_to_model(state: PlannerState) -> PlannerView:
    return PlannerView(
        current_week_start=state.current_week_start,
        view_mode=state.view_mode,
        selected_subjects=list(state.selected_subjects),
        show_heatmap=state.show_heatmap,
    )


def update_request_to_fields(request: TaskUpdateRequest) -> dict[str, t.Any]:
    """Turn the fields a client actually sent into store updates."""
    updates = {
        name: value
        for name, value in request.model_dump(exclude_unset=True).items()
        # Only the objective link may be cleared with null
        if value is not None or name == "linked_goal_id"
    }
    if "checklist" in updates:
        updates["checklist"] = [ChecklistItemData(**item) for item in updates["checklist"]]
    return updates
