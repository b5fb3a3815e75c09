"""
FastAPI service for the weekly planner.

This service exposes the planner core (quick-add parsing, the per-user
planner store and its task operations) as REST API endpoints. Each user gets
their own PlannerStore; created tasks are also handed to the task repository,
which stands in for the document database.
"""
from __future__ import annotations

import logging
import typing as t
from contextlib import asynccontextmanager
from dataclasses import asdict

from fastapi import FastAPI, HTTPException

from planner_server.config import PLANNER_SERVICE_PORT, configure_logging
from planner_server.parser import parse_task_text
from planner_server.quick_add import quick_add
from planner_server.repository import InMemoryTaskRepository, TaskRepository
from planner_server.store import StoreRegistry
from planner_server.subjects import DEFAULT_CATALOG, SubjectCatalog
from services.shared.models import (
    ParsedTask,
    PlannerView,
    QuickAddRequest,
    RemoveTaskResponse,
    Subject,
    Task,
    TaskUpdateRequest,
    ViewSettingsRequest,
    WeekMeta,
    WeekPlanResponse,
    parsed_task_to_model,
    subject_to_model,
    task_to_model,
    update_request_to_fields,
    view_to_model,
    week_plan_to_model,
)

logger = logging.getLogger(__name__)


def create_app(
        registry: t.Optional[StoreRegistry] = None,
        repository: t.Optional[TaskRepository] = None,
        catalog: SubjectCatalog = DEFAULT_CATALOG,
) -> FastAPI:
    """Build the planner API around the given stores.

    :param registry: Per-user planner stores; a fresh registry if omitted.
    :param repository: Task storage; an in-memory repository if omitted.
    :param catalog: Subjects that #tags resolve against.
    :return: The FastAPI application.
    """
    registry = registry if registry is not None else StoreRegistry()
    repository = repository if repository is not None else InMemoryTaskRepository()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Initialize resources on startup and cleanup on shutdown."""
        logger.info("Planner service starting with %d subjects", len(catalog))
        yield

    app = FastAPI(
        title="Planner Service",
        description="REST API for quick-add task parsing and weekly planner management",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.registry = registry
    app.state.repository = repository

    @app.get("/health")
    async def health_check():
        """Health check endpoint for container orchestration."""
        return {"status": "healthy", "service": "planner-service"}

    @app.get("/subjects", response_model=list[Subject])
    async def list_subjects() -> list[Subject]:
        """List the subjects that #tags can refer to."""
        return [subject_to_model(subject) for subject in catalog]

    @app.post("/users/{user_id}/tasks/parse", response_model=ParsedTask)
    async def parse_task(user_id: str, request: QuickAddRequest) -> ParsedTask:
        """
        Preview how quick-add text would be parsed.

        Nothing is stored.
        """
        parsed = parse_task_text(request.text, catalog=catalog)
        if parsed is None:
            raise HTTPException(status_code=422, detail="Couldn't parse the task. Please try a different format.")
        return parsed_task_to_model(parsed)

    @app.post("/users/{user_id}/tasks/quick-add", response_model=Task, status_code=201)
    async def quick_add_task(user_id: str, request: QuickAddRequest) -> Task:
        """
        Create a task from free text and add it to the user's week plan.
        """
        try:
            result = quick_add(
                request.text,
                registry.get(user_id),
                catalog=catalog,
                repository=repository,
                user_id=user_id,
            )
        except Exception as e:
            logger.exception("Quick-add failed for user %s", user_id)
            raise HTTPException(status_code=500, detail=f"Error adding task: {str(e)}")

        if result.task is None:
            raise HTTPException(status_code=422, detail=result.error)
        return task_to_model(result.task)

    @app.get("/users/{user_id}/week-plan", response_model=WeekPlanResponse)
    async def get_week_plan(user_id: str) -> WeekPlanResponse:
        """
        Return the week plan in view, its view settings and figures computed from the tasks.
        """
        store = registry.get(user_id)
        plan = store.week_plan
        if plan is None:
            return WeekPlanResponse(view=view_to_model(store.state))
        return WeekPlanResponse(
            view=view_to_model(store.state),
            week_plan=week_plan_to_model(plan),
            progress_percent=plan.progress_percent(),
            planned_minutes=plan.planned_minutes(),
        )

    @app.patch("/users/{user_id}/tasks/{task_id}", response_model=Task)
    async def update_task(user_id: str, task_id: str, request: TaskUpdateRequest) -> Task:
        """
        Apply a partial update to one task.
        """
        store = registry.get(user_id)
        updates = update_request_to_fields(request)
        try:
            updated = store.update_task(task_id, updates)
        except ValueError as e:
            raise HTTPException(status_code=422, detail=str(e))
        if not updated:
            raise HTTPException(status_code=404, detail=f"Task {task_id} not found")

        repository.update(user_id, task_id, updates)
        return task_to_model(store.get_task(task_id))

    @app.delete("/users/{user_id}/tasks/{task_id}", response_model=RemoveTaskResponse)
    async def remove_task(user_id: str, task_id: str) -> RemoveTaskResponse:
        """
        Remove a task from the week plan and from storage.
        """
        if not registry.get(user_id).remove_task(task_id):
            raise HTTPException(status_code=404, detail=f"Task {task_id} not found")
        repository.delete(user_id, task_id)
        return RemoveTaskResponse(removed=True)

    @app.put("/users/{user_id}/view", response_model=PlannerView)
    async def update_view(user_id: str, request: ViewSettingsRequest) -> PlannerView:
        """
        Change view mode, current week, subject filter or heatmap toggle.
        """
        store = registry.get(user_id)
        if request.view_mode is not None:
            store.set_view_mode(request.view_mode)
        if request.current_week_start is not None:
            store.set_current_week_start(request.current_week_start)
        if request.selected_subjects is not None:
            store.set_selected_subjects(request.selected_subjects)
        if request.show_heatmap is not None:
            store.set_show_heatmap(request.show_heatmap)
        return view_to_model(store.state)

    @app.post("/users/{user_id}/week-plan/sync-meta", response_model=WeekMeta)
    async def sync_meta(user_id: str) -> WeekMeta:
        """
        Recount the week plan's task counters and study hours from its tasks.
        """
        meta = registry.get(user_id).sync_meta()
        if meta is None:
            raise HTTPException(status_code=404, detail="No week plan")
        return WeekMeta(**asdict(meta))

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    configure_logging()
    uvicorn.run(app, host="0.0.0.0", port=PLANNER_SERVICE_PORT)
