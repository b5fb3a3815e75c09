# -*- coding: utf-8 -*-
import logging
import typing as t
from datetime import datetime
from pathlib import Path

from fastmcp import FastMCP

from planner_server.config import PLANNER_STATE_PATH, configure_logging
from planner_server.models import Subject, Task, WeekPlan
from planner_server.persistence import load_state_file, save_state
from planner_server.quick_add import quick_add
from planner_server.store import PlannerStore
from planner_server.subjects import DEFAULT_CATALOG, SubjectCatalog

logger = logging.getLogger(__name__)


def _quick_add_task(store: PlannerStore, text: str, catalog: SubjectCatalog = DEFAULT_CATALOG) -> Task:
    """Parses quick-add text and adds the resulting task to the week plan.

    :param store: The planner store to add to.
    :param text: Free text such as "read chapter 5 tomorrow 17:00 2h #literature".
    :param catalog: Subjects that #tags resolve against.
    :return: The created Task.
    :raises ValueError: If the text is empty or could not be parsed.
    """
    result = quick_add(text, store, catalog=catalog)
    if result.task is None:
        raise ValueError(result.error)
    return result.task


def _list_tasks(store: PlannerStore) -> list[Task]:
    """Returns the week plan's tasks in insertion order."""
    plan = store.week_plan
    return list(plan.tasks) if plan else []


def _update_task_status(store: PlannerStore, task_id: str, status: str) -> bool:
    """Changes a task's status.

    :return: True if the task exists and was updated.
    """
    return store.update_task(task_id, {"status": status})


def _remove_task(store: PlannerStore, task_id: str) -> bool:
    return store.remove_task(task_id)


def _set_view_mode(store: PlannerStore, mode: str) -> str:
    store.set_view_mode(mode)
    return store.state.view_mode


def _format_time(moment: datetime) -> str:
    return moment.strftime("%H:%M")


def _format_day(moment: datetime) -> str:
    return f"{moment:%a} {moment.month}/{moment.day}"


def _format_row(day_label: str, task: Task, catalog: SubjectCatalog) -> str:
    title = task.title[:34] if len(task.title) > 34 else task.title
    subject = catalog.get(task.subject_id)
    subject_label = subject.name[:11] if subject else "—"
    return (
        f"{day_label:<10} {_format_time(task.due_date):<6} {title:<35} {subject_label:<12} "
        f"{task.estimated_effort:>4} min {task.priority:<8} {task.status:<11}"
    )


def format_week_plan(plan: t.Optional[WeekPlan], catalog: SubjectCatalog = DEFAULT_CATALOG) -> str:
    """Formats a week plan as a table grouped by day.

    Tasks within a day are ordered by position. Tasks due outside the week are
    listed at the end by due date.

    :param plan: The week plan, or None.
    :param catalog: Used to show subject names.
    :return: Formatted table string.
    """
    if plan is None or not plan.tasks:
        return "📅 No tasks planned this week."

    lines = []
    lines.append(f"📅 WEEK OF {plan.week_start.isoformat()}")
    lines.append("=" * 100)
    lines.append(
        f"{'Day':<10} {'Time':<6} {'Title':<35} {'Subject':<12} {'Effort':<8} {'Priority':<8} {'Status':<11}"
    )
    lines.append("-" * 100)

    week_days = plan.days()
    for day in week_days:
        for idx, task in enumerate(plan.tasks_on(day)):
            day_label = _format_day(task.due_date) if idx == 0 else ""
            lines.append(_format_row(day_label, task, catalog))

    outside = sorted(
        (task for task in plan.tasks if task.due_date.date() not in week_days),
        key=lambda task: task.due_date,
    )
    if outside:
        lines.append("-" * 100)
        for task in outside:
            lines.append(_format_row(_format_day(task.due_date), task, catalog))

    lines.append("=" * 100)
    lines.append(
        f"Total: {len(plan.tasks)} task(s), {plan.progress_percent():.0f}% done, "
        f"{plan.planned_minutes()} min planned"
    )
    return "\n".join(lines)


def build_server(
        store: PlannerStore,
        catalog: SubjectCatalog = DEFAULT_CATALOG,
        state_path: t.Optional[Path] = None,
) -> FastMCP:
    """Creates the planner tool server around an existing store.

    :param store: Store the tools read and mutate.
    :param catalog: Subjects that #tags resolve against.
    :param state_path: When given, state is saved there after every change.
    :return: A FastMCP server with the planner tools registered.
    """
    mcp = FastMCP("PlannerServer")

    def _persist() -> None:
        if state_path is not None:
            save_state(state_path, store.state)

    @mcp.tool()
    def quick_add_task(text: str) -> Task:
        """Creates a task from free text.

        Understands #subject tags, objective codes like 10.3.2.1, times like
        "tomorrow 17:00" or "fri 9:30", efforts like 2h or 45min and the
        markers !important, !high and !low.

        :param text: The quick-add text.
        :return: The created task.
        """
        task = _quick_add_task(store, text, catalog)
        _persist()
        return task

    @mcp.tool()
    def list_tasks() -> list[Task]:
        """Lists the tasks of the week plan in the order they were added.

        :return: A list of tasks.
        """
        return _list_tasks(store)

    @mcp.tool()
    def update_task_status(task_id: str, status: str) -> bool:
        """Sets a task's status to pending, in_progress or completed.

        :param task_id: Id of the task.
        :param status: New status.
        :return: True if the task was found and updated.
        """
        updated = _update_task_status(store, task_id, status)
        if updated:
            _persist()
        return updated

    @mcp.tool()
    def remove_task(task_id: str) -> bool:
        """Removes a task from the week plan.

        :param task_id: Id of the task.
        :return: True if the task was removed.
        """
        removed = _remove_task(store, task_id)
        if removed:
            _persist()
        return removed

    @mcp.tool()
    def set_view_mode(mode: str) -> str:
        """Switches the planner view between calendar, list and timeline.

        :param mode: The new view mode.
        :return: The view mode now in effect.
        """
        return _set_view_mode(store, mode)

    @mcp.tool()
    def show_week_plan() -> str:
        """Displays the week plan as a table grouped by day.

        :return: Formatted table of this week's tasks, or a message if there are none.
        """
        return format_week_plan(store.week_plan, catalog)

    @mcp.tool()
    def list_subjects() -> list[Subject]:
        """Lists the subjects that #tags can refer to.

        :return: A list of subjects.
        """
        return list(catalog)

    return mcp


if __name__ == "__main__":
    configure_logging()
    planner_store = PlannerStore(load_state_file(PLANNER_STATE_PATH))
    build_server(planner_store, state_path=PLANNER_STATE_PATH).run()
