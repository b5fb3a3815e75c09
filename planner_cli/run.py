# -*- coding: utf-8 -*-
import typing as t
from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from planner_server.config import PLANNER_STATE_PATH, configure_logging
from planner_server.models import ParsedTask, WeekPlan
from planner_server.parser import parse_task_text
from planner_server.persistence import PersistenceError, load_state_file, save_state
from planner_server.quick_add import quick_add
from planner_server.store import PlannerStore
from planner_server.subjects import DEFAULT_CATALOG

console = Console()
err_console = Console(stderr=True)


def _fail(message: str) -> t.NoReturn:
    err_console.print(f"[red]Error:[/red] {message}")
    raise SystemExit(1)


def truncate_title(title: str, max_length: int = 45) -> str:
    """Truncate title to max_length characters, adding ellipsis if needed."""
    if len(title) <= max_length:
        return title
    return title[:max_length-3] + "..."


def short_id(task_id: str) -> str:
    """The random suffix of a task id, enough to refer to it on the command line."""
    return task_id.rsplit("_", 1)[-1]


def _load_store(state_path: Path) -> PlannerStore:
    try:
        state = load_state_file(state_path)
    except PersistenceError as e:
        _fail(str(e))
    return PlannerStore(state)


def _resolve_task_id(store: PlannerStore, ref: str) -> str:
    """Accept either a full task id or its short suffix."""
    plan = store.week_plan
    if plan is None:
        _fail("No week plan yet. Add a task first.")
    matches = [task.id for task in plan.tasks if task.id == ref or short_id(task.id) == ref]
    if not matches:
        _fail(f"Task '{ref}' not found.")
    if len(matches) > 1:
        _fail(f"Task reference '{ref}' is ambiguous.")
    return matches[0]


def create_parsed_table(parsed: ParsedTask) -> Table:
    """Create a two-column table of parsed quick-add fields."""
    subject = DEFAULT_CATALOG.get(parsed.subject_id)
    table = Table(title="🔍 Parsed Task", show_header=False)
    table.add_column("Field", style="cyan")
    table.add_column("Value", style="white")
    table.add_row("Title", escape(parsed.title))
    table.add_row("Subject", f"{subject.icon} {subject.name}" if subject else "—")
    table.add_row("Objective", parsed.linked_goal_id or "—")
    table.add_row("Due", parsed.due_date.strftime("%a %d.%m %H:%M"))
    table.add_row("Effort", f"{parsed.estimated_effort} min")
    table.add_row("Priority", parsed.priority)
    return table


def create_week_table(plan: WeekPlan) -> Table:
    """Create a table of the week's tasks, grouped by day and ordered by position."""
    table = Table(
        title=f"📅 Week of {plan.week_start.isoformat()}",
        show_header=True,
        header_style="bold magenta",
    )
    table.add_column("Day", style="yellow")
    table.add_column("Time", style="yellow")
    table.add_column("Title", style="white")
    table.add_column("Subject", style="cyan")
    table.add_column("Effort", justify="right")
    table.add_column("Status")
    table.add_column("ID", style="dim")

    status_marks = {"pending": "·", "in_progress": "▶", "completed": "✓"}
    week_days = plan.days()
    for day in week_days:
        for idx, task in enumerate(plan.tasks_on(day)):
            subject = DEFAULT_CATALOG.get(task.subject_id)
            title = escape(truncate_title(task.title))
            if task.priority == "high":
                title = f"[bold red]![/bold red] {title}"
            table.add_row(
                day.strftime("%a %d.%m") if idx == 0 else "",
                task.due_date.strftime("%H:%M"),
                title,
                subject.name if subject else "",
                f"{task.estimated_effort}m",
                status_marks[task.status],
                short_id(task.id),
            )

    for task in sorted(plan.tasks, key=lambda task: task.due_date):
        if task.due_date.date() in week_days:
            continue
        table.add_row(
            task.due_date.strftime("%a %d.%m"),
            task.due_date.strftime("%H:%M"),
            escape(truncate_title(task.title)),
            "",
            f"{task.estimated_effort}m",
            status_marks[task.status],
            short_id(task.id),
        )
    return table


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.option(
    "--state",
    "state_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=PLANNER_STATE_PATH,
    show_default=True,
    help="Planner state file.",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
@click.pass_context
def cli(ctx: click.Context, state_path: Path, verbose: bool) -> None:
    """Weekly study planner with natural-language quick-add."""
    configure_logging("DEBUG" if verbose else None)
    ctx.obj = {"state_path": state_path}


@cli.command()
@click.argument("words", nargs=-1, required=True)
def parse(words: tuple[str, ...]) -> None:
    """Show how TEXT would be parsed, without adding anything."""
    parsed = parse_task_text(" ".join(words))
    if parsed is None:
        _fail("Couldn't parse the task. Please try a different format.")
    console.print(create_parsed_table(parsed))


@cli.command()
@click.argument("words", nargs=-1, required=True)
@click.pass_obj
def add(obj: dict, words: tuple[str, ...]) -> None:
    """Add a task from free text, e.g. "essay fri 18:00 2h #literature !high"."""
    state_path = obj["state_path"]
    store = _load_store(state_path)
    result = quick_add(" ".join(words), store)
    if result.task is None:
        _fail(result.error)
    save_state(state_path, store.state)

    task = result.task
    console.print(
        f"[bold green]✓[/bold green] Added [bold]{escape(task.title)}[/bold] "
        f"due {task.due_date.strftime('%a %d.%m %H:%M')} "
        f"({task.estimated_effort} min) [dim]{short_id(task.id)}[/dim]"
    )


@cli.command()
@click.pass_obj
def week(obj: dict) -> None:
    """Show the planned week's tasks.

    The planned week is the one the state file was started in; it does not
    move forward on its own when a new week begins. Use a fresh --state file
    to plan a new week.
    """
    store = _load_store(obj["state_path"])
    plan = store.week_plan
    if plan is None or not plan.tasks:
        console.print("📅 No tasks planned this week.")
        return

    console.print(create_week_table(plan))

    stats_text = Text()
    stats_text.append("Done: ", style="white")
    stats_text.append(f"{plan.progress_percent():.0f}%", style="bold green")
    stats_text.append("\n")
    stats_text.append("Planned: ", style="white")
    stats_text.append(f"{plan.planned_minutes()} min", style="bold green")
    stats_text.append("\n")
    stats_text.append("Streak: ", style="white")
    stats_text.append(f"{plan.meta.streak}", style="bold green")
    console.print(Panel(stats_text, title="📊 Statistics", border_style="green"))


@cli.command()
@click.argument("task_ref")
@click.option(
    "--status",
    type=click.Choice(["pending", "in_progress", "completed"]),
    default="completed",
    show_default=True,
)
@click.pass_obj
def done(obj: dict, task_ref: str, status: str) -> None:
    """Mark TASK_REF (full id or short id) as completed."""
    state_path = obj["state_path"]
    store = _load_store(state_path)
    task_id = _resolve_task_id(store, task_ref)
    store.update_task(task_id, {"status": status})
    save_state(state_path, store.state)
    console.print(f"[bold green]✓[/bold green] {short_id(task_id)} is now {status}")


@cli.command()
@click.argument("task_ref")
@click.pass_obj
def remove(obj: dict, task_ref: str) -> None:
    """Remove TASK_REF from the week plan."""
    state_path = obj["state_path"]
    store = _load_store(state_path)
    task_id = _resolve_task_id(store, task_ref)
    store.remove_task(task_id)
    save_state(state_path, store.state)
    console.print(f"[bold green]✓[/bold green] Removed {short_id(task_id)}")


@cli.command()
@click.pass_obj
def sync(obj: dict) -> None:
    """Recount the week's completed/total tasks and study hours."""
    state_path = obj["state_path"]
    store = _load_store(state_path)
    meta = store.sync_meta()
    if meta is None:
        _fail("No week plan yet. Add a task first.")
    save_state(state_path, store.state)
    console.print(
        f"Completed {meta.completed_tasks}/{meta.total_tasks} task(s), "
        f"{meta.total_study_hours:g} h studied"
    )


@cli.command()
def subjects() -> None:
    """List the subjects #tags can refer to."""
    table = Table(title="📚 Subjects", show_header=True, header_style="bold magenta")
    table.add_column("", width=3)
    table.add_column("Tag", style="cyan")
    table.add_column("Name", style="white")
    for subject in DEFAULT_CATALOG:
        table.add_row(subject.icon, f"#{subject.id}", subject.name)
    console.print(table)


if __name__ == "__main__":
    cli()
