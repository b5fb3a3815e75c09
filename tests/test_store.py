# -*- coding: utf-8 -*-
"""Tests for the planner store and its per-user registry."""
from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace
from datetime import date

import pytest

from planner_server.models import WeekMeta, WeekPlan, start_of_week
from planner_server.store import PlannerStore, StoreRegistry


def test_new_store_starts_at_current_week(store):
    assert store.state.current_week_start == date(2026, 10, 12)
    assert store.state.view_mode == "calendar"
    assert store.week_plan is None


def test_first_weekday_is_configurable(now):
    sunday_store = PlannerStore(clock=lambda: now, first_weekday=6)

    assert sunday_store.state.current_week_start == date(2026, 10, 11)


def test_add_task_on_empty_store_creates_week_plan(store, make_task, now):
    task = make_task()

    plan = store.add_task(task)

    assert store.week_plan is plan
    assert plan.tasks == [task]
    assert plan.meta == WeekMeta(streak=0, total_study_hours=0.0, completed_tasks=0, total_tasks=1)
    assert plan.week_start == date(2026, 10, 12)
    assert plan.id == "week_2026-10-12"
    assert plan.created_at == plan.updated_at == now


def test_add_task_appends_without_sorting_or_touching_meta(store, make_task):
    late = make_task(position=200.0)
    early = make_task(position=100.0)

    store.add_task(late)
    store.add_task(early)

    assert [task.id for task in store.week_plan.tasks] == [late.id, early.id]
    assert store.week_plan.meta.total_tasks == 1


def test_add_task_is_not_idempotent_across_ids(store, make_task):
    first = make_task(title="same")
    second = replace(first, id="other")

    store.add_task(first)
    store.add_task(second)

    assert len(store.week_plan.tasks) == 2


def test_add_task_rejects_duplicate_id(store, make_task):
    task = make_task()
    store.add_task(task)

    with pytest.raises(ValueError):
        store.add_task(replace(task, title="copy"))
    assert len(store.week_plan.tasks) == 1


def test_update_task_round_trip(store, make_task):
    task = make_task()
    neighbour = make_task()
    store.add_task(task)
    store.add_task(neighbour)

    assert store.update_task(task.id, {"status": "completed"}) is True

    updated = store.get_task(task.id)
    assert updated.status == "completed"
    assert updated == replace(task, status="completed")
    assert updated.position == task.position
    assert store.week_plan.tasks[1] is neighbour
    assert [t.id for t in store.week_plan.tasks] == [task.id, neighbour.id]


def test_update_does_not_mutate_earlier_snapshots(store, make_task):
    task = make_task()
    store.add_task(task)
    before = store.week_plan

    store.update_task(task.id, {"title": "renamed"})

    assert before.tasks[0].title == task.title
    assert store.get_task(task.id).title == "renamed"


def test_update_missing_task_is_a_no_op(store, make_task):
    store.add_task(make_task())
    state_before = store.state

    assert store.update_task("missing", {"status": "completed"}) is False
    assert store.state is state_before


def test_update_without_week_plan_is_a_no_op(store):
    assert store.update_task("any", {"status": "completed"}) is False
    assert store.week_plan is None


@pytest.mark.parametrize(
    "updates",
    [
        {"colour": "red"},
        {"id": "new-id"},
        {"status": "done"},
        {"priority": "urgent"},
    ],
)
def test_update_rejects_invalid_changes(store, make_task, updates):
    task = make_task()
    store.add_task(task)

    with pytest.raises(ValueError):
        store.update_task(task.id, updates)
    assert store.get_task(task.id) == task


def test_remove_task(store, make_task):
    keep = make_task()
    drop = make_task()
    store.add_task(keep)
    store.add_task(drop)
    store.sync_meta()
    meta_before = store.week_plan.meta

    assert store.remove_task(drop.id) is True

    assert store.week_plan.tasks == [keep]
    assert store.week_plan.meta == meta_before


def test_remove_missing_task_keeps_the_same_list(store, make_task):
    store.add_task(make_task())
    tasks_before = store.week_plan.tasks

    assert store.remove_task("missing") is False
    assert store.week_plan.tasks is tasks_before


def test_remove_without_week_plan_is_a_no_op(store):
    assert store.remove_task("any") is False
    assert store.week_plan is None


def test_setters_replace_fields(store, make_task):
    store.set_view_mode("timeline")
    store.set_selected_subjects(["math", "physics"])
    store.set_show_heatmap(True)
    store.set_current_week_start(date(2026, 10, 22))

    state = store.state
    assert state.view_mode == "timeline"
    assert state.selected_subjects == ["math", "physics"]
    assert state.show_heatmap is True
    assert state.current_week_start == date(2026, 10, 19)


def test_set_view_mode_rejects_unknown_mode(store):
    with pytest.raises(ValueError):
        store.set_view_mode("kanban")
    assert store.state.view_mode == "calendar"


def test_set_week_plan(store, make_task, now):
    plan = WeekPlan(id="w", created_at=now, updated_at=now, week_start=date(2026, 10, 12), tasks=[make_task()])

    store.set_week_plan(plan)
    assert store.week_plan is plan

    store.set_week_plan(None)
    assert store.week_plan is None


def test_sync_meta_recounts_from_tasks(store, make_task):
    done = make_task(estimated_effort=90)
    store.add_task(done)
    store.add_task(make_task(estimated_effort=30))
    store.add_task(make_task(estimated_effort=45))
    store.update_task(done.id, {"status": "completed"})

    meta = store.sync_meta()

    assert meta == WeekMeta(streak=0, total_study_hours=1.5, completed_tasks=1, total_tasks=3)
    assert store.week_plan.meta == meta


def test_sync_meta_without_week_plan(store):
    assert store.sync_meta() is None


def test_week_plan_views(store, make_task, now):
    second = make_task(title="second", position=20.0)
    first = make_task(title="first", position=10.0)
    store.add_task(second)
    store.add_task(first)
    store.update_task(first.id, {"status": "completed"})

    plan = store.week_plan
    assert [t.title for t in plan.tasks_on(now.date())] == ["first", "second"]
    assert plan.tasks_on(date(2026, 10, 13)) == []
    assert plan.days()[0] == date(2026, 10, 12)
    assert plan.days()[-1] == date(2026, 10, 18)
    assert plan.progress_percent() == 50.0
    assert plan.planned_minutes() == 60


def test_start_of_week():
    assert start_of_week(date(2026, 10, 14)) == date(2026, 10, 12)
    assert start_of_week(date(2026, 10, 12)) == date(2026, 10, 12)
    assert start_of_week(date(2026, 10, 14), first_weekday=6) == date(2026, 10, 11)


def test_registry_keeps_one_store_per_user():
    registry = StoreRegistry()

    alice = registry.get("alice")

    assert registry.get("alice") is alice
    assert registry.get("bob") is not alice
    assert "alice" in registry
    assert len(registry) == 2


def test_concurrent_adds_are_all_kept(store, make_task):
    tasks = [make_task() for _ in range(50)]

    with ThreadPoolExecutor(max_workers=8) as pool:
        list(pool.map(store.add_task, tasks))

    assert sorted(t.id for t in store.week_plan.tasks) == sorted(t.id for t in tasks)
