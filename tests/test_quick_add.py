# -*- coding: utf-8 -*-
"""Tests for the quick-add flow from text to stored task."""
from planner_server import quick_add as quick_add_module
from planner_server.quick_add import EMPTY_INPUT_ERROR, PARSE_ERROR, quick_add
from planner_server.repository import InMemoryTaskRepository


def test_quick_add_puts_task_in_store_and_repository(store, now):
    repository = InMemoryTaskRepository()

    result = quick_add(
        "  essay draft tomorrow 17:00 2h #literature !high  ",
        store,
        now=now,
        repository=repository,
        user_id="u1",
    )

    assert result.ok
    task = result.task
    assert task.title == "essay draft"
    assert task.subject_id == "literature"
    assert task.estimated_effort == 120
    assert task.priority == "high"
    assert store.week_plan.tasks == [task]
    assert store.week_plan.meta.total_tasks == 1
    assert repository.list_tasks("u1") == [task]


def test_quick_add_without_repository_only_touches_store(store, now):
    result = quick_add("stretch 10min", store, now=now)

    assert result.task.estimated_effort == 10
    assert len(store.week_plan.tasks) == 1


def test_blank_text_is_reported(store, now):
    result = quick_add("   ", store, now=now)

    assert not result.ok
    assert result.error == EMPTY_INPUT_ERROR
    assert store.week_plan is None


def test_parse_failure_is_reported(store, now, monkeypatch):
    monkeypatch.setattr(quick_add_module, "parse_task_text", lambda *args, **kwargs: None)

    result = quick_add("anything", store, now=now)

    assert result.task is None
    assert result.error == PARSE_ERROR
    assert store.week_plan is None


def test_repository_update_and_delete(store, now):
    repository = InMemoryTaskRepository()
    task = quick_add("flashcards", store, now=now, repository=repository, user_id="u1").task

    assert repository.update("u1", task.id, {"status": "in_progress"}) is True
    assert repository.get("u1", task.id).status == "in_progress"
    assert repository.update("u2", task.id, {"status": "completed"}) is False
    assert repository.delete("u1", task.id) is True
    assert repository.delete("u1", task.id) is False
    assert repository.list_tasks("u1") == []
