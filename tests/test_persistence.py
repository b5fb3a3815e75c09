# -*- coding: utf-8 -*-
"""Tests for saving and restoring planner state."""
import json

import pytest

from planner_server.models import ChecklistItem
from planner_server.persistence import (
    PersistenceError,
    dump_state,
    load_state,
    load_state_file,
    save_state,
)


def test_state_survives_a_save_and_load(store, make_task, tmp_path):
    task = make_task(
        subject_id="math",
        linked_goal_id="10.3.2.1",
        tags=["math"],
        checklist=[ChecklistItem(id="c1", text="read theory"), ChecklistItem(id="c2", text="exercises", completed=True)],
    )
    store.add_task(task)
    store.set_selected_subjects(["math"])
    store.set_show_heatmap(True)
    path = tmp_path / "nested" / "state.json"

    save_state(path, store.state)
    restored = load_state_file(path)

    assert restored.current_week_start == store.state.current_week_start
    assert restored.selected_subjects == ["math"]
    assert restored.show_heatmap is True
    assert restored.week_plan == store.week_plan
    assert restored.week_plan.tasks[0].checklist[1].completed is True


def test_view_mode_is_not_persisted(store):
    store.set_view_mode("list")

    payload = json.loads(dump_state(store.state))
    restored = load_state(dump_state(store.state))

    assert "view_mode" not in payload
    assert restored.view_mode == "calendar"


def test_missing_file_loads_as_none(tmp_path):
    assert load_state_file(tmp_path / "absent.json") is None


@pytest.mark.parametrize(
    "payload",
    [
        "not json",
        '{"selected_subjects": []}',
        '{"current_week_start": "2026-10-12", "version": 99}',
    ],
)
def test_unreadable_state_raises(payload):
    with pytest.raises(PersistenceError):
        load_state(payload)
