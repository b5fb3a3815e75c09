# -*- coding: utf-8 -*-
"""
Serialize and restore planner state.

Only the durable part of the state is written: the current week, the subject
filter, the heatmap toggle and the week plan. The view mode always starts at
its default.
"""
from __future__ import annotations

import logging
import typing as t
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path

from pydantic import TypeAdapter, ValidationError

from .models import PlannerState, WeekPlan

logger = logging.getLogger(__name__)

STATE_VERSION = 1


class PersistenceError(RuntimeError):
    """Raised when stored planner state cannot be read back."""


@dataclass
class PersistedPlannerState:
    """On-disk shape of PlannerState."""
    current_week_start: date
    selected_subjects: list[str] = field(default_factory=list)
    show_heatmap: bool = False
    week_plan: t.Optional[WeekPlan] = None
    version: int = STATE_VERSION


_ADAPTER = TypeAdapter(PersistedPlannerState)


def dump_state(state: PlannerState) -> str:
    """Serialize the durable part of ``state`` to JSON."""
    persisted = PersistedPlannerState(
        current_week_start=state.current_week_start,
        selected_subjects=list(state.selected_subjects),
        show_heatmap=state.show_heatmap,
        week_plan=state.week_plan,
    )
    return _ADAPTER.dump_json(persisted, indent=2).decode("utf-8")


def load_state(payload: t.Union[str, bytes]) -> PlannerState:
    """Rebuild a PlannerState from JSON written by dump_state.

    :raises PersistenceError: If the payload is not valid planner state.
    """
    try:
        persisted = _ADAPTER.validate_json(payload)
    except ValidationError as e:
        raise PersistenceError(f"Invalid planner state: {e}") from e
    if persisted.version != STATE_VERSION:
        raise PersistenceError(f"Unsupported planner state version: {persisted.version}")
    return PlannerState(
        current_week_start=persisted.current_week_start,
        selected_subjects=persisted.selected_subjects,
        show_heatmap=persisted.show_heatmap,
        week_plan=persisted.week_plan,
    )


def save_state(path: t.Union[str, Path], state: PlannerState) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(dump_state(state), encoding="utf-8")
    logger.debug("Saved planner state to %s", path)


def load_state_file(path: t.Union[str, Path]) -> t.Optional[PlannerState]:
    """Read planner state from ``path``; returns None if the file does not exist."""
    path = Path(path)
    if not path.is_file():
        return None
    try:
        payload = path.read_text(encoding="utf-8")
    except OSError as e:
        raise PersistenceError(f"Error reading planner state {path}: {e}") from e
    return load_state(payload)
