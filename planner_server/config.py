# -*- coding: utf-8 -*-
"""Runtime settings, read once from environment variables."""
from __future__ import annotations

import logging
import os
import typing as t
from datetime import datetime, tzinfo
from pathlib import Path
from zoneinfo import ZoneInfo

from rich.console import Console
from rich.logging import RichHandler
from tzlocal import get_localzone


# Where the CLI keeps the persisted planner state
PLANNER_STATE_PATH = Path(
    os.getenv("PLANNER_STATE_PATH", str(Path.home() / ".study_planner" / "state.json"))
)

# IANA zone name for interpreting quick-add times, e.g. "Asia/Almaty"; empty means system local
PLANNER_TIMEZONE = os.getenv("PLANNER_TIMEZONE", "")

# 0 = Monday ... 6 = Sunday
PLANNER_FIRST_WEEKDAY = int(os.getenv("PLANNER_FIRST_WEEKDAY", "0"))

PLANNER_LOG_LEVEL = os.getenv("PLANNER_LOG_LEVEL", "WARNING")

PLANNER_SERVICE_PORT = int(os.getenv("PLANNER_SERVICE_PORT", "8004"))


def local_timezone() -> tzinfo:
    """Return the configured IANA zone, or the system zone when none is set.

    Either way the result knows its daylight-saving rules, so a wall-clock
    time on another date gets that date's offset.
    """
    if PLANNER_TIMEZONE:
        return ZoneInfo(PLANNER_TIMEZONE)
    return get_localzone()


def local_now() -> datetime:
    """Current wall-clock time as an aware datetime in the user's zone."""
    return datetime.now(local_timezone())


def configure_logging(level: t.Optional[str] = None) -> None:
    """Send log records to stderr through rich. Called by entry points only."""
    logging.basicConfig(
        level=(level or PLANNER_LOG_LEVEL).upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True, show_path=False)],
    )
