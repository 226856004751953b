"""
One-shot upgrades applied to stored tasks when the store loads.
"""
from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime
from typing import Sequence

from ..engine.timeutil import parse_timestamp, round_half_up
from .models import Task, TaskStatus

logger = logging.getLogger(__name__)


def backfill_completion_time(
    tasks: Sequence[Task], now: datetime
) -> tuple[list[Task], bool]:
    """
    Give completed tasks recorded before completion times existed a
    completion time of "minutes since creation". Safe to run repeatedly.
    Returns the migrated tasks and whether anything changed.
    """
    migrated: list[Task] = []
    changed = 0

    for task in tasks:
        if task.status == TaskStatus.COMPLETED and task.completion_time is None:
            created = parse_timestamp(task.timestamp)
            if created is not None:
                minutes = round_half_up((now - created).total_seconds() / 60)
                task = replace(task, completion_time=max(minutes, 0))
                changed += 1
        migrated.append(task)

    if changed:
        logger.info(f"Backfilled completion time on {changed} task(s)")
    return migrated, bool(changed)
