"""
SLA thresholds per task type and priority, in hours.

The warning threshold doubles as the baseline effort of a task: it drives
the time-saved estimate for duplicates and the efficiency denominator.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional

from ..storage.models import Task, TaskPriority, TaskStatus, TaskType
from .timeutil import parse_timestamp, utc_now


@dataclass(frozen=True)
class SlaThreshold:
    warning_hours: float
    overdue_hours: float


H, M, L = TaskPriority.HIGH, TaskPriority.MEDIUM, TaskPriority.LOW

TIME_THRESHOLDS: dict[TaskType, dict[TaskPriority, SlaThreshold]] = {
    TaskType.LOAN_APPROVAL: {
        H: SlaThreshold(2, 4),
        M: SlaThreshold(4, 8),
        L: SlaThreshold(12, 24),
    },
    TaskType.KYC_CHECK: {
        H: SlaThreshold(1, 2),
        M: SlaThreshold(2, 4),
        L: SlaThreshold(4, 8),
    },
    TaskType.TRANSACTION_REVIEW: {
        H: SlaThreshold(0.5, 1),
        M: SlaThreshold(1, 2),
        L: SlaThreshold(2, 4),
    },
    TaskType.ACCOUNT_OPENING: {
        H: SlaThreshold(1, 2),
        M: SlaThreshold(2, 4),
        L: SlaThreshold(4, 8),
    },
    TaskType.CREDIT_CHECK: {
        H: SlaThreshold(2, 4),
        M: SlaThreshold(4, 8),
        L: SlaThreshold(12, 24),
    },
}

del H, M, L


class SlaState(str, Enum):
    NORMAL = "normal"
    WARNING = "warning"
    OVERDUE = "overdue"


@dataclass(frozen=True)
class SlaStatus:
    state: SlaState
    elapsed_hours: float
    threshold: SlaThreshold

    @property
    def hours_remaining(self) -> float:
        return self.threshold.overdue_hours - self.elapsed_hours


def threshold_for(
    task_type: TaskType, priority: Optional[TaskPriority] = None
) -> SlaThreshold:
    return TIME_THRESHOLDS[task_type][priority or TaskPriority.MEDIUM]


def baseline_minutes(task: Task) -> float:
    """Warning threshold of the task, in minutes."""
    return threshold_for(task.task_type, task.priority).warning_hours * 60


def sla_status(task: Task, now: Optional[datetime] = None) -> SlaStatus:
    threshold = threshold_for(task.task_type, task.priority)
    created = parse_timestamp(task.timestamp)
    if created is None:
        return SlaStatus(SlaState.NORMAL, 0.0, threshold)

    elapsed = max(((now or utc_now()) - created).total_seconds() / 3600, 0.0)
    if elapsed >= threshold.overdue_hours:
        state = SlaState.OVERDUE
    elif elapsed >= threshold.warning_hours:
        state = SlaState.WARNING
    else:
        state = SlaState.NORMAL
    return SlaStatus(state, elapsed, threshold)


def is_sla_compliant(task: Task) -> bool:
    """Completed with a recorded completion time inside the overdue limit."""
    if task.status != TaskStatus.COMPLETED or not task.completion_time:
        return False
    limit = threshold_for(task.task_type, task.priority).overdue_hours * 60
    return task.completion_time <= limit
