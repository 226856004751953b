"""
Data models for tasks, duplicate findings, and dashboard metrics.
Plain dataclasses. The engine works on these; storage validates at the edge.
"""
from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class TaskType(str, Enum):
    LOAN_APPROVAL = "loan-approval"
    KYC_CHECK = "kyc-check"
    TRANSACTION_REVIEW = "transaction-review"
    ACCOUNT_OPENING = "account-opening"
    CREDIT_CHECK = "credit-check"


class TaskStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class TaskPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class SuggestedAction(str, Enum):
    DELETE = "delete"
    MERGE = "merge"
    REVIEW = "review"


def short_id() -> str:
    return uuid.uuid4().hex[:9]


@dataclass
class Task:
    customer_id: str
    task_type: TaskType
    description: str
    timestamp: str  # ISO 8601 creation time
    status: TaskStatus = TaskStatus.PENDING
    priority: Optional[TaskPriority] = None
    assigned_to: Optional[str] = None
    notes: Optional[str] = None
    completion_time: Optional[float] = None  # minutes, set once on completion
    id: str = field(default_factory=short_id)

    @property
    def effective_priority(self) -> TaskPriority:
        return self.priority or TaskPriority.MEDIUM


@dataclass(frozen=True)
class DuplicateFinding:
    original_task_id: str
    duplicate_task_id: str
    reason: str
    similarity_score: float
    suggested_action: SuggestedAction
    time_saved: int  # minutes


@dataclass(frozen=True)
class DayCount:
    date: str  # YYYY-MM-DD, UTC
    count: int


@dataclass
class DashboardMetrics:
    total_tasks: int = 0
    duplicates_detected: int = 0
    time_saved: int = 0
    efficiency_gain: int = 0
    tasks_by_type: dict[TaskType, int] = field(
        default_factory=lambda: {t: 0 for t in TaskType}
    )
    tasks_by_status: dict[TaskStatus, int] = field(
        default_factory=lambda: {s: 0 for s in TaskStatus}
    )
    duplicates_by_day: list[DayCount] = field(default_factory=list)


@dataclass
class OperationalKpis:
    average_completion_time: int = 0  # minutes
    active_customers: int = 0
    sla_compliance: int = 0  # percent


@dataclass
class TypeInsight:
    count: int = 0
    duplicates: int = 0
    time_saved: int = 0
