"""
Report filtering: narrow tasks and findings to a date range and task type,
then rebuild the metrics for that slice.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional, Sequence

from ..engine.metrics import compute_metrics, duplicates_by_day
from ..engine.timeutil import parse_timestamp, utc_now
from ..storage.models import DashboardMetrics, DuplicateFinding, Task, TaskType


@dataclass(frozen=True)
class ReportFilter:
    start_date: Optional[date] = None
    end_date: Optional[date] = None  # inclusive, whole UTC day
    task_type: Optional[TaskType] = None  # None means all types

    @property
    def is_filtered(self) -> bool:
        return bool(self.start_date or self.end_date or self.task_type)

    def matches(self, task: Task) -> bool:
        if self.task_type is not None and task.task_type != self.task_type:
            return False
        if self.start_date is None and self.end_date is None:
            return True

        created = parse_timestamp(task.timestamp)
        if created is None:
            return False
        day = created.date()
        if self.start_date is not None and day < self.start_date:
            return False
        if self.end_date is not None and day > self.end_date:
            return False
        return True

    def describe(self) -> str:
        parts = []
        if self.start_date and self.end_date:
            parts.append(f"Date range: {self.start_date} to {self.end_date}")
        elif self.start_date:
            parts.append(f"From: {self.start_date}")
        elif self.end_date:
            parts.append(f"Until: {self.end_date}")
        if self.task_type:
            parts.append(f"Task type: {self.task_type.value.replace('-', ' ')}")
        return "Filters: " + " ".join(parts) if parts else ""


@dataclass
class ReportData:
    tasks: list[Task]
    findings: list[DuplicateFinding]
    metrics: DashboardMetrics
    generated_at: datetime = field(default_factory=utc_now)


def filter_report_data(
    tasks: Sequence[Task],
    findings: Sequence[DuplicateFinding],
    report_filter: Optional[ReportFilter] = None,
) -> ReportData:
    """
    Keep tasks matching the filter, and findings whose duplicate task
    matches it. Metrics are recomputed over the kept slice.
    """
    report_filter = report_filter or ReportFilter()
    by_id = {t.id: t for t in tasks}

    kept_tasks = [t for t in tasks if report_filter.matches(t)]
    kept_findings = [
        f for f in findings
        if f.duplicate_task_id in by_id and report_filter.matches(by_id[f.duplicate_task_id])
    ]

    metrics = compute_metrics(kept_tasks, kept_findings)
    # Originals may fall outside the slice; look them up in the full list
    metrics.duplicates_by_day = duplicates_by_day(tasks, kept_findings)

    return ReportData(tasks=kept_tasks, findings=kept_findings, metrics=metrics)
