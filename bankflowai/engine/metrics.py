"""
Dashboard metrics, rebuilt from the task list and the current findings.
Nothing here is stored; the same inputs always give the same snapshot.
"""
from __future__ import annotations

from typing import Sequence

from ..storage.models import (
    DashboardMetrics,
    DayCount,
    DuplicateFinding,
    OperationalKpis,
    Task,
)
from .sla import baseline_minutes, is_sla_compliant
from .timeutil import parse_timestamp, round_half_up


def compute_metrics(
    tasks: Sequence[Task], findings: Sequence[DuplicateFinding]
) -> DashboardMetrics:
    metrics = DashboardMetrics(
        total_tasks=len(tasks),
        duplicates_detected=len(findings),
    )

    for task in tasks:
        metrics.tasks_by_type[task.task_type] += 1
        metrics.tasks_by_status[task.status] += 1

    metrics.time_saved = sum(f.time_saved for f in findings)

    total_task_time = sum(baseline_minutes(task) for task in tasks)
    if total_task_time > 0:
        metrics.efficiency_gain = round_half_up(
            metrics.time_saved / total_task_time * 100
        )

    metrics.duplicates_by_day = duplicates_by_day(tasks, findings)
    return metrics


def duplicates_by_day(
    tasks: Sequence[Task], findings: Sequence[DuplicateFinding]
) -> list[DayCount]:
    """Findings per UTC calendar day of the original task, oldest day first."""
    by_id = {t.id: t for t in tasks}
    counts: dict[str, int] = {}

    for finding in findings:
        original = by_id.get(finding.original_task_id)
        if original is None:
            continue
        created = parse_timestamp(original.timestamp)
        if created is None:
            continue
        day = created.date().isoformat()
        counts[day] = counts.get(day, 0) + 1

    return [DayCount(date=day, count=counts[day]) for day in sorted(counts)]


def compute_kpis(tasks: Sequence[Task]) -> OperationalKpis:
    total = len(tasks)
    if total == 0:
        return OperationalKpis()

    completion_total = sum(t.completion_time or 0 for t in tasks)
    compliant = sum(1 for t in tasks if is_sla_compliant(t))

    return OperationalKpis(
        average_completion_time=round_half_up(completion_total / total),
        active_customers=len({t.customer_id for t in tasks}),
        sla_compliance=round_half_up(compliant / total * 100),
    )
