"""
Duplicate detector.

Groups tasks by customer, compares every pair within a customer once,
and emits a finding for each pair the similarity engine flags. The earlier
task of a pair is the original; ties keep the first task seen.

Time saved per finding is the duplicate's SLA warning time plus up to ±10%
random jitter. Pass a seeded random.Random for reproducible output.
"""
from __future__ import annotations

import logging
import random
from typing import Iterable, Optional, Sequence

from ..config import DetectionConfig
from ..storage.models import DuplicateFinding, Task, TaskType, TypeInsight
from .similarity import classify_pair
from .sla import baseline_minutes
from .timeutil import parse_timestamp, round_half_up

logger = logging.getLogger(__name__)


def estimate_time_saved(
    task: Task,
    rng: Optional[random.Random] = None,
    jitter_ratio: float = 0.20,
) -> int:
    """Minutes saved by not doing `task` twice."""
    rng = rng or random.Random()
    base = baseline_minutes(task)
    jitter = base * jitter_ratio
    return round_half_up(base + rng.uniform(-jitter / 2, jitter / 2))


def group_by_customer(tasks: Iterable[Task]) -> dict[str, list[Task]]:
    """Customer id → tasks, in input order."""
    groups: dict[str, list[Task]] = {}
    for task in tasks:
        groups.setdefault(task.customer_id, []).append(task)
    return groups


def _order_pair(task1: Task, task2: Task) -> tuple[Task, Task]:
    t1 = parse_timestamp(task1.timestamp)
    t2 = parse_timestamp(task2.timestamp)
    if t1 is not None and t2 is not None and t2 < t1:
        return task2, task1
    return task1, task2


def detect_duplicates(
    tasks: Sequence[Task],
    rng: Optional[random.Random] = None,
    rules: Optional[DetectionConfig] = None,
) -> list[DuplicateFinding]:
    rules = rules or DetectionConfig()
    rng = rng or random.Random(rules.seed)

    findings: list[DuplicateFinding] = []
    seen_pairs: set[tuple[str, str]] = set()

    for customer_tasks in group_by_customer(tasks).values():
        if len(customer_tasks) < 2:
            continue

        for i, task1 in enumerate(customer_tasks):
            for task2 in customer_tasks[i + 1:]:
                pair_key = tuple(sorted((task1.id, task2.id)))
                if pair_key in seen_pairs:
                    continue
                seen_pairs.add(pair_key)

                decision = classify_pair(task1, task2, rules)
                if decision is None:
                    continue

                original, duplicate = _order_pair(task1, task2)
                findings.append(DuplicateFinding(
                    original_task_id=original.id,
                    duplicate_task_id=duplicate.id,
                    reason=decision.reason,
                    similarity_score=decision.similarity,
                    suggested_action=decision.suggested_action,
                    time_saved=estimate_time_saved(duplicate, rng, rules.jitter_ratio),
                ))

    logger.debug(f"Compared {len(seen_pairs)} pair(s), flagged {len(findings)}")
    return findings


def original_task_for(
    tasks: Sequence[Task],
    findings: Sequence[DuplicateFinding],
    duplicate_id: str,
) -> Optional[Task]:
    finding = next((f for f in findings if f.duplicate_task_id == duplicate_id), None)
    if finding is None:
        return None
    return next((t for t in tasks if t.id == finding.original_task_id), None)


def insights_by_task_type(
    tasks: Sequence[Task], findings: Sequence[DuplicateFinding]
) -> dict[TaskType, TypeInsight]:
    """Task count, duplicate count and time saved per task type."""
    insights = {task_type: TypeInsight() for task_type in TaskType}
    by_id = {t.id: t for t in tasks}

    for task in tasks:
        insights[task.task_type].count += 1

    for finding in findings:
        duplicate = by_id.get(finding.duplicate_task_id)
        if duplicate is not None:
            insight = insights[duplicate.task_type]
            insight.duplicates += 1
            insight.time_saved += finding.time_saved

    return insights
