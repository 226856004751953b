"""
Demo task generator.

Most tasks are fresh customers with templated descriptions; the rest are
near-copies of existing tasks so the detector has something to find.
"""
from __future__ import annotations

import math
import random
import re
from dataclasses import replace
from datetime import datetime, timedelta
from typing import Optional

from ..engine.timeutil import round_half_up, to_iso, utc_now
from .models import Task, TaskPriority, TaskStatus, TaskType

CUSTOMER_PREFIX = "CUST"

ASSIGNEES = ["John Smith", "Emma Wilson", "Michael Chen", "Priya Patel"]

DESCRIPTION_TEMPLATES: dict[TaskType, list[str]] = {
    TaskType.LOAN_APPROVAL: [
        "Review loan application for customer",
        "Process mortgage approval for",
        "Verify loan documents for",
        "Analyze credit history for loan application",
        "Finalize loan terms for customer",
    ],
    TaskType.KYC_CHECK: [
        "Complete KYC verification for new customer",
        "Review customer identification documents",
        "Perform background check for client",
        "Update KYC records for customer",
        "Finalize KYC compliance check for",
    ],
    TaskType.TRANSACTION_REVIEW: [
        "Review high-value transaction for customer",
        "Verify international transfer details for",
        "Analyze suspicious transaction pattern for account",
        "Complete transaction approval for customer",
        "Finalize transaction security check for",
    ],
    TaskType.ACCOUNT_OPENING: [
        "Process new account application for",
        "Setup online banking for new account",
        "Complete account verification for client",
        "Initialize premium account for customer",
        "Finalize account opening procedure for",
    ],
    TaskType.CREDIT_CHECK: [
        "Perform credit score analysis for",
        "Review credit history for customer",
        "Complete credit risk assessment for",
        "Verify credit references for customer",
        "Finalize credit limit approval for",
    ],
}

_CUSTOMER_WORD = re.compile(r"for (customer|client)")


def _task_id(rng: random.Random) -> str:
    return f"{rng.getrandbits(36):09x}"


def _customer_id(rng: random.Random) -> str:
    return f"{CUSTOMER_PREFIX}{rng.randint(10_000_000, 99_999_999)}"


def _describe(template: str, customer_id: str) -> str:
    if _CUSTOMER_WORD.search(template):
        return _CUSTOMER_WORD.sub(f"for {customer_id}", template, count=1)
    return f"{template} {customer_id}"


# Rewordings for near-copies, applied after the customer id is filled in
WORDING_VARIATIONS = [("Review", "Check"), ("Complete", "Finish"), ("Verify", "Validate")]


def _vary(description: str, rng: random.Random) -> str:
    variations = [description]
    variations.extend(description.replace(old, new) for old, new in WORDING_VARIATIONS)
    return rng.choice(variations)


def _recent_moment(rng: random.Random, now: datetime, days_back: int) -> datetime:
    offset = timedelta(
        days=rng.randrange(max(days_back, 1)),
        hours=rng.randrange(24),
        minutes=rng.randrange(60),
    )
    return now - offset


def _completion_time(status: TaskStatus, created: datetime, now: datetime) -> Optional[int]:
    """Minutes since creation for completed tasks, like the store stamps them."""
    if status != TaskStatus.COMPLETED:
        return None
    return max(round_half_up((now - created).total_seconds() / 60), 0)


def generate_mock_tasks(
    count: int,
    rng: Optional[random.Random] = None,
    now: Optional[datetime] = None,
    duplicate_ratio: float = 0.20,
    days_back: int = 7,
) -> list[Task]:
    rng = rng or random.Random()
    now = now or utc_now()
    if count <= 0:
        return []

    base_count = max(1, math.ceil(count * (1 - duplicate_ratio)))
    tasks: list[Task] = []

    for _ in range(base_count):
        task_type = rng.choice(list(TaskType))
        customer_id = _customer_id(rng)
        template = rng.choice(DESCRIPTION_TEMPLATES[task_type])
        task_id = _task_id(rng)
        created = _recent_moment(rng, now, days_back)
        status = rng.choice(list(TaskStatus))
        tasks.append(Task(
            id=task_id,
            customer_id=customer_id,
            task_type=task_type,
            description=_describe(template, customer_id),
            timestamp=to_iso(created),
            status=status,
            completion_time=_completion_time(status, created, now),
            priority=rng.choice(list(TaskPriority)),
            assigned_to=rng.choice(ASSIGNEES),
        ))

    for _ in range(count - base_count):
        original = rng.choice(tasks)
        task_id = _task_id(rng)
        description = _vary(original.description, rng)
        created = _recent_moment(rng, now, days_back)
        status = rng.choice(list(TaskStatus))
        tasks.append(replace(
            original,
            id=task_id,
            description=description,
            timestamp=to_iso(created),
            status=status,
            completion_time=_completion_time(status, created, now),
        ))

    return tasks
