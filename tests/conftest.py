"""
Shared pytest fixtures.

This module provides fixtures for:
- Building tasks with sensible defaults
- A fixed clock
- An in-memory task store
"""

import random
from datetime import datetime, timezone
from typing import Callable, Optional

import pytest

from bankflowai.config import DetectionConfig, SeedConfig
from bankflowai.storage.models import Task, TaskPriority, TaskStatus, TaskType
from bankflowai.storage.store import MemoryStorage, TaskStore

FIXED_NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


class MidpointRng:
    """Random source whose jitter is always zero."""

    def uniform(self, a: float, b: float) -> float:
        return (a + b) / 2


@pytest.fixture
def now() -> datetime:
    return FIXED_NOW


@pytest.fixture
def make_task() -> Callable[..., Task]:
    counter = {"n": 0}

    def _make(
        customer_id: str = "C1",
        task_type: TaskType = TaskType.KYC_CHECK,
        description: str = "Complete KYC verification for C1",
        timestamp: str = "2026-10-18T09:00:00.000Z",
        status: TaskStatus = TaskStatus.PENDING,
        priority: Optional[TaskPriority] = None,
        task_id: Optional[str] = None,
        **extra,
    ) -> Task:
        counter["n"] += 1
        return Task(
            id=task_id or f"t{counter['n']}",
            customer_id=customer_id,
            task_type=task_type,
            description=description,
            timestamp=timestamp,
            status=status,
            priority=priority,
            **extra,
        )

    return _make


@pytest.fixture
def zero_jitter() -> MidpointRng:
    return MidpointRng()


@pytest.fixture
def memory_store() -> TaskStore:
    """Store over empty in-memory storage with a small seeded demo set."""
    return TaskStore(
        MemoryStorage(),
        detection=DetectionConfig(seed=7),
        seed=SeedConfig(mock_task_count=20, random_seed=42),
        rng=random.Random(7),
        clock=lambda: FIXED_NOW,
    )
