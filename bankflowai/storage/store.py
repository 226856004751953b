"""
Task store for BankFlowAI.

Owns the task collection, persists it through a pluggable storage backend
(a JSON file by default), and re-runs duplicate detection and metrics after
every change. Stored records are validated on the way in; malformed ones
are dropped rather than trusted.
"""
from __future__ import annotations

import json
import logging
import random
from dataclasses import fields, replace
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional, Protocol

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ..config import DetectionConfig, SeedConfig
from ..engine.detector import detect_duplicates, original_task_for
from ..engine.metrics import compute_metrics
from ..engine.timeutil import parse_timestamp, round_half_up, to_iso, utc_now
from .migrations import backfill_completion_time
from .mock_data import generate_mock_tasks
from .models import (
    DashboardMetrics,
    DuplicateFinding,
    Task,
    TaskPriority,
    TaskStatus,
    TaskType,
    short_id,
)

logger = logging.getLogger(__name__)

_IMMUTABLE_FIELDS = {"id", "timestamp"}
_TASK_FIELDS = {f.name for f in fields(Task)}


class TaskNotFoundError(KeyError):
    pass


class StoredDataError(ValueError):
    """Stored task data is not a JSON list of records."""


# ------------------------------------------------------------------
# Storage backends
# ------------------------------------------------------------------

class TaskStorage(Protocol):
    def load(self) -> Optional[str]: ...

    def save(self, text: str) -> None: ...


class JsonFileStorage:
    def __init__(self, path: Path):
        self.path = path
        self.path.parent.mkdir(parents=True, exist_ok=True)

    def load(self) -> Optional[str]:
        if not self.path.exists():
            return None
        return self.path.read_text(encoding="utf-8")

    def save(self, text: str) -> None:
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(text, encoding="utf-8")
        tmp.replace(self.path)


class MemoryStorage:
    def __init__(self, text: Optional[str] = None):
        self.text = text

    def load(self) -> Optional[str]:
        return self.text

    def save(self, text: str) -> None:
        self.text = text


# ------------------------------------------------------------------
# Record schema (on-disk shape keeps the camelCase keys)
# ------------------------------------------------------------------

class TaskRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = Field(min_length=1)
    customer_id: str = Field(alias="customerId", min_length=1)
    task_type: TaskType = Field(alias="taskType")
    description: str
    status: TaskStatus
    timestamp: str
    priority: Optional[TaskPriority] = None
    assigned_to: Optional[str] = Field(default=None, alias="assignedTo")
    notes: Optional[str] = None
    completion_time: Optional[float] = Field(
        default=None, alias="completionTime", ge=0
    )

    @field_validator("timestamp")
    @classmethod
    def _timestamp_parses(cls, value: str) -> str:
        if parse_timestamp(value) is None:
            raise ValueError(f"unparseable timestamp {value!r}")
        return value

    @classmethod
    def from_task(cls, task: Task) -> "TaskRecord":
        return cls(**{f.name: getattr(task, f.name) for f in fields(Task)})

    def to_task(self) -> Task:
        return Task(**self.model_dump())


def parse_tasks(text: str) -> list[Task]:
    """Decode stored JSON, keeping only records that validate."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise StoredDataError(f"invalid JSON: {exc}") from exc
    if not isinstance(data, list):
        raise StoredDataError(f"expected a list of tasks, got {type(data).__name__}")

    tasks: list[Task] = []
    for index, item in enumerate(data):
        try:
            tasks.append(TaskRecord.model_validate(item).to_task())
        except ValidationError as exc:
            logger.warning(
                f"Discarding malformed task record #{index}: "
                f"{exc.error_count()} validation error(s)"
            )
    return tasks


def serialize_tasks(tasks: list[Task]) -> str:
    return json.dumps(
        [
            TaskRecord.from_task(t).model_dump(by_alias=True, exclude_none=True, mode="json")
            for t in tasks
        ],
        indent=2,
    )


# ------------------------------------------------------------------
# Store
# ------------------------------------------------------------------

class TaskStore:
    """
    Single owner of the task list and the latest detection results.

    Detection and metrics run on a snapshot after each mutation; the engine
    never reads store state directly.
    """

    def __init__(
        self,
        storage: TaskStorage,
        detection: Optional[DetectionConfig] = None,
        seed: Optional[SeedConfig] = None,
        rng: Optional[random.Random] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.storage = storage
        self.detection = detection or DetectionConfig()
        self.seed_config = seed or SeedConfig()
        self._rng = rng or random.Random(self.detection.seed)
        self._clock = clock or utc_now
        self._tasks: list[Task] = []
        self._findings: list[DuplicateFinding] = []
        self._metrics = DashboardMetrics()

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def tasks(self) -> tuple[Task, ...]:
        return tuple(self._tasks)

    @property
    def findings(self) -> tuple[DuplicateFinding, ...]:
        return tuple(self._findings)

    @property
    def metrics(self) -> DashboardMetrics:
        return self._metrics

    def get_task(self, task_id: str) -> Task:
        return self._tasks[self._index_of(task_id)]

    def original_for(self, duplicate_id: str) -> Optional[Task]:
        return original_task_for(self._tasks, self._findings, duplicate_id)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def load(self) -> tuple[Task, ...]:
        raw = self.storage.load()
        if raw is None:
            logger.info("No stored tasks found, generating demo data")
            self._tasks = self._generate()
            self._persist()
        else:
            try:
                tasks = parse_tasks(raw)
            except StoredDataError as exc:
                logger.error(f"Error parsing stored tasks: {exc}. Regenerating demo data")
                self._tasks = self._generate()
                self._persist()
            else:
                tasks, changed = backfill_completion_time(tasks, self._clock())
                self._tasks = tasks
                if changed:
                    self._persist()

        self.refresh()
        return self.tasks

    def reset(self, count: Optional[int] = None) -> tuple[Task, ...]:
        """Replace everything with a fresh demo data set."""
        self._tasks = self._generate(count)
        self._persist()
        self.refresh()
        return self.tasks

    def refresh(self) -> list[DuplicateFinding]:
        snapshot = tuple(self._tasks)
        self._findings = detect_duplicates(snapshot, self._rng, self.detection)
        self._metrics = compute_metrics(snapshot, self._findings)
        return list(self._findings)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def add_task(
        self,
        customer_id: str,
        task_type: TaskType,
        description: str,
        status: TaskStatus = TaskStatus.PENDING,
        priority: Optional[TaskPriority] = None,
        assigned_to: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> Task:
        task = Task(
            id=short_id(),
            customer_id=customer_id,
            task_type=TaskType(task_type),
            description=description,
            timestamp=to_iso(self._clock()),
            status=TaskStatus(status),
            priority=TaskPriority(priority) if priority else None,
            assigned_to=assigned_to,
            notes=notes,
        )
        task = self._stamp_completion(task)
        self._tasks.append(task)
        logger.info(f"Added task {task.id} for customer {task.customer_id}")
        self._commit()
        return task

    def update_task(self, task_id: str, **changes) -> Task:
        frozen = _IMMUTABLE_FIELDS & changes.keys()
        if frozen:
            raise ValueError(f"Cannot change {', '.join(sorted(frozen))} of a task")
        unknown = changes.keys() - _TASK_FIELDS
        if unknown:
            raise ValueError(f"Unknown task field(s): {', '.join(sorted(unknown))}")

        index = self._index_of(task_id)
        current = self._tasks[index]
        if "completion_time" in changes and current.completion_time is not None:
            raise ValueError(f"Completion time of task {task_id} is already set")

        updated = TaskRecord.from_task(replace(current, **changes)).to_task()
        updated = self._stamp_completion(updated)
        self._tasks[index] = updated
        logger.info(f"Updated task {task_id}")
        self._commit()
        return updated

    def delete_task(self, task_id: str) -> Task:
        removed = self._tasks.pop(self._index_of(task_id))
        logger.info(f"Deleted task {task_id}")
        self._commit()
        return removed

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _index_of(self, task_id: str) -> int:
        for index, task in enumerate(self._tasks):
            if task.id == task_id:
                return index
        raise TaskNotFoundError(task_id)

    def _stamp_completion(self, task: Task) -> Task:
        if task.status != TaskStatus.COMPLETED or task.completion_time is not None:
            return task
        created = parse_timestamp(task.timestamp)
        if created is None:
            return task
        minutes = round_half_up((self._clock() - created).total_seconds() / 60)
        return replace(task, completion_time=max(minutes, 0))

    def _generate(self, count: Optional[int] = None) -> list[Task]:
        cfg = self.seed_config
        return generate_mock_tasks(
            cfg.mock_task_count if count is None else count,
            rng=random.Random(cfg.random_seed),
            now=self._clock(),
            duplicate_ratio=cfg.duplicate_ratio,
            days_back=cfg.days_back,
        )

    def _persist(self) -> None:
        self.storage.save(serialize_tasks(self._tasks))
        logger.debug(f"Persisted {len(self._tasks)} task(s)")

    def _commit(self) -> None:
        self._persist()
        self.refresh()
