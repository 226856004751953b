"""Tests for the demo task generator."""

import random

from bankflowai.engine.detector import detect_duplicates
from bankflowai.engine.metrics import compute_kpis
from bankflowai.engine.timeutil import parse_timestamp
from bankflowai.storage.mock_data import (
    DESCRIPTION_TEMPLATES,
    WORDING_VARIATIONS,
    _describe,
    generate_mock_tasks,
)
from bankflowai.storage.models import TaskStatus, TaskType


def test_generates_requested_count(now):
    for count in (1, 7, 20, 100):
        assert len(generate_mock_tasks(count, random.Random(0), now)) == count


def test_zero_count_is_empty(now):
    assert generate_mock_tasks(0, random.Random(0), now) == []


def test_same_seed_gives_same_tasks(now):
    first = generate_mock_tasks(30, random.Random(9), now)
    second = generate_mock_tasks(30, random.Random(9), now)
    assert first == second


def test_ids_are_unique(now):
    tasks = generate_mock_tasks(100, random.Random(1), now)
    assert len({t.id for t in tasks}) == 100


def test_timestamps_fall_within_the_last_week(now):
    for task in generate_mock_tasks(50, random.Random(2), now):
        created = parse_timestamp(task.timestamp)
        assert created is not None
        age = now - created
        assert age.total_seconds() >= 0
        assert age.days <= 7


def test_templates_cover_every_task_type():
    assert set(DESCRIPTION_TEMPLATES) == set(TaskType)


def test_near_copies_share_customer_and_type(now):
    tasks = generate_mock_tasks(50, random.Random(4), now)
    base, copies = tasks[:40], tasks[40:]

    base_customers = {t.customer_id: t.task_type for t in base}
    for copy in copies:
        assert base_customers[copy.customer_id] == copy.task_type


def test_generated_set_contains_duplicates(now):
    tasks = generate_mock_tasks(100, random.Random(6), now)
    assert detect_duplicates(tasks, random.Random(0))


def test_every_rewording_changes_some_description():
    described = [
        _describe(template, "CUST12345678")
        for templates in DESCRIPTION_TEMPLATES.values()
        for template in templates
    ]
    for old, new in WORDING_VARIATIONS:
        assert any(d.replace(old, new) != d for d in described), old


def test_completed_tasks_carry_completion_time(now):
    tasks = generate_mock_tasks(100, random.Random(8), now)

    completed = [t for t in tasks if t.status == TaskStatus.COMPLETED]
    assert completed
    for task in tasks:
        if task.status == TaskStatus.COMPLETED:
            minutes = (now - parse_timestamp(task.timestamp)).total_seconds() / 60
            assert abs(task.completion_time - minutes) <= 1
        else:
            assert task.completion_time is None

    assert compute_kpis(tasks).average_completion_time > 0
