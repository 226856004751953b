"""
Similarity engine: scores two task descriptions and decides whether a
pair of tasks for the same customer looks like duplicated work.

Two rules flag a pair:
  1. same task type, created within the time window (24h by default)
  2. description similarity above the similarity threshold (0.80)

The suggested action depends only on the description similarity.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..config import DetectionConfig
from ..storage.models import SuggestedAction, Task
from .timeutil import parse_timestamp, round_half_up

SAME_TYPE_REASON = "Same task type for customer within 24 hours"


@dataclass(frozen=True)
class Decision:
    reason: str
    similarity: float
    suggested_action: SuggestedAction


def levenshtein_distance(a: str, b: str) -> int:
    """Edit distance with unit cost for insertion, deletion and substitution."""
    if not a:
        return len(b)
    if not b:
        return len(a)

    previous = list(range(len(b) + 1))
    for i, ca in enumerate(a, start=1):
        current = [i]
        for j, cb in enumerate(b, start=1):
            cost = 0 if ca == cb else 1
            current.append(min(
                previous[j] + 1,
                current[j - 1] + 1,
                previous[j - 1] + cost,
            ))
        previous = current
    return previous[-1]


def string_similarity(a: str, b: str) -> float:
    """Case-insensitive similarity in [0, 1]; 1 means identical text."""
    a, b = a.lower(), b.lower()
    # Lowercasing can lengthen a string ('İ' becomes two code points)
    max_length = max(len(a), len(b))
    if max_length == 0:
        return 1.0
    return 1 - levenshtein_distance(a, b) / max_length


def within_window(timestamp1: str, timestamp2: str, hours: float = 24) -> bool:
    """False when either timestamp is unparseable."""
    t1 = parse_timestamp(timestamp1)
    t2 = parse_timestamp(timestamp2)
    if t1 is None or t2 is None:
        return False
    return abs((t1 - t2).total_seconds()) / 3600 <= hours


def suggest_action(
    similarity: float, rules: Optional[DetectionConfig] = None
) -> SuggestedAction:
    rules = rules or DetectionConfig()
    if similarity > rules.delete_threshold:
        return SuggestedAction.DELETE
    if similarity > rules.merge_threshold:
        return SuggestedAction.MERGE
    return SuggestedAction.REVIEW


def classify_pair(
    task1: Task, task2: Task, rules: Optional[DetectionConfig] = None
) -> Optional[Decision]:
    """
    Return a Decision when the pair looks duplicated, else None.
    Both tasks are expected to belong to the same customer.
    """
    rules = rules or DetectionConfig()

    same_type = task1.task_type == task2.task_type
    time_match = within_window(task1.timestamp, task2.timestamp, rules.window_hours)
    similarity = string_similarity(task1.description, task2.description)

    if same_type and time_match:
        reason = SAME_TYPE_REASON
    elif similarity > rules.similarity_threshold:
        reason = (
            f"Very similar task description ({round_half_up(similarity * 100)}% match)"
        )
    else:
        return None

    return Decision(
        reason=reason,
        similarity=similarity,
        suggested_action=suggest_action(similarity, rules),
    )
