"""Tests for the similarity engine."""

import pytest

from bankflowai.config import DetectionConfig
from bankflowai.engine.similarity import (
    SAME_TYPE_REASON,
    classify_pair,
    levenshtein_distance,
    string_similarity,
    suggest_action,
    within_window,
)
from bankflowai.storage.models import SuggestedAction, TaskType


def test_levenshtein_known_distances():
    assert levenshtein_distance("kitten", "sitting") == 3
    assert levenshtein_distance("flaw", "lawn") == 2
    assert levenshtein_distance("", "abc") == 3
    assert levenshtein_distance("abc", "") == 3
    assert levenshtein_distance("same", "same") == 0


@pytest.mark.parametrize("text", ["a", "Review loan application", "  spaced  "])
def test_similarity_of_identical_strings_is_one(text):
    assert string_similarity(text, text) == 1


def test_similarity_of_two_empty_strings_is_one():
    assert string_similarity("", "") == 1


def test_similarity_against_empty_string_is_zero():
    assert string_similarity("", "abc") == 0
    assert string_similarity("abc", "") == 0


def test_similarity_is_case_insensitive():
    assert string_similarity("KYC Check", "kyc check") == 1


def test_similarity_normalizes_by_longer_string():
    assert string_similarity("kitten", "sitting") == pytest.approx(1 - 3 / 7)


def test_similarity_measures_length_after_lowercasing():
    # "İ" lowercases to two code points
    assert string_similarity("İ", "") == 0
    assert string_similarity("İstanbul", "istanbul") == pytest.approx(1 - 1 / 9)
    assert string_similarity("İİİ", "x") == 0


@pytest.mark.parametrize(
    "a,b",
    [
        ("kitten", "sitting"),
        ("Review loan application", "Check loan application"),
        ("", "x"),
        ("abc", "xyz"),
        ("İ", ""),
        ("İstanbul", "ISTANBUL"),
    ],
)
def test_similarity_is_symmetric_and_bounded(a, b):
    score = string_similarity(a, b)
    assert score == string_similarity(b, a)
    assert 0 <= score <= 1


@pytest.mark.parametrize(
    "score,expected",
    [
        (0.95, SuggestedAction.DELETE),
        (0.87, SuggestedAction.MERGE),
        (0.82, SuggestedAction.REVIEW),
        (0.90, SuggestedAction.MERGE),
        (0.85, SuggestedAction.REVIEW),
        (1.0, SuggestedAction.DELETE),
        (0.1, SuggestedAction.REVIEW),
    ],
)
def test_suggested_action_thresholds_are_strict(score, expected):
    assert suggest_action(score) == expected


def test_within_window():
    assert within_window("2026-10-18T00:00:00Z", "2026-10-19T00:00:00Z")
    assert not within_window("2026-10-18T00:00:00Z", "2026-10-19T00:00:01Z")
    assert within_window("2026-10-19T00:00:00Z", "2026-10-18T01:00:00Z")


def test_within_window_rejects_unparseable_timestamps():
    assert not within_window("not a date", "2026-10-19T00:00:00Z")
    assert not within_window("", "")


def test_same_type_within_24_hours_is_flagged_despite_low_similarity(make_task):
    t1 = make_task(
        description="Complete KYC verification for C1",
        timestamp="2026-10-18T09:00:00Z",
    )
    t2 = make_task(
        description="Review customer identification documents",
        timestamp="2026-10-18T10:00:00Z",
    )

    decision = classify_pair(t1, t2)

    assert decision is not None
    assert decision.reason == SAME_TYPE_REASON
    assert decision.similarity < 0.8
    assert decision.suggested_action == SuggestedAction.REVIEW


def test_identical_descriptions_far_apart_are_flagged_by_similarity(make_task):
    t1 = make_task(
        task_type=TaskType.LOAN_APPROVAL,
        description="Review loan application for C1",
        timestamp="2026-10-01T09:00:00Z",
    )
    t2 = make_task(
        task_type=TaskType.CREDIT_CHECK,
        description="Review loan application for C1",
        timestamp="2026-10-11T09:00:00Z",
    )

    decision = classify_pair(t1, t2)

    assert decision is not None
    assert decision.similarity == 1
    assert decision.suggested_action == SuggestedAction.DELETE
    assert "100% match" in decision.reason


def test_type_rule_takes_priority_for_reason_but_keeps_raw_similarity(make_task):
    t1 = make_task(description="Update KYC records for C1")
    t2 = make_task(description="Update KYC records for C1")

    decision = classify_pair(t1, t2)

    assert decision.reason == SAME_TYPE_REASON
    assert decision.similarity == 1
    assert decision.suggested_action == SuggestedAction.DELETE


def test_reason_reports_rounded_percentage(make_task):
    # one substitution in ten characters: similarity 0.9
    t1 = make_task(task_type=TaskType.LOAN_APPROVAL, description="abcdefghij")
    t2 = make_task(task_type=TaskType.CREDIT_CHECK, description="abcdefghix")

    decision = classify_pair(t1, t2)

    assert decision.reason == "Very similar task description (90% match)"
    assert decision.suggested_action == SuggestedAction.MERGE


def test_unrelated_tasks_are_not_flagged(make_task):
    t1 = make_task(
        task_type=TaskType.LOAN_APPROVAL,
        description="Review loan application for C1",
        timestamp="2026-10-01T09:00:00Z",
    )
    t2 = make_task(
        task_type=TaskType.ACCOUNT_OPENING,
        description="Setup online banking for new account",
        timestamp="2026-10-01T10:00:00Z",
    )
    assert classify_pair(t1, t2) is None


def test_same_type_beyond_window_needs_similarity(make_task):
    t1 = make_task(description="Complete KYC verification", timestamp="2026-10-01T09:00:00Z")
    t2 = make_task(description="Perform background check", timestamp="2026-10-05T09:00:00Z")
    assert classify_pair(t1, t2) is None


def test_unparseable_timestamp_disables_time_rule(make_task):
    t1 = make_task(description="Complete KYC verification", timestamp="yesterday")
    t2 = make_task(description="Perform background check", timestamp="2026-10-18T09:00:00Z")
    assert classify_pair(t1, t2) is None


def test_custom_rules_are_honoured(make_task):
    t1 = make_task(task_type=TaskType.LOAN_APPROVAL, description="kitten")
    t2 = make_task(task_type=TaskType.CREDIT_CHECK, description="sitting")
    rules = DetectionConfig(similarity_threshold=0.5)

    decision = classify_pair(t1, t2, rules)

    assert decision is not None
    assert decision.reason == "Very similar task description (57% match)"
