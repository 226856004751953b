"""Tests for report filtering, formatting and the Word export."""

from datetime import date

import pytest
from docx import Document

from bankflowai.config import ReportsConfig
from bankflowai.reports.filters import ReportFilter, filter_report_data
from bankflowai.reports.formatting import format_hours_minutes, format_time_saved, humanize
from bankflowai.reports.word_report import generate_efficiency_report
from bankflowai.storage.models import DayCount, DuplicateFinding, SuggestedAction, TaskType


@pytest.mark.parametrize(
    "minutes,expected",
    [(0, "0m"), (45, "45m"), (60, "1h"), (65, "1h 5m"), (1439, "23h 59m"),
     (1440, "1d"), (1620, "1d 3h"), (2880, "2d")],
)
def test_format_time_saved(minutes, expected):
    assert format_time_saved(minutes) == expected


def test_format_hours_minutes():
    assert format_hours_minutes(125) == "125 minutes (2 hours, 5 minutes)"


def test_humanize():
    assert humanize("loan-approval") == "Loan Approval"
    assert humanize("in-progress") == "In Progress"


@pytest.fixture
def report_tasks(make_task):
    return [
        make_task(task_id="o1", timestamp="2026-10-01T10:00:00Z"),
        make_task(task_id="d1", timestamp="2026-10-02T10:00:00Z"),
        make_task(task_id="o2", customer_id="C2", task_type=TaskType.LOAN_APPROVAL,
                  description="Verify loan documents", timestamp="2026-10-05T23:59:00Z"),
        make_task(task_id="d2", customer_id="C2", task_type=TaskType.LOAN_APPROVAL,
                  description="Verify loan documents", timestamp="2026-10-06T01:00:00Z"),
    ]


@pytest.fixture
def report_findings():
    return [
        DuplicateFinding("o1", "d1", "Very similar task description (100% match)",
                         1.0, SuggestedAction.DELETE, 120),
        DuplicateFinding("o2", "d2", "Same task type for customer within 24 hours",
                         1.0, SuggestedAction.DELETE, 240),
    ]


def test_unfiltered_report_keeps_everything(report_tasks, report_findings):
    data = filter_report_data(report_tasks, report_findings)

    assert len(data.tasks) == 4
    assert data.metrics.duplicates_detected == 2
    assert data.metrics.time_saved == 360


def test_date_range_is_inclusive_of_whole_end_day(report_tasks, report_findings):
    report_filter = ReportFilter(start_date=date(2026, 10, 2), end_date=date(2026, 10, 5))

    data = filter_report_data(report_tasks, report_findings, report_filter)

    assert [t.id for t in data.tasks] == ["d1", "o2"]
    assert [f.duplicate_task_id for f in data.findings] == ["d1"]
    assert data.metrics.total_tasks == 2
    assert data.metrics.time_saved == 120


def test_histogram_finds_originals_outside_the_slice(report_tasks, report_findings):
    report_filter = ReportFilter(start_date=date(2026, 10, 2))

    data = filter_report_data(report_tasks, report_findings, report_filter)

    assert data.metrics.duplicates_by_day == [
        DayCount("2026-10-01", 1),
        DayCount("2026-10-05", 1),
    ]


def test_type_filter(report_tasks, report_findings):
    report_filter = ReportFilter(task_type=TaskType.LOAN_APPROVAL)

    data = filter_report_data(report_tasks, report_findings, report_filter)

    assert {t.id for t in data.tasks} == {"o2", "d2"}
    assert [f.duplicate_task_id for f in data.findings] == ["d2"]
    assert data.metrics.tasks_by_type[TaskType.KYC_CHECK] == 0


def test_filter_description():
    assert ReportFilter().describe() == ""
    assert not ReportFilter().is_filtered
    text = ReportFilter(
        start_date=date(2026, 10, 1), end_date=date(2026, 10, 7), task_type=TaskType.KYC_CHECK
    ).describe()
    assert text == "Filters: Date range: 2026-10-01 to 2026-10-07 Task type: kyc check"
    assert ReportFilter(end_date=date(2026, 10, 7)).describe() == "Filters: Until: 2026-10-07"


def _document_text(path) -> str:
    doc = Document(str(path))
    parts = [p.text for p in doc.paragraphs]
    for table in doc.tables:
        for row in table.rows:
            parts.extend(cell.text for cell in row.cells)
    return "\n".join(parts)


def test_word_report_contents(tmp_path, report_tasks, report_findings):
    report_filter = ReportFilter(task_type=TaskType.LOAN_APPROVAL)
    data = filter_report_data(report_tasks, report_findings, report_filter)

    path = generate_efficiency_report(data, report_filter, ReportsConfig(output_dir=str(tmp_path)))

    assert path is not None
    assert path.parent == tmp_path
    assert path.name.endswith("Workflow Efficiency Report.docx")
    text = _document_text(path)
    assert "Workflow Efficiency Report" in text
    assert "Task type: loan approval" in text
    assert "240 minutes (4 hours, 0 minutes)" in text
    assert "Loan Approval" in text
    assert "C2" in text
    assert "Delete" in text
    assert "240 min" in text


def test_word_report_without_duplicates(tmp_path, make_task):
    data = filter_report_data([make_task()], [])
    out = tmp_path / "empty.docx"

    path = generate_efficiency_report(data, ReportFilter(), ReportsConfig(), output_path=out)

    assert path == out
    assert "No duplicates found matching the current filters." in _document_text(out)


def test_word_report_failure_returns_none(tmp_path, make_task):
    blocker = tmp_path / "file"
    blocker.write_text("not a directory")
    data = filter_report_data([make_task()], [])

    path = generate_efficiency_report(
        data, ReportFilter(), ReportsConfig(), output_path=blocker / "report.docx"
    )

    assert path is None
