"""
Workflow efficiency report: a .docx snapshot of the dashboard.

Format:
  - Header: title, generation time, active filters
  - Summary table (tasks, duplicates, time saved, efficiency gain)
  - Tasks by Type table
  - Detected Duplicates table
  - Confidentiality footer

Files saved to: ~/Documents/BankFlow Reports/YYYY-MM-DD HHMM Workflow Efficiency Report.docx
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from docx import Document
from docx.enum.text import WD_ALIGN_PARAGRAPH
from docx.oxml import OxmlElement
from docx.oxml.ns import qn
from docx.shared import Inches, Pt, RGBColor

from ..config import ReportsConfig
from ..engine.timeutil import round_half_up
from ..storage.models import DuplicateFinding, Task
from .filters import ReportData, ReportFilter
from .formatting import format_hours_minutes, humanize

logger = logging.getLogger(__name__)

BRAND_BLUE = RGBColor(0x00, 0x30, 0x87)
ACCENT_RED = RGBColor(0xDB, 0x00, 0x11)
HEADER_FILL = "003087"


def _set_cell_bg(cell, hex_color: str) -> None:
    """Set table cell background color."""
    tc = cell._tc
    tcPr = tc.get_or_add_tcPr()
    shd = OxmlElement("w:shd")
    shd.set(qn("w:val"), "clear")
    shd.set(qn("w:color"), "auto")
    shd.set(qn("w:fill"), hex_color)
    tcPr.append(shd)


def generate_efficiency_report(
    data: ReportData,
    report_filter: ReportFilter,
    config: ReportsConfig,
    output_path: Optional[Path] = None,
) -> Optional[Path]:
    """
    Write the report and return its path.
    Returns None if document creation fails.
    """
    try:
        output_path = output_path or _build_output_path(data, config)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        doc = Document()
        _set_document_margins(doc)

        _add_header(doc, data, report_filter)
        _add_summary(doc, data)
        _add_type_table(doc, data)
        _add_duplicates(doc, data.findings, data.tasks)
        _add_footer(doc)

        doc.save(str(output_path))
        logger.info(f"Report saved: {output_path}")
        return output_path

    except Exception as e:
        logger.error(f"Failed to generate report: {e}")
        return None


# ── Document building helpers ─────────────────────────────────────────────────

def _build_output_path(data: ReportData, config: ReportsConfig) -> Path:
    stamp = data.generated_at.strftime("%Y-%m-%d %H%M")
    return config.output_path / f"{stamp} Workflow Efficiency Report.docx"


def _set_document_margins(doc: Document) -> None:
    for section in doc.sections:
        section.top_margin = Inches(1.0)
        section.bottom_margin = Inches(1.0)
        section.left_margin = Inches(1.0)
        section.right_margin = Inches(1.0)


def _centered(doc: Document, text: str, size: int, color: RGBColor, bold: bool = False) -> None:
    p = doc.add_paragraph()
    p.alignment = WD_ALIGN_PARAGRAPH.CENTER
    run = p.add_run(text)
    run.font.size = Pt(size)
    run.font.bold = bold
    run.font.color.rgb = color


def _add_header(doc: Document, data: ReportData, report_filter: ReportFilter) -> None:
    _centered(doc, "BankFlowAI", 24, BRAND_BLUE, bold=True)
    _centered(doc, "Workflow Efficiency Report", 16, ACCENT_RED)

    generated = data.generated_at.strftime("%B %d, %Y at %H:%M UTC")
    _centered(doc, f"Generated on: {generated}", 10, RGBColor(0, 0, 0))

    if report_filter.is_filtered:
        _centered(doc, report_filter.describe(), 10, RGBColor(0x66, 0x66, 0x66))


def _add_heading(doc: Document, text: str) -> None:
    h = doc.add_heading(text, level=2)
    for run in h.runs:
        run.font.size = Pt(14)
        run.font.color.rgb = BRAND_BLUE


def _add_table(doc: Document, header: list[str], rows: list[list[str]], font_size: int = 10) -> None:
    table = doc.add_table(rows=1, cols=len(header))
    table.style = "Table Grid"

    for cell, text in zip(table.rows[0].cells, header):
        cell.text = text
        _set_cell_bg(cell, HEADER_FILL)
        for para in cell.paragraphs:
            for run in para.runs:
                run.font.bold = True
                run.font.color.rgb = RGBColor(0xFF, 0xFF, 0xFF)
                run.font.size = Pt(font_size)

    for values in rows:
        cells = table.add_row().cells
        for cell, text in zip(cells, values):
            cell.text = text
            for para in cell.paragraphs:
                for run in para.runs:
                    run.font.size = Pt(font_size)

    doc.add_paragraph()


def _add_summary(doc: Document, data: ReportData) -> None:
    m = data.metrics
    _add_heading(doc, "Summary")
    _add_table(doc, ["Metric", "Value"], [
        ["Total Tasks", str(m.total_tasks)],
        ["Duplicates Detected", str(m.duplicates_detected)],
        ["Time Saved", format_hours_minutes(m.time_saved)],
        ["Efficiency Gain", f"{m.efficiency_gain}%"],
    ])


def _add_type_table(doc: Document, data: ReportData) -> None:
    m = data.metrics
    rows = []
    for task_type, count in m.tasks_by_type.items():
        share = round_half_up(count / m.total_tasks * 100) if m.total_tasks else 0
        rows.append([humanize(task_type.value), str(count), f"{share}%"])

    _add_heading(doc, "Tasks by Type")
    _add_table(doc, ["Task Type", "Count", "Percentage"], rows)


def _add_duplicates(doc: Document, findings: list[DuplicateFinding], tasks: list[Task]) -> None:
    _add_heading(doc, "Detected Duplicates")
    by_id = {t.id: t for t in tasks}

    rows = []
    for finding in findings:
        duplicate = by_id.get(finding.duplicate_task_id)
        if duplicate is None:
            continue
        rows.append([
            duplicate.id[:8],
            duplicate.task_type.value.replace("-", " "),
            duplicate.customer_id,
            f"{round_half_up(finding.similarity_score * 100)}%",
            finding.suggested_action.value.capitalize(),
            f"{finding.time_saved} min",
        ])

    if not rows:
        p = doc.add_paragraph("No duplicates found matching the current filters.")
        p.alignment = WD_ALIGN_PARAGRAPH.CENTER
        return

    _add_table(
        doc,
        ["ID", "Type", "Customer ID", "Similarity", "Action", "Time Saved"],
        rows,
        font_size=9,
    )


def _add_footer(doc: Document) -> None:
    section = doc.sections[0]
    p = section.footer.paragraphs[0]
    p.alignment = WD_ALIGN_PARAGRAPH.CENTER
    run = p.add_run("BankFlowAI - Confidential and Internal Use Only")
    run.font.size = Pt(8)
    run.font.color.rgb = RGBColor(0x64, 0x64, 0x64)
