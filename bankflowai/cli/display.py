"""
Rich display helpers for the BankFlowAI CLI.
All terminal output goes through this module for consistency.
"""
from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ..engine.sla import SlaState, sla_status
from ..engine.timeutil import parse_timestamp, round_half_up
from ..reports.formatting import format_time_saved, humanize
from ..storage.models import (
    DashboardMetrics,
    DuplicateFinding,
    OperationalKpis,
    Task,
    TaskType,
    TypeInsight,
)

console = Console()

_STATUS_COLORS = {
    "completed": "green",
    "in-progress": "blue",
    "pending": "yellow",
    "cancelled": "dim",
}

_SLA_COLORS = {
    SlaState.OVERDUE: "red",
    SlaState.WARNING: "yellow",
    SlaState.NORMAL: "green",
}

_ACTION_COLORS = {
    "delete": "bold red",
    "merge": "yellow",
    "review": "cyan",
}


def _table() -> Table:
    return Table(
        show_header=True,
        header_style="bold",
        box=None,
        padding=(0, 1),
        show_edge=False,
    )


# ── Banner ────────────────────────────────────────────────────────────────────

def print_banner() -> None:
    console.print()
    console.print(Panel.fit(
        "[bold]BankFlowAI[/bold]  ·  duplicate workflow detection",
        border_style="dim",
        padding=(0, 2),
    ))
    console.print()


# ── Task list ─────────────────────────────────────────────────────────────────

def print_task_list(
    tasks: Sequence[Task],
    duplicate_ids: set[str],
    now: Optional[datetime] = None,
) -> None:
    if not tasks:
        console.print("[dim]No tasks found. Run 'bankflow seed' to generate demo data.[/dim]")
        return

    table = _table()
    table.add_column("ID", style="dim", width=9, no_wrap=True)
    table.add_column("Customer", style="cyan", width=12, no_wrap=True)
    table.add_column("Type", width=18, no_wrap=True)
    table.add_column("Description", min_width=30)
    table.add_column("Status", width=11, no_wrap=True)
    table.add_column("Prio", width=6, no_wrap=True)
    table.add_column("SLA", width=8, no_wrap=True)
    table.add_column("Created", width=13, no_wrap=True)

    for task in tasks:
        created = parse_timestamp(task.timestamp)
        description = escape(task.description)
        if task.id in duplicate_ids:
            description = f"{description} [red](duplicate)[/red]"

        if task.status.value in ("completed", "cancelled"):
            sla = Text("—", style="dim")
        else:
            state = sla_status(task, now).state
            sla = Text(state.value, style=_SLA_COLORS[state])

        table.add_row(
            escape(task.id),
            escape(task.customer_id),
            humanize(task.task_type.value),
            description,
            Text(task.status.value, style=_STATUS_COLORS.get(task.status.value, "white")),
            task.effective_priority.value,
            sla,
            created.strftime("%b %d  %H:%M") if created else "[dim]invalid[/dim]",
        )

    console.print(table)


def print_task_detail(task: Task, original: Optional[Task] = None) -> None:
    console.print(
        f"[bold]{escape(task.id)}[/bold]  {humanize(task.task_type.value)}  ·  {escape(task.customer_id)}"
    )
    console.print(f"  {escape(task.description)}")
    console.print(f"  [dim]Status: {task.status.value}  ·  Priority: {task.effective_priority.value}[/dim]")
    if task.assigned_to:
        console.print(f"  [dim]Assigned to: {escape(task.assigned_to)}[/dim]")
    if task.completion_time is not None:
        console.print(f"  [dim]Completed in: {task.completion_time:g} minutes[/dim]")
    if original is not None:
        console.print(
            f"  [red]Duplicate of {escape(original.id)}[/red]  "
            f"[dim]{escape(original.description)}[/dim]"
        )


# ── Duplicates ────────────────────────────────────────────────────────────────

def print_findings(findings: Sequence[DuplicateFinding], tasks: Sequence[Task]) -> None:
    if not findings:
        console.print("[dim]No duplicate tasks detected.[/dim]")
        return

    by_id = {t.id: t for t in tasks}
    table = _table()
    table.add_column("Original", style="dim", width=9, no_wrap=True)
    table.add_column("Duplicate", style="dim", width=9, no_wrap=True)
    table.add_column("Customer", style="cyan", width=12, no_wrap=True)
    table.add_column("Reason", min_width=30)
    table.add_column("Match", width=6, no_wrap=True)
    table.add_column("Action", width=7, no_wrap=True)
    table.add_column("Saved", width=7, no_wrap=True)

    for f in findings:
        duplicate = by_id.get(f.duplicate_task_id)
        table.add_row(
            escape(f.original_task_id),
            escape(f.duplicate_task_id),
            escape(duplicate.customer_id) if duplicate else "—",
            f.reason,
            f"{round_half_up(f.similarity_score * 100)}%",
            Text(f.suggested_action.value, style=_ACTION_COLORS[f.suggested_action.value]),
            format_time_saved(f.time_saved),
        )

    console.print(table)
    console.print()
    total = sum(f.time_saved for f in findings)
    console.print(
        f"[bold]{len(findings)}[/bold] duplicate pair(s)  ·  "
        f"[green]{format_time_saved(total)}[/green] potential time saved"
    )


# ── Dashboard ─────────────────────────────────────────────────────────────────

def print_dashboard(metrics: DashboardMetrics, kpis: OperationalKpis) -> None:
    console.print(Panel.fit(
        f"[bold]{metrics.total_tasks}[/bold] tasks  ·  "
        f"[red]{metrics.duplicates_detected}[/red] duplicates  ·  "
        f"[green]{format_time_saved(metrics.time_saved)}[/green] saved  ·  "
        f"[yellow]{metrics.efficiency_gain}%[/yellow] efficiency gain",
        border_style="dim",
    ))
    console.print(
        f"  [dim]Avg. completion time:[/dim] {kpis.average_completion_time}m   "
        f"[dim]Active customers:[/dim] {kpis.active_customers}   "
        f"[dim]SLA compliance:[/dim] {kpis.sla_compliance}%"
    )
    console.print()

    breakdown = _table()
    breakdown.add_column("Task type", min_width=20)
    breakdown.add_column("Count", justify="right", width=6)
    for task_type, count in metrics.tasks_by_type.items():
        breakdown.add_row(humanize(task_type.value), str(count))
    console.print(breakdown)
    console.print()

    statuses = _table()
    statuses.add_column("Status", min_width=20)
    statuses.add_column("Count", justify="right", width=6)
    for status, count in metrics.tasks_by_status.items():
        statuses.add_row(Text(status.value, style=_STATUS_COLORS[status.value]), str(count))
    console.print(statuses)
    console.print()

    if metrics.duplicates_by_day:
        console.print("[bold]Duplicates by day[/bold]")
        peak = max(d.count for d in metrics.duplicates_by_day)
        for day in metrics.duplicates_by_day:
            bar = "█" * max(1, round_half_up(day.count / peak * 24))
            console.print(f"  [dim]{day.date}[/dim]  [red]{bar}[/red] {day.count}")
        console.print()


def print_insights(insights: dict[TaskType, TypeInsight]) -> None:
    table = _table()
    table.add_column("Task type", min_width=20)
    table.add_column("Tasks", justify="right", width=6)
    table.add_column("Duplicates", justify="right", width=10)
    table.add_column("Rate", justify="right", width=6)
    table.add_column("Time saved", justify="right", width=10)

    for task_type, insight in insights.items():
        rate = round_half_up(insight.duplicates / insight.count * 100) if insight.count else 0
        table.add_row(
            humanize(task_type.value),
            str(insight.count),
            str(insight.duplicates),
            f"{rate}%",
            format_time_saved(insight.time_saved),
        )

    console.print(table)


# ── Utility ───────────────────────────────────────────────────────────────────

def print_error(msg: str) -> None:
    console.print(f"\n[bold red]Error:[/bold red] {msg}\n")


def print_success(msg: str) -> None:
    console.print(f"[bold green]✓[/bold green]  {msg}")


def print_warn(msg: str) -> None:
    console.print(f"[yellow]⚠[/yellow]   {msg}")


def print_info(msg: str) -> None:
    console.print(f"[dim]{msg}[/dim]")
