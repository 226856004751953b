"""
BankFlowAI CLI: all commands.

Commands:
  tasks         List tasks (filter by status, type, duplicates)
  show          Show one task and what it duplicates
  add           Create a task
  update        Change fields of a task
  complete      Mark a task completed
  delete        Delete a task
  duplicates    List detected duplicate pairs
  dashboard     Show dashboard metrics and KPIs
  insights      Duplicate insights per task type
  report        Export a Word efficiency report
  seed          Replace all tasks with generated demo data
  config        Show configuration values
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape

from ..config import CONFIG_FILE, Config, load_config
from ..engine.detector import insights_by_task_type
from ..engine.metrics import compute_kpis
from ..engine.timeutil import parse_timestamp
from ..reports.filters import ReportFilter, filter_report_data
from ..reports.word_report import generate_efficiency_report
from ..storage.models import TaskPriority, TaskStatus, TaskType
from ..storage.store import JsonFileStorage, TaskNotFoundError, TaskStore
from . import display

app = typer.Typer(
    name="bankflow",
    help="Duplicate workflow detection for banking tasks.",
    no_args_is_help=True,
    add_completion=False,
    pretty_exceptions_enable=False,
)
console = Console()
logger = logging.getLogger(__name__)

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def _get_store(config: Optional[Config] = None) -> TaskStore:
    cfg = config or load_config()
    _setup_logging(cfg.display.log_level)
    store = TaskStore(
        JsonFileStorage(cfg.tasks_path),
        detection=cfg.detection,
        seed=cfg.seed,
    )
    store.load()
    return store


def _parse_date(value: Optional[str], option: str):
    if value is None:
        return None
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        display.print_error(f"{option} must be a date in YYYY-MM-DD format, got '{escape(value)}'.")
        raise typer.Exit(1)


# ── tasks ─────────────────────────────────────────────────────────────────────

@app.command(name="tasks")
def list_tasks(
    status: Optional[TaskStatus] = typer.Option(None, "--status", "-s", help="Only this status"),
    task_type: Optional[TaskType] = typer.Option(None, "--type", "-t", help="Only this task type"),
    duplicates_only: bool = typer.Option(
        False, "--duplicates-only", "-d", help="Only tasks flagged as duplicates"
    ),
    search: Optional[str] = typer.Option(
        None, "--search", help="Match description, customer ID or task ID"
    ),
    limit: int = typer.Option(50, "--limit", "-n", help="Number of tasks to show"),
) -> None:
    """List tasks, newest first."""
    store = _get_store()
    duplicate_ids = {f.duplicate_task_id for f in store.findings}

    tasks = list(store.tasks)
    if status:
        tasks = [t for t in tasks if t.status == status]
    if task_type:
        tasks = [t for t in tasks if t.task_type == task_type]
    if duplicates_only:
        tasks = [t for t in tasks if t.id in duplicate_ids]
    if search:
        needle = search.lower()
        tasks = [
            t for t in tasks
            if needle in t.description.lower()
            or needle in t.customer_id.lower()
            or needle in t.id.lower()
        ]

    tasks.sort(key=lambda t: parse_timestamp(t.timestamp) or _EPOCH, reverse=True)
    display.print_task_list(tasks[:limit], duplicate_ids)
    if len(tasks) > limit:
        display.print_info(f"\n{len(tasks) - limit} more task(s) not shown (use --limit).")


# ── show ──────────────────────────────────────────────────────────────────────

@app.command()
def show(task_id: str = typer.Argument(..., help="Task ID")) -> None:
    """Show a task and the task it duplicates, if any."""
    store = _get_store()
    try:
        task = store.get_task(task_id)
    except TaskNotFoundError:
        display.print_error(f"Task '{escape(task_id)}' not found.")
        raise typer.Exit(1)
    display.print_task_detail(task, store.original_for(task_id))


# ── add ───────────────────────────────────────────────────────────────────────

@app.command()
def add(
    customer_id: str = typer.Option(..., "--customer", "-c", help="Customer ID"),
    task_type: TaskType = typer.Option(..., "--type", "-t", help="Task type"),
    description: str = typer.Option(..., "--description", "-m", help="What needs doing"),
    priority: Optional[TaskPriority] = typer.Option(None, "--priority", "-p"),
    status: TaskStatus = typer.Option(TaskStatus.PENDING, "--status", "-s"),
    assigned_to: Optional[str] = typer.Option(None, "--assign", "-a", help="Assignee name"),
    notes: Optional[str] = typer.Option(None, "--notes"),
) -> None:
    """Create a new task and re-run duplicate detection."""
    store = _get_store()
    task = store.add_task(
        customer_id=customer_id,
        task_type=task_type,
        description=description,
        status=status,
        priority=priority,
        assigned_to=assigned_to,
        notes=notes,
    )
    display.print_success(f"Added task {escape(task.id)}")

    original = store.original_for(task.id)
    if original is not None:
        display.print_warn(
            f"Looks like a duplicate of {escape(original.id)}: {escape(original.description)}"
        )


# ── update ────────────────────────────────────────────────────────────────────

@app.command()
def update(
    task_id: str = typer.Argument(..., help="Task ID"),
    status: Optional[TaskStatus] = typer.Option(None, "--status", "-s"),
    priority: Optional[TaskPriority] = typer.Option(None, "--priority", "-p"),
    task_type: Optional[TaskType] = typer.Option(None, "--type", "-t"),
    description: Optional[str] = typer.Option(None, "--description", "-m"),
    assigned_to: Optional[str] = typer.Option(None, "--assign", "-a"),
    notes: Optional[str] = typer.Option(None, "--notes"),
) -> None:
    """Change fields of an existing task."""
    changes = {
        key: value
        for key, value in {
            "status": status,
            "priority": priority,
            "task_type": task_type,
            "description": description,
            "assigned_to": assigned_to,
            "notes": notes,
        }.items()
        if value is not None
    }
    if not changes:
        display.print_info("Nothing to update.")
        return

    _apply_update(task_id, changes)


@app.command()
def complete(task_id: str = typer.Argument(..., help="Task ID")) -> None:
    """Mark a task completed (records its completion time)."""
    task = _apply_update(task_id, {"status": TaskStatus.COMPLETED})
    if task.completion_time is not None:
        display.print_info(f"Completed in {task.completion_time:g} minutes")


def _apply_update(task_id: str, changes: dict):
    store = _get_store()
    try:
        task = store.update_task(task_id, **changes)
    except TaskNotFoundError:
        display.print_error(f"Task '{escape(task_id)}' not found.")
        raise typer.Exit(1)
    except ValueError as exc:
        display.print_error(escape(str(exc)))
        raise typer.Exit(1)
    display.print_success(f"Updated task {escape(task.id)}")
    return task


# ── delete ────────────────────────────────────────────────────────────────────

@app.command()
def delete(
    task_id: str = typer.Argument(..., help="Task ID"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """Delete a task."""
    store = _get_store()
    try:
        task = store.get_task(task_id)
    except TaskNotFoundError:
        display.print_error(f"Task '{escape(task_id)}' not found.")
        raise typer.Exit(1)

    if not yes and not typer.confirm(f"Delete task {task.id} ({task.description})?"):
        raise typer.Exit(0)

    store.delete_task(task_id)
    display.print_success(f"Deleted task {escape(task_id)}")


# ── duplicates ────────────────────────────────────────────────────────────────

@app.command()
def duplicates() -> None:
    """List detected duplicate task pairs with suggested actions."""
    store = _get_store()
    display.print_findings(store.findings, store.tasks)


# ── dashboard ─────────────────────────────────────────────────────────────────

@app.command()
def dashboard() -> None:
    """Show dashboard metrics: totals, time saved, efficiency, duplicates per day."""
    store = _get_store()
    display.print_banner()
    display.print_dashboard(store.metrics, compute_kpis(store.tasks))


# ── insights ──────────────────────────────────────────────────────────────────

@app.command()
def insights() -> None:
    """Duplicate counts and time saved for each task type."""
    store = _get_store()
    display.print_insights(insights_by_task_type(store.tasks, store.findings))


# ── report ────────────────────────────────────────────────────────────────────

@app.command()
def report(
    start: Optional[str] = typer.Option(None, "--start", help="First day (YYYY-MM-DD)"),
    end: Optional[str] = typer.Option(None, "--end", help="Last day, inclusive (YYYY-MM-DD)"),
    task_type: Optional[TaskType] = typer.Option(None, "--type", "-t", help="Only this task type"),
) -> None:
    """Export a Word workflow efficiency report."""
    config = load_config()
    report_filter = ReportFilter(
        start_date=_parse_date(start, "--start"),
        end_date=_parse_date(end, "--end"),
        task_type=task_type,
    )
    if report_filter.start_date and report_filter.end_date \
            and report_filter.start_date > report_filter.end_date:
        display.print_error("--start must not be after --end.")
        raise typer.Exit(1)

    store = _get_store(config)
    data = filter_report_data(store.tasks, store.findings, report_filter)
    path = generate_efficiency_report(data, report_filter, config.reports)
    if path is None:
        display.print_error("Could not write the report. See the log above.")
        raise typer.Exit(1)

    display.print_success(
        f"{data.metrics.total_tasks} task(s), {data.metrics.duplicates_detected} duplicate(s) "
        f"→ [italic]{path}[/italic]"
    )


# ── seed ──────────────────────────────────────────────────────────────────────

@app.command()
def seed(
    count: Optional[int] = typer.Option(
        None, "--count", "-n", help="Number of tasks (default: from config)"
    ),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """Replace all stored tasks with generated demo data."""
    if not yes and not typer.confirm("This replaces every stored task. Continue?"):
        raise typer.Exit(0)

    store = _get_store()
    tasks = store.reset(count)
    display.print_success(
        f"Generated {len(tasks)} task(s); {len(store.findings)} duplicate pair(s) detected."
    )


# ── config ────────────────────────────────────────────────────────────────────

config_app = typer.Typer(name="config", help="View configuration.", no_args_is_help=True)
app.add_typer(config_app)


@config_app.command("show")
def config_show() -> None:
    """Print current configuration."""
    config = load_config()
    import yaml
    console.print(yaml.dump(config.model_dump(), default_flow_style=False))


@config_app.command("path")
def config_path() -> None:
    """Show path to the config file."""
    console.print(str(CONFIG_FILE))
