"""Display formatting for durations and labels."""
from __future__ import annotations


def format_time_saved(minutes: int) -> str:
    """45 → "45m", 65 → "1h 5m", 120 → "2h", 1620 → "1d 3h", 2880 → "2d"."""
    if minutes < 60:
        return f"{minutes}m"

    hours, remaining_minutes = divmod(minutes, 60)
    if hours < 24:
        return f"{hours}h {remaining_minutes}m" if remaining_minutes else f"{hours}h"

    days, remaining_hours = divmod(hours, 24)
    return f"{days}d {remaining_hours}h" if remaining_hours else f"{days}d"


def format_hours_minutes(minutes: int) -> str:
    return f"{minutes} minutes ({minutes // 60} hours, {minutes % 60} minutes)"


def humanize(value: str) -> str:
    """'loan-approval' → 'Loan Approval'."""
    return value.replace("-", " ").title()
