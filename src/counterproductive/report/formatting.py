"""Text formatting shared by the renderer.

All date and time output goes through the configured timezone; nothing
here reads the host clock's zone.
"""

from __future__ import annotations

from datetime import date, datetime, tzinfo
from typing import Optional

NOT_AVAILABLE = "n/a"


def format_duration(seconds: Optional[float]) -> str:
    """Floored `Xh Ym Zs`."""
    if seconds is None:
        return NOT_AVAILABLE
    total = int(seconds)
    return f"{total // 3600}h {(total % 3600) // 60}m {total % 60}s"


def format_gap(seconds: float) -> str:
    """Floored `Xh Ym`, the short form used for ranked gaps."""
    total = int(seconds)
    return f"{total // 3600}h {(total % 3600) // 60}m"


def format_date(day: Optional[date]) -> str:
    """`Apr 09`."""
    if day is None:
        return NOT_AVAILABLE
    return day.strftime("%b %d")


def format_day_label(day: date) -> str:
    """`Apr 09 (Wed)`."""
    return day.strftime("%b %d (%a)")


def format_datetime(moment: Optional[datetime], tz: tzinfo) -> str:
    """`Apr 09, 07:02:33 PM` in the given timezone."""
    if moment is None:
        return NOT_AVAILABLE
    return moment.astimezone(tz).strftime("%b %d, %I:%M:%S %p")


def format_hour(hour: int) -> str:
    return f"{hour}:00"


def format_percentage(value: Optional[float]) -> str:
    """Two-decimal percentage; stable for already-rounded values."""
    if value is None:
        return NOT_AVAILABLE
    return f"{value:.2f}%"
