"""
Date windows and the range splitter.

NeoWs only answers feed queries spanning at most 7 days, so longer windows
are cut into consecutive sub-windows that share their boundary dates.
"""
import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Optional

from .errors import ValidationError

_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


@dataclass(frozen=True)
class DateWindow:
    """Inclusive calendar-date range"""
    start: date
    end: date

    def __post_init__(self):
        if self.start > self.end:
            raise ValueError(f"window start {self.start} is after end {self.end}")

    @property
    def days(self) -> int:
        return (self.end - self.start).days

    def __str__(self) -> str:
        return f"{self.start.isoformat()}..{self.end.isoformat()}"


def split(window: DateWindow, max_span_days: int = 7) -> list[DateWindow]:
    """
    Split a window into sub-windows of at most max_span_days.

    Consecutive sub-windows share their boundary date. A single-day window
    comes back unchanged.
    """
    if max_span_days < 1:
        raise ValueError("max_span_days must be at least 1")

    step = timedelta(days=max_span_days)
    cursor = window.start
    parts = []
    while True:
        # Compare before adding so windows ending at date.max never overflow
        if (window.end - cursor).days <= max_span_days:
            parts.append(DateWindow(cursor, window.end))
            return parts
        parts.append(DateWindow(cursor, cursor + step))
        cursor += step


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


def parse_date(text: str, field: str = "date") -> date:
    if not isinstance(text, str) or not _ISO_DATE.match(text):
        raise ValidationError(
            f"Invalid {field} '{text}'. Use YYYY-MM-DD",
            code="INVALID_DATE_FORMAT",
        )
    try:
        return date.fromisoformat(text)
    except ValueError:
        raise ValidationError(
            f"Invalid {field} '{text}'. Use YYYY-MM-DD",
            code="INVALID_DATE_FORMAT",
        ) from None


def _add_days(start: date, days: int) -> date:
    """start + days, stopping at date.max instead of overflowing"""
    if (date.max - start).days < days:
        return date.max
    return start + timedelta(days=days)


def parse_window(
    start_text: Optional[str],
    end_text: Optional[str],
    max_days: int,
    today: Optional[date] = None,
    days: Optional[int] = None,
) -> DateWindow:
    """
    Validate caller-supplied bounds into a DateWindow.

    A missing start means today (UTC). The end is either given directly or
    as a number of days after start; with neither, it is start + 7 days,
    capped at max_days.
    """
    start = parse_date(start_text, "start_date") if start_text else (today or utc_today())
    if days is not None:
        if end_text:
            raise ValidationError(
                "Give either end_date or days, not both",
                code="INVALID_DATE_RANGE",
            )
        if days < 0:
            raise ValidationError(
                f"days must not be negative, got {days}",
                code="INVALID_DATE_RANGE",
            )
        if days > max_days:
            raise ValidationError(
                f"Date range cannot exceed {max_days} days",
                code="DATE_RANGE_TOO_LARGE",
            )
        end = _add_days(start, days)
    elif end_text:
        end = parse_date(end_text, "end_date")
    else:
        end = _add_days(start, min(7, max_days))

    if start > end:
        raise ValidationError(
            f"start_date {start.isoformat()} is after end_date {end.isoformat()}",
            code="INVALID_DATE_RANGE",
        )
    if (end - start).days > max_days:
        raise ValidationError(
            f"Date range cannot exceed {max_days} days",
            code="DATE_RANGE_TOO_LARGE",
        )
    return DateWindow(start, end)
