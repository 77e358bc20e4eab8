# app/utils/periods.py
"""
Time-window helpers shared by the expense, goal and reporting code.

All timestamps are stored and compared as naive UTC datetimes.
"""
from datetime import datetime, timedelta, timezone
from typing import Optional, Tuple


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Convert an aware datetime to naive UTC; naive values are assumed to be UTC already."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def month_bounds(year: int, month: int) -> Tuple[datetime, datetime]:
    """Half-open [first day of month, first day of next month)."""
    start = datetime(year, month, 1)
    if month == 12:
        end = datetime(year + 1, 1, 1)
    else:
        end = datetime(year, month + 1, 1)
    return start, end


def previous_month(year: int, month: int) -> Tuple[int, int]:
    if month == 1:
        return year - 1, 12
    return year, month - 1


def trend_start(period: str, now: datetime) -> datetime:
    """Start of the look-back window for a spending-trend period."""
    if period == "7days":
        return now - timedelta(days=7)
    if period == "90days":
        return now - timedelta(days=90)
    if period == "1year":
        try:
            return now.replace(year=now.year - 1)
        except ValueError:
            # Feb 29 has no counterpart last year
            return now.replace(year=now.year - 1, day=28)
    return now - timedelta(days=30)


def week_of_year(value: datetime) -> int:
    """Week number with weeks starting on Sunday; days before the first Sunday are week 0."""
    return int(value.strftime("%U"))
