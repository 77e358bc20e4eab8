# app/utils/goal_progress.py
import math
from datetime import datetime
from typing import Any, Dict, Optional

from app.utils.periods import utcnow

SECONDS_PER_DAY = 24 * 60 * 60

# Floor for months remaining so the required contribution stays finite at the deadline
MIN_MONTHS_REMAINING = 0.1


# ────────────────────────────────────────────────────────────────────────────────
# AMOUNTS
# ────────────────────────────────────────────────────────────────────────────────
def progress_percentage(current_amount: float, target_amount: float) -> float:
    if target_amount <= 0:
        return 0.0
    return min(current_amount / target_amount * 100, 100.0)


def remaining_amount(current_amount: float, target_amount: float) -> float:
    return max(target_amount - current_amount, 0.0)


# ────────────────────────────────────────────────────────────────────────────────
# TIME
# ────────────────────────────────────────────────────────────────────────────────
def days_remaining(target_date: datetime, now: datetime) -> int:
    return math.ceil((target_date - now).total_seconds() / SECONDS_PER_DAY)


def elapsed_fraction(created_at: datetime, target_date: datetime, now: datetime) -> float:
    """Share of the goal's lifetime already used; 0 when the lifetime is empty."""
    span = (target_date - created_at).total_seconds()
    if span <= 0:
        return 0.0
    return (now - created_at).total_seconds() / span


def is_on_track(current_amount: float, target_amount: float, created_at: datetime,
                target_date: datetime, now: datetime) -> bool:
    amount_fraction = current_amount / target_amount if target_amount > 0 else 0.0
    return amount_fraction >= elapsed_fraction(created_at, target_date, now)


def required_monthly_contribution(remaining: float, days_left: int) -> float:
    months_left = max(days_left / 30, MIN_MONTHS_REMAINING)
    return remaining / months_left


# ────────────────────────────────────────────────────────────────────────────────
# FULL BLOCK
# ────────────────────────────────────────────────────────────────────────────────
def goal_progress(goal: Any, now: Optional[datetime] = None) -> Dict[str, Any]:
    """
    Derive the read-time progress block for a goal. Works on the ORM row or any
    object exposing current_amount, target_amount, created_at and target_date.
    """
    now = now or utcnow()
    current = float(goal.current_amount or 0.0)
    target = float(goal.target_amount or 0.0)
    created_at = goal.created_at or now

    remaining = remaining_amount(current, target)
    days_left = days_remaining(goal.target_date, now)
    days_total = days_remaining(goal.target_date, created_at)
    fraction = elapsed_fraction(created_at, goal.target_date, now)

    return {
        "progress": round(progress_percentage(current, target), 2),
        "remainingAmount": round(remaining, 2),
        "daysRemaining": days_left,
        "daysPassed": days_total - days_left,
        "timeProgress": round(fraction * 100, 2),
        "isOnTrack": is_on_track(current, target, created_at, goal.target_date, now),
        "requiredMonthlyContribution": round(required_monthly_contribution(remaining, days_left), 2),
    }
