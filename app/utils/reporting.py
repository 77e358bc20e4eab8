# app/utils/reporting.py
"""
Dashboard aggregations over a single user's expenses and goals.

Nothing here is stored: every report is recomputed from the current rows on
each call. Totals are folded in Python after one scoped query per window so
the same code runs on PostgreSQL and SQLite.
"""
from collections import defaultdict
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Tuple
import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import User
from app.models.expense import Expense
from app.models.goal import Goal, GoalStatus
from app.utils.goal_progress import goal_progress
from app.utils.periods import month_bounds, previous_month, trend_start, utcnow, week_of_year

TOP_CATEGORIES_LIMIT = 10
RECENT_TRANSACTIONS_LIMIT = 5
CATEGORY_SAMPLE_LIMIT = 5
TOP_EXPENSES_LIMIT = 10


# ────────────────────────────────────────────────────────────────────────────────
# HELPERS – COMMON
# ────────────────────────────────────────────────────────────────────────────────
def _money(value: float) -> float:
    return round(float(value), 2)


def percent_change(current: float, previous: float) -> float:
    if previous <= 0:
        return 0.0
    return _money((current - previous) / previous * 100)


def share_of(amount: float, total: float) -> float:
    if total <= 0:
        return 0.0
    return _money(amount / total * 100)


def budget_block(monthly_budget: Optional[float], spent: float) -> Dict[str, Any]:
    budget = float(monthly_budget or 0.0)
    used = spent / budget * 100 if budget > 0 else 0.0
    return {
        "monthlyBudget": _money(budget),
        "budgetUsed": _money(used),
        "budgetRemaining": _money(max(budget - spent, 0.0)),
        "isOverBudget": used > 100,
    }


def totals(expenses: Iterable[Expense]) -> Dict[str, Any]:
    amounts = [expense.amount for expense in expenses]
    total = sum(amounts)
    return {
        "totalAmount": _money(total),
        "count": len(amounts),
        "averageAmount": _money(total / len(amounts)) if amounts else 0.0,
    }


def group_by_category(expenses: Iterable[Expense]) -> List[Dict[str, Any]]:
    """Sum, count and average per category, largest sum first."""
    groups: Dict[str, List[float]] = defaultdict(list)
    for expense in expenses:
        groups[expense.category.value].append(expense.amount)
    rows = [
        {
            "category": category,
            "totalAmount": _money(sum(amounts)),
            "count": len(amounts),
            "averageAmount": _money(sum(amounts) / len(amounts)),
        }
        for category, amounts in groups.items()
    ]
    rows.sort(key=lambda row: row["totalAmount"], reverse=True)
    return rows


def brief(expense: Expense) -> Dict[str, Any]:
    return {
        "id": str(expense.id),
        "title": expense.title,
        "amount": expense.amount,
        "category": expense.category.value,
        "date": expense.date,
        "paymentMethod": expense.payment_method.value,
    }


async def fetch_expenses(
    user_id: uuid.UUID,
    db: AsyncSession,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    end_inclusive: bool = False,
) -> List[Expense]:
    query = select(Expense).where(Expense.user_id == user_id)
    if start is not None:
        query = query.where(Expense.date >= start)
    if end is not None:
        query = query.where(Expense.date <= end if end_inclusive else Expense.date < end)
    result = await db.execute(query.order_by(Expense.date.desc(), Expense.created_at.desc()))
    return list(result.scalars().all())


async def fetch_goals(user_id: uuid.UUID, db: AsyncSession) -> List[Goal]:
    result = await db.execute(select(Goal).where(Goal.user_id == user_id).order_by(Goal.created_at.desc()))
    return list(result.scalars().all())


# ────────────────────────────────────────────────────────────────────────────────
# OVERVIEW
# ────────────────────────────────────────────────────────────────────────────────
async def get_overview(user: User, db: AsyncSession, now: Optional[datetime] = None) -> Dict[str, Any]:
    now = now or utcnow()
    month_start, month_end = month_bounds(now.year, now.month)
    prev_start, prev_end = month_bounds(*previous_month(now.year, now.month))

    current = await fetch_expenses(user.id, db, month_start, month_end)
    previous = await fetch_expenses(user.id, db, prev_start, prev_end)
    current_totals = totals(current)
    previous_totals = totals(previous)
    current_total = current_totals["totalAmount"]

    categories = group_by_category(current)[:TOP_CATEGORIES_LIMIT]
    for row in categories:
        row["percentage"] = share_of(row["totalAmount"], current_total)

    goals = await fetch_goals(user.id, db)
    status_counts = {status: 0 for status in GoalStatus}
    for goal in goals:
        status_counts[goal.status] += 1

    result = await db.execute(
        select(Expense)
        .where(Expense.user_id == user.id)
        .order_by(Expense.created_at.desc())
        .limit(RECENT_TRANSACTIONS_LIMIT)
    )
    recent = result.scalars().all()

    return {
        "currentMonth": {
            "totalExpenses": current_total,
            "transactionCount": current_totals["count"],
            "averageTransaction": current_totals["averageAmount"],
            "monthOverMonthChange": percent_change(current_total, previous_totals["totalAmount"]),
        },
        "previousMonth": {
            "totalExpenses": previous_totals["totalAmount"],
            "transactionCount": previous_totals["count"],
        },
        "budget": budget_block(user.monthly_budget, current_total),
        "currency": user.currency,
        "categoryBreakdown": categories,
        "goals": {
            "active": status_counts[GoalStatus.active],
            "completed": status_counts[GoalStatus.completed],
            "paused": status_counts[GoalStatus.paused],
            "cancelled": status_counts[GoalStatus.cancelled],
            "totalTarget": _money(sum(goal.target_amount for goal in goals)),
            "totalSaved": _money(sum(goal.current_amount for goal in goals)),
        },
        "recentTransactions": [brief(expense) for expense in recent],
    }


# ────────────────────────────────────────────────────────────────────────────────
# SPENDING TRENDS
# ────────────────────────────────────────────────────────────────────────────────
def bucket_key(value: datetime, group_by: str) -> Tuple[int, ...]:
    if group_by == "week":
        return (value.year, week_of_year(value))
    if group_by == "month":
        return (value.year, value.month)
    return (value.year, value.month, value.day)


def _bucket_id(key: Tuple[int, ...], group_by: str) -> Dict[str, int]:
    if group_by == "week":
        return {"year": key[0], "week": key[1]}
    if group_by == "month":
        return {"year": key[0], "month": key[1]}
    return {"year": key[0], "month": key[1], "day": key[2]}


def build_trend_buckets(expenses: Iterable[Expense], group_by: str) -> List[Dict[str, Any]]:
    buckets: Dict[Tuple[int, ...], Dict[str, Any]] = {}
    for expense in expenses:
        key = bucket_key(expense.date, group_by)
        bucket = buckets.setdefault(key, {"totalAmount": 0.0, "count": 0, "categories": []})
        bucket["totalAmount"] += expense.amount
        bucket["count"] += 1
        if expense.category.value not in bucket["categories"]:
            bucket["categories"].append(expense.category.value)

    return [
        {
            "_id": _bucket_id(key, group_by),
            "totalAmount": _money(bucket["totalAmount"]),
            "count": bucket["count"],
            "categories": sorted(bucket["categories"]),
        }
        for key, bucket in sorted(buckets.items())
    ]


async def get_spending_trends(
    user_id: uuid.UUID,
    db: AsyncSession,
    period: str = "30days",
    group_by: str = "day",
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    now = now or utcnow()
    expenses = await fetch_expenses(user_id, db, trend_start(period, now), now, end_inclusive=True)
    trends = build_trend_buckets(expenses, group_by)
    grand_total = sum(bucket["totalAmount"] for bucket in trends)
    return {
        "period": period,
        "groupBy": group_by,
        "trends": trends,
        "summary": {
            "totalPeriods": len(trends),
            "totalAmount": _money(grand_total),
            "averagePerPeriod": _money(grand_total / len(trends)) if trends else 0.0,
        },
    }


# ────────────────────────────────────────────────────────────────────────────────
# CATEGORY ANALYSIS
# ────────────────────────────────────────────────────────────────────────────────
def analysis_window(
    start: Optional[datetime], end: Optional[datetime], now: datetime
) -> Tuple[datetime, datetime, bool]:
    """
    Resolve the analysed range. Returns (start, end, end_inclusive). A missing
    bound falls back to the current month's edge; an explicit end is inclusive,
    the current-month end is half-open.
    """
    month_start, month_end = month_bounds(now.year, now.month)
    if end is None:
        return start or month_start, month_end, False
    return start or month_start, end, True


async def get_category_analysis(
    user_id: uuid.UUID,
    db: AsyncSession,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    now = now or utcnow()
    start, end, end_inclusive = analysis_window(start, end, now)
    length = end - start

    expenses = await fetch_expenses(user_id, db, start, end, end_inclusive=end_inclusive)
    # The preceding window of equal length ends where this one starts
    previous = await fetch_expenses(user_id, db, start - length, start)

    previous_totals: Dict[str, float] = defaultdict(float)
    for expense in previous:
        previous_totals[expense.category.value] += expense.amount

    grouped: Dict[str, List[Expense]] = defaultdict(list)
    for expense in expenses:
        grouped[expense.category.value].append(expense)

    total_spent = sum(expense.amount for expense in expenses)
    categories = []
    for category, rows in grouped.items():
        amounts = [row.amount for row in rows]
        category_total = sum(amounts)
        previous_amount = previous_totals.get(category, 0.0)
        newest = sorted(rows, key=lambda row: row.date, reverse=True)[:CATEGORY_SAMPLE_LIMIT]
        categories.append({
            "category": category,
            "totalAmount": _money(category_total),
            "count": len(amounts),
            "averageAmount": _money(category_total / len(amounts)),
            "minAmount": min(amounts),
            "maxAmount": max(amounts),
            "transactions": [
                {"title": row.title, "amount": row.amount, "date": row.date} for row in newest
            ],
            "percentage": share_of(category_total, total_spent),
            "previousPeriodAmount": _money(previous_amount),
            "changePercentage": percent_change(category_total, previous_amount),
        })
    categories.sort(key=lambda row: row["totalAmount"], reverse=True)

    return {
        "dateRange": {"startDate": start, "endDate": end},
        "previousDateRange": {"startDate": start - length, "endDate": start},
        "totalSpent": _money(total_spent),
        "categoryCount": len(categories),
        "categories": categories,
    }


# ────────────────────────────────────────────────────────────────────────────────
# GOALS PROGRESS
# ────────────────────────────────────────────────────────────────────────────────
def _contribution(contribution) -> Dict[str, Any]:
    return {
        "id": str(contribution.id),
        "amount": contribution.amount,
        "date": contribution.date,
        "note": contribution.note,
    }


def _goal_summary(goal: Goal) -> Dict[str, Any]:
    return {
        "id": str(goal.id),
        "title": goal.title,
        "description": goal.description,
        "category": goal.category.value,
        "priority": goal.priority.value,
        "status": goal.status.value,
        "targetAmount": goal.target_amount,
        "currentAmount": goal.current_amount,
        "targetDate": goal.target_date,
        "createdAt": goal.created_at,
    }


def goals_by_category(goals: Iterable[Goal]) -> List[Dict[str, Any]]:
    groups: Dict[str, List[Goal]] = defaultdict(list)
    for goal in goals:
        groups[goal.category.value].append(goal)
    rows = []
    for category, members in groups.items():
        # A zero target contributes 0 to the average instead of dividing by zero
        progresses = [
            goal.current_amount / goal.target_amount * 100 if goal.target_amount > 0 else 0.0
            for goal in members
        ]
        rows.append({
            "category": category,
            "count": len(members),
            "totalTarget": _money(sum(goal.target_amount for goal in members)),
            "totalCurrent": _money(sum(goal.current_amount for goal in members)),
            "avgProgress": _money(sum(progresses) / len(progresses)),
        })
    rows.sort(key=lambda row: row["totalTarget"], reverse=True)
    return rows


async def get_goals_progress(user_id: uuid.UUID, db: AsyncSession, now: Optional[datetime] = None) -> Dict[str, Any]:
    now = now or utcnow()
    goals = await fetch_goals(user_id, db)

    detailed = []
    for goal in goals:
        history = sorted(goal.contributions, key=lambda c: c.date, reverse=True)
        detailed.append({
            **_goal_summary(goal),
            **goal_progress(goal, now),
            "contributionHistory": [_contribution(c) for c in history],
        })

    total_target = sum(goal.target_amount for goal in goals)
    total_current = sum(goal.current_amount for goal in goals)
    active = [row for row in detailed if row["status"] == GoalStatus.active.value]

    return {
        "overview": {
            "totalGoals": len(goals),
            "activeGoals": len(active),
            "completedGoals": sum(1 for goal in goals if goal.status == GoalStatus.completed),
            "totalTargetAmount": _money(total_target),
            "totalCurrentAmount": _money(total_current),
            "overallProgress": share_of(total_current, total_target),
        },
        "goals": detailed,
        "categoryBreakdown": goals_by_category(goals),
        "onTrackGoals": sum(1 for row in active if row["isOnTrack"]),
        "behindGoals": sum(1 for row in active if not row["isOnTrack"]),
    }


# ────────────────────────────────────────────────────────────────────────────────
# MONTHLY REPORT
# ────────────────────────────────────────────────────────────────────────────────
def daily_breakdown(expenses: Iterable[Expense]) -> List[Dict[str, Any]]:
    days: Dict[int, List[float]] = defaultdict(list)
    for expense in expenses:
        days[expense.date.day].append(expense.amount)
    return [
        {"day": day, "totalAmount": _money(sum(amounts)), "count": len(amounts)}
        for day, amounts in sorted(days.items())
    ]


def payment_method_breakdown(expenses: Iterable[Expense]) -> List[Dict[str, Any]]:
    methods: Dict[str, List[float]] = defaultdict(list)
    for expense in expenses:
        methods[expense.payment_method.value].append(expense.amount)
    rows = [
        {"paymentMethod": method, "totalAmount": _money(sum(amounts)), "count": len(amounts)}
        for method, amounts in methods.items()
    ]
    rows.sort(key=lambda row: row["totalAmount"], reverse=True)
    return rows


async def get_monthly_report(
    user: User,
    db: AsyncSession,
    year: Optional[int] = None,
    month: Optional[int] = None,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    now = now or utcnow()
    year = year or now.year
    month = month or now.month
    start, end = month_bounds(year, month)

    expenses = await fetch_expenses(user.id, db, start, end)
    month_totals = totals(expenses)
    top = sorted(expenses, key=lambda expense: expense.amount, reverse=True)[:TOP_EXPENSES_LIMIT]

    return {
        "period": {"year": year, "month": month, "startDate": start, "endDate": end},
        "summary": {
            "totalExpenses": month_totals["totalAmount"],
            "transactionCount": month_totals["count"],
            "averageTransaction": month_totals["averageAmount"],
            **budget_block(user.monthly_budget, month_totals["totalAmount"]),
        },
        "dailyBreakdown": daily_breakdown(expenses),
        "categoryBreakdown": group_by_category(expenses),
        "paymentMethodBreakdown": payment_method_breakdown(expenses),
        "topExpenses": [brief(expense) for expense in top],
    }
