from datetime import datetime, timedelta

import pytest

from app.models.expense import Expense, ExpenseCategory, PaymentMethod
from app.models.goal import Goal, GoalCategory, GoalContribution, GoalStatus
from app.utils.reporting import (
    build_trend_buckets,
    get_category_analysis,
    get_goals_progress,
    get_monthly_report,
    get_overview,
    get_spending_trends,
    percent_change,
)

NOW = datetime(2026, 6, 15, 12, 0)


async def add_expense(db, user, amount, when, category=ExpenseCategory.food_dining,
                      title="Lunch", payment_method=PaymentMethod.cash):
    expense = Expense(
        user_id=user.id,
        title=title,
        amount=amount,
        category=category,
        date=when,
        payment_method=payment_method,
        tags=[],
        recurring={},
    )
    db.add(expense)
    await db.commit()
    return expense


async def add_goal(db, user, target, current=0.0, status=GoalStatus.active,
                   category=GoalCategory.vacation, created_at=None, target_date=None):
    goal = Goal(
        user_id=user.id,
        title=f"Goal {target}",
        target_amount=target,
        current_amount=current,
        target_date=target_date or NOW + timedelta(days=100),
        category=category,
        status=status,
        auto_contribute={},
        created_at=created_at or NOW - timedelta(days=100),
    )
    if current:
        goal.contributions.append(GoalContribution(amount=current, date=NOW - timedelta(days=1)))
    db.add(goal)
    await db.commit()
    return goal


def test_percent_change_is_zero_without_baseline() -> None:
    assert percent_change(50, 0) == 0.0
    assert percent_change(150, 100) == 50.0
    assert percent_change(50, 100) == -50.0


async def test_overview_single_expense_has_full_share(db, user) -> None:
    await add_expense(db, user, 4.5, NOW - timedelta(hours=1), title="Coffee")

    overview = await get_overview(user, db, now=NOW)

    assert overview["currentMonth"]["totalExpenses"] == 4.5
    assert overview["currentMonth"]["transactionCount"] == 1
    assert overview["currentMonth"]["monthOverMonthChange"] == 0.0
    assert overview["categoryBreakdown"] == [{
        "category": "Food & Dining",
        "totalAmount": 4.5,
        "count": 1,
        "averageAmount": 4.5,
        "percentage": 100.0,
    }]
    assert overview["recentTransactions"][0]["title"] == "Coffee"
    assert overview["budget"]["monthlyBudget"] == 500.0
    assert overview["budget"]["budgetUsed"] == 0.9
    assert overview["budget"]["isOverBudget"] is False


async def test_overview_month_over_month(db, user) -> None:
    await add_expense(db, user, 100, datetime(2026, 5, 31, 23, 59))
    await add_expense(db, user, 150, datetime(2026, 6, 1, 0, 0))
    await add_expense(db, user, 450, datetime(2026, 6, 2), category=ExpenseCategory.housing)

    overview = await get_overview(user, db, now=NOW)

    assert overview["previousMonth"] == {"totalExpenses": 100.0, "transactionCount": 1}
    assert overview["currentMonth"]["totalExpenses"] == 600.0
    assert overview["currentMonth"]["monthOverMonthChange"] == 500.0
    assert overview["budget"]["isOverBudget"] is True
    assert overview["budget"]["budgetRemaining"] == 0.0
    shares = [row["percentage"] for row in overview["categoryBreakdown"]]
    assert shares == [75.0, 25.0]


async def test_overview_counts_goals_by_status(db, user) -> None:
    await add_goal(db, user, 1000, current=200)
    await add_goal(db, user, 300, current=300, status=GoalStatus.completed)
    await add_goal(db, user, 50, status=GoalStatus.paused)

    goals = (await get_overview(user, db, now=NOW))["goals"]

    assert goals == {
        "active": 1,
        "completed": 1,
        "paused": 1,
        "cancelled": 0,
        "totalTarget": 1350.0,
        "totalSaved": 500.0,
    }


async def test_empty_trends_are_zero(db, user) -> None:
    trends = await get_spending_trends(user.id, db, period="7days", group_by="day", now=NOW)

    assert trends["trends"] == []
    assert trends["summary"] == {"totalPeriods": 0, "totalAmount": 0.0, "averagePerPeriod": 0.0}


async def test_trends_bucket_by_day_inside_the_window(db, user) -> None:
    await add_expense(db, user, 10, NOW - timedelta(days=8))
    await add_expense(db, user, 20, datetime(2026, 6, 14, 9, 0))
    await add_expense(db, user, 5, datetime(2026, 6, 14, 18, 0), category=ExpenseCategory.transportation)
    await add_expense(db, user, 15, datetime(2026, 6, 15, 8, 0))

    trends = await get_spending_trends(user.id, db, period="7days", group_by="day", now=NOW)

    assert trends["trends"] == [
        {"_id": {"year": 2026, "month": 6, "day": 14}, "totalAmount": 25.0, "count": 2,
         "categories": ["Food & Dining", "Transportation"]},
        {"_id": {"year": 2026, "month": 6, "day": 15}, "totalAmount": 15.0, "count": 1,
         "categories": ["Food & Dining"]},
    ]
    assert trends["summary"] == {"totalPeriods": 2, "totalAmount": 40.0, "averagePerPeriod": 20.0}


def test_week_and_month_bucket_ids() -> None:
    class Row:
        def __init__(self, date):
            self.date = date
            self.amount = 1.0
            self.category = ExpenseCategory.other

    rows = [Row(datetime(2026, 1, 3)), Row(datetime(2026, 1, 4)), Row(datetime(2026, 2, 1))]
    weeks = build_trend_buckets(rows, "week")
    assert [bucket["_id"] for bucket in weeks] == [
        {"year": 2026, "week": 0},
        {"year": 2026, "week": 1},
        {"year": 2026, "week": 5},
    ]
    months = build_trend_buckets(rows, "month")
    assert [(b["_id"], b["count"]) for b in months] == [
        ({"year": 2026, "month": 1}, 2),
        ({"year": 2026, "month": 2}, 1),
    ]


async def test_category_analysis_compares_with_previous_window(db, user) -> None:
    start, end = datetime(2026, 6, 11), datetime(2026, 6, 21)
    await add_expense(db, user, 40, datetime(2026, 6, 5))
    await add_expense(db, user, 60, datetime(2026, 6, 12))
    await add_expense(db, user, 20, datetime(2026, 6, 13))
    await add_expense(db, user, 100, datetime(2026, 6, 20), category=ExpenseCategory.travel, title="Train")

    analysis = await get_category_analysis(user.id, db, start, end, now=NOW)

    assert analysis["previousDateRange"] == {"startDate": datetime(2026, 6, 1), "endDate": start}
    assert analysis["totalSpent"] == 180.0
    assert analysis["categoryCount"] == 2
    travel, food = analysis["categories"]
    assert travel["category"] == "Travel"
    assert travel["changePercentage"] == 0.0
    assert food["totalAmount"] == 80.0
    assert food["minAmount"] == 20
    assert food["maxAmount"] == 60
    assert food["previousPeriodAmount"] == 40.0
    assert food["changePercentage"] == 100.0
    assert [t["amount"] for t in food["transactions"]] == [20, 60]
    assert sum(row["percentage"] for row in analysis["categories"]) == pytest.approx(100.0)


async def test_category_analysis_defaults_to_current_month(db, user) -> None:
    await add_expense(db, user, 10, datetime(2026, 5, 20))
    await add_expense(db, user, 30, datetime(2026, 6, 3))

    analysis = await get_category_analysis(user.id, db, now=NOW)

    assert analysis["dateRange"] == {"startDate": datetime(2026, 6, 1), "endDate": datetime(2026, 7, 1)}
    assert analysis["totalSpent"] == 30.0


async def test_goals_progress(db, user) -> None:
    await add_goal(db, user, 1000, current=600)
    await add_goal(db, user, 1000, current=100, category=GoalCategory.car)
    await add_goal(db, user, 0.0, status=GoalStatus.paused, category=GoalCategory.car,
                   target_date=NOW + timedelta(days=10))

    report = await get_goals_progress(user.id, db, now=NOW)

    assert report["overview"]["totalGoals"] == 3
    assert report["overview"]["activeGoals"] == 2
    assert report["overview"]["overallProgress"] == 35.0
    # Halfway through their lifetime: 60% saved is on track, 10% is behind
    assert report["onTrackGoals"] == 1
    assert report["behindGoals"] == 1
    car = next(row for row in report["categoryBreakdown"] if row["category"] == "Car")
    assert car["count"] == 2
    assert car["avgProgress"] == 5.0
    leading = next(row for row in report["goals"] if row["currentAmount"] == 600)
    assert leading["progress"] == 60.0
    assert leading["daysRemaining"] == 100
    assert leading["requiredMonthlyContribution"] == 120.0
    assert [c["amount"] for c in leading["contributionHistory"]] == [600]


async def test_monthly_report(db, user) -> None:
    await add_expense(db, user, 12, datetime(2026, 2, 3), payment_method=PaymentMethod.credit_card)
    await add_expense(db, user, 8, datetime(2026, 2, 3, 20, 0))
    await add_expense(db, user, 80, datetime(2026, 2, 28, 23, 0), category=ExpenseCategory.groceries)
    await add_expense(db, user, 999, datetime(2026, 3, 1))

    report = await get_monthly_report(user, db, year=2026, month=2, now=NOW)

    assert report["period"]["startDate"] == datetime(2026, 2, 1)
    assert report["period"]["endDate"] == datetime(2026, 3, 1)
    assert report["summary"]["totalExpenses"] == 100.0
    assert report["summary"]["transactionCount"] == 3
    assert report["summary"]["budgetUsed"] == 20.0
    assert report["dailyBreakdown"] == [
        {"day": 3, "totalAmount": 20.0, "count": 2},
        {"day": 28, "totalAmount": 80.0, "count": 1},
    ]
    assert [row["paymentMethod"] for row in report["paymentMethodBreakdown"]] == ["Cash", "Credit Card"]
    assert [e["amount"] for e in report["topExpenses"]] == [80, 12, 8]


async def test_category_analysis_fills_missing_bound_from_current_month(db, user) -> None:
    await add_expense(db, user, 10, datetime(2026, 5, 31))
    await add_expense(db, user, 25, datetime(2026, 6, 2))
    await add_expense(db, user, 40, datetime(2026, 6, 30, 23, 0))

    only_end = await get_category_analysis(user.id, db, end=datetime(2026, 6, 10), now=NOW)
    assert only_end["dateRange"] == {"startDate": datetime(2026, 6, 1), "endDate": datetime(2026, 6, 10)}
    assert only_end["totalSpent"] == 25.0

    only_start = await get_category_analysis(user.id, db, start=datetime(2026, 6, 5), now=NOW)
    assert only_start["dateRange"] == {"startDate": datetime(2026, 6, 5), "endDate": datetime(2026, 7, 1)}
    assert only_start["totalSpent"] == 40.0
