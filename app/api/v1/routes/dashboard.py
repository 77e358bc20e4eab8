# app/api/v1/routes/dashboard.py
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Any, Dict, Literal, Optional
from datetime import datetime

from app.api.deps import get_current_user
from app.core.auth import User
from app.core.database import get_async_session
from app.utils.periods import to_naive_utc
from app.utils.reporting import (
    get_category_analysis,
    get_goals_progress,
    get_monthly_report,
    get_overview,
    get_spending_trends,
)

router = APIRouter(prefix="/dashboard", tags=["dashboard"])

@router.get("/overview")
async def read_overview(
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
) -> Dict[str, Any]:
    """
    Key metrics for the current calendar month:
    - totals and month-over-month change
    - budget usage against the profile's monthly budget
    - top categories, goal counts and the five latest expenses
    """
    return await get_overview(user, db)

@router.get("/spending-trends")
async def read_spending_trends(
    period: Literal["7days", "30days", "90days", "1year"] = Query("30days"),
    group_by: Literal["day", "week", "month"] = Query("day", alias="groupBy"),
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
) -> Dict[str, Any]:
    return await get_spending_trends(user.id, db, period=period, group_by=group_by)

@router.get("/category-analysis")
async def read_category_analysis(
    start_date: Optional[datetime] = Query(None, alias="startDate"),
    end_date: Optional[datetime] = Query(None, alias="endDate"),
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
) -> Dict[str, Any]:
    """Per-category statistics, compared with the preceding period of the same length."""
    start_date, end_date = to_naive_utc(start_date), to_naive_utc(end_date)
    if start_date and end_date and start_date > end_date:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Start date must be before end date",
        )
    return await get_category_analysis(user.id, db, start_date, end_date)

@router.get("/goals-progress")
async def read_goals_progress(
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
) -> Dict[str, Any]:
    return await get_goals_progress(user.id, db)

@router.get("/monthly-report")
async def read_monthly_report(
    year: Optional[int] = Query(None, ge=2020, le=2030),
    month: Optional[int] = Query(None, ge=1, le=12),
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
) -> Dict[str, Any]:
    return await get_monthly_report(user, db, year=year, month=month)
