# app/api/v1/routes/expenses.py
from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional
import uuid
from datetime import datetime

from app.api.deps import get_current_user
from app.core.database import get_async_session
from app.core.auth import User
from app.crud.expense import (
    ExpenseFilters,
    create_expense_for_user,
    delete_expense,
    get_category_summary,
    get_expense_by_id,
    list_expenses_for_user,
    update_expense,
)
from app.models.expense import ExpenseCategory
from app.schemas.common import MessageResponse, Pagination
from app.schemas.expense import (
    CategorySummaryItem,
    ExpenseCreate,
    ExpenseListResponse,
    ExpenseRead,
    ExpenseResponse,
    ExpenseUpdate,
)
from app.utils.periods import to_naive_utc

router = APIRouter(prefix="/expenses", tags=["expenses"])

NOT_FOUND = "Expense not found"

@router.get("", response_model=ExpenseListResponse)
async def read_expenses(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    category: Optional[ExpenseCategory] = Query(None),
    start_date: Optional[datetime] = Query(None, alias="startDate"),
    end_date: Optional[datetime] = Query(None, alias="endDate"),
    min_amount: Optional[float] = Query(None, ge=0, alias="minAmount"),
    max_amount: Optional[float] = Query(None, ge=0, alias="maxAmount"),
    search: Optional[str] = Query(None, max_length=100),
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    """
    List the caller's expenses, newest first.

    - **page** / **limit**: pagination (limit 1..100)
    - **category**: exact category label
    - **startDate** / **endDate**: inclusive bounds on the expense date
    - **minAmount** / **maxAmount**: inclusive bounds on the amount
    - **search**: case-insensitive match on title or description

    The summary covers every matching expense, not only the returned page.
    """
    filters = ExpenseFilters(
        category=category,
        start_date=to_naive_utc(start_date),
        end_date=to_naive_utc(end_date),
        min_amount=min_amount,
        max_amount=max_amount,
        search=search,
    )
    expenses, total, summary = await list_expenses_for_user(user.id, filters, page, limit, db)
    return {
        "expenses": expenses,
        "pagination": Pagination.build(page, limit, total),
        "summary": summary,
    }

@router.get("/categories/summary", response_model=List[CategorySummaryItem])
async def read_category_summary(
    start_date: Optional[datetime] = Query(None, alias="startDate"),
    end_date: Optional[datetime] = Query(None, alias="endDate"),
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    """Totals per category, largest first."""
    return await get_category_summary(user.id, db, to_naive_utc(start_date), to_naive_utc(end_date))

@router.post("", response_model=ExpenseResponse, status_code=status.HTTP_201_CREATED)
async def create_expense(
    ex_in: ExpenseCreate,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    expense = await create_expense_for_user(user.id, ex_in, db)
    return {"message": "Expense created successfully", "expense": expense}

@router.get("/{expense_id}", response_model=ExpenseRead)
async def read_expense(
    expense_id: uuid.UUID,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    expense = await get_expense_by_id(expense_id, user.id, db)
    if not expense:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=NOT_FOUND)
    return expense

@router.put("/{expense_id}", response_model=ExpenseResponse)
async def update_expense_endpoint(
    expense_id: uuid.UUID,
    ex_in: ExpenseUpdate,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    expense = await get_expense_by_id(expense_id, user.id, db)
    if not expense:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=NOT_FOUND)
    expense = await update_expense(expense, ex_in, db)
    return {"message": "Expense updated successfully", "expense": expense}

@router.delete("/{expense_id}", response_model=MessageResponse)
async def delete_expense_endpoint(
    expense_id: uuid.UUID,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    expense = await get_expense_by_id(expense_id, user.id, db)
    if not expense:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=NOT_FOUND)
    await delete_expense(expense, db)
    return {"message": "Expense deleted successfully"}
