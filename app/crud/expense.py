# app/crud/expense.py
from dataclasses import dataclass
from datetime import datetime
from sqlalchemy import and_, func, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from app.models.expense import Expense, ExpenseCategory
from typing import Any, Dict, List, Optional, Tuple
import uuid
from app.schemas.expense import ExpenseCreate, ExpenseUpdate
from app.utils.periods import utcnow

@dataclass
class ExpenseFilters:
    category: Optional[ExpenseCategory] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    min_amount: Optional[float] = None
    max_amount: Optional[float] = None
    search: Optional[str] = None

def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")

def build_expense_conditions(user_id: uuid.UUID, filters: ExpenseFilters) -> List[Any]:
    conditions = [Expense.user_id == user_id]
    if filters.category is not None:
        conditions.append(Expense.category == filters.category)
    if filters.start_date is not None:
        conditions.append(Expense.date >= filters.start_date)
    if filters.end_date is not None:
        conditions.append(Expense.date <= filters.end_date)
    if filters.min_amount is not None:
        conditions.append(Expense.amount >= filters.min_amount)
    if filters.max_amount is not None:
        conditions.append(Expense.amount <= filters.max_amount)
    if filters.search:
        pattern = f"%{_escape_like(filters.search.lower())}%"
        conditions.append(or_(
            func.lower(Expense.title).like(pattern, escape="\\"),
            func.lower(func.coalesce(Expense.description, "")).like(pattern, escape="\\"),
        ))
    return conditions

async def summarize_expenses(conditions: List[Any], db: AsyncSession) -> Dict[str, Any]:
    result = await db.execute(
        select(
            func.coalesce(func.sum(Expense.amount), 0.0),
            func.count(Expense.id),
            func.coalesce(func.avg(Expense.amount), 0.0),
        ).where(and_(*conditions))
    )
    total, count, average = result.one()
    return {
        "total_amount": round(float(total), 2),
        "count": int(count),
        "average_amount": round(float(average), 2),
    }

async def list_expenses_for_user(
    user_id: uuid.UUID,
    filters: ExpenseFilters,
    page: int,
    limit: int,
    db: AsyncSession,
) -> Tuple[List[Expense], int, Dict[str, Any]]:
    """Return one page of matching expenses, the total match count and a summary over every match."""
    conditions = build_expense_conditions(user_id, filters)
    result = await db.execute(
        select(Expense)
        .where(and_(*conditions))
        .order_by(Expense.date.desc(), Expense.created_at.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    )
    expenses = result.scalars().all()
    summary = await summarize_expenses(conditions, db)
    return expenses, summary["count"], summary

async def get_expense_by_id(expense_id: uuid.UUID, user_id: uuid.UUID, db: AsyncSession) -> Optional[Expense]:
    result = await db.execute(
        select(Expense).where(Expense.id == expense_id, Expense.user_id == user_id)
    )
    return result.scalar_one_or_none()

def _to_columns(ex_in: ExpenseCreate) -> Dict[str, Any]:
    data = ex_in.model_dump(exclude={"recurring"})
    data["recurring"] = ex_in.recurring.model_dump(mode="json", by_alias=True)
    if data.get("date") is None:
        data["date"] = utcnow()
    return data

async def create_expense_for_user(user_id: uuid.UUID, ex_in: ExpenseCreate, db: AsyncSession) -> Expense:
    new_ex = Expense(**_to_columns(ex_in), user_id=user_id)
    db.add(new_ex)
    await db.commit()
    await db.refresh(new_ex)
    return new_ex

async def update_expense(expense: Expense, ex_in: ExpenseUpdate, db: AsyncSession) -> Expense:
    """
    Merge the provided fields into the stored expense and re-validate the result
    as a whole. Raises pydantic.ValidationError before anything is written.
    """
    current = {
        "title": expense.title,
        "amount": expense.amount,
        "category": expense.category,
        "description": expense.description,
        "date": expense.date,
        "payment_method": expense.payment_method,
        "tags": expense.tags or [],
        "recurring": expense.recurring or {},
        "receipt": expense.receipt,
    }
    changes = ex_in.model_dump(exclude_unset=True)
    merged = ExpenseCreate.model_validate({**current, **changes})
    for field, value in _to_columns(merged).items():
        setattr(expense, field, value)
    db.add(expense)
    await db.commit()
    await db.refresh(expense)
    return expense

async def delete_expense(expense: Expense, db: AsyncSession) -> None:
    await db.delete(expense)
    await db.commit()

async def get_category_summary(
    user_id: uuid.UUID,
    db: AsyncSession,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
) -> List[Dict[str, Any]]:
    conditions = build_expense_conditions(
        user_id, ExpenseFilters(start_date=start_date, end_date=end_date)
    )
    total = func.sum(Expense.amount)
    result = await db.execute(
        select(Expense.category, total, func.count(Expense.id), func.avg(Expense.amount))
        .where(and_(*conditions))
        .group_by(Expense.category)
        .order_by(total.desc())
    )
    return [
        {
            "category": category,
            "total_amount": round(float(total_amount), 2),
            "count": int(count),
            "average_amount": round(float(average), 2),
        }
        for category, total_amount, count, average in result.all()
    ]
