# app/schemas/expense.py
from typing import Annotated, List, Optional
from pydantic import Field, StringConstraints, field_validator, model_validator
from datetime import datetime
import uuid
from app.models.expense import ExpenseCategory, PaymentMethod, RecurrenceFrequency
from app.schemas.common import AmountSummary, CamelModel, Pagination, UTCModel

Title = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=100)]
Description = Annotated[str, StringConstraints(strip_whitespace=True, max_length=500)]

class RecurringInfo(UTCModel):
    is_recurring: bool = False
    frequency: Optional[RecurrenceFrequency] = None
    end_date: Optional[datetime] = None

    @model_validator(mode="after")
    def frequency_required_when_recurring(self):
        if self.is_recurring and self.frequency is None:
            raise ValueError("Frequency is required for recurring expenses")
        return self

def _clean_tags(tags: Optional[List[str]]) -> Optional[List[str]]:
    if tags is None:
        return None
    seen = set()
    cleaned = []
    for tag in tags:
        tag = tag.strip()
        if tag and tag.lower() not in seen:
            seen.add(tag.lower())
            cleaned.append(tag)
    return cleaned

class ExpenseBase(UTCModel):
    title: Title = Field(..., description="Expense title, e.g. Coffee, Rent")
    amount: float = Field(..., gt=0, description="Amount spent, must be greater than 0")
    category: ExpenseCategory
    description: Optional[Description] = None
    date: Optional[datetime] = None
    payment_method: PaymentMethod = PaymentMethod.cash
    tags: List[str] = Field(default_factory=list)
    recurring: RecurringInfo = Field(default_factory=RecurringInfo)
    receipt: str = ""

    @field_validator("tags")
    @classmethod
    def dedupe_tags(cls, tags: List[str]) -> List[str]:
        return _clean_tags(tags)

class ExpenseCreate(ExpenseBase):
    pass

class ExpenseUpdate(UTCModel):
    title: Optional[Title] = None
    amount: Optional[float] = Field(None, gt=0)
    category: Optional[ExpenseCategory] = None
    description: Optional[Description] = None
    date: Optional[datetime] = None
    payment_method: Optional[PaymentMethod] = None
    tags: Optional[List[str]] = None
    recurring: Optional[RecurringInfo] = None
    receipt: Optional[str] = None

    @field_validator("tags")
    @classmethod
    def dedupe_tags(cls, tags: Optional[List[str]]) -> Optional[List[str]]:
        return _clean_tags(tags)

class ExpenseRead(CamelModel):
    id: uuid.UUID
    user_id: uuid.UUID
    title: str
    amount: float
    category: ExpenseCategory
    description: Optional[str] = None
    date: datetime
    payment_method: PaymentMethod
    tags: List[str] = []
    recurring: RecurringInfo
    receipt: str = ""
    created_at: datetime
    updated_at: datetime

    @field_validator("recurring", mode="before")
    @classmethod
    def empty_recurring(cls, value):
        return value or {}

class ExpenseListResponse(CamelModel):
    expenses: List[ExpenseRead]
    pagination: Pagination
    summary: AmountSummary

class ExpenseResponse(CamelModel):
    message: str
    expense: ExpenseRead

class CategorySummaryItem(CamelModel):
    category: ExpenseCategory
    total_amount: float
    count: int
    average_amount: float
