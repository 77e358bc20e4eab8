# app/models/expense.py
import uuid
from sqlalchemy import Column, String, ForeignKey, Float, Enum, DateTime, JSON, Uuid
from sqlalchemy.orm import relationship
from app.core.database import Base
from app.utils.periods import utcnow
import enum

class ExpenseCategory(str, enum.Enum):
    food_dining = "Food & Dining"
    transportation = "Transportation"
    shopping = "Shopping"
    entertainment = "Entertainment"
    bills_utilities = "Bills & Utilities"
    healthcare = "Healthcare"
    education = "Education"
    travel = "Travel"
    groceries = "Groceries"
    housing = "Housing"
    insurance = "Insurance"
    gifts_donations = "Gifts & Donations"
    personal_care = "Personal Care"
    business = "Business"
    other = "Other"

class PaymentMethod(str, enum.Enum):
    cash = "Cash"
    credit_card = "Credit Card"
    debit_card = "Debit Card"
    bank_transfer = "Bank Transfer"
    digital_wallet = "Digital Wallet"
    check = "Check"

class RecurrenceFrequency(str, enum.Enum):
    daily = "daily"
    weekly = "weekly"
    monthly = "monthly"
    yearly = "yearly"

def _enum_values(enum_cls):
    # Persist the human-readable labels rather than the member names
    return [member.value for member in enum_cls]

class Expense(Base):
    __tablename__ = "expenses"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(length=100), nullable=False)
    amount = Column(Float, nullable=False)
    category = Column(
        Enum(ExpenseCategory, name="expense_category", values_callable=_enum_values),
        nullable=False,
    )
    description = Column(String(length=500), nullable=True)
    date = Column(DateTime, nullable=False, default=utcnow, index=True)
    payment_method = Column(
        Enum(PaymentMethod, name="payment_method", values_callable=_enum_values),
        nullable=False,
        default=PaymentMethod.cash,
    )
    tags = Column(JSON, nullable=False, default=list)
    # {"isRecurring": bool, "frequency": str | None, "endDate": iso str | None}
    recurring = Column(JSON, nullable=False, default=dict)
    receipt = Column(String, nullable=False, default="")

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    user = relationship("User", back_populates="expenses")

    def __repr__(self):
        return f"<Expense title={self.title} amount={self.amount} user_id={self.user_id}>"
