# app/models/goal.py
import uuid
from sqlalchemy import Column, String, Float, DateTime, ForeignKey, Enum, JSON, Uuid
from sqlalchemy.orm import relationship
from app.core.database import Base
from app.models.expense import _enum_values
from app.utils.periods import utcnow
import enum

class GoalCategory(str, enum.Enum):
    emergency_fund = "Emergency Fund"
    vacation = "Vacation"
    car = "Car"
    house = "House"
    education = "Education"
    retirement = "Retirement"
    wedding = "Wedding"
    medical = "Medical"
    business = "Business"
    electronics = "Electronics"
    other = "Other"

class GoalPriority(str, enum.Enum):
    low = "Low"
    medium = "Medium"
    high = "High"

class GoalStatus(str, enum.Enum):
    active = "Active"
    completed = "Completed"
    paused = "Paused"
    cancelled = "Cancelled"

class AutoContributeFrequency(str, enum.Enum):
    weekly = "weekly"
    monthly = "monthly"

class Goal(Base):
    __tablename__ = "goals"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(length=100), nullable=False)
    description = Column(String(length=500), nullable=True)
    target_amount = Column(Float, nullable=False)
    # Running total, only ever moved together with a contribution row
    current_amount = Column(Float, nullable=False, default=0.0)
    target_date = Column(DateTime, nullable=False)
    category = Column(
        Enum(GoalCategory, name="goal_category", values_callable=_enum_values),
        nullable=False,
    )
    priority = Column(
        Enum(GoalPriority, name="goal_priority", values_callable=_enum_values),
        nullable=False,
        default=GoalPriority.medium,
    )
    status = Column(
        Enum(GoalStatus, name="goal_status", values_callable=_enum_values),
        nullable=False,
        default=GoalStatus.active,
        index=True,
    )
    # {"enabled": bool, "amount": float | None, "frequency": str | None}
    auto_contribute = Column(JSON, nullable=False, default=dict)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    user = relationship("User", back_populates="goals")
    contributions = relationship(
        "GoalContribution",
        back_populates="goal",
        cascade="all, delete-orphan",
        order_by="GoalContribution.date",
        lazy="selectin",
    )

    def __repr__(self):
        return f"<Goal title={self.title} target={self.target_amount} user_id={self.user_id}>"

class GoalContribution(Base):
    __tablename__ = "goal_contributions"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    goal_id = Column(Uuid(as_uuid=True), ForeignKey("goals.id", ondelete="CASCADE"), nullable=False, index=True)
    amount = Column(Float, nullable=False)
    date = Column(DateTime, nullable=False, default=utcnow)
    note = Column(String(length=200), nullable=False, default="")

    goal = relationship("Goal", back_populates="contributions")

    def __repr__(self):
        return f"<GoalContribution amount={self.amount} goal_id={self.goal_id}>"
