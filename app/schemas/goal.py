# app/schemas/goal.py
from typing import Annotated, List, Optional
from pydantic import ConfigDict, Field, StringConstraints, field_validator, model_validator
from datetime import datetime
import uuid

from app.models.goal import AutoContributeFrequency, GoalCategory, GoalPriority, GoalStatus
from app.schemas.common import CamelModel, UTCModel
from app.utils.goal_progress import days_remaining, progress_percentage, remaining_amount
from app.utils.periods import to_naive_utc, utcnow

Title = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=100)]
Description = Annotated[str, StringConstraints(strip_whitespace=True, max_length=500)]
Note = Annotated[str, StringConstraints(strip_whitespace=True, max_length=200)]

TARGET_DATE_IN_PAST = "Target date must be in the future"

def _require_future(value: Optional[datetime]) -> Optional[datetime]:
    value = to_naive_utc(value)
    if value is not None and value <= utcnow():
        raise ValueError(TARGET_DATE_IN_PAST)
    return value

class AutoContribute(CamelModel):
    enabled: bool = False
    amount: Optional[float] = Field(None, gt=0)
    frequency: Optional[AutoContributeFrequency] = None

    @model_validator(mode="after")
    def frequency_required_when_enabled(self):
        if self.enabled and self.frequency is None:
            raise ValueError("Frequency is required when auto-contribute is enabled")
        return self

class GoalBase(UTCModel):
    title: Title
    description: Optional[Description] = None
    target_amount: float = Field(..., gt=0)
    target_date: datetime
    category: GoalCategory
    priority: GoalPriority = GoalPriority.medium
    status: GoalStatus = GoalStatus.active
    auto_contribute: AutoContribute = Field(default_factory=AutoContribute)

class GoalCreate(GoalBase):
    current_amount: float = Field(0.0, ge=0, description="Amount already saved, recorded as an opening contribution")

    @field_validator("target_date")
    @classmethod
    def target_date_in_future(cls, value: datetime) -> datetime:
        return _require_future(value)

class GoalUpdate(UTCModel):
    # currentAmount is deliberately absent: only contributions move it
    model_config = ConfigDict(extra="forbid")

    title: Optional[Title] = None
    description: Optional[Description] = None
    target_amount: Optional[float] = Field(None, gt=0)
    target_date: Optional[datetime] = None
    category: Optional[GoalCategory] = None
    priority: Optional[GoalPriority] = None
    status: Optional[GoalStatus] = None
    auto_contribute: Optional[AutoContribute] = None

class TargetDateChange(UTCModel):
    """Checked by update_goal only when the target date actually moves."""
    target_date: datetime

    @field_validator("target_date")
    @classmethod
    def target_date_in_future(cls, value: datetime) -> datetime:
        return _require_future(value)

class ContributionCreate(CamelModel):
    amount: float = Field(..., gt=0)
    note: Optional[Note] = None

class ContributionRead(CamelModel):
    id: uuid.UUID
    amount: float
    date: datetime
    note: str = ""

class GoalStatusUpdate(CamelModel):
    status: GoalStatus

class GoalRead(CamelModel):
    id: uuid.UUID
    user_id: uuid.UUID
    title: str
    description: Optional[str] = None
    target_amount: float
    current_amount: float
    target_date: datetime
    category: GoalCategory
    priority: GoalPriority
    status: GoalStatus
    auto_contribute: AutoContribute
    contributions: List[ContributionRead] = []
    created_at: datetime
    updated_at: datetime
    progress_percentage: float = 0.0
    remaining_amount: float = 0.0
    days_remaining: int = 0

    @field_validator("auto_contribute", mode="before")
    @classmethod
    def empty_auto_contribute(cls, value):
        return value or {}

    @field_validator("contributions", mode="after")
    @classmethod
    def newest_first(cls, value: List[ContributionRead]) -> List[ContributionRead]:
        return sorted(value, key=lambda c: c.date, reverse=True)

    @model_validator(mode="after")
    def derive_progress(self):
        self.progress_percentage = round(progress_percentage(self.current_amount, self.target_amount), 2)
        self.remaining_amount = round(remaining_amount(self.current_amount, self.target_amount), 2)
        self.days_remaining = days_remaining(self.target_date, utcnow())
        return self

class GoalStatistics(CamelModel):
    total_goals: int
    active_goals: int
    completed_goals: int
    total_target_amount: float
    total_current_amount: float
    overall_progress: float

class GoalListResponse(CamelModel):
    goals: List[GoalRead]
    statistics: GoalStatistics

class GoalResponse(CamelModel):
    message: str
    goal: GoalRead

class ContributionListResponse(CamelModel):
    contributions: List[ContributionRead]
    total_contributions: int
    total_amount: float
