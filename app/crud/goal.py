# app/crud/goal.py
import logging
from sqlalchemy import case, literal, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from app.core.exceptions import ConflictError
from app.models.goal import Goal, GoalCategory, GoalContribution, GoalPriority, GoalStatus
from typing import Any, Dict, List, Optional
import uuid
from app.schemas.goal import GoalBase, GoalCreate, GoalUpdate, TargetDateChange
from app.utils.periods import utcnow

logger = logging.getLogger(__name__)

INACTIVE_GOAL_MESSAGE = "Cannot contribute to inactive goal"
OPENING_CONTRIBUTION_NOTE = "Initial amount"

# High first, then Medium, then Low
_priority_rank = case(
    (Goal.priority == GoalPriority.high, 0),
    (Goal.priority == GoalPriority.medium, 1),
    else_=2,
)

def _complete_if_reached(goal: Goal) -> None:
    if goal.status == GoalStatus.active and goal.current_amount >= goal.target_amount:
        goal.status = GoalStatus.completed

async def get_goals_for_user(
    user_id: uuid.UUID,
    db: AsyncSession,
    status: Optional[GoalStatus] = None,
    category: Optional[GoalCategory] = None,
) -> List[Goal]:
    query = select(Goal).where(Goal.user_id == user_id)
    if status is not None:
        query = query.where(Goal.status == status)
    if category is not None:
        query = query.where(Goal.category == category)
    result = await db.execute(
        query.order_by(_priority_rank, Goal.target_date.asc(), Goal.created_at.desc())
    )
    return result.scalars().all()

def goal_statistics(goals: List[Goal]) -> Dict[str, Any]:
    total_target = sum(goal.target_amount for goal in goals)
    total_current = sum(goal.current_amount for goal in goals)
    return {
        "total_goals": len(goals),
        "active_goals": sum(1 for goal in goals if goal.status == GoalStatus.active),
        "completed_goals": sum(1 for goal in goals if goal.status == GoalStatus.completed),
        "total_target_amount": round(total_target, 2),
        "total_current_amount": round(total_current, 2),
        "overall_progress": round(total_current / total_target * 100, 2) if total_target > 0 else 0.0,
    }

async def get_goal_by_id(
    goal_id: uuid.UUID,
    user_id: uuid.UUID,
    db: AsyncSession,
    refresh: bool = False,
) -> Optional[Goal]:
    query = select(Goal).where(Goal.id == goal_id, Goal.user_id == user_id)
    if refresh:
        query = query.execution_options(populate_existing=True)
    result = await db.execute(query)
    return result.scalar_one_or_none()

async def create_goal_for_user(user_id: uuid.UUID, goal_in: GoalCreate, db: AsyncSession) -> Goal:
    data = goal_in.model_dump(exclude={"auto_contribute", "current_amount"})
    new_goal = Goal(
        **data,
        user_id=user_id,
        current_amount=0.0,
        auto_contribute=goal_in.auto_contribute.model_dump(mode="json", by_alias=True),
    )
    if goal_in.current_amount > 0:
        # Seeded savings enter the ledger like any other contribution
        new_goal.contributions.append(GoalContribution(
            amount=goal_in.current_amount,
            note=OPENING_CONTRIBUTION_NOTE,
            date=utcnow(),
        ))
        new_goal.current_amount = goal_in.current_amount
    _complete_if_reached(new_goal)
    db.add(new_goal)
    await db.commit()
    return await get_goal_by_id(new_goal.id, user_id, db, refresh=True)

async def update_goal(goal: Goal, goal_in: GoalUpdate, db: AsyncSession) -> Goal:
    """
    Merge the provided fields and re-validate the whole goal. An unchanged
    target date is not re-checked, so overdue goals stay editable.
    """
    current = {
        "title": goal.title,
        "description": goal.description,
        "target_amount": goal.target_amount,
        "target_date": goal.target_date,
        "category": goal.category,
        "priority": goal.priority,
        "status": goal.status,
        "auto_contribute": goal.auto_contribute or {},
    }
    changes = goal_in.model_dump(exclude_unset=True)
    new_target_date = changes.get("target_date")
    if new_target_date is not None and new_target_date != goal.target_date:
        TargetDateChange.model_validate({"targetDate": new_target_date})
    merged = GoalBase.model_validate({**current, **changes})
    for field, value in merged.model_dump(exclude={"auto_contribute"}).items():
        setattr(goal, field, value)
    goal.auto_contribute = merged.auto_contribute.model_dump(mode="json", by_alias=True)
    _complete_if_reached(goal)
    db.add(goal)
    await db.commit()
    return await get_goal_by_id(goal.id, goal.user_id, db, refresh=True)

async def set_goal_status(goal: Goal, status: GoalStatus, db: AsyncSession) -> Goal:
    goal.status = status
    db.add(goal)
    await db.commit()
    return await get_goal_by_id(goal.id, goal.user_id, db, refresh=True)

async def delete_goal(goal: Goal, db: AsyncSession) -> None:
    await db.delete(goal)
    await db.commit()

async def add_contribution(goal: Goal, amount: float, note: Optional[str], db: AsyncSession) -> Goal:
    """
    Record a contribution and bump the running total in one transaction.

    The increment and the completion check run as a single conditional UPDATE
    evaluated by the database against the stored row, so concurrent
    contributions to the same goal cannot overwrite each other. Raises
    ConflictError when the goal is not Active.
    """
    if goal.status != GoalStatus.active:
        raise ConflictError(INACTIVE_GOAL_MESSAGE)

    new_total = Goal.current_amount + amount
    completed = literal(GoalStatus.completed, Goal.__table__.c.status.type)
    result = await db.execute(
        update(Goal)
        .where(Goal.id == goal.id, Goal.status == GoalStatus.active)
        .values(
            current_amount=new_total,
            status=case((new_total >= Goal.target_amount, completed), else_=Goal.status),
            updated_at=utcnow(),
        )
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        # Status changed between the lookup and the update
        await db.rollback()
        raise ConflictError(INACTIVE_GOAL_MESSAGE)

    db.add(GoalContribution(goal_id=goal.id, amount=amount, note=note or "", date=utcnow()))
    await db.commit()
    logger.info(f"Contribution of {amount} recorded for goal {goal.id}")
    return await get_goal_by_id(goal.id, goal.user_id, db, refresh=True)

def contributions_newest_first(goal: Goal) -> List[GoalContribution]:
    return sorted(goal.contributions, key=lambda contribution: contribution.date, reverse=True)
