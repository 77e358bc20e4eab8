# app/api/v1/routes/goals.py
from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional
import uuid

from app.api.deps import get_current_user
from app.core.auth import User
from app.core.database import get_async_session
from app.crud.goal import (
    add_contribution,
    contributions_newest_first,
    create_goal_for_user,
    delete_goal,
    get_goal_by_id,
    get_goals_for_user,
    goal_statistics,
    set_goal_status,
    update_goal,
)
from app.models.goal import Goal, GoalCategory, GoalStatus
from app.schemas.common import MessageResponse
from app.schemas.goal import (
    ContributionCreate,
    ContributionListResponse,
    GoalCreate,
    GoalListResponse,
    GoalRead,
    GoalResponse,
    GoalStatusUpdate,
    GoalUpdate,
)

router = APIRouter(prefix="/goals", tags=["goals"])

async def _owned_goal(goal_id: uuid.UUID, user: User, db: AsyncSession) -> Goal:
    goal = await get_goal_by_id(goal_id, user.id, db)
    if not goal:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Goal not found")
    return goal

@router.get("", response_model=GoalListResponse)
async def read_goals(
    goal_status: Optional[GoalStatus] = Query(None, alias="status"),
    category: Optional[GoalCategory] = Query(None),
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    """
    List the caller's goals (High priority first, then nearest target date)
    together with totals across the returned goals.
    """
    goals = await get_goals_for_user(user.id, db, status=goal_status, category=category)
    return {"goals": goals, "statistics": goal_statistics(goals)}

@router.post("", response_model=GoalResponse, status_code=status.HTTP_201_CREATED)
async def create_goal(
    goal_in: GoalCreate,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    goal = await create_goal_for_user(user.id, goal_in, db)
    return {"message": "Goal created successfully", "goal": goal}

@router.get("/{goal_id}", response_model=GoalRead)
async def read_goal(
    goal_id: uuid.UUID,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    return await _owned_goal(goal_id, user, db)

@router.put("/{goal_id}", response_model=GoalResponse)
async def update_goal_endpoint(
    goal_id: uuid.UUID,
    goal_in: GoalUpdate,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    goal = await _owned_goal(goal_id, user, db)
    goal = await update_goal(goal, goal_in, db)
    return {"message": "Goal updated successfully", "goal": goal}

@router.delete("/{goal_id}", response_model=MessageResponse)
async def delete_goal_endpoint(
    goal_id: uuid.UUID,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    goal = await _owned_goal(goal_id, user, db)
    await delete_goal(goal, db)
    return {"message": "Goal deleted successfully"}

@router.post("/{goal_id}/contribute", response_model=GoalResponse)
async def contribute_to_goal(
    goal_id: uuid.UUID,
    contribution: ContributionCreate,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    """
    Add money to an Active goal. The goal completes automatically once the
    saved amount reaches the target; inactive goals reject contributions.
    """
    goal = await _owned_goal(goal_id, user, db)
    goal = await add_contribution(goal, contribution.amount, contribution.note, db)
    return {"message": "Contribution added successfully", "goal": goal}

@router.get("/{goal_id}/contributions", response_model=ContributionListResponse)
async def read_contributions(
    goal_id: uuid.UUID,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    goal = await _owned_goal(goal_id, user, db)
    contributions = contributions_newest_first(goal)
    return {
        "contributions": contributions,
        "total_contributions": len(contributions),
        "total_amount": round(sum(c.amount for c in contributions), 2),
    }

@router.put("/{goal_id}/status", response_model=GoalResponse)
async def update_goal_status(
    goal_id: uuid.UUID,
    status_in: GoalStatusUpdate,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    # Any status may follow any other; no transition table is enforced
    goal = await _owned_goal(goal_id, user, db)
    goal = await set_goal_status(goal, status_in.status, db)
    return {"message": "Goal status updated successfully", "goal": goal}
