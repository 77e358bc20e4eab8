# app/api/v1/routes/users.py
import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import User, UserRead, UserUpdate
from app.core.database import get_async_session
from app.api.deps import get_current_user

logger = logging.getLogger(__name__)

router = APIRouter(tags=["User Management"])

# Profile fields a user may change here; credentials go through fastapi-users
PROFILE_FIELDS = {"full_name", "currency", "monthly_budget"}

# 1) GET /users/me
@router.get("/me", response_model=UserRead)
async def read_own_profile(user: User = Depends(get_current_user)):
    """Get current user's profile"""
    return user

# 2) PATCH /users/me
@router.patch("/me", response_model=UserRead)
async def update_own_profile(
    user_update: UserUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
):
    """Update the display name, currency or monthly budget used by the dashboard"""
    update_dict = user_update.model_dump(exclude_unset=True, include=PROFILE_FIELDS)

    if not update_dict:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No fields provided for update"
        )

    if "currency" in update_dict and update_dict["currency"]:
        update_dict["currency"] = update_dict["currency"].upper()

    for field, value in update_dict.items():
        setattr(user, field, value)
    db.add(user)
    await db.commit()
    await db.refresh(user)
    logger.info(f"Profile updated for {user.email}: {sorted(update_dict)}")
    return user
