# app/core/auth.py

import uuid
import logging
from datetime import datetime
from typing import Optional

from fastapi import Depends, Request
from fastapi_users import FastAPIUsers, BaseUserManager, UUIDIDMixin
from fastapi_users.authentication import (
    AuthenticationBackend,
    BearerTransport,
    JWTStrategy,
)
from fastapi_users.db import SQLAlchemyUserDatabase
from fastapi_users import schemas
from pydantic import ConfigDict, Field
from pydantic.alias_generators import to_camel

from sqlalchemy import Column, String, Boolean, DateTime, Float, Uuid
from sqlalchemy.orm import relationship
from sqlalchemy.ext.asyncio import AsyncSession

from .database import Base, get_async_session
from .config import settings
from app.utils.periods import utcnow

logger = logging.getLogger(__name__)

# Audience written into every access token by the JWT strategy
TOKEN_AUDIENCE = ["fastapi-users:auth"]

# 1. User DB model
class User(Base):
    __tablename__ = "users"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    email = Column(String(length=320), unique=True, index=True, nullable=False)
    hashed_password = Column(String(length=1024), nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    is_superuser = Column(Boolean, default=False, nullable=False)
    is_verified = Column(Boolean, default=False, nullable=False)

    # Profile fields consumed by the dashboard reports
    full_name = Column(String(length=100), nullable=True)
    currency = Column(String(length=3), default=settings.DEFAULT_CURRENCY, nullable=False)
    monthly_budget = Column(Float, default=0.0, nullable=False)

    created_at = Column(DateTime, default=utcnow)

    expenses = relationship(
        "Expense",
        back_populates="user",
        cascade="all, delete-orphan",
    )
    goals = relationship(
        "Goal",
        back_populates="user",
        cascade="all, delete-orphan",
    )

    def __repr__(self):
        return f"<User email={self.email}>"

# 2. Pydantic schemas
_camel_config = ConfigDict(from_attributes=True, alias_generator=to_camel, populate_by_name=True)

class UserRead(schemas.BaseUser[uuid.UUID]):
    model_config = _camel_config

    full_name: Optional[str] = None
    currency: str = settings.DEFAULT_CURRENCY
    monthly_budget: float = 0.0
    created_at: Optional[datetime] = None

class UserCreate(schemas.BaseUserCreate):
    model_config = _camel_config

    full_name: Optional[str] = Field(None, max_length=100)
    currency: str = Field(settings.DEFAULT_CURRENCY, min_length=3, max_length=3)
    monthly_budget: float = Field(0.0, ge=0)

class UserUpdate(schemas.BaseUserUpdate):
    model_config = _camel_config

    full_name: Optional[str] = Field(None, max_length=100)
    currency: Optional[str] = Field(None, min_length=3, max_length=3)
    monthly_budget: Optional[float] = Field(None, ge=0)

# 3. User Manager
class UserManager(UUIDIDMixin, BaseUserManager[User, uuid.UUID]):
    reset_password_token_secret = settings.SECRET_KEY
    verification_token_secret = settings.SECRET_KEY

    async def on_after_register(self, user: User, request: Optional[Request] = None):
        logger.info(f"User {user.email} has registered")

    async def on_after_login(self, user: User, request: Optional[Request] = None, response=None):
        logger.info(f"User {user.email} logged in")

# 4. User Database
async def get_user_db(session: AsyncSession = Depends(get_async_session)):
    yield SQLAlchemyUserDatabase(session, User)

# 5. User Manager dependency
async def get_user_manager(user_db: SQLAlchemyUserDatabase = Depends(get_user_db)):
    yield UserManager(user_db)

# 6. Authentication
bearer_transport = BearerTransport(tokenUrl="/api/v1/auth/jwt/login")

def get_jwt_strategy() -> JWTStrategy:
    return JWTStrategy(
        secret=settings.SECRET_KEY,
        lifetime_seconds=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        token_audience=TOKEN_AUDIENCE,
        algorithm=settings.ALGORITHM,
    )

auth_backend = AuthenticationBackend(
    name="jwt",
    transport=bearer_transport,
    get_strategy=get_jwt_strategy,
)

# 7. FastAPI Users instance
fastapi_users = FastAPIUsers[User, uuid.UUID](get_user_manager, [auth_backend])

__all__ = [
    "fastapi_users",
    "auth_backend",
    "get_user_db",
    "get_user_manager",
    "get_jwt_strategy",
    "User",
    "UserRead",
    "UserCreate",
    "UserUpdate",
]
