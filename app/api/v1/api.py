from fastapi import APIRouter

from app.api.v1.routes import auth, dashboard, expenses, goals, users
from app.core.auth import auth_backend, fastapi_users, UserCreate, UserRead

api_router = APIRouter()

# Custom logout goes first so it wins over the fastapi-users route of the same path
api_router.include_router(auth.router, prefix="/auth")
api_router.include_router(
    fastapi_users.get_auth_router(auth_backend),
    prefix="/auth/jwt",
    tags=["Authentication"],
)
api_router.include_router(
    fastapi_users.get_register_router(UserRead, UserCreate),
    prefix="/auth",
    tags=["Authentication"],
)
api_router.include_router(users.router, prefix="/users")
api_router.include_router(expenses.router)
api_router.include_router(goals.router)
api_router.include_router(dashboard.router)
