# app/models/user.py
# Note: User is defined in core/auth.py next to the fastapi-users wiring.
# Importing this package registers every table on Base.metadata.

from app.core.auth import User
from .expense import Expense
from .goal import Goal, GoalContribution

__all__ = ["User", "Expense", "Goal", "GoalContribution"]
