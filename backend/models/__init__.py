# Import all models so they register with SQLAlchemy Base.metadata
# This ensures Base.metadata.create_all() creates all tables

from models.user import User
from models.problem import Problem
from models.user_progress import UserProgress
from models.verification_code import VerificationCode

__all__ = [
    "User",
    "Problem",
    "UserProgress",
    "VerificationCode",
]
