from datetime import datetime, timezone

from sqlalchemy import Column, String, Text, DateTime, ForeignKey, UniqueConstraint
from database import Base, new_id


class UserProgress(Base):
    __tablename__ = "user_progress"
    __table_args__ = (
        UniqueConstraint("user_id", "problem_id", name="uq_user_progress_user_problem"),
    )

    id = Column(String(32), primary_key=True, default=new_id)
    user_id = Column(String(32), ForeignKey("users.id"), nullable=False, index=True)
    problem_id = Column(String(32), ForeignKey("problems.id"), nullable=False)
    status = Column(String(20), nullable=False, default="not_started")  # not_started/in_progress/completed
    solution = Column(Text, nullable=False, default="")
    last_updated = Column(DateTime, default=lambda: datetime.now(timezone.utc))
