from datetime import datetime, timezone

from sqlalchemy import Column, String, DateTime
from database import Base, new_id


class User(Base):
    __tablename__ = "users"

    id = Column(String(32), primary_key=True, default=new_id)
    name = Column(String(60), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    hashed_password = Column(String(255), nullable=False)
    role = Column(String(10), nullable=False, default="User")  # Admin/User
    status = Column(String(10), nullable=False, default="active")  # active/inactive
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
