from sqlalchemy import Column, String, Float
from database import Base


class VerificationCode(Base):
    """One pending code per email; replaced on every new send."""
    __tablename__ = "verification_codes"

    email = Column(String(255), primary_key=True)
    code = Column(String(6), nullable=False)
    issued_at = Column(Float, nullable=False)  # UNIX timestamp, seconds
