from datetime import datetime, timedelta, timezone
import logging
import re
import uuid

from fastapi import Depends, Request
from jose import jwt, JWTError
from sqlalchemy.orm import Session
import bcrypt

from config import JWT_SECRET, JWT_ALGORITHM, JWT_EXPIRY_HOURS, COOKIE_NAME
from database import get_db
from errors import Unauthenticated, InvalidCredential, Forbidden, ValidationFailed
from models.user import User

logger = logging.getLogger(__name__)

ROLE_ADMIN = "Admin"
ROLE_USER = "User"


def hash_password(password: str) -> str:
    """Hash a plain-text password using bcrypt."""
    # Ensure it doesn't exceed 72 bytes to prevent bcrypt ValueError
    pw_bytes = password.encode('utf-8')[:72]
    hashed = bcrypt.hashpw(pw_bytes, bcrypt.gensalt())
    return hashed.decode('utf-8')


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a plain-text password against a bcrypt hash."""
    try:
        pw_bytes = plain_password.encode('utf-8')[:72]
        hash_bytes = hashed_password.encode('utf-8')
        return bcrypt.checkpw(pw_bytes, hash_bytes)
    except ValueError as e:
        logger.warning(f"Bcrypt verification error: {e}")
        return False


def check_password_strength(password: str):
    """Raise ValidationFailed unless the password satisfies the account rules."""
    if len(password) < 8:
        raise ValidationFailed("Password must be at least 8 characters")
    if not re.search(r"[A-Z]", password):
        raise ValidationFailed("Password must contain at least one uppercase letter")
    if not re.search(r"[a-z]", password):
        raise ValidationFailed("Password must contain at least one lowercase letter")
    if not re.search(r"[0-9]", password):
        raise ValidationFailed("Password must contain at least one number")


def create_token(data: dict) -> str:
    """Create a JWT token with an expiry claim and a unique JTI."""
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + timedelta(hours=JWT_EXPIRY_HOURS)
    jti = str(uuid.uuid4())
    to_encode.update({"exp": expire, "jti": jti})
    return jwt.encode(to_encode, JWT_SECRET, algorithm=JWT_ALGORITHM)


def verify_token(token: str) -> dict | None:
    """Decode and verify a JWT token. Returns the payload or None on failure."""
    try:
        payload = jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALGORITHM])
        return payload
    except JWTError:
        return None


def _extract_token(request: Request) -> str | None:
    token = request.cookies.get(COOKIE_NAME)
    if token:
        return token
    auth_header = request.headers.get("Authorization")
    if auth_header and auth_header.startswith("Bearer "):
        return auth_header.split(" ", 1)[1]
    return None


async def get_current_user(request: Request) -> dict:
    """
    FastAPI dependency: reads the auth cookie (or a Bearer header), verifies
    it, and returns {"user_id", "email"}.
    Raises Unauthenticated if the token is missing, InvalidCredential if it
    does not verify.
    """
    token = _extract_token(request)
    if not token:
        raise Unauthenticated()

    payload = verify_token(token)
    if payload is None:
        raise InvalidCredential("Invalid or expired token")

    user_id = payload.get("user_id")
    email = payload.get("email")
    if user_id is None or email is None:
        raise InvalidCredential("Token payload missing required claims")

    return {"user_id": user_id, "email": email}


async def get_optional_user(request: Request) -> dict | None:
    """Like get_current_user, but anonymous requests yield None."""
    token = _extract_token(request)
    if not token:
        return None
    payload = verify_token(token)
    if payload is None or payload.get("user_id") is None:
        return None
    return {"user_id": payload["user_id"], "email": payload.get("email")}


def _load_active_user(db: Session, user_id: str) -> User:
    user = db.query(User).filter_by(id=user_id).first()
    if not user:
        raise InvalidCredential("Account no longer exists")
    if user.status != "active":
        raise Forbidden("This account has been deactivated")
    return user


async def get_active_user(
    current: dict = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    """Like get_current_user, but the account behind the token must still exist and be active."""
    _load_active_user(db, current["user_id"])
    return current


async def require_admin(
    current: dict = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> User:
    """Single authorization check for admin-only routes, based on the stored role."""
    user = _load_active_user(db, current["user_id"])
    if user.role != ROLE_ADMIN:
        raise Forbidden()
    return user
