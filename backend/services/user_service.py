"""
user_service.py — Identity store
Accounts, credentials and the role/status attributes used for authorization.
"""

import logging
from datetime import datetime

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from auth import ROLE_ADMIN, ROLE_USER, hash_password, verify_password, check_password_strength
from errors import Conflict, Forbidden, InvalidCredential, NotFound, ValidationFailed
from models.user import User
from models.user_progress import UserProgress

logger = logging.getLogger(__name__)

ROLES = (ROLE_ADMIN, ROLE_USER)
STATUSES = ("active", "inactive")


def _check_role_and_status(role: str | None, status: str | None):
    if role is not None and role not in ROLES:
        raise ValidationFailed(f"Unknown role: {role}")
    if status is not None and status not in STATUSES:
        raise ValidationFailed(f"Unknown account status: {status}")


def user_to_dict(u: User) -> dict:
    created: datetime | None = u.created_at
    return {
        "id": u.id,
        "name": u.name,
        "email": u.email,
        "role": u.role,
        "status": u.status,
        "created_at": created.isoformat() if created else None,
    }


class UserService:
    @staticmethod
    def get(db: Session, user_id: str) -> User:
        user = db.query(User).filter_by(id=user_id).first()
        if not user:
            raise NotFound("User not found")
        return user

    @staticmethod
    def get_by_email(db: Session, email: str) -> User | None:
        return db.query(User).filter_by(email=email.lower()).first()

    @staticmethod
    def create(db: Session, name: str, email: str, password: str,
               role: str | None = None, status: str = "active") -> User:
        """Create an account. With no role given, the first account becomes Admin."""
        check_password_strength(password)
        _check_role_and_status(role, status)
        email = email.lower()
        if UserService.get_by_email(db, email):
            raise Conflict("User with this email already exists")

        if role is None:
            role = ROLE_ADMIN if db.query(User).count() == 0 else ROLE_USER

        user = User(
            name=name,
            email=email,
            hashed_password=hash_password(password),
            role=role,
            status=status,
        )
        db.add(user)
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            raise Conflict("User with this email already exists")
        db.refresh(user)
        logger.info(f"Created {role} account {user.id}")
        return user

    @staticmethod
    def authenticate(db: Session, email: str, password: str) -> User:
        user = UserService.get_by_email(db, email)
        if not user or not verify_password(password, user.hashed_password):
            raise InvalidCredential("Invalid email or password")
        if user.status != "active":
            raise Forbidden("This account has been deactivated")
        return user

    @staticmethod
    def update(db: Session, user_id: str, data: dict) -> User:
        _check_role_and_status(data.get("role"), data.get("status"))
        user = UserService.get(db, user_id)
        new_role = data.get("role") or user.role
        new_status = data.get("status") or user.status
        if user.role == ROLE_ADMIN and user.status == "active" and (new_role, new_status) != (ROLE_ADMIN, "active"):
            if db.query(User).filter_by(role=ROLE_ADMIN, status="active").count() <= 1:
                raise Forbidden("Cannot demote or deactivate the last active admin")
        for key in ("name", "role", "status"):
            if data.get(key) is not None:
                setattr(user, key, data[key])
        db.commit()
        db.refresh(user)
        return user

    @staticmethod
    def set_password(db: Session, email: str, new_password: str) -> User:
        check_password_strength(new_password)
        user = UserService.get_by_email(db, email)
        if not user:
            raise NotFound("User not found")
        user.hashed_password = hash_password(new_password)
        db.commit()
        return user

    @staticmethod
    def delete(db: Session, user_id: str):
        """Delete a non-admin account together with its progress."""
        user = UserService.get(db, user_id)
        if user.role == ROLE_ADMIN:
            raise Forbidden("Cannot delete admin users")
        db.query(UserProgress).filter_by(user_id=user.id).delete(synchronize_session=False)
        db.delete(user)
        db.commit()
        logger.info(f"Deleted account {user_id}")

    @staticmethod
    def list_all(db: Session) -> list[User]:
        return db.query(User).order_by(User.created_at).all()
