from typing import Literal, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, EmailStr, Field
from sqlalchemy.orm import Session

from auth import require_admin
from database import get_db, parse_id
from models.problem import Problem
from models.user import User
from models.user_progress import UserProgress
from services.user_service import UserService, user_to_dict

router = APIRouter(prefix="/api/admin", tags=["Admin"])

Role = Literal["Admin", "User"]
AccountStatus = Literal["active", "inactive"]


class CreateUserRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=60)
    email: EmailStr
    password: str
    role: Role = "User"
    status: AccountStatus = "active"


class UpdateUserRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=60)
    role: Optional[Role] = None
    status: Optional[AccountStatus] = None


@router.get("/users")
async def list_all_users(admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    return {"status": "success", "data": [user_to_dict(u) for u in UserService.list_all(db)]}


@router.post("/users", status_code=201)
async def admin_create_user(body: CreateUserRequest, admin: User = Depends(require_admin),
                            db: Session = Depends(get_db)):
    """Admin only: create an account with an explicit role and status."""
    user = UserService.create(db, body.name, body.email, body.password, role=body.role, status=body.status)
    return {"status": "success", "message": "User created successfully", "data": user_to_dict(user)}


@router.put("/users/{user_id}")
async def admin_update_user(user_id: str, body: UpdateUserRequest, admin: User = Depends(require_admin),
                            db: Session = Depends(get_db)):
    user = UserService.update(db, parse_id(user_id, "user ID"), body.model_dump(exclude_unset=True))
    return {"status": "success", "data": user_to_dict(user)}


@router.delete("/users/{user_id}")
async def admin_delete_user(user_id: str, admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    UserService.delete(db, parse_id(user_id, "user ID"))
    return {"status": "success", "message": "User deleted successfully"}


@router.get("/stats")
async def stats(admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    return {
        "status": "success",
        "data": {
            "users": db.query(User).count(),
            "active_users": db.query(User).filter_by(status="active").count(),
            "problems": db.query(Problem).count(),
            "attempts": db.query(UserProgress).filter(UserProgress.status != "not_started").count(),
            "completions": db.query(UserProgress).filter_by(status="completed").count(),
        },
    }
