from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel, EmailStr, Field
from sqlalchemy.orm import Session

from auth import check_password_strength, create_token, get_current_user
from config import COOKIE_NAME, COOKIE_SECURE, JWT_EXPIRY_HOURS
from database import get_db, parse_id
from dependencies import get_verification_service
from errors import NotFound
from services.user_service import UserService, user_to_dict
from services.verification_service import VerificationService

router = APIRouter(prefix="/api/auth", tags=["Auth"])


# ── Pydantic schemas ──────────────────────────────────────────────
class SignupRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=60)
    email: EmailStr
    password: str


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class ProfileUpdate(BaseModel):
    name: str = Field(..., min_length=1, max_length=60)


class SendVerificationRequest(BaseModel):
    email: EmailStr


class VerifyCodeRequest(BaseModel):
    email: EmailStr
    code: str = Field(..., min_length=1)


class ResetPasswordRequest(BaseModel):
    email: EmailStr
    code: str = Field(..., min_length=1)
    new_password: str


# ── Routes ────────────────────────────────────────────────────────
@router.post("/signup", status_code=201)
async def signup(body: SignupRequest, db: Session = Depends(get_db)):
    """Register an account. The first account on a fresh install is the admin."""
    user = UserService.create(db, body.name, body.email, body.password)
    return {"status": "success", "message": "User registered successfully", "data": user_to_dict(user)}


@router.post("/login")
async def login(body: LoginRequest, response: Response, db: Session = Depends(get_db)):
    """Authenticate with email + password and set the auth cookie."""
    user = UserService.authenticate(db, body.email, body.password)
    token = create_token({"user_id": user.id, "email": user.email})

    response.set_cookie(
        key=COOKIE_NAME,
        value=token,
        httponly=True,
        secure=COOKIE_SECURE,
        samesite="lax",
        max_age=JWT_EXPIRY_HOURS * 3600,
        path="/",
    )
    return {"status": "success", "data": {"token": token, "user": user_to_dict(user)}}


@router.post("/logout")
async def logout(response: Response):
    """Clear the auth cookie."""
    response.delete_cookie(COOKIE_NAME, path="/")
    return {"status": "success", "data": {"message": "Logged out successfully"}}


@router.get("/me")
async def me(current: dict = Depends(get_current_user), db: Session = Depends(get_db)):
    """Return the current user's profile."""
    user = UserService.get(db, parse_id(current["user_id"], "user ID"))
    return {"status": "success", "data": user_to_dict(user)}


@router.put("/me")
async def update_me(body: ProfileUpdate, current: dict = Depends(get_current_user),
                    db: Session = Depends(get_db)):
    user = UserService.update(db, parse_id(current["user_id"], "user ID"), {"name": body.name})
    return {"status": "success", "message": "Profile updated successfully", "data": user_to_dict(user)}


@router.post("/send-verification")
def send_verification(body: SendVerificationRequest,
                      verification: VerificationService = Depends(get_verification_service)):
    """Runs in the threadpool: sending mail blocks on SMTP."""
    verification.issue(body.email.lower())
    return {"status": "success", "message": "Verification code sent successfully"}


@router.post("/verify-code")
def verify_code(body: VerifyCodeRequest,
                verification: VerificationService = Depends(get_verification_service)):
    verification.verify(body.email.lower(), body.code)
    return {"status": "success", "message": "Email verified successfully"}


@router.put("/reset-password")
def reset_password(body: ResetPasswordRequest, db: Session = Depends(get_db),
                   verification: VerificationService = Depends(get_verification_service)):
    """Change a password after proving ownership of the email with a code."""
    email = body.email.lower()
    check_password_strength(body.new_password)
    if UserService.get_by_email(db, email) is None:
        raise NotFound("User not found")
    verification.verify(email, body.code)
    UserService.set_password(db, email, body.new_password)
    return {"status": "success", "message": "Password reset successful"}
