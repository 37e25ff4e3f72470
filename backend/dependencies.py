"""
dependencies.py — Long-lived collaborators
Built once in the application lifespan and handed to routes via Depends.
"""

from fastapi import Request

import config
import database
from providers.openai_provider import OpenAIProvider
from services.email_service import build_sender
from services.grading_service import GradingService
from services.verification_service import VerificationService, build_store


def build_verification_service() -> VerificationService:
    store = build_store(
        config.VERIFICATION_BACKEND,
        file_path=config.VERIFICATION_FILE,
        session_factory=database.SessionLocal,
    )
    sender = build_sender(
        config.EMAIL_BACKEND,
        host=config.SMTP_HOST,
        port=config.SMTP_PORT,
        username=config.EMAIL_USER,
        password=config.EMAIL_PASS,
        from_addr=config.EMAIL_FROM,
    )
    return VerificationService(store, sender)


def build_grading_service() -> GradingService:
    provider = OpenAIProvider(
        api_key=config.GRADER_API_KEY,
        base_url=config.GRADER_BASE_URL,
        model=config.GRADER_MODEL,
        timeout=config.GRADER_TIMEOUT,
    )
    return GradingService(provider)


def get_verification_service(request: Request) -> VerificationService:
    return request.app.state.verification_service


def get_grading_service(request: Request) -> GradingService:
    return request.app.state.grading_service
