"""
errors.py — Application error taxonomy.
Services raise these; main.py renders them as {"error": ..., "kind": ...}.
"""


class AppError(Exception):
    status_code = 500
    kind = "internal_error"
    default_message = "An unexpected error occurred"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    @property
    def headers(self) -> dict | None:
        return None


class Unauthenticated(AppError):
    status_code = 401
    kind = "unauthenticated"
    default_message = "Not authenticated"

    @property
    def headers(self) -> dict:
        return {"WWW-Authenticate": "Bearer"}


class InvalidCredential(Unauthenticated):
    kind = "invalid_credential"
    default_message = "Invalid token"


class Forbidden(AppError):
    status_code = 403
    kind = "forbidden"
    default_message = "Admin privileges required"


class InvalidIdentifier(AppError):
    status_code = 400
    kind = "invalid_identifier"
    default_message = "Invalid ID provided"


class ValidationFailed(AppError):
    status_code = 400
    kind = "validation_failed"
    default_message = "Invalid request"


class NotFound(AppError):
    status_code = 404
    kind = "not_found"
    default_message = "Not found"


class Conflict(AppError):
    status_code = 409
    kind = "conflict"
    default_message = "Resource already exists"


class CooldownActive(AppError):
    status_code = 429
    kind = "cooldown_active"

    def __init__(self, remaining_seconds: int):
        self.remaining_seconds = remaining_seconds
        super().__init__(f"Please wait {remaining_seconds} seconds before requesting a new code")

    @property
    def headers(self) -> dict:
        return {"Retry-After": str(self.remaining_seconds)}


class Expired(AppError):
    status_code = 400
    kind = "expired"
    default_message = "Verification code has expired"


class Mismatch(AppError):
    status_code = 400
    kind = "mismatch"
    default_message = "Invalid verification code"


class GradingFailure(AppError):
    status_code = 502
    kind = "grading_failure"
    default_message = "Failed to check solution"


class DeliveryFailure(AppError):
    status_code = 502
    kind = "delivery_failure"
    default_message = "Failed to send verification code"


class InternalError(AppError):
    pass
