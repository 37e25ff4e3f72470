import os
from dotenv import load_dotenv

load_dotenv()

# --- JWT / session cookie ---
JWT_SECRET = os.getenv("JWT_SECRET", "change-this-secret-key")
JWT_ALGORITHM = "HS256"
JWT_EXPIRY_HOURS = int(os.getenv("JWT_EXPIRY_HOURS", "168"))  # 7 days
COOKIE_NAME = os.getenv("COOKIE_NAME", "auth_token")
COOKIE_SECURE = os.getenv("COOKIE_SECURE", "false").lower() in ("1", "true", "yes")

# --- Database ---
# Default to local SQLite, but prefer environment variable
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./data/leetdesign.db")

# Hosted providers hand out postgres:// URLs; SQLAlchemy needs the dialect and driver spelled out
for prefix in ("postgres://", "postgresql://"):
    if DATABASE_URL.startswith(prefix):
        DATABASE_URL = DATABASE_URL.replace(prefix, "postgresql+psycopg://", 1)
        break

# --- Verification codes ---
VERIFICATION_BACKEND = os.getenv("VERIFICATION_BACKEND", "memory")  # memory/file/database
VERIFICATION_FILE = os.getenv("VERIFICATION_FILE", "./data/verification-codes.json")

# --- Email ---
EMAIL_BACKEND = os.getenv("EMAIL_BACKEND", "smtp")  # smtp/console
SMTP_HOST = os.getenv("SMTP_HOST", "smtp.gmail.com")
SMTP_PORT = int(os.getenv("SMTP_PORT", "465"))
EMAIL_USER = os.getenv("EMAIL_USER", "")
EMAIL_PASS = os.getenv("EMAIL_PASS", "")
EMAIL_FROM = os.getenv("EMAIL_FROM", EMAIL_USER)

# --- Solution grading (OpenAI-compatible chat completions) ---
GRADER_API_KEY = os.getenv("GRADER_API_KEY") or os.getenv("OPENAI_API_KEY", "")
GRADER_BASE_URL = os.getenv("GRADER_BASE_URL", "https://api.openai.com/v1")
GRADER_MODEL = os.getenv("GRADER_MODEL", "gpt-4o-mini")
GRADER_TIMEOUT = float(os.getenv("GRADER_TIMEOUT", "30"))

# --- App ---
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
