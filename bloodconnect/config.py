import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

ENVIRONMENT = os.getenv("ENVIRONMENT", "development").lower()
IS_PRODUCTION = ENVIRONMENT == "production"

# Falls back to a local SQLite file so the API can start without a database server
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./bloodconnect.db")

# Firebase Configuration
# The project ID is used to check ID token audience/issuer, the Web API key for
# the Identity Toolkit REST calls (sign up, sign in, password reset)
FIREBASE_PROJECT_ID = os.getenv("FIREBASE_PROJECT_ID")
FIREBASE_API_KEY = os.getenv("FIREBASE_API_KEY")

# Frontend base URL for redirects (password reset continue URL)
FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:5173")

ALLOWED_ORIGINS = [
    origin.strip()
    for origin in os.getenv(
        "ALLOWED_ORIGINS", f"{FRONTEND_URL},http://localhost:3000,http://127.0.0.1:5500"
    ).split(",")
    if origin.strip()
]

# SMTP Configuration (primary transport)
EMAIL_HOST = os.getenv("EMAIL_HOST")
EMAIL_PORT = int(os.getenv("EMAIL_PORT", "587"))
EMAIL_SECURE = os.getenv("EMAIL_SECURE", "false").lower() == "true"
EMAIL_USER = os.getenv("EMAIL_USER")
EMAIL_PASS = os.getenv("EMAIL_PASS")
EMAIL_FROM_ADDRESS = os.getenv("EMAIL_FROM_ADDRESS", "BloodConnect <noreply@bloodconnect.org>")

# Resend Email Configuration (fallback)
RESEND_API_KEY = os.getenv("RESEND_API_KEY")

# Rate limiting - window values are in seconds
RATE_LIMIT_ENABLED = os.getenv("RATE_LIMIT_ENABLED", "true").lower() == "true"
RATE_LIMIT_AUTH_MAX = int(os.getenv("RATE_LIMIT_AUTH_MAX", "5"))
RATE_LIMIT_AUTH_WINDOW = int(os.getenv("RATE_LIMIT_AUTH_WINDOW", str(15 * 60)))
RATE_LIMIT_API_MAX = int(os.getenv("RATE_LIMIT_API_MAX", "30"))
RATE_LIMIT_API_WINDOW = int(os.getenv("RATE_LIMIT_API_WINDOW", "60"))
RATE_LIMIT_SENSITIVE_MAX = int(os.getenv("RATE_LIMIT_SENSITIVE_MAX", "10"))
RATE_LIMIT_SENSITIVE_WINDOW = int(os.getenv("RATE_LIMIT_SENSITIVE_WINDOW", str(60 * 60)))
RATE_LIMIT_PUBLIC_MAX = int(os.getenv("RATE_LIMIT_PUBLIC_MAX", "100"))
RATE_LIMIT_PUBLIC_WINDOW = int(os.getenv("RATE_LIMIT_PUBLIC_WINDOW", str(15 * 60)))

# Request bodies larger than this are rejected with 413 (bytes, default 10 MB)
MAX_REQUEST_SIZE = int(os.getenv("MAX_REQUEST_SIZE", str(10 * 1024 * 1024)))

SECURITY_HEADERS_ENABLED = os.getenv("SECURITY_HEADERS_ENABLED", "true").lower() == "true"

REQUIRED_SETTINGS = ("DATABASE_URL", "FIREBASE_PROJECT_ID", "FIREBASE_API_KEY")


def validate_environment() -> list[str]:
    """Return the names of required settings that are not configured"""
    return [name for name in REQUIRED_SETTINGS if not os.getenv(name)]
