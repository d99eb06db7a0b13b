"""Application configuration and settings."""
import os
from dotenv import load_dotenv

# Load environment variables from .env (if present)
load_dotenv()

# Database configuration
SQLALCHEMY_DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./trainingcog.db")

# Security configuration - REQUIRED, no default for security
ADMIN_API_KEY = os.environ.get("ADMIN_API_KEY")
if not ADMIN_API_KEY:
    raise ValueError(
        "ADMIN_API_KEY environment variable is required. "
        "Please set it in your .env file or environment variables."
    )

# Identity token cookie set by the identity provider
SESSION_COOKIE_NAME = os.getenv("SESSION_COOKIE_NAME", "access_token")

# Freshness cache: entries older than this are refetched
CACHE_TTL_SECONDS = float(os.getenv("CACHE_TTL_SECONDS", "300"))

# Protected paths without a matching rule are allowed unless this is set
ACCESS_FAIL_CLOSED = os.getenv("ACCESS_FAIL_CLOSED", "false").lower() in ("1", "true", "yes")

LOG_DIR = os.getenv("LOG_DIR", "logs")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv(
        "CORS_ORIGINS",
        "http://localhost:3000,http://127.0.0.1:3000,http://localhost:8000,http://127.0.0.1:8000",
    ).split(",")
    if origin.strip()
]
