import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./servicehub.db")

# Security - CRITICAL: No default secret key in production
SECRET_KEY = os.getenv("SECRET_KEY")
if not SECRET_KEY:
    import warnings

    warnings.warn(
        "SECRET_KEY not set! Using insecure default - DO NOT USE IN PRODUCTION", RuntimeWarning, stacklevel=2
    )
    SECRET_KEY = "INSECURE-DEV-KEY-CHANGE-IN-PRODUCTION"  # noqa: S105 - Dev fallback only

JWT_ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "60"))

# Frontend base URL for CORS
FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:3000")
ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", f"{FRONTEND_URL},http://localhost:5173").split(",")

ENVIRONMENT = os.getenv("ENVIRONMENT", "development").lower()
SECURITY_HEADERS_ENABLED = os.getenv("SECURITY_HEADERS_ENABLED", "true").lower() == "true"

# Booking defaults
DEFAULT_TEAM_SIZE = int(os.getenv("DEFAULT_TEAM_SIZE", "2"))
MIN_TEAM_SIZE = 1
MAX_TEAM_SIZE = 8
DEFAULT_MIN_HOURS = int(os.getenv("DEFAULT_MIN_HOURS", "3"))
DEFAULT_PACKING_PER_ROOM_CENTS = int(os.getenv("DEFAULT_PACKING_PER_ROOM_CENTS", "9900"))

# Availability defaults (weekday rules are auto-created with these values)
DEFAULT_MORNING_JOBS = int(os.getenv("DEFAULT_MORNING_JOBS", "3"))
DEFAULT_AFTERNOON_JOBS = int(os.getenv("DEFAULT_AFTERNOON_JOBS", "2"))
DEFAULT_NOTICE_HOURS = int(os.getenv("DEFAULT_NOTICE_HOURS", "24"))
MAX_SLOT_RANGE_DAYS = int(os.getenv("MAX_SLOT_RANGE_DAYS", "366"))

# Invoicing
DEFAULT_PAYMENT_TERMS_DAYS = int(os.getenv("DEFAULT_PAYMENT_TERMS_DAYS", "30"))
QUOTE_VALID_DAYS = int(os.getenv("QUOTE_VALID_DAYS", "7"))
