"""
Application Configuration

All runtime settings for the back office are read from environment variables
(optionally loaded from a .env file). Modules import the values they need from
here instead of calling os.getenv themselves.
"""

import os
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


# Database connection settings
POSTGRES_USER = os.getenv("POSTGRES_USER", "postgres")
POSTGRES_PASSWORD = os.getenv("POSTGRES_PASSWORD", "postgres")
POSTGRES_SERVER = os.getenv("POSTGRES_SERVER", "localhost")
POSTGRES_PORT = os.getenv("POSTGRES_PORT", "5432")
POSTGRES_DB = os.getenv("POSTGRES_DB", "backoffice_db")

# A full DATABASE_URL wins over the individual POSTGRES_* settings
DATABASE_URL = os.getenv(
    "DATABASE_URL",
    f"postgresql+psycopg2://{POSTGRES_USER}:{POSTGRES_PASSWORD}@{POSTGRES_SERVER}:{POSTGRES_PORT}/{POSTGRES_DB}",
)

# Timezone used for audit timestamps and default payment dates
APP_TIMEZONE = os.getenv("APP_TIMEZONE", "Asia/Kolkata")

# Display
CURRENCY_SYMBOL = os.getenv("CURRENCY_SYMBOL", "₹")

# When true, a supplier payment pinned to one schedule may not exceed that
# schedule's remaining balance. Tenants can override it through app_config.
STRICT_SCHEDULE_BOUND = _env_bool("STRICT_SCHEDULE_BOUND", False)

# Logging
LOG_DIR = os.getenv("LOG_DIR", "logs")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# CORS
CORS_ALLOWED_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ALLOWED_ORIGINS", "http://localhost:5173,http://127.0.0.1:5173").split(",")
    if origin.strip()
]

# Cognito
COGNITO_REGION = os.getenv("COGNITO_REGION", "eu-north-1")
COGNITO_USER_POOL_ID = os.getenv("COGNITO_USER_POOL_ID")
COGNITO_APP_CLIENT_ID = os.getenv("COGNITO_APP_CLIENT_ID")
