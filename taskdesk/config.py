"""Environment configuration for TaskDesk."""
import os

from dotenv import load_dotenv

# Load environment variables from a local .env file when present
load_dotenv()


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


DATABASE_URL = os.environ.get("DATABASE_URL", "sqlite:///./taskdesk.db")
SQL_ECHO = _env_bool("SQL_ECHO")

# Development-only fallback; deployments must set AUTH_SECRET
AUTH_SECRET = os.environ.get("AUTH_SECRET", "taskdesk-dev-secret-change-me")
AUTH_ALGORITHM = os.environ.get("AUTH_ALGORITHM", "HS256")
TOKEN_EXPIRE_DAYS = int(os.environ.get("TOKEN_EXPIRE_DAYS", "7"))

ENVIRONMENT = os.environ.get("ENVIRONMENT", "development")
FRONTEND_URL = os.environ.get("FRONTEND_URL", "http://localhost:3000")

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()
