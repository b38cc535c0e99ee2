import os
from pathlib import Path
from dotenv import load_dotenv

# Force-load .env (Windows-safe, reload-safe)
BASE_DIR = Path(__file__).resolve().parent.parent
load_dotenv(dotenv_path=BASE_DIR / ".env")

APP_ENV = os.getenv("APP_ENV", "development")
HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "3000"))

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./db.sqlite")

# Insecure defaults, overridden per deployment
DEFAULT_SESSION_SECRET = "change_this_secret"
SESSION_SECRET = os.getenv("SESSION_SECRET", DEFAULT_SESSION_SECRET)
SESSION_TTL_MINUTES = int(os.getenv("SESSION_TTL_MINUTES", "60"))
SESSION_COOKIE = "topup_session"
COOKIE_SECURE = os.getenv(
    "COOKIE_SECURE", "true" if APP_ENV == "production" else "false"
).lower() in ("1", "true", "yes")

BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", "10"))
RATE_LIMIT = os.getenv("RATE_LIMIT", "30/minute")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Bootstrap admin, must be rotated before production use
DEFAULT_ADMIN_USERNAME = "admin"
DEFAULT_ADMIN_PASSWORD = "changeit"

ORDER_LIST_LIMIT = 200


def is_production() -> bool:
    return APP_ENV == "production"
