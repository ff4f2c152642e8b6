"""
config.py
---------
Central configuration module. Loads all environment variables
from the .env file and exposes them as typed constants.
"""

import os
from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


# ── HTTP API ──────────────────────────────────────────────
API_HOST: str = os.getenv("API_HOST", "0.0.0.0")
API_PORT: int = int(os.getenv("API_PORT", "3000"))

_raw_origins = os.getenv("CORS_ORIGINS", "*")
CORS_ORIGINS: list[str] = [o.strip() for o in _raw_origins.split(",") if o.strip()]

# ── PostgreSQL ────────────────────────────────────────────
DB_HOST: str = os.getenv("DB_HOST", "localhost")
DB_PORT: int = int(os.getenv("DB_PORT", "5432"))
DB_NAME: str = os.getenv("DB_NAME", "pet_tec")
DB_USER: str = os.getenv("DB_USER", "postgres")
DB_PASS: str = os.getenv("DB_PASS", "")

DATABASE_URL: str = (
    f"postgresql://{DB_USER}:{DB_PASS}@{DB_HOST}:{DB_PORT}/{DB_NAME}"
)

# ── Connection pool ───────────────────────────────────────
DB_MIN_CONNECTIONS: int = int(os.getenv("DB_MIN_CONNECTIONS", "0"))
DB_MAX_CONNECTIONS: int = int(os.getenv("DB_MAX_CONNECTIONS", "10"))
DB_QUEUE_UNBOUNDED: bool = _env_bool("DB_QUEUE_UNBOUNDED", "true")

# ── Schema ────────────────────────────────────────────────
AUTO_CREATE_SCHEMA: bool = _env_bool("AUTO_CREATE_SCHEMA", "false")

# ── Logging ───────────────────────────────────────────────
_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
_raw_level = os.getenv("LOG_LEVEL", "INFO").strip().upper()
LOG_LEVEL: str = _raw_level if _raw_level in _LOG_LEVELS else "INFO"
