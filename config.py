"""
config.py
---------
Central configuration module. Loads all environment variables
from the .env file and exposes them as typed constants.
"""

import os
from dotenv import load_dotenv

load_dotenv()


# ── HTTP server ───────────────────────────────────────────
HOST: str = os.getenv("HOST", "0.0.0.0")
PORT: int = int(os.getenv("PORT", "8080"))
REQUEST_TIMEOUT_SECONDS: int = int(os.getenv("REQUEST_TIMEOUT_SECONDS", "60"))

# ── PostgreSQL ────────────────────────────────────────────
# Left empty, the service starts in degraded mode (no data endpoints).
DATABASE_URL: str = os.getenv("DATABASE_URL", "").strip()

DB_MAX_CONNECTIONS: int = int(os.getenv("DB_MAX_CONNECTIONS", "25"))
DB_MIN_IDLE_CONNECTIONS: int = int(os.getenv("DB_MIN_IDLE_CONNECTIONS", "5"))
DB_CONN_MAX_LIFETIME_SECONDS: int = int(os.getenv("DB_CONN_MAX_LIFETIME_SECONDS", "300"))
DB_CHECKOUT_TIMEOUT_SECONDS: float = float(os.getenv("DB_CHECKOUT_TIMEOUT_SECONDS", "30"))

# ── CORS ──────────────────────────────────────────────────
_raw_origins = os.getenv("CORS_ALLOWED_ORIGINS", "*")
CORS_ALLOWED_ORIGINS: list[str] = [
    origin.strip() for origin in _raw_origins.split(",") if origin.strip()
] or ["*"]

# ── Logging ───────────────────────────────────────────────
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
