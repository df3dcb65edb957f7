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


# ── Telegram ──────────────────────────────────────────────
TELEGRAM_BOT_TOKEN: str = os.getenv("TELEGRAM_BOT_TOKEN", "")

# ── Gemini AI ─────────────────────────────────────────────
GEMINI_API_KEY: str = os.getenv("GEMINI_API_KEY", "")
GEMINI_MODEL: str = os.getenv("GEMINI_MODEL", "gemini-2.5-flash")
GEMINI_EMBEDDING_MODEL: str = os.getenv("GEMINI_EMBEDDING_MODEL", "models/text-embedding-004")
AI_TIMEOUT_SECONDS: float = float(os.getenv("AI_TIMEOUT_SECONDS", "15"))

# ── PostgreSQL ────────────────────────────────────────────
DB_HOST: str = os.getenv("DB_HOST", "localhost")
DB_PORT: int = int(os.getenv("DB_PORT", "5432"))
DB_NAME: str = os.getenv("DB_NAME", "cartao_bot")
DB_USER: str = os.getenv("DB_USER", "cartao_bot_user")
DB_PASS: str = os.getenv("DB_PASS", "")

DATABASE_URL: str = (
    f"postgresql://{DB_USER}:{DB_PASS}@{DB_HOST}:{DB_PORT}/{DB_NAME}"
)
DB_POOL_MIN: int = int(os.getenv("DB_POOL_MIN", "1"))
DB_POOL_MAX: int = int(os.getenv("DB_POOL_MAX", "10"))

# ── Security ──────────────────────────────────────────────
_raw_ids = os.getenv("ALLOWED_USER_IDS", "")
ALLOWED_USER_IDS: list[int] = (
    [int(uid.strip()) for uid in _raw_ids.split(",") if uid.strip()]
    if _raw_ids
    else []
)

# ── Rate Limiting ─────────────────────────────────────────
RATE_LIMIT_MESSAGES: int = int(os.getenv("RATE_LIMIT_MESSAGES", "30"))
RATE_LIMIT_WINDOW_SECONDS: int = int(os.getenv("RATE_LIMIT_WINDOW_SECONDS", "60"))

# ── Locale & Currency ─────────────────────────────────────
DEFAULT_LOCALE: str = os.getenv("DEFAULT_LOCALE", "pt-BR")
DEFAULT_CURRENCY: str = "BRL"
DEFAULT_CLOSING_DAY: int = 5

# ── WhatsApp Cloud API ────────────────────────────────────
WHATSAPP_API_BASE: str = os.getenv("WHATSAPP_API_BASE", "https://graph.facebook.com/v20.0")
WHATSAPP_API_TOKEN: str = os.getenv("WHATSAPP_API_TOKEN", "")
WHATSAPP_PHONE_NUMBER_ID: str = os.getenv("WHATSAPP_PHONE_NUMBER_ID", "")
WHATSAPP_TIMEOUT_SECONDS: float = float(os.getenv("WHATSAPP_TIMEOUT_SECONDS", "10"))

# ── Reminders ─────────────────────────────────────────────
# 'whatsapp' or 'telegram'
REMINDER_PROVIDER: str = os.getenv("REMINDER_PROVIDER", "whatsapp")
REMINDER_MAX_ATTEMPTS: int = int(os.getenv("REMINDER_MAX_ATTEMPTS", "3"))
REMINDER_BACKOFF_BASE_SECONDS: float = float(os.getenv("REMINDER_BACKOFF_BASE_SECONDS", "1"))
REMINDER_BACKOFF_FACTOR: float = float(os.getenv("REMINDER_BACKOFF_FACTOR", "5"))
REMINDER_BATCH_SIZE: int = int(os.getenv("REMINDER_BATCH_SIZE", "10"))
STATEMENT_REMINDER_DAYS_BEFORE: int = int(os.getenv("STATEMENT_REMINDER_DAYS_BEFORE", "3"))
PAYMENT_REMINDER_DAYS_BEFORE: int = int(os.getenv("PAYMENT_REMINDER_DAYS_BEFORE", "2"))
REMINDER_MIN_SUCCESS_RATE: float = 99.0
REMINDER_MAX_DURATION_SECONDS: float = 30.0

# ── Intent Parsing ────────────────────────────────────────
LOCAL_NLP_CONFIDENCE_THRESHOLD: float = float(os.getenv("LOCAL_NLP_CONFIDENCE_THRESHOLD", "0.8"))
SEMANTIC_CACHE_ENABLED: bool = _env_bool("SEMANTIC_CACHE_ENABLED", "true")
SEMANTIC_CACHE_THRESHOLD: float = float(os.getenv("SEMANTIC_CACHE_THRESHOLD", "0.85"))
PATTERN_LEARNING_ENABLED: bool = _env_bool("PATTERN_LEARNING_ENABLED", "true")
PATTERN_LEARNING_MIN_CONFIDENCE: float = float(os.getenv("PATTERN_LEARNING_MIN_CONFIDENCE", "0.9"))

# ── Conversation State ────────────────────────────────────
CONVERSATION_STATE_TTL_SECONDS: int = int(os.getenv("CONVERSATION_STATE_TTL_SECONDS", "300"))

# ── Maintenance ───────────────────────────────────────────
DATA_RETENTION_DAYS: int = int(os.getenv("DATA_RETENTION_DAYS", "90"))

# ── Logging ───────────────────────────────────────────────
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
