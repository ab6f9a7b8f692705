"""
Environment settings loaded from .env file.
"""
import os
from dotenv import load_dotenv

load_dotenv()


# --- LLM API ---
GEMINI_API_KEY: str = os.getenv("GEMINI_API_KEY", "")
GEMINI_MODEL: str = os.getenv("GEMINI_MODEL", "gemini-2.5-flash")
MAX_LLM_RETRIES: int = int(os.getenv("MAX_LLM_RETRIES", "3"))

# --- Database ---
DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///nlp_platform.db")

# --- Redis (payload audit) ---
REDIS_URL: str = os.getenv("REDIS_URL", "redis://localhost:6379/0")
AUDIT_TTL_SECONDS: int = int(os.getenv("AUDIT_TTL_SECONDS", "86400"))

# --- Export ---
EXPORT_PATH: str = os.getenv("EXPORT_PATH", "dataset.jsonl")

# --- Logging ---
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
MAX_TEXT_LOG_CHARS: int = int(os.getenv("MAX_TEXT_LOG_CHARS", "50"))
