from __future__ import annotations

import os

from dotenv import load_dotenv

load_dotenv()


DB_PATH = os.getenv("DB_PATH", "data/petalk.db")
LLM_MODEL_ID = os.getenv("PETALK_MODEL_ID", "gpt-4o-mini")
LLM_BASE_URL = os.getenv("OPENAI_BASE_URL", "https://api.openai.com/v1")
USE_LLM = bool(int(os.getenv("PETALK_USE_LLM", "1")))
LOG_LEVEL = os.getenv("LOG_LEVEL", os.getenv("PETALK_LOG_LEVEL", "INFO")).upper()
MAX_TEXT_LENGTH = int(os.getenv("MAX_TEXT_LENGTH", "1000"))

# ── External capability calls ────────────────────────────────────
CAPABILITY_TIMEOUT = float(os.getenv("PETALK_CAPABILITY_TIMEOUT", "8.0"))

# ── Quota (anonymous / signed-in) ────────────────────────────────
DAILY_LIMIT = int(os.getenv("PETALK_DAILY_LIMIT", "50"))
DAILY_LIMIT_AUTH = int(os.getenv("PETALK_DAILY_LIMIT_AUTH", "200"))

# ── Memory context ───────────────────────────────────────────────
MEMORY_TOP_N = int(os.getenv("PETALK_MEMORY_TOP_N", "5"))
