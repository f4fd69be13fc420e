"""
AgroSage — Configuration
─────────────────────────
All runtime settings are read from the environment (a local .env file is
loaded first, if present).

    export GEMINI_API_KEY=your_key_here
    export GENAI_MODEL=gemini-2.0-flash
"""

import os

from dotenv import load_dotenv

load_dotenv()

# ── Generative AI ─────────────────────────────────────────────────────────────
GEMINI_API_KEY: str = os.getenv("GEMINI_API_KEY") or os.getenv("GOOGLE_API_KEY", "")
GENAI_MODEL: str = os.getenv("GENAI_MODEL", "gemini-2.0-flash")
GENAI_TEMPERATURE: float = float(os.getenv("GENAI_TEMPERATURE", "0.4"))
GENAI_MAX_OUTPUT_TOKENS: int = int(os.getenv("GENAI_MAX_OUTPUT_TOKENS", "2048"))

# ── Logging ───────────────────────────────────────────────────────────────────
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

# ── Dashboard polling (client-side setInterval, in seconds) ───────────────────
MARKET_REFRESH_SECONDS: int = int(os.getenv("MARKET_REFRESH_SECONDS", "5"))
ALERT_INTERVAL_SECONDS: int = int(os.getenv("ALERT_INTERVAL_SECONDS", "15"))

# ── CORS ──────────────────────────────────────────────────────────────────────
CORS_ORIGINS: list[str] = [
    o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()
]

APP_NAME = "AgroSageAI"
APP_VERSION = "1.0.0"
