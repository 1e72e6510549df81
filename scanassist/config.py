# scanassist/config.py

from __future__ import annotations

import os
from pathlib import Path

DATA_DIR = Path(os.getenv("SCANASSIST_DATA_DIR", "data"))
HISTORY_FILE = DATA_DIR / "scan_history.json"
SETTINGS_FILE = DATA_DIR / "settings.json"
HISTORY_LIMIT = int(os.getenv("HISTORY_LIMIT", "50"))

# One accepted AI request per window
AI_COOLDOWN_SECONDS = float(os.getenv("AI_COOLDOWN_SECONDS", "60"))
GROQ_TEXT_MODEL = os.getenv("GROQ_TEXT_MODEL", "llama-3.3-70b-versatile")
GROQ_VISION_MODEL = os.getenv(
    "GROQ_VISION_MODEL", "meta-llama/llama-4-scout-17b-16e-instruct"
)

MAX_UPLOAD_BYTES = int(os.getenv("MAX_UPLOAD_BYTES", str(5 * 1024 * 1024)))

SENTRY_DSN = os.getenv("SENTRY_DSN", "")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
