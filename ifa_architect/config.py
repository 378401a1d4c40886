"""
Global configuration read from the environment (.env supported).
"""

import os
from dotenv import load_dotenv

load_dotenv()

# LLM provider / models
LLM_PROVIDER = os.getenv("LLM_PROVIDER", "google").lower()
REPORT_MODEL = os.getenv("REPORT_MODEL", "gemini-2.5-pro")
FAST_MODEL = os.getenv("FAST_MODEL", "gemini-2.5-flash")

# Retry policy for quota / rate-limit rejections
AI_RETRY_MAX_ATTEMPTS = int(os.getenv("AI_RETRY_MAX_ATTEMPTS", "3"))
AI_RETRY_INITIAL_DELAY = float(os.getenv("AI_RETRY_INITIAL_DELAY", "2.0"))
AI_RETRY_MAX_DELAY = float(os.getenv("AI_RETRY_MAX_DELAY", "30.0"))

# Placeholder target amount for freshly added proposal assets (client base currency)
DEFAULT_PROPOSAL_AMOUNT = float(os.getenv("DEFAULT_PROPOSAL_AMOUNT", "1000000"))

# Extracted assets below this confidence are flagged to the user
LOW_CONFIDENCE_THRESHOLD = float(os.getenv("LOW_CONFIDENCE_THRESHOLD", "0.8"))

# Paths
LOG_DIR = os.getenv("LOG_DIR", "logs")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
EXPORT_DIR = os.getenv("EXPORT_DIR", "reports")
