"""Application configuration."""

import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent
DB_PATH = BASE_DIR / "data" / "wealth_snapshot.db"
DATABASE_URL = os.getenv("DATABASE_URL") or f"sqlite+aiosqlite:///{DB_PATH}"

# Currency settings (static table, no rate fetching)
BASE_CURRENCY = "HKD"
FX_RATES = {
    "HKD": 1.0,
    "USD": float(os.getenv("FX_RATE_USD", "7.8")),
    "AUD": float(os.getenv("FX_RATE_AUD", "5.1")),
}

DEFAULT_WEALTH_GOAL = 2_000_000

# Fixed deposit settings
FD_DEFAULT_RATE = 4.0  # % p.a.
FD_DEFAULT_TERM_MONTHS = 3
FD_ROLLOVER_TERMS = (1, 3, 6, 12)
FD_URGENT_DAYS = 30

# Passive income heuristic: assumed annual dividend yield per stock market
DIVIDEND_YIELDS = {"HK": 0.05, "US": 0.015, "AU": 0.045}
BENCHMARK_MONTHLY_RATE = 0.005

# Convert FD payouts into the destination account's currency (off: credit the raw amount)
SETTLEMENT_CONVERT_CURRENCY = os.getenv("SETTLEMENT_CONVERT_CURRENCY", "").lower() in (
    "1",
    "true",
    "yes",
)

# AI price oracle / statement extractor
GEMINI_API_KEY = os.getenv("GEMINI_API_KEY", "")
GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-2.0-flash")
GEMINI_API_URL = "https://generativelanguage.googleapis.com/v1beta/models"
AI_MAX_ATTEMPTS = 3
AI_BASE_DELAY = 1.0  # seconds, doubled after each failed attempt
PRICE_CACHE_TTL = 300  # seconds

# Remote ledger mirror (spreadsheet webhook); empty disables syncing
LEDGER_MIRROR_URL = os.getenv("LEDGER_MIRROR_URL", "")
LEDGER_MIRROR_TIMEOUT = 15  # seconds

# Ensure data directory exists (only needed for local SQLite, skip if DATABASE_URL is overridden)
if not os.getenv("DATABASE_URL"):
    DB_PATH.parent.mkdir(parents=True, exist_ok=True)
