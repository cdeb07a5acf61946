"""Configuration for the LetsSave budgeting app.

Paths, timings and the hard-coded starter data live here so the core and the
Streamlit page read them from one place.
"""

from __future__ import annotations

import logging
from pathlib import Path

# Base project root - assumes this file is in piggybank/
_PROJECT_ROOT = Path(__file__).parent.parent.resolve()

DATA_DIR = _PROJECT_ROOT / "data"
DATA_FILE = DATA_DIR / "letssave.json"

# Key the whole ledger is stored under
STORAGE_KEY = "letsSave.v1"

NOTIFICATION_SECONDS = 3.0
CELEBRATE_SECONDS = 0.9

ACTION_TABS = ("cash", "card", "hangout", "goal")

DEFAULT_AVAILABLE = 500
DEFAULT_CREDIT_CARD_BALANCE = 0

DEFAULT_HANGOUT_TEMPLATES = (
    {"id": "nyc-day", "name": "NYC day trip", "train": 60, "meals": 45, "activity": 35},
)

DEFAULT_GOALS = (
    {"id": "japan-trip", "name": "Japan trip", "target": 2000, "saved": 500},
    {"id": "iphone", "name": "New iPhone", "target": 1200, "saved": 0},
)

# Goals created from the hangout planner are always named after the built-in template
HANGOUT_GOAL_NAME = DEFAULT_HANGOUT_TEMPLATES[0]["name"]

# Field-level fallbacks used when stored items are missing values
FALLBACK_TEMPLATE_NAME = "Hangout"
FALLBACK_WISH_TITLE = "Wish"
FALLBACK_GOAL_NAME = "Untitled goal"

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def ensure_data_directories() -> None:
    """Create the data directory if it doesn't exist."""
    DATA_DIR.mkdir(parents=True, exist_ok=True)


def configure_logging(level: int = logging.INFO) -> None:
    logging.basicConfig(level=level, format=LOG_FORMAT)
