"""
Configuration Management

Loads application settings from the environment (and a local .env file).
"""

import os
from pathlib import Path
from dotenv import load_dotenv

load_dotenv()

BASE_DIR = Path(__file__).parent.parent
DATA_DIR = BASE_DIR / "data"

# Database
DATABASE_URL = os.getenv("DATABASE_URL", f"sqlite:///{DATA_DIR / 'tracker.db'}")

# Auth
SECRET_KEY = os.getenv("SECRET_KEY", "your-secret-key-change-in-production")
TOKEN_MAX_AGE_DAYS = int(os.getenv("TOKEN_MAX_AGE_DAYS", "7"))
MIN_PASSWORD_LENGTH = 6

# Calendar days (streaks, "today" analytics) are taken in this timezone
APP_TIMEZONE = os.getenv("APP_TIMEZONE", "UTC")

# Focus timer
DEFAULT_FOCUS_MINUTES = int(os.getenv("DEFAULT_FOCUS_MINUTES", "25"))

# Web server
HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "5000"))
