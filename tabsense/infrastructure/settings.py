"""
Application-wide settings and environment configuration
"""

from __future__ import annotations

import os
from pathlib import Path

# Project paths
PACKAGE_ROOT = Path(__file__).parent.parent
DATA_DIR = Path(os.getenv("TABSENSE_DATA_DIR", str(PACKAGE_ROOT / "data")))

# Environment
ENV = os.getenv("TABSENSE_ENV", "development")
DEBUG = ENV == "development"

# API Configuration
API_HOST = os.getenv("API_HOST", "127.0.0.1")
API_PORT = int(os.getenv("API_PORT", "8000"))
LOG_LEVEL = os.getenv("TABSENSE_LOG_LEVEL", "INFO")

# Storage ("memory" keeps everything in-process, anything else is a SQLite path)
DB_PATH = os.getenv("TABSENSE_DB_PATH", str(DATA_DIR / "tabsense.db"))

# Gemini (REST generateContent endpoint)
GEMINI_API_BASE = os.getenv(
    "GEMINI_API_BASE", "https://generativelanguage.googleapis.com/v1beta"
)
GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-1.5-pro")
GEMINI_TEMPERATURE = float(os.getenv("GEMINI_TEMPERATURE", "0.3"))
GEMINI_TOP_K = int(os.getenv("GEMINI_TOP_K", "1"))
GEMINI_TOP_P = float(os.getenv("GEMINI_TOP_P", "1"))
GEMINI_MAX_OUTPUT_TOKENS = int(os.getenv("GEMINI_MAX_OUTPUT_TOKENS", "500"))

# Chrome extension allowed to call the API (set after Web Store publish)
EXTENSION_ID = os.getenv("TABSENSE_EXTENSION_ID", "")


def is_production() -> bool:
    """Check if running in production"""
    return ENV == "production"


def is_development() -> bool:
    """Check if running in development"""
    return ENV == "development"
