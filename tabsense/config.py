"""Centralized configuration for the TabSense backend.

Re-exports everything from tabsense.infrastructure.settings, then adds typed
constants for the classification pipeline, extraction, the remote client and
the cleanup schedule. Environment variable overrides use safe defaults so the
service starts without extra configuration.
"""

from __future__ import annotations

import os

from tabsense.infrastructure.settings import *  # noqa: F401, F403 - re-export settings

# --- App ---
APP_VERSION: str = "1.0.0"

# --- Classification Pipeline ---
PIPELINE_MIN_TEXT_CHARS: int = 100
PIPELINE_PROMPT_TEXT_CHARS: int = 10_000

# --- Extraction ---
EXTRACTION_MAX_CHARS: int = 15_000

# --- Remote LLM ---
GEMINI_TIMEOUT_SECONDS: float = float(os.getenv("GEMINI_TIMEOUT_SECONDS", "30"))
CREDENTIAL_KEY: str = "geminiApiKey"

# --- Cleanup Sweep ---
CLEANUP_INITIAL_DELAY_SECONDS: float = float(
    os.getenv("TABSENSE_CLEANUP_INITIAL_DELAY_SECONDS", "60")
)
CLEANUP_INTERVAL_SECONDS: float = float(os.getenv("TABSENSE_CLEANUP_INTERVAL_SECONDS", "3600"))

# --- Startup processing ---
INSTALL_STAGGER_MAX_SECONDS: float = 1.0
