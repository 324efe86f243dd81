"""
ABG Insights - Configuration
============================
Centralised settings for the Gemini transport and logging.
Secrets are read from the environment after loading the project-level .env file.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from abg_insights import __version__

# ── Paths ───────────────────────────────────────────────────────────────
PROJECT_ROOT = Path(__file__).resolve().parent.parent

# ── Load .env ───────────────────────────────────────────────────────────
load_dotenv(PROJECT_ROOT / ".env")

APP_TITLE = "ABG Insights API"
APP_VERSION = __version__

DEFAULT_GEMINI_MODEL = "gemini-2.5-flash"


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if not raw:
        return default
    return float(raw)


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if not raw:
        return default
    return int(raw)


@dataclass
class Settings:
    """Runtime settings, resolved from the environment at construction time."""
    gemini_api_key: Optional[str] = field(
        default_factory=lambda: os.getenv("GEMINI_API_KEY") or os.getenv("GOOGLE_API_KEY")
    )
    gemini_model: str = field(default_factory=lambda: os.getenv("GEMINI_MODEL", DEFAULT_GEMINI_MODEL))
    gemini_temperature: float = field(default_factory=lambda: _env_float("GEMINI_TEMPERATURE", 0.4))
    gemini_max_output_tokens: int = field(default_factory=lambda: _env_int("GEMINI_MAX_OUTPUT_TOKENS", 2048))
    gemini_timeout_seconds: int = field(default_factory=lambda: _env_int("GEMINI_TIMEOUT_SECONDS", 30))

    # Serve deterministic replies even when a key is configured
    use_mock: bool = field(default_factory=lambda: _env_bool("ABG_USE_MOCK"))

    # "full": one three-section prompt; "stepwise": interpret, then conditions, then treatment
    analysis_mode: str = field(default_factory=lambda: os.getenv("ABG_ANALYSIS_MODE", "full").strip().lower())

    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))
    log_file: Optional[str] = field(default_factory=lambda: os.getenv("LOG_FILE") or None)


settings = Settings()
