"""
Configuration management with pydantic-settings.

Every variable has a sane default so the extraction service can start
with an empty environment. Values are read from the environment or from
a local .env file (case-insensitive).
"""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables / .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ── Hotel results limits ──────────────────────────────────────────
    max_rows_default: int = Field(
        default=5000,
        description="Row cap used when the caller does not send maxRows.",
    )
    max_rows_floor: int = Field(default=100)
    max_rows_ceiling: int = Field(default=20000)
    dom_batch_size: int = Field(
        default=500,
        description="Cards mapped per batch before yielding to the event loop.",
    )
    hotel_sample_size: int = Field(default=3)

    # ── Travel facts limits ───────────────────────────────────────────
    max_chars_default: int = Field(
        default=250_000,
        description="Visible-text budget for the regex pass.",
    )
    max_chars_floor: int = Field(default=50_000)
    max_chars_ceiling: int = Field(default=1_000_000)
    facts_sample_size: int = Field(default=5)

    # ── Classifier ────────────────────────────────────────────────────
    markup_peek_chars: int = Field(
        default=20_000,
        description="How much raw markup the platform classifier looks at.",
    )

    # ── Confidence bonuses per route (tunable heuristics) ─────────────
    confidence_bonus_jsonld: float = Field(default=0.15)
    confidence_bonus_inline_json: float = Field(default=0.05)
    confidence_bonus_regex: float = Field(default=0.0)

    # ── Page loading ──────────────────────────────────────────────────
    render_with_browser: bool = Field(
        default=True,
        description="Render with Playwright; when off, fetch static HTML with curl_cffi.",
    )
    navigation_timeout_ms: int = Field(default=15000)
    settle_delay_ms: int = Field(
        default=2500,
        description="Wait after navigation so client-side results can hydrate.",
    )
    fetch_timeout: float = Field(default=30.0)
    user_agent: str = Field(
        default=(
            "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
            "AppleWebKit/537.36 (KHTML, like Gecko) "
            "Chrome/121.0.0.0 Safari/537.36"
        ),
    )
    accept_language: str = Field(default="en-US,en;q=0.9")

    # ── Redis / ARQ ───────────────────────────────────────────────────
    redis_url: str = Field(
        default="redis://localhost:6379/0",
        description="Redis connection string for ARQ workers.",
    )

    # ── Logging ───────────────────────────────────────────────────────
    log_level: str = Field(default="INFO")


# Singleton instance, import this everywhere
settings = Settings()
