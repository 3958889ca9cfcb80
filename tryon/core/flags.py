"""
Central feature flags. One file controls every external dependency.

Set via environment variables (prefix FF_) or .env file.
When a flag is OFF, the system uses a local/mock fallback. Nothing crashes.
"""

from functools import lru_cache
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class FeatureFlags(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── AI service ───────────────────────────────────────────────────
    use_gemini: bool = Field(default=True, alias="FF_USE_GEMINI")
    # ON  → Analysis + edit calls go to Google Gemini. Needs GEMINI_API_KEY.
    # OFF → Offline mock service. Echoes the model image back as the result.

    # ── Catalogue ────────────────────────────────────────────────────
    enable_accessories: bool = Field(default=True, alias="FF_ENABLE_ACCESSORIES")
    # ON  → Glasses, hats, watches, bracelets and bags are selectable.
    # OFF → Only apparel categories are listed and accepted.


@lru_cache
def get_flags() -> FeatureFlags:
    return FeatureFlags()
