"""Application settings loaded from environment variables via pydantic-settings.

# ─── HOW SETTINGS WORK ────────────────────────────────────────────────
#
# Two sources, in priority order:
#
#   1. **Environment variables** -- e.g., BACKEND_URL=https://x.supabase.co
#   2. **.env file** -- key=value lines in the project root .env file
#
# Field ``backend_url`` maps to env var ``BACKEND_URL``.  Defaults apply
# when neither source sets a field.
#
# TTLs and the breaker cooldown were chosen empirically (minutes) and are
# tuning parameters, not contracts; override them per deployment.
# ──────────────────────────────────────────────────────────────────────
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Revmohelp data-layer settings.

    Environment variables override defaults. Loaded from .env file when present.
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # === Hosted backend ===
    backend_url: str = ""
    backend_api_key: str = ""
    backend_timeout_seconds: float = Field(default=10.0, gt=0)

    # === Circuit breaker ===
    breaker_cooldown_seconds: float = Field(default=60.0, gt=0)

    # === Cache TTLs (seconds) ===
    cache_list_ttl: float = Field(default=120.0, gt=0)  # volatile listings
    cache_detail_ttl: float = Field(default=600.0, gt=0)  # single-item views
    cache_static_ttl: float = Field(default=900.0, gt=0)  # categories

    # === App Config ===
    app_env: str = "development"
    log_level: str = "INFO"

    def is_backend_configured(self) -> bool:
        """Return True when a backend URL has been provided."""
        return bool(self.backend_url)
