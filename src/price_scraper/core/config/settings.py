"""Application configuration using Pydantic Settings with YAML support.

Sources, highest priority first:
1. Values passed to ``Settings()``
2. Environment variables (nested with ``__``, e.g. ``BUDGET__DAILY_CAP=2.00``)
3. ``.env`` file (secrets)
4. ``config/environments/{APP_ENV}/*.yaml``
5. ``config/base/*.yaml``
6. Defaults below

Defaults reproduce the provider budget the scraper was designed around:
$5.00 total, $1.00 per day, 8 requests per minute.
"""

from __future__ import annotations

from decimal import Decimal
from functools import lru_cache
from typing import TYPE_CHECKING, Annotated

from pydantic import BaseModel, BeforeValidator, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .yaml_source import MultiYamlConfigSettingsSource


if TYPE_CHECKING:
    from pydantic_settings import PydanticBaseSettingsSource


def parse_list(v: str | list[str]) -> list[str]:
    """Parse comma-separated string or list into list of strings."""
    if isinstance(v, str):
        return [x.strip() for x in v.split(",") if x.strip()]
    return v


# =============================================================================
# Nested Configuration Models (from YAML)
# =============================================================================


class AppSettings(BaseModel):
    """Application identity settings."""

    name: str = "Grocery Price Scraper"
    version: str = "0.1.0"
    debug: bool = False


class ServerSettings(BaseModel):
    """Server configuration settings."""

    host: str = "127.0.0.1"
    port: int = 8000


class ApiSettings(BaseModel):
    """API configuration settings."""

    v1_prefix: str = "/api/v1/grocery-prices"
    cors_origins: Annotated[list[str], BeforeValidator(parse_list)] = []


class LoggingSettings(BaseModel):
    """Logging configuration settings."""

    level: str = "INFO"
    format: str = "json"


class ZyteSettings(BaseModel):
    """Zyte extraction API client settings."""

    api_url: str = "https://api.zyte.com/v1/extract"
    timeout: float = 30.0
    geolocation: str = "US"


class BudgetSettings(BaseModel):
    """Spend caps for the paid extraction API (USD)."""

    total_cap: Decimal = Decimal("5.00")
    daily_cap: Decimal = Decimal("1.00")
    default_estimate: Decimal = Decimal("0.0003")


class RateLimitSettings(BaseModel):
    """Outbound token bucket settings."""

    max_tokens: int = Field(default=8, ge=1)
    refill_per_minute: int = Field(default=8, ge=1)


class ScrapingSettings(BaseModel):
    """Publix price scraping behaviour."""

    cache_ttl: int = 6 * 60 * 60
    max_retries: int = Field(default=2, ge=1)
    retry_backoff_seconds: float = 2.0
    min_payload_length: int = 100
    promotion_chance: float = Field(default=0.25, ge=0, le=1)
    batch_delay_seconds: float = 1.5
    require_live_data: bool = False


class ComparisonSettings(BaseModel):
    """Multi-store price comparison settings."""

    cache_ttl: int = 5 * 60
    default_radius_miles: float = 15.0


# =============================================================================
# Main Settings Class
# =============================================================================


class Settings(BaseSettings):
    """Application settings with YAML + environment variable support."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        extra="ignore",
        case_sensitive=False,
        env_nested_delimiter="__",
    )

    APP_ENV: str = "development"

    app: AppSettings = AppSettings()
    server: ServerSettings = ServerSettings()
    api: ApiSettings = ApiSettings()
    logging: LoggingSettings = LoggingSettings()
    zyte: ZyteSettings = ZyteSettings()
    budget: BudgetSettings = BudgetSettings()
    rate_limit: RateLimitSettings = RateLimitSettings()
    scraping: ScrapingSettings = ScrapingSettings()
    comparison: ComparisonSettings = ComparisonSettings()

    # Secrets (.env or environment only - never in YAML)
    ZYTE_API_KEY: str = ""

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Insert the YAML source between dotenv and file secrets."""
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            MultiYamlConfigSettingsSource(settings_cls),
            file_secret_settings,
        )

    @property
    def zyte_enabled(self) -> bool:
        """Whether a Zyte API key is configured."""
        return bool(self.ZYTE_API_KEY.strip())

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.APP_ENV == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.APP_ENV == "production"

    @property
    def is_testing(self) -> bool:
        """Check if running in test environment."""
        return self.APP_ENV == "test"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
