"""
Application configuration using Pydantic Settings.

Loads configuration from environment variables and .env file.
"""
from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # =========================================================================
    # Application
    # =========================================================================
    app_name: str = "iPerkz Support Agent"
    app_version: str = "1.0.0"
    debug: bool = False
    log_level: str = "INFO"
    api_v1_prefix: str = "/api/v1"

    # =========================================================================
    # Upstream order source
    # =========================================================================
    store_id: str = Field(
        default="25",
        description="Store identifier sent with every order-set request",
    )

    orders_api_url: str = Field(
        default="https://delivery-routes.vercel.app/api/orders-by-criteria",
        description="Order-set endpoint (POST with storeId and date range)",
    )

    todays_orders_api_url: str = Field(
        default="https://delivery-routes.vercel.app/api/todays-orders",
        description="Today's orders endpoint (fresher status)",
    )

    driver_locations_api_url: str = Field(
        default="https://delivery-routes.vercel.app/api/driver-locations",
        description="Live driver GPS feed",
    )

    upstream_api_key: Optional[str] = Field(
        default=None,
        description="Bearer token for the upstream API, if it requires one",
    )

    upstream_timeout_seconds: float = Field(
        default=10.0,
        description="Timeout for every upstream HTTP call",
    )

    # =========================================================================
    # Cache
    # =========================================================================
    orders_cache_ttl_seconds: float = Field(
        default=30.0,
        description="TTL of the wide order snapshot",
    )

    todays_orders_cache_ttl_seconds: float = Field(
        default=10.0,
        description="TTL of today's order snapshot",
    )

    orders_days_back: int = 60
    orders_days_forward: int = 7

    # =========================================================================
    # Verification sessions
    # =========================================================================
    mobile_session_ttl_hours: int = Field(
        default=24,
        description="Lifetime of server-issued mobile sessions",
    )

    session_sweep_threshold: int = Field(
        default=10000,
        description="Session count above which expired sessions are swept on create",
    )

    # =========================================================================
    # ETA
    # =========================================================================
    avg_minutes_per_stop: int = 12

    # =========================================================================
    # Links shown to customers
    # =========================================================================
    driver_tracking_url: str = "https://delivery-routes.vercel.app/driver"
    ios_app_url: str = "https://apps.apple.com/us/app/iperkz/id1512501611"
    android_app_url: str = (
        "https://play.google.com/store/apps/details?id=com.appisoft.perkz"
    )
    support_email: str = "support@iperkz.com"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Convenience alias
settings = get_settings()
