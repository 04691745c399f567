"""Application configuration powered by environment variables."""
from __future__ import annotations

from functools import lru_cache

from dotenv import load_dotenv
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load variables from a local .env file if present. This keeps runtime flexible.
load_dotenv()

RESTORE_BACKENDS = ("memory", "rq")


class Settings(BaseSettings):
    """Strongly typed configuration for the service."""

    app_name: str = "RenewalMailGuard"
    environment: str = "development"
    port: int = 3000

    webhook_secret: str = ""
    allow_unverified_webhooks: bool = False

    shopify_shop: str = "example.myshopify.com"
    shopify_api_version: str = "2024-01"
    shopify_api_token: str | None = None
    request_timeout_seconds: float = 10.0

    target_order_tag: str = "appstle_subscription_recurring_order"
    restore_delay_seconds: float = 8.0
    fetch_customer_before_suppress: bool = False

    restore_backend: str = "memory"
    restore_on_shutdown: bool = True
    redis_url: str = "redis://localhost:6379/0"
    rq_queue_name: str = "email-restores"

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", case_sensitive=False)

    @field_validator("redis_url", "webhook_secret", "shopify_api_token", mode="before")
    @classmethod
    def strip_wrapping_quotes(cls, value: str | None) -> str | None:
        """Allow quoted values in env files."""
        if isinstance(value, str):
            return value.strip().strip('"').strip("'")
        return value

    @field_validator("shopify_shop", mode="before")
    @classmethod
    def normalise_shop(cls, value: str) -> str:
        """Accept `https://shop.myshopify.com/` as well as the bare hostname."""
        if isinstance(value, str):
            value = value.strip().strip('"').strip("'")
            for prefix in ("https://", "http://"):
                if value.startswith(prefix):
                    value = value[len(prefix):]
            return value.rstrip("/")
        return value

    @field_validator("target_order_tag")
    @classmethod
    def lowercase_tag(cls, value: str) -> str:
        value = value.strip().lower()
        if not value:
            raise ValueError("target_order_tag must not be empty")
        return value

    @field_validator("restore_delay_seconds")
    @classmethod
    def validate_delay(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("restore_delay_seconds must be positive")
        return value

    @field_validator("restore_backend")
    @classmethod
    def validate_backend(cls, value: str) -> str:
        value = value.strip().lower()
        if value not in RESTORE_BACKENDS:
            raise ValueError(f"restore_backend must be one of {', '.join(RESTORE_BACKENDS)}")
        return value

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    @property
    def signature_bypass_active(self) -> bool:
        """Signature checks are only skipped when explicitly allowed outside production."""
        return self.allow_unverified_webhooks and not self.is_production


@lru_cache()
def get_settings() -> Settings:
    """Return a cached Settings instance for reuse across the app."""

    return Settings()


settings = get_settings()
