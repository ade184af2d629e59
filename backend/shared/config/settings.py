"""
Application settings loaded from environment variables.
Uses pydantic-settings for type-safe configuration.
"""

from decimal import Decimal
from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings with defaults for development."""

    # Branding shown on receipts and the terminal header
    app_name: str = "FusionPOS"
    currency_symbol: str = "$"

    # Pricing
    tax_rate: Decimal = Decimal("0.08")  # Flat rate, no jurisdictional tiers

    # Order numbering: first order of a session gets this number
    order_number_start: int = 101

    # Price overrides
    override_reason_min_length: int = 3

    # External address-resolution service (empty disables remote lookups)
    address_lookup_url: str = ""
    address_lookup_timeout: float = 5.0

    # Server
    api_port: int = 8000
    # Comma-separated list of allowed origins (empty uses default localhost list)
    allowed_origins: str = ""

    # Environment
    environment: str = "development"
    debug: bool = True

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False

    def validate_production_settings(self) -> list[str]:
        """
        Validate that settings are sane for production.
        Returns a list of validation errors. Empty list means all checks pass.
        """
        errors = []

        if not Decimal("0") <= self.tax_rate < Decimal("1"):
            errors.append("TAX_RATE must be between 0 and 1")

        if self.order_number_start < 1:
            errors.append("ORDER_NUMBER_START must be a positive integer")

        if self.environment == "production":
            if self.debug:
                errors.append("DEBUG must be False in production")

            if not self.allowed_origins:
                errors.append(
                    "ALLOWED_ORIGINS must be set in production (comma-separated list of allowed domains)"
                )

        return errors


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Convenience exports
settings = get_settings()

# Direct access to commonly used settings
TAX_RATE = settings.tax_rate
