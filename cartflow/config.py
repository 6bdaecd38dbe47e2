"""
Settings, read from CARTFLOW_* environment variables or a .env file.

    from cartflow.config import settings

    settings.discount_rate  # Decimal("0.10")
"""

from decimal import Decimal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    database_url: str = "sqlite+aiosqlite:///cartflow.db"

    discount_rate: Decimal = Field(default=Decimal("0.10"), ge=0, le=1)
    payment_delay_seconds: float = Field(default=2.0, ge=0)
    event_buffer_size: int = Field(default=16, ge=1)

    # Checkout form
    min_customer_name_length: int = Field(default=4, ge=1)
    min_shipping_address_length: int = Field(default=6, ge=1)

    log_level: str = "INFO"
    log_json: bool = False

    model_config = SettingsConfigDict(
        env_prefix="CARTFLOW_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


settings = Settings()

__all__ = ("Settings", "settings")
