"""
Configuration Management Module

Provides ledger configuration using pydantic-settings for environment-based
configuration. There is no process-wide instance: build a LedgerConfig (or call
load_config) and pass it to the Ledger at wiring time.
"""

from decimal import Decimal
from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .currency import Currency


class LedgerConfig(BaseSettings):
    """Ledger simulator configuration"""

    model_config = SettingsConfigDict(
        env_prefix="LEDGER_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Ledger Simulator"
    app_version: str = "1.0.0"
    currency: str = "EUR"
    date_format: str = "%Y-%m-%d %H:%M:%S"

    # Business rules
    max_transfer_amount: Decimal = Decimal("10000.00")
    min_initial_deposit: Decimal = Decimal("0.00")
    max_initial_deposit: Decimal = Decimal("1000000.00")
    premium_min_initial_deposit: Decimal = Decimal("1000.00")

    # Observers
    enable_audit_logging: bool = True
    enable_notifications: bool = True
    notify_console: bool = True
    notify_email: bool = False
    notify_sms: bool = False
    audit_log_file: Optional[str] = None  # If None, audit entries stay in memory

    # Logging
    log_level: str = "INFO"
    log_format: str = "json"  # json or text

    @field_validator("max_transfer_amount")
    @classmethod
    def _positive_transfer_limit(cls, value: Decimal) -> Decimal:
        if value <= 0:
            raise ValueError("max_transfer_amount must be positive")
        return value

    @field_validator("currency")
    @classmethod
    def _known_currency(cls, value: str) -> str:
        return Currency.from_code(value).code

    @field_validator("log_level")
    @classmethod
    def _known_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level: {value}")
        return level

    @field_validator("log_format")
    @classmethod
    def _known_log_format(cls, value: str) -> str:
        if value not in ("json", "text"):
            raise ValueError("log_format must be 'json' or 'text'")
        return value

    @property
    def currency_unit(self) -> Currency:
        """Currency enum for the configured code"""
        return Currency.from_code(self.currency)


def load_config(**overrides) -> LedgerConfig:
    """Build a fresh configuration from the environment plus explicit overrides"""
    return LedgerConfig(**overrides)
