"""
Configuration Management Module

Provides centralized configuration using pydantic-settings for environment-based configuration.
"""

from decimal import Decimal
from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .accounts import breaks_record
from .currency import ZERO, to_amount


class LedgerConfig(BaseSettings):
    """ATM ledger configuration"""

    model_config = SettingsConfigDict(
        env_prefix="ATM_LEDGER_",
        env_file=".env",
        case_sensitive=False,
    )

    # Storage configuration
    accounts_file: str = "accounts.txt"
    transactions_file: str = "transactions.txt"

    # Cash pool configuration
    initial_cash_reserve: str = "10000.00"  # Decimal as string

    # Actors recorded in the transaction log for administrative operations
    admin_actor: str = "ADMIN"
    technician_actor: str = "TECH"

    # Technician console credentials (checked by the HTTP adapter only)
    technician_id: str = "tech"
    technician_pin: str = "0000"

    # API configuration
    api_host: str = "0.0.0.0"
    api_port: int = 8090

    # Logging configuration
    log_level: str = "INFO"
    log_format: str = "json"  # json or text
    log_file: Optional[str] = None  # If None, logs to stderr

    @field_validator("initial_cash_reserve")
    @classmethod
    def check_cash_reserve(cls, value: str) -> str:
        amount = to_amount(value)
        if amount < ZERO:
            raise ValueError("initial_cash_reserve cannot be negative")
        return value

    @field_validator("admin_actor", "technician_actor")
    @classmethod
    def check_actor(cls, value: str) -> str:
        if not value.strip() or breaks_record(value):
            raise ValueError("actor names cannot be empty or contain commas, '|' or line breaks")
        return value

    @property
    def initial_cash_reserve_amount(self) -> Decimal:
        return to_amount(self.initial_cash_reserve)


# Global configuration instance
config = LedgerConfig()


def get_config() -> LedgerConfig:
    """Get global configuration instance"""
    return config


def reload_config() -> LedgerConfig:
    """Reload configuration from environment"""
    global config
    config = LedgerConfig()
    return config
