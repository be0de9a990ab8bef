"""Settings for the billing service."""
from __future__ import annotations

import functools
from typing import Literal, get_args

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
LOG_LEVELS: tuple[str, ...] = get_args(LogLevel)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        populate_by_name=True,
        extra="ignore",
    )

    service_name: str = Field("billing-service", alias="BILLING_SERVICE_NAME")
    invoice_start_number: int = Field(
        100,
        ge=0,
        alias="BILLING_INVOICE_START_NUMBER",
        description="First invoice number handed out by a fresh service",
    )
    payment_terms_days: int = Field(
        7,
        ge=0,
        alias="BILLING_PAYMENT_TERMS_DAYS",
        description="Days between invoice generation and its due date",
    )
    strict_amounts: bool = Field(
        False,
        alias="BILLING_STRICT_AMOUNTS",
        description="Reject negative discounts and invoices whose amount drops below zero",
    )
    log_level: LogLevel = Field("INFO", alias="BILLING_LOG_LEVEL")
    log_json: bool = Field(True, alias="BILLING_LOG_JSON")

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalise_log_level(cls, value: object) -> object:
        return value.strip().upper() if isinstance(value, str) else value


@functools.lru_cache
def get_settings() -> Settings:
    return Settings()
