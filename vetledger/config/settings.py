"""
Configuration Management for Vet Ledger

Typed settings read from the environment (and a local .env file) with pydantic-settings.

DESIGN DECISION: Every tunable of the ledger lives in this module:
currency and amount limits, session lifetime, and the Sheets backend.
"""

from decimal import Decimal
from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from vetledger.models.ledger import ExpenseCategory


class GoogleSheetsSettings(BaseSettings):
    """Google Sheets record store configuration."""

    model_config = SettingsConfigDict(
        env_prefix="GOOGLE_SHEETS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    credentials_path: str = Field(
        ...,
        description="Path to Google service account credentials JSON"
    )
    spreadsheet_id: str = Field(
        ...,
        description="ID of the Google Sheets spreadsheet to use"
    )

    # One worksheet per table
    income_sheet_name: str = Field(
        default="income_records",
        description="Worksheet holding income records"
    )
    payments_sheet_name: str = Field(
        default="payment_transactions",
        description="Worksheet holding payment transactions"
    )
    expenses_sheet_name: str = Field(
        default="expenses",
        description="Worksheet holding expenses"
    )

    @field_validator('credentials_path')
    @classmethod
    def validate_credentials_path(cls, v: str) -> str:
        """A missing key file only warns; it may be mounted after start-up."""
        if not Path(v).exists():
            import warnings
            warnings.warn(
                f"Google credentials file not found at {v}. "
                "The Sheets record store cannot connect until it does."
            )
        return v

    def sheet_name_for(self, table: str) -> str:
        """Worksheet name for a record store table."""
        names = {
            "income_records": self.income_sheet_name,
            "payment_transactions": self.payments_sheet_name,
            "expenses": self.expenses_sheet_name,
        }
        return names.get(table, table)


class AppSettings(BaseSettings):
    """
    Ledger and session settings.

    Unprefixed environment variables, e.g. DEFAULT_CURRENCY=EUR.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Environment
    app_environment: str = Field(
        default="development",
        description="development, staging or production"
    )
    debug_mode: bool = Field(
        default=False,
        description="Verbose logging and tracebacks"
    )
    log_level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Minimum level written to the structured log"
    )

    # Ledger
    default_currency: str = Field(
        default="TRY",
        min_length=3,
        max_length=3,
        description="Currency the practice books in; others are flagged, not converted"
    )
    max_record_amount: Decimal = Field(
        default=Decimal("1000000"),
        gt=0,
        description="Amounts above this are rejected as implausible"
    )
    future_date_tolerance_days: int = Field(
        default=7,
        ge=0,
        description="How many days in the future a record date can be"
    )
    expense_categories: str = Field(
        default=",".join(category.value for category in ExpenseCategory),
        description="Comma-separated list of known expense categories"
    )

    # Sessions
    session_ttl_minutes: int = Field(
        default=60 * 24,
        ge=1,
        description="Lifetime of a local session"
    )

    @property
    def expense_categories_list(self) -> list[str]:
        """Get known expense categories as a list."""
        return [c.strip() for c in self.expense_categories.split(",") if c.strip()]


class Settings(BaseSettings):
    """
    Root settings container.

    Entry point to every settings section.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Sub-settings are loaded lazily so the ledger runs without Sheets configured

    @property
    def google_sheets(self) -> GoogleSheetsSettings:
        return GoogleSheetsSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Process-wide settings instance.

    Tests that change the environment call
    get_settings.cache_clear() afterwards.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Try loading each settings section.

    Returns {section: loaded}, plus "<section>_error" messages for
    sections that failed. Meant for a start-up health check.
    """
    results = {}

    settings = get_settings()

    try:
        _ = settings.google_sheets
        results["google_sheets"] = True
    except Exception as e:
        results["google_sheets"] = False
        results["google_sheets_error"] = str(e)

    try:
        _ = settings.app
        results["app"] = True
    except Exception as e:
        results["app"] = False
        results["app_error"] = str(e)

    return results
