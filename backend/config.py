"""Application configuration using pydantic-settings."""

from typing import Any

from pydantic import field_validator
from pydantic.fields import FieldInfo
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from services.credential_manager import CREDENTIAL_KEYS, get_credential


class KeychainSettingsSource(PydanticBaseSettingsSource):
    """Load credential fields from the OS keychain via ``keyring``.

    Only fields whose uppercase name appears in
    :data:`~services.credential_manager.CREDENTIAL_KEYS` are looked up.
    All other fields return ``None`` so the next source in the chain
    handles them.
    """

    def get_field_value(
        self, field: FieldInfo, field_name: str
    ) -> tuple[Any, str, bool]:
        env_name = field_name.upper()
        if env_name not in CREDENTIAL_KEYS:
            return None, field_name, False
        value = get_credential(env_name)
        return value, field_name, False

    def __call__(self) -> dict[str, Any]:
        d: dict[str, Any] = {}
        for field_name, field_info in self.settings_cls.model_fields.items():
            value, key, is_complex = self.get_field_value(field_info, field_name)
            if value is not None:
                d[key] = value
        return d


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            KeychainSettingsSource(settings_cls),
            env_settings,
            dotenv_settings,
            file_secret_settings,
        )

    # Database
    DATABASE_URL: str = "sqlite:///./portfolio.db"

    # Price provider credentials (optional - keyless tiers are used otherwise)
    COINGECKO_API_KEY: str = ""
    ALPHA_VANTAGE_API_KEY: str = ""

    # Exchange rate provider credentials (optional - fallback provider only)
    OPEN_EXCHANGE_RATES_API_KEY: str = ""

    # Bearer token required by the scheduled snapshot endpoint (empty = endpoint disabled)
    CRON_SECRET: str = ""

    # Currencies
    BASE_CURRENCY: str = "USD"
    DEFAULT_DISPLAY_CURRENCY: str = "USD"

    # Price resolution
    CRYPTO_PRICE_TTL_SECONDS: int = 300
    EQUITY_PRICE_TTL_SECONDS: int = 1800
    PRICE_PROVIDER_TIMEOUT_SECONDS: float = 10.0
    PRICE_RESOLUTION_DEADLINE_SECONDS: float = 30.0
    PRICE_MAX_WORKERS: int = 4

    # Dividends
    DIVIDEND_TRAILING_DAYS: int = 365

    @field_validator("BASE_CURRENCY", "DEFAULT_DISPLAY_CURRENCY", mode="before")
    @classmethod
    def normalize_currency(cls, v: str) -> str:
        """Upper-case ISO currency codes so lookups are case-insensitive."""
        if isinstance(v, str):
            v = v.strip().upper()
            if len(v) != 3 or not v.isalpha():
                raise ValueError(f"Currency must be a 3-letter ISO code, got {v!r}")
        return v

    @field_validator("LOG_LEVEL", mode="before")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate and normalize LOG_LEVEL to an uppercase Python logging level."""
        valid = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid:
            raise ValueError(f"LOG_LEVEL must be one of {valid}, got {v!r}")
        return v.upper()

    # App settings
    ENVIRONMENT: str = "development"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"


settings = Settings()
