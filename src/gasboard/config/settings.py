"""Application settings and configuration."""

from decimal import Decimal
from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

from gasboard.core.retry import RetryPolicy


def get_default_data_dir() -> Path:
    """Return the default data directory based on platform."""
    return Path.home() / ".gasboard"


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    app_name: str = "Solana Gas Board"

    # Data directory (all app data lives here)
    data_dir: Optional[Path] = None

    # Database URL (derived from data_dir if not set explicitly)
    database_url: Optional[str] = None

    log_level: str = "INFO"

    # Upstream endpoints
    rpc_url: str = "https://api.mainnet-beta.solana.com"
    kline_url: str = "https://api.binance.com/api/v3/klines"
    kline_symbol: str = "SOLUSDT"
    kline_interval: str = "1h"
    coingecko_url: str = "https://api.coingecko.com/api/v3"
    coingecko_coin_id: str = "solana"
    exchange_rate_url: str = "https://open.er-api.com/v6/latest/USD"

    # Local presentation
    local_currency: str = "CNY"
    local_timezone: str = "Asia/Shanghai"

    # Fallback prices used when every lookup fails
    default_native_usd_price: Decimal = Decimal("85")
    default_usd_to_local: Decimal = Decimal("7.25")

    # Signature scan
    signatures_page_limit: int = 1000
    max_month_transactions: int = 3000
    max_signature_pages: int = 50
    page_delay_seconds: float = 0.2
    scan_resume_attempts: int = 2

    # Transaction body batches
    tx_batch_size: int = 5
    batch_delay_seconds: float = 0.2

    # Retry / timeout
    request_timeout_seconds: float = 8.0
    rpc_max_attempts: int = 3
    rpc_retry_delay_seconds: float = 0.5
    rpc_rate_limit_delay_seconds: float = 0.8
    price_max_attempts: int = 2
    price_retry_delay_seconds: float = 0.5

    def get_data_dir(self) -> Path:
        """Get the data directory, creating it if needed."""
        data_dir = self.data_dir or get_default_data_dir()
        data_dir.mkdir(parents=True, exist_ok=True)
        return data_dir

    def get_database_url(self) -> str:
        """Get database URL, deriving from data_dir if not set."""
        if self.database_url:
            return self.database_url
        db_path = self.get_data_dir() / "gas_cache.db"
        return f"sqlite:///{db_path}"

    def retry_policy(self, kind: str) -> RetryPolicy:
        """
        Build the retry policy for a call kind.

        Kinds: "scan_page", "batch_item", "price_lookup".
        """
        if kind in ("scan_page", "batch_item"):
            return RetryPolicy(
                name=kind,
                max_attempts=self.rpc_max_attempts,
                delay_seconds=self.rpc_retry_delay_seconds,
                rate_limit_delay_seconds=self.rpc_rate_limit_delay_seconds,
                timeout_seconds=self.request_timeout_seconds,
            )
        if kind == "price_lookup":
            return RetryPolicy(
                name=kind,
                max_attempts=self.price_max_attempts,
                delay_seconds=self.price_retry_delay_seconds,
                rate_limit_delay_seconds=self.price_retry_delay_seconds,
                timeout_seconds=self.request_timeout_seconds,
            )
        raise ValueError(f"Unknown retry policy kind: {kind}")


# Global settings instance (can be replaced at runtime)
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Return the current settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def set_settings(settings: Settings) -> None:
    """Set the global settings instance."""
    global _settings
    _settings = settings


def reset_settings() -> None:
    """Reset settings to force reload."""
    global _settings
    _settings = None
