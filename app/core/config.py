from functools import lru_cache
from pathlib import Path
from typing import List, Optional
import re

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment with defaults.

    Environment variable mapping follows pydantic's rules (e.g., APP_NAME, DEBUG,
    DATA_DIR, EXCHANGE_API_KEY, REFRESH_INTERVAL_SECONDS).
    """

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Basic app metadata
    app_name: str = "Currency Rates API"
    debug: bool = False
    version: str = "0.1.0"

    # Data & persistence
    data_dir: Path = Path("data")
    db_filename: str = "currency.sqlite3"
    db_path: Optional[Path] = None  # derived if not provided

    # Upstream provider
    base_currency: str = "USD"
    exchange_api_key: str = ""
    exchange_api_base_url: str = "https://v6.exchangerate-api.com/v6"
    # Allowed: 'exchangerate-api' (live HTTP), 'static' (built-in fixed rates)
    exchange_rate_provider: str = "exchangerate-api"
    http_timeout_seconds: float = 10.0
    http_retries: int = 2

    # Refresh schedule
    refresh_interval_seconds: int = 86400  # daily
    refresh_on_startup: bool = True

    # HTTP surface
    rate_limit_requests: int = 100
    rate_limit_window_seconds: int = 60
    cors_origins: List[str] = ["*"]
    display_locale: str = "en"
    enable_manual_refresh: bool = False

    @property
    def exchange_api_url(self) -> str:
        base = self.exchange_api_base_url.rstrip("/")
        return f"{base}/latest/{self.base_currency}"

    def init_post_load(self) -> None:
        """Finalize derived fields and ensure directories exist."""
        if self.db_path is None:
            self.db_path = self.data_dir / self.db_filename
        # Ensure persistence directory exists
        Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        self.base_currency = self.base_currency.upper()
        if not re.fullmatch(r"[A-Z]{3}", self.base_currency):
            raise ValueError(
                f"base_currency must be a 3-letter code, got '{self.base_currency}'"
            )
        allowed = {"exchangerate-api", "static"}
        if self.exchange_rate_provider not in allowed:
            raise ValueError(
                f"Unsupported exchange_rate_provider '{self.exchange_rate_provider}'. Allowed: {allowed}"
            )
        if self.refresh_interval_seconds <= 0:
            raise ValueError("refresh_interval_seconds must be positive")


@lru_cache
def get_settings() -> Settings:
    settings = Settings()
    settings.init_post_load()
    return settings
