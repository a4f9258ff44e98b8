from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment with defaults.

    Environment variable mapping follows pydantic's rules (e.g., APP_NAME, DEBUG,
    DATA_DIR, DB_FILENAME, RATES_CACHE_TTL_SECONDS, GEOIP_LOOKUP_ENABLED).
    """

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Basic app metadata
    app_name: str = "Airport Parking Pricing"
    debug: bool = False
    version: str = "0.1.0"

    # Data & persistence
    data_dir: Path = Path("data")
    db_filename: str = "parking.sqlite3"
    db_path: Optional[Path] = None  # derived if not provided

    # Exchange rates / caching
    rates_cache_ttl_seconds: int = 6 * 3600
    exchange_api_base_url: str = "https://api.exchangerate-api.com/v4/latest"
    exchange_rate_provider: str = "exchangerate-api"
    exchange_rate_timeout_seconds: float = 2.0
    supported_currencies: List[str] = ["USD", "GBP", "EUR"]
    initialize_rates_on_startup: bool = True

    # Geo detection
    geoip_lookup_enabled: bool = True
    geoip_api_base_url: str = "http://ip-api.com/json"
    geoip_timeout_seconds: float = 2.0
    secure_cookies: bool = False

    def init_post_load(self) -> None:
        """Finalize derived fields and ensure directories exist."""
        if self.db_path is None:
            self.db_path = self.data_dir / self.db_filename
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        allowed = {"exchangerate-api"}
        if self.exchange_rate_provider not in allowed:
            raise ValueError(
                f"Unsupported exchange_rate_provider '{self.exchange_rate_provider}'. Allowed: {allowed}"
            )
        self.supported_currencies = [c.strip().upper() for c in self.supported_currencies]


@lru_cache
def get_settings() -> Settings:
    settings = Settings()
    settings.init_post_load()
    return settings
