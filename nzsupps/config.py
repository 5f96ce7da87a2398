"""Application configuration via Pydantic Settings."""

from typing import Optional

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Global scraper settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Database
    DATABASE_URL: str = "sqlite+aiosqlite:///./nzsupps.db"

    @model_validator(mode="after")
    def fix_database_url(self) -> "Settings":
        """Hosted Postgres hands out postgresql:// but asyncpg needs postgresql+asyncpg://"""
        url = self.DATABASE_URL
        if url.startswith("postgresql://"):
            self.DATABASE_URL = url.replace("postgresql://", "postgresql+asyncpg://", 1)
        elif url.startswith("postgres://"):
            self.DATABASE_URL = url.replace("postgres://", "postgresql+asyncpg://", 1)
        return self

    # App
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False

    # Fetcher
    FETCH_TIMEOUT_SECONDS: float = 10.0

    # Browser automation
    BROWSER_HEADLESS: bool = True
    BROWSER_RECYCLE_AFTER: int = 40  # leases before the context is relaunched
    BROWSER_LOCALE: str = "en-NZ"
    BROWSER_TIMEZONE: str = "Pacific/Auckland"
    NAVIGATION_TIMEOUT_MS: int = 30000
    RETRY_NAVIGATION_TIMEOUT_MS: int = 60000
    OPTIONS_WAIT_MS: int = 5000
    FLAVOUR_DELAY_MS: int = 250

    # Listing crawl
    MAX_LISTING_PAGES: int = 50

    # Test-mode wall-clock budget
    SCRAPE_TESTING: bool = False
    MAX_MS: int = 0

    def runtime_budget_seconds(self) -> Optional[float]:
        """Return the test-mode budget in seconds, or None when unlimited.

        The budget only applies when SCRAPE_TESTING is set and MAX_MS > 0.
        """
        if not self.SCRAPE_TESTING or self.MAX_MS <= 0:
            return None
        return self.MAX_MS / 1000.0


settings = Settings()
