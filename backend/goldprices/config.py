"""Application configuration via Pydantic Settings."""

from typing import List, Optional

from pydantic import BaseModel, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class VendorConfig(BaseModel):
    """Identity and listing URL of one scraped vendor."""

    slug: str  # Registry key of the extractor (e.g., "moro")
    name: str  # Display name, also the cache key (e.g., "Moro")
    url: str


DEFAULT_VENDORS: List[VendorConfig] = [
    VendorConfig(
        slug="gvs-croatia",
        name="GVS Croatia",
        url="https://www.zlatosrebro.hr/kupnja/cijene-zlatnih-poluga.html",
    ),
    VendorConfig(
        slug="plemenit",
        name="Plemenit",
        url="https://plemenit.hr/cijene/cijena-zlatnih-poluga/cjenik-zlatnih-poluga-usporedba/",
    ),
    VendorConfig(
        slug="moro",
        name="Moro",
        url="https://www.moro.hr/kategorija-proizvoda/zlatne-poluge/",
    ),
    VendorConfig(
        slug="centar-zlata",
        name="Centar Zlata",
        url="https://www.centarzlata.com/kategorija/investicijsko-zlato/zlatne-poluge/",
    ),
]


class Settings(BaseSettings):
    """Global application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
    )

    # App
    ENVIRONMENT: str = "development"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"

    # Vendors (JSON list in the environment)
    VENDORS: List[VendorConfig] = DEFAULT_VENDORS

    # Fetching
    REQUEST_TIMEOUT_SECONDS: float = 10.0
    RETRY_ATTEMPTS: int = 2  # Retries after the first attempt
    RETRY_DELAY_SECONDS: float = 1.0
    USER_AGENT: Optional[str] = None  # Rotated browser UA when unset

    # Product page revisits (Centar Zlata)
    DETAIL_PAGE_LIMIT: int = 10
    DETAIL_PAGE_DELAY_SECONDS: float = 0.4

    # Scheduling
    SCHEDULER_ENABLED: bool = True
    SCRAPE_INTERVAL_MINUTES: int = 5
    PROGRESS_CLEAR_DELAY_SECONDS: float = 3.0

    # Frontend
    FRONTEND_URL: str = "http://localhost:3000"

    @field_validator("RETRY_ATTEMPTS")
    @classmethod
    def check_retry_attempts(cls, value: int) -> int:
        """Retry count can be zero but never negative."""
        if value < 0:
            raise ValueError("RETRY_ATTEMPTS must be >= 0")
        return value

    @field_validator("LOG_LEVEL")
    @classmethod
    def upper_log_level(cls, value: str) -> str:
        return value.upper()

    def get_vendor(self, identifier: str) -> Optional[VendorConfig]:
        """Look up a configured vendor by slug or display name.

        Args:
            identifier: Vendor slug ("moro") or name ("Moro"), case-insensitive

        Returns:
            VendorConfig or None if not configured
        """
        wanted = identifier.strip().lower()
        for vendor in self.VENDORS:
            if vendor.slug.lower() == wanted or vendor.name.lower() == wanted:
                return vendor
        return None


settings = Settings()
