"""
Application settings using Pydantic Settings.

Environment variables are loaded from .env file.
Adapters never read these directly: the pipeline turns them into an explicit
SourceConfig per upstream with ``settings.source_config(...)``.
"""
from datetime import date
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from accountability.config.constants import (
    CONGRESS_GOV_BASE_URL,
    CONGRESS_GOV_PAGE_SIZE,
    CURRENT_CONGRESS,
    FEC_BASE_URL,
    HTTP_TIMEOUT,
    PROPUBLICA_BASE_URL,
    PROPUBLICA_PAGE_SIZE,
    QUIVER_BASE_URL,
    QUIVER_PAGE_SIZE,
    RATE_LIMIT_DELAY,
    VOTEVIEW_BASE_URL,
)


class SourceConfig(BaseModel):
    """
    Everything one source adapter needs to talk to its upstream.

    Built once per adapter at construction time, so tests can hand an adapter
    a fixture config without touching the environment.
    """
    base_url: str
    api_key: Optional[SecretStr] = None
    congress: int = CURRENT_CONGRESS
    page_size: int = Field(default=250, gt=0)
    timeout: float = Field(default=HTTP_TIMEOUT, gt=0)
    rate_limit_delay: float = Field(default=RATE_LIMIT_DELAY, ge=0)

    def credential(self) -> Optional[str]:
        """Return the raw credential, or None when absent or blank."""
        if self.api_key is None:
            return None
        value = self.api_key.get_secret_value().strip()
        return value or None


class Settings(BaseSettings):
    """
    Application configuration loaded from environment variables.

    Create a .env file in the project root with these values.
    """
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # ========================================================================
    # External APIs
    # ========================================================================

    # Congress.gov API (get key at: https://api.congress.gov/sign-up/)
    CONGRESS_GOV_API_KEY: Optional[SecretStr] = None

    # ProPublica Congress API (free, 5000 requests/day)
    PROPUBLICA_API_KEY: Optional[SecretStr] = None

    # Quiver Quant API (paid)
    QUIVER_API_KEY: Optional[SecretStr] = None

    # FEC OpenFEC API (get key at: https://api.data.gov/signup/)
    FEC_API_KEY: Optional[SecretStr] = None

    CONGRESS_GOV_BASE_URL: str = CONGRESS_GOV_BASE_URL
    PROPUBLICA_BASE_URL: str = PROPUBLICA_BASE_URL
    QUIVER_BASE_URL: str = QUIVER_BASE_URL
    VOTEVIEW_BASE_URL: str = VOTEVIEW_BASE_URL
    FEC_BASE_URL: str = FEC_BASE_URL

    # ========================================================================
    # Sessions
    # ========================================================================
    CURRENT_CONGRESS: int = CURRENT_CONGRESS

    # These default to CURRENT_CONGRESS; keep them in sync with it unless you
    # deliberately want a prior session from one source
    VOTEVIEW_CONGRESS: Optional[int] = None
    PROPUBLICA_CONGRESS: Optional[int] = None

    # FEC cycle for campaign totals (None = the cycle that elected CURRENT_CONGRESS)
    FEC_CYCLE: Optional[int] = None

    # ========================================================================
    # Pipeline
    # ========================================================================
    DATA_DIR: Path = Path("data")
    HTTP_TIMEOUT: float = HTTP_TIMEOUT
    RATE_LIMIT_DELAY: float = RATE_LIMIT_DELAY

    # "continue" = skip a failed source, "abort" = fail the whole run
    FAILURE_POLICY: str = "continue"

    # Lower bound for the bulk trades fetch (None = everything)
    TRADES_SINCE: Optional[date] = None

    # ========================================================================
    # Logging
    # ========================================================================
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    # ========================================================================
    # Application
    # ========================================================================
    APP_NAME: str = "Accountability Pipeline"
    APP_VERSION: str = "0.1.0"

    @property
    def voteview_congress(self) -> int:
        return self.VOTEVIEW_CONGRESS or self.CURRENT_CONGRESS

    @property
    def propublica_congress(self) -> int:
        return self.PROPUBLICA_CONGRESS or self.CURRENT_CONGRESS

    def source_config(self, source: str) -> SourceConfig:
        """
        Build the SourceConfig for one upstream.

        Args:
            source: One of "congress_gov", "propublica", "quiver", "voteview", "fec"

        Returns:
            SourceConfig with base URL, credential, congress and paging values
        """
        common = {
            "timeout": self.HTTP_TIMEOUT,
            "rate_limit_delay": self.RATE_LIMIT_DELAY,
        }
        if source == "congress_gov":
            return SourceConfig(
                base_url=self.CONGRESS_GOV_BASE_URL,
                api_key=self.CONGRESS_GOV_API_KEY,
                congress=self.CURRENT_CONGRESS,
                page_size=CONGRESS_GOV_PAGE_SIZE,
                **common,
            )
        if source == "propublica":
            return SourceConfig(
                base_url=self.PROPUBLICA_BASE_URL,
                api_key=self.PROPUBLICA_API_KEY,
                congress=self.propublica_congress,
                page_size=PROPUBLICA_PAGE_SIZE,
                **common,
            )
        if source == "quiver":
            return SourceConfig(
                base_url=self.QUIVER_BASE_URL,
                api_key=self.QUIVER_API_KEY,
                congress=self.CURRENT_CONGRESS,
                page_size=QUIVER_PAGE_SIZE,
                **common,
            )
        if source == "voteview":
            return SourceConfig(
                base_url=self.VOTEVIEW_BASE_URL,
                congress=self.voteview_congress,
                **common,
            )
        if source == "fec":
            return SourceConfig(
                base_url=self.FEC_BASE_URL,
                api_key=self.FEC_API_KEY,
                congress=self.CURRENT_CONGRESS,
                **common,
            )
        raise ValueError(f"Unknown source: {source}")


# Singleton instance
settings = Settings()
