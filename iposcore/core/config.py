from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

CHITTORGARH_BASE = "https://www.chittorgarh.com"


class Settings(BaseSettings):
    """Runtime configuration, overridable with IPOSCORE_* environment variables."""

    model_config = SettingsConfigDict(env_prefix="IPOSCORE_", env_file=".env", extra="ignore")

    PROJECT_NAME: str = "IPO Score"
    BASE_URL: str = CHITTORGARH_BASE

    # Tried in order; the first source yielding rows wins.
    LISTING_URLS: List[str] = [
        f"{CHITTORGARH_BASE}/ipo/ipo_dashboard.asp",
        f"{CHITTORGARH_BASE}/report/ipo-in-india-list-main-board-sme/82/mainboard/?year=2025",
    ]
    GMP_URLS: List[str] = [
        f"{CHITTORGARH_BASE}/report/grey-market-premium-upcoming-ipo-mainboard/104/",
        f"{CHITTORGARH_BASE}/report/ipo-grey-market-premium-latest-mainboard-sme/90/",
    ]

    REQUEST_TIMEOUT: float = 30.0
    FETCH_BACKEND: str = "requests"  # "requests" or "browser"
    USE_HTML_CACHE: bool = False
    HTML_CACHE_DIR: str = "html_temp"

    LOG_LEVEL: str = "INFO"
    SYNTHETIC_SEED: Optional[int] = None


settings = Settings()
