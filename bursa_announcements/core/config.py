import os
from typing import Optional

class Settings:
    # Server
    HOST: str = os.getenv("HOST", "0.0.0.0")
    BASE_PORT: int = int(os.getenv("BASE_PORT", "8888"))
    PORT_RETRIES: int = int(os.getenv("PORT_RETRIES", "10"))

    # Logging
    LOG_PATH: str = os.getenv("LOG_PATH", "logs/server.log")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Source selection: "markup" scrapes the listing page, "api" pages the search API
    SOURCE_STRATEGY: str = os.getenv("SOURCE_STRATEGY", "markup").lower()
    SITE_ORIGIN: str = os.getenv("SITE_ORIGIN", "https://www.bursamalaysia.com")
    ANNOUNCEMENTS_URL: str = os.getenv(
        "ANNOUNCEMENTS_URL",
        "https://www.bursamalaysia.com/market_information/announcements/company_announcement",
    )
    API_SEARCH_URL: str = os.getenv(
        "API_SEARCH_URL", "https://www.bursamalaysia.com/api/v1/announcements/search"
    )
    API_PER_PAGE: int = int(os.getenv("API_PER_PAGE", "200"))
    API_MAX_PAGES: int = int(os.getenv("API_MAX_PAGES", "100"))
    MAX_RECORDS: int = int(os.getenv("MAX_RECORDS", "50"))

    # Fetching
    FETCH_ATTEMPTS: int = int(os.getenv("FETCH_ATTEMPTS", "3"))
    BACKOFF_BASE_SECONDS: float = float(os.getenv("BACKOFF_BASE_SECONDS", "1.0"))
    CONNECT_TIMEOUT: float = float(os.getenv("CONNECT_TIMEOUT", "10"))
    TRANSFER_TIMEOUT: float = float(os.getenv("TRANSFER_TIMEOUT", "30"))
    MAX_REDIRECTS: int = int(os.getenv("MAX_REDIRECTS", "5"))
    MAX_BUFFER_BYTES: int = int(os.getenv("MAX_BUFFER_BYTES", str(10 * 1024 * 1024)))
    USER_AGENT: str = os.getenv(
        "USER_AGENT",
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    )
    # Some edge protections only let a browser session cookie through
    SOURCE_COOKIE: Optional[str] = os.getenv("SOURCE_COOKIE")

settings = Settings()
