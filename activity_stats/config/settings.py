"""Application settings and configuration"""

from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Application
    APP_NAME: str = "Activity Stats"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False

    # GitHub API
    GITHUB_USERNAME: str = "octocat"
    GITHUB_TOKEN: Optional[str] = None
    GITHUB_API_BASE_URL: str = "https://api.github.com"

    # GitHub client resilience controls
    GITHUB_TIMEOUT_SECONDS: float = 30.0
    GITHUB_MAX_ATTEMPTS: int = 1  # 1 = no automatic retry
    GITHUB_BACKOFF_BASE_SECONDS: float = 1.0
    GITHUB_BACKOFF_MAX_SECONDS: float = 16.0

    # Live event feed pagination (the public events API caps retrievable history)
    EVENTS_PAGE_SIZE: int = 100
    EVENTS_MAX_PAGES: int = 3

    # Snapshot artifact location (URL takes priority over the local path)
    SNAPSHOT_URL: Optional[str] = None
    SNAPSHOT_PATH: Optional[str] = "public/data/github-contributions.json"

    # Reconciliation
    CONTRIBUTION_WINDOW_DAYS: int = 365
    RECONCILE_DEADLINE_SECONDS: Optional[float] = None
    RESULT_CACHE_TTL_SECONDS: float = 300.0

    USER_AGENT: str = "ActivityStats/1.0"

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"  # Ignore extra fields in .env


settings = Settings()
