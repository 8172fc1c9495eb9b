"""Application settings and configuration"""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Application
    APP_NAME: str = "devfinder"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # GitHub API
    GITHUB_API_BASE_URL: str = "https://api.github.com"
    USER_AGENT: str = "devfinder/1.0"
    REQUEST_TIMEOUT_SECONDS: float = 10.0

    # Repository listing
    REPO_OWNER: str = "BboyAkers"
    REPOS_PER_PAGE: int = 150
    # Empty means offer the languages found in the fetched repositories
    FILTER_LANGUAGES: list[str] = []

    # Superseded lookups are always ignored; this also cancels their tasks
    CANCEL_SUPERSEDED_REQUESTS: bool = False

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"  # Ignore extra fields in .env


settings = Settings()
