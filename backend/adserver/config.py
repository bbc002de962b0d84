from pydantic_settings import BaseSettings
from pydantic import validator
from typing import List

class Settings(BaseSettings):
    # Application
    APP_NAME: str = "Ad Server"
    APP_ENV: str = "development"
    ENABLE_API_DOCS: bool = True
    HOST: str = "0.0.0.0"
    PORT: int = 8080

    # Database
    DATABASE_URL: str = "sqlite:///./ads.db"
    DB_TIMEOUT_SECONDS: int = 5
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 20

    # Targeting
    CANDIDATE_POOL_LIMIT: int = 1000  # upper bound on ads scanned per selection

    # Security - static bearer token for admin routes
    API_TOKEN: str = ""

    # CORS
    CORS_ORIGINS: str = "*"

    @property
    def origins_list(self) -> List[str]:
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    # Rate limiting (public routes)
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_DEFAULT: str = "600/minute"
    RATE_LIMIT_STORAGE_URI: str = "memory://"

    # Seed data
    PRELOAD_ENABLED: bool = True
    PRELOAD_CAMPAIGNS_FILE: str = "campaigns.json"
    PRELOAD_ADS_FILE: str = "ads.json"
    PRELOAD_EVENTS_FILE: str = "impressions.json"

    # Logging
    LOG_LEVEL: str = "INFO"

    @validator("CANDIDATE_POOL_LIMIT")
    def validate_pool_limit(cls, v):
        if v < 1:
            raise ValueError("CANDIDATE_POOL_LIMIT must be at least 1")
        return v

    @validator("DB_TIMEOUT_SECONDS")
    def validate_timeout(cls, v):
        if v <= 0:
            raise ValueError("DB_TIMEOUT_SECONDS must be positive")
        return v

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "allow"

# Create settings instance
settings = Settings()
