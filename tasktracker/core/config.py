from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List

class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )

    APP_ENV: str = "local"
    APP_NAME: str = "task-tracker"
    LOG_LEVEL: str = "INFO"

    DATABASE_URL: str
    # Creates missing tables from model metadata on startup (local runs only).
    DB_AUTO_CREATE: bool = False

    JWT_SECRET: str = "change_me_access"
    JWT_REFRESH_SECRET: str = "change_me_refresh"
    ACCESS_TOKEN_TTL_MINUTES: int = 15
    REFRESH_TOKEN_TTL_DAYS: int = 7
    REFRESH_COOKIE_NAME: str = "refreshToken"

    CORS_ORIGINS: str = "http://localhost:3000"

    PAGINATION_DEFAULT_LIMIT: int = 10
    PAGINATION_MAX_LIMIT: int = 50
    PAGINATION_MAX_SKIP: int = 2**63 - 1

    @property
    def cors_origins_list(self) -> List[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]

    @property
    def is_production(self) -> bool:
        return self.APP_ENV.strip().lower() in {"prod", "production"}

settings = Settings()
