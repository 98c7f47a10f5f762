
from __future__ import annotations
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_prefix="", extra="ignore")

    # BambooHR
    BAMBOOHR_BASE_URL: str = "https://api.bamboohr.com/api/gateway.php/{company_domain}/v1"
    HTTP_TIMEOUT: float = 20.0

    # Credentials are kept out of .env, in their own store
    SECRETS_FILE: str = ".clocker.env"

    # Sync
    REFRESH_INTERVAL_SECONDS: int = 60
    SCHEDULER_ENABLED: bool = True

    # Working hours used by the status view (local time)
    WORKDAY_START_HOUR: int = 8
    WORKDAY_END_HOUR: int = 18

    # Server
    CORS_ORIGINS: str = "http://localhost:3000"

    # Observability
    LOG_JSON: bool = False
    LOG_LEVEL: str = "INFO"

settings = Settings()
