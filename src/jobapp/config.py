from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


PRODUCTION_API_URL = "https://jobappdemo.pythonanywhere.com/api/v1"
DEVELOPMENT_API_URL = "http://localhost:8000/api/v1"

load_dotenv()


class Settings(BaseSettings):
    """
    Centralized runtime configuration for the job marketplace client.
    All defaults are sensible for dev-mode; ops override via JOBAPP_* ENV.
    """

    model_config = SettingsConfigDict(
        env_prefix="JOBAPP_",
        env_file=".env",
        extra="ignore",
    )

    # --- API ---
    api_url: Optional[str] = None
    environment: str = "development"
    request_timeout: int = Field(default=30, gt=0)

    # --- Token storage ---
    token_db_path: Optional[str] = None

    # --- Logging ---
    log_level: str = "INFO"
    log_dir: Optional[str] = None

    # --- Work sessions ---
    clock_in_early_minutes: int = Field(default=30, ge=0)
    default_currency: str = "MYR"

    # Kuala Lumpur
    default_latitude: float = 3.139003
    default_longitude: float = 101.686855

    @property
    def base_url(self) -> str:
        """Resolve the API base URL: explicit override, then production, then dev host."""
        if self.api_url:
            return self.api_url.rstrip("/")
        if self.environment.lower() == "production":
            return PRODUCTION_API_URL
        return DEVELOPMENT_API_URL


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the process-wide settings instance."""
    return Settings()
