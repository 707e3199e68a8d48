from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./league.db"
    SECRET_KEY: str = "YOUR_SECRET_KEY_HERE"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    # Required to create admin accounts. Left unset, admin signup is a configuration error.
    ADMIN_SIGNUP_KEY: Optional[str] = None

    LOG_LEVEL: str = "INFO"
    ENVIRONMENT: str = "development"  # "development" or "production"
    ALLOWED_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:5000"]

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @property
    def is_development(self) -> bool:
        return self.ENVIRONMENT.lower() == "development"


settings = Settings()
