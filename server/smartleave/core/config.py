from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator
from typing import List, Union
import json
from pathlib import Path


class Settings(BaseSettings):
    # Database
    DATABASE_URL: str
    DB_POOL_TIMEOUT_SECONDS: int = 10
    DB_COMMAND_TIMEOUT_SECONDS: int = 15

    # JWT (tokens are issued by the external auth service, only verified here)
    SECRET_KEY: str
    ALGORITHM: str = "HS256"

    # Environment / logging
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = str(Path(__file__).parent.parent.parent / "logs")

    # Leave engine
    DEFAULT_LEAVE_BALANCE: int = 30
    STORAGE_RETRY_AFTER_SECONDS: int = 2

    # CORS
    CORS_ORIGINS: Union[str, List[str]] = "http://localhost:5173"

    @field_validator('CORS_ORIGINS', mode='before')
    @classmethod
    def parse_cors_origins(cls, v):
        if isinstance(v, str):
            # Try to parse as JSON first
            try:
                parsed = json.loads(v)
                if isinstance(parsed, list):
                    return parsed
            except (json.JSONDecodeError, ValueError):
                pass
            # If not JSON, split by comma
            return [origin.strip() for origin in v.split(',') if origin.strip()]
        return v

    @field_validator('DEFAULT_LEAVE_BALANCE')
    @classmethod
    def validate_default_balance(cls, v: int) -> int:
        if v < 0:
            raise ValueError("DEFAULT_LEAVE_BALANCE cannot be negative")
        return v

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() in ("prod", "production")

    model_config = SettingsConfigDict(
        env_file=Path(__file__).parent.parent.parent / ".env",
        env_file_encoding='utf-8',
        case_sensitive=True,
        extra='ignore'  # Ignore extra environment variables (like POSTGRES_USER, POSTGRES_DB, etc.)
    )


settings = Settings()
