import json
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator
from typing import Optional, List, Dict
from datetime import timedelta

class Settings(BaseSettings):
    # Application Settings
    APP_NAME: str = "Daycare Management System"
    VERSION: str = "1.0.0"
    DEBUG: bool = Field(default=False)

    # Database Settings
    DATABASE_URL: str = Field(default="sqlite+aiosqlite:///./daycare.db")
    DATABASE_ECHO: bool = Field(default=False)

    # Authentication Settings
    SECRET_KEY: str = Field(default="change-me-daycare-development-secret-key")
    ALGORITHM: str = Field(default="HS256")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(default=30)
    TOKEN_ISSUER: str = Field(default="daycare_backend")

    # CORS Settings
    ALLOWED_ORIGINS: List[str] = Field(
        default=[
            "http://localhost:5173",
            "http://127.0.0.1:5173",
            "http://localhost:3000",
            "http://127.0.0.1:3000"
        ]
    )

    # Logging Settings
    LOG_LEVEL: str = Field(default="INFO")
    LOG_DIR: Optional[str] = Field(default=None)
    LOG_TO_FILE: bool = Field(default=False)

    # Pagination Settings
    USERS_PAGE_SIZE: int = Field(default=10)
    CHILDREN_PAGE_SIZE: int = Field(default=10)
    ACTIVITIES_PAGE_SIZE: int = Field(default=20)
    FINANCE_PAGE_SIZE: int = Field(default=10)
    MESSAGES_PAGE_SIZE: int = Field(default=20)
    CALENDAR_PAGE_SIZE: int = Field(default=20)
    INVENTORY_PAGE_SIZE: int = Field(default=20)
    PROGRESS_PAGE_SIZE: int = Field(default=10)
    MAX_PAGE_SIZE: int = Field(default=100)

    UPCOMING_EVENTS_LIMIT: int = Field(default=10)

    @field_validator('ALLOWED_ORIGINS', mode='before')
    @classmethod
    def parse_allowed_origins(cls, v):
        if isinstance(v, str):
            try:
                return json.loads(v)
            except json.JSONDecodeError:
                return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    @field_validator('LOG_LEVEL')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Invalid log level: {v}")
        return level

    @field_validator('MAX_PAGE_SIZE')
    @classmethod
    def validate_max_page_size(cls, v: int) -> int:
        if v < 1:
            raise ValueError("MAX_PAGE_SIZE must be at least 1")
        return v

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=True
    )

# Initialize settings
settings = Settings()

# Helper Functions
def get_token_expires_delta(minutes: Optional[int] = None) -> timedelta:
    if minutes is None:
        minutes = settings.ACCESS_TOKEN_EXPIRE_MINUTES
    return timedelta(minutes=minutes)

def get_database_url() -> str:
    return settings.DATABASE_URL

def get_jwt_settings() -> dict:
    return {
        "secret_key": settings.SECRET_KEY,
        "algorithm": settings.ALGORITHM,
        "access_token_expire_minutes": settings.ACCESS_TOKEN_EXPIRE_MINUTES,
        "token_issuer": settings.TOKEN_ISSUER
    }

def get_logging_config() -> Dict[str, Optional[str]]:
    return {
        "log_level": settings.LOG_LEVEL,
        "log_dir": settings.LOG_DIR,
        "log_to_file": settings.LOG_TO_FILE
    }

def get_page_sizes() -> Dict[str, int]:
    return {
        "user": settings.USERS_PAGE_SIZE,
        "child": settings.CHILDREN_PAGE_SIZE,
        "activity": settings.ACTIVITIES_PAGE_SIZE,
        "transaction": settings.FINANCE_PAGE_SIZE,
        "message": settings.MESSAGES_PAGE_SIZE,
        "calendar_event": settings.CALENDAR_PAGE_SIZE,
        "inventory_item": settings.INVENTORY_PAGE_SIZE,
        "progress_report": settings.PROGRESS_PAGE_SIZE,
    }
