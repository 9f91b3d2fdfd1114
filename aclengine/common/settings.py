from functools import lru_cache
from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .logger import VALID_LEVELS


class Settings(BaseSettings):
    # Configuration file
    config_path: Optional[str] = None

    # Logging
    log_level: str = "INFO"
    log_dir: str = "logs"
    file_logging: bool = False
    debug: bool = False

    @field_validator("log_level")
    @classmethod
    def check_log_level(cls, value: str) -> str:
        if value.upper() not in VALID_LEVELS:
            raise ValueError(f"log_level must be one of: {', '.join(VALID_LEVELS)}")
        return value.upper()

    @property
    def effective_log_level(self) -> str:
        return "DEBUG" if self.debug else self.log_level

    model_config = SettingsConfigDict(
        env_prefix="ACLENGINE_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore"  # Allow extra env vars without raising validation errors
    )


@lru_cache
def get_settings() -> Settings:
    return Settings()
