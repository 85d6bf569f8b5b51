"""
Route Validator configuration loaded from the environment
"""

from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

# Get the package root directory path
ROOT_DIR = Path(__file__).parent.parent.parent.parent
ENV_FILE = ROOT_DIR / ".env"


class ValidatorSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(ENV_FILE),
        env_file_encoding="utf-8",
        env_prefix="ROUTE_VALIDATOR_",
        case_sensitive=False,
        extra="ignore",
    )

    # Service
    SERVICE_NAME: str = "route_validator"

    # Validation failure policy
    DEFAULT_STATUS_CODE: int = 400
    PROPAGATE_ERROR: bool = False

    # Logging
    LOG_LEVEL: str = "INFO"
    ENABLE_FILE_LOGGING: bool = False
    LOG_DIR: Optional[str] = None


# Create a singleton instance
_settings_instance: Optional[ValidatorSettings] = None


def get_settings() -> ValidatorSettings:
    """Get settings singleton instance"""
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = ValidatorSettings()
    return _settings_instance


def reset_settings() -> None:
    """Drop the cached settings so the next call re-reads the environment"""
    global _settings_instance
    _settings_instance = None
