"""Configuration management for the KidCreatives workflow service."""

import os
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from dotenv import load_dotenv

from .errors import ConfigurationError
from .logger import get_logger

logger = get_logger(__name__)

# Load environment variables
load_dotenv()

DEFAULT_MODELS_PATH = Path("config/models.yaml")


class Config(BaseModel):
    """Main application configuration."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    # API Keys
    gemini_api_key: str = Field(..., alias="GEMINI_API_KEY")
    gemini_base_url: str = Field(
        default="https://generativelanguage.googleapis.com/v1beta",
        alias="GEMINI_BASE_URL",
    )

    # Application Settings
    app_env: str = Field(default="development", alias="APP_ENV")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Model Configuration (config/models.yaml)
    text_model: str = "gemini-2.5-flash"
    image_model: str = "gemini-2.5-flash-image"

    # Workflow
    question_count: int = Field(default=4, ge=0)
    default_mime_type: str = "image/jpeg"
    default_output_mime_type: str = "image/png"

    @field_validator("gemini_api_key")
    @classmethod
    def _require_api_key(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("GEMINI_API_KEY is required but not set")
        return value.strip()


# Global config instance
_config: Optional[Config] = None


def load_config(models_path: Path = DEFAULT_MODELS_PATH) -> Config:
    """
    Load configuration from environment and the models YAML file.

    Args:
        models_path: Path to models.yaml

    Returns:
        Config instance

    Raises:
        ConfigurationError: If configuration is missing or invalid
    """
    global _config

    models_path = Path(models_path)
    if not models_path.exists():
        raise ConfigurationError(f"models.yaml not found at {models_path}")

    try:
        with open(models_path, "r", encoding="utf-8") as f:
            models_config = yaml.safe_load(f) or {}

        config_data = {
            **os.environ,
            **models_config,
        }

        _config = Config(**config_data)

    except (ValidationError, yaml.YAMLError, TypeError) as e:
        raise ConfigurationError(f"Failed to load configuration: {e}") from e

    logger.info(
        "Configuration loaded successfully",
        extra={
            "environment": _config.app_env,
            "text_model": _config.text_model,
            "image_model": _config.image_model,
        }
    )

    return _config


def get_config() -> Config:
    """
    Get the current configuration instance.

    Returns:
        Config instance

    Raises:
        ConfigurationError: If config not loaded
    """
    if _config is None:
        raise ConfigurationError("Configuration not loaded. Call load_config() first.")
    return _config
