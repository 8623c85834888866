"""Configuration management for the document model."""

from typing import Literal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Logging
    log_level: str = "INFO"

    # Confidence aggregation used when a caller passes no method
    aggregation_method: Literal["min", "max", "mean"] = "mean"

    # Forms
    field_search_threshold: float = 80.0

    # Rendering
    cell_separator: str = " | "

    class Config:
        env_prefix = "DOCMODEL_"
        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()
