"""Process settings for the credibility engine, read from PEERZERO_* environment variables."""

from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

LOG_LEVELS = ("TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL")


class Settings(BaseSettings):
    """
    Engine process settings.

    Scoring rules are not settings: they live in immutable rule sets and
    only the rule set *name* is chosen here.

    Attributes:
        log_level: Minimum level for both loguru and structlog output
        log_format: "json" (default) or "console" for colourised TTY output
        ruleset: Name of the engine rule set (launch or rebalance_v3)
        persistence_dir: Directory for store JSON files and the engine log;
            memory-only when unset
    """

    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="json", description="Log output format: json or console")
    ruleset: str = Field(default="rebalance_v3", description="Engine rule set name")
    persistence_dir: Optional[str] = Field(
        default=None,
        description="Directory for store JSON persistence (memory-only when unset)",
    )

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        value = value.upper()
        if value not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}")
        return value

    @field_validator("ruleset", "log_format")
    @classmethod
    def _lowercase(cls, value: str) -> str:
        return value.strip().lower()

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "env_prefix": "PEERZERO_",
    }


# Singleton instance - import this throughout the application
settings = Settings()
