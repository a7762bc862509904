"""ReleaseVault settings model.

Engine tuning knobs grouped by component. Values come from keyword
arguments, a TOML file (``Settings.from_toml_file``) or ``RELEASEVAULT_``
environment variables, e.g. ``RELEASEVAULT_MATCHER__MAX_FUZZY_DISTANCE=2``.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Literal

import toml
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

logger = logging.getLogger(__name__)

StrategyName = Literal["arr-pattern", "scene", "anime", "user-naming"]


class ParserSettings(BaseModel):
    """Parsing pipeline settings.

    Attributes:
        min_confidence: Confidence at which a strategy accepts a title
        future_year_tolerance: Years beyond the current year still accepted
        max_workers: Default worker count for bulk parsing (None = executor default)
        disabled_strategies: Strategies to skip; the fallback cannot be disabled
    """

    min_confidence: int = Field(default=50, ge=1, le=100)
    future_year_tolerance: int = Field(default=5, ge=0, le=50)
    max_workers: int | None = Field(default=None, ge=1)
    disabled_strategies: list[StrategyName] = Field(default_factory=list)


class MatcherSettings(BaseModel):
    """Title matcher settings.

    Attributes:
        enable_*: Toggle an individual matching strategy
        max_fuzzy_distance: Largest Levenshtein distance a fuzzy match may have
        min_year_similarity: Minimum scaled title similarity (0-80) for a
            year-disambiguation candidate
        max_concurrent_lookups: Releases looked up at the same time in bulk matching
        provider_rate_capacity: Token bucket size per provider
        provider_refill_rate: Requests per second per provider
    """

    enable_exact: bool = True
    enable_year_disambiguation: bool = True
    enable_fuzzy: bool = True
    enable_alias: bool = True
    enable_external_id: bool = True
    max_fuzzy_distance: int = Field(default=3, ge=1, le=20)
    min_year_similarity: int = Field(default=40, ge=0, le=80)
    max_concurrent_lookups: int = Field(default=4, ge=1, le=64)
    provider_rate_capacity: int = Field(default=10, ge=1)
    provider_refill_rate: float = Field(default=4.0, gt=0)


class ScoringSettings(BaseModel):
    """Scoring settings."""

    indexer_priority_baseline: int = Field(
        default=25,
        ge=1,
        le=50,
        description="Indexer term is baseline minus the indexer's priority",
    )


class LoggingSettings(BaseModel):
    """Logging settings applied by ``setup_structured_logger``."""

    level: str = Field(default="INFO", description="Log level name")
    file: str | None = Field(default=None, description="Optional JSON log file")
    use_rich_console: bool = True

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Validate the log level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid_levels:
            msg = f"Invalid log level: {v}. Must be one of {sorted(valid_levels)}"
            raise ValueError(msg)
        return v.upper()


class Settings(BaseSettings):
    """Top-level ReleaseVault settings."""

    model_config = SettingsConfigDict(
        env_prefix="RELEASEVAULT_",
        env_nested_delimiter="__",
        env_ignore_empty=True,
        extra="ignore",
    )

    parser: ParserSettings = Field(default_factory=ParserSettings)
    matcher: MatcherSettings = Field(default_factory=MatcherSettings)
    scoring: ScoringSettings = Field(default_factory=ScoringSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # environment first, so RELEASEVAULT_* beats values read from TOML
        return env_settings, init_settings, dotenv_settings, file_secret_settings

    @classmethod
    def from_toml_file(cls, file_path: str | Path) -> Settings:
        """Load settings from a TOML file with environment variable overrides.

        Raises:
            FileNotFoundError: If the file does not exist
        """
        file_path = Path(file_path)
        if not file_path.exists():
            msg = f"Configuration file not found: {file_path}"
            raise FileNotFoundError(msg)

        raw_config = toml.load(file_path)
        logger.debug("Loaded settings from %s", file_path)
        return cls(**raw_config)


__all__ = [
    "LoggingSettings",
    "MatcherSettings",
    "ParserSettings",
    "ScoringSettings",
    "Settings",
    "StrategyName",
]
