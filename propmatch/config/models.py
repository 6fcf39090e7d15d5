"""Configuration schema models using Pydantic."""

from enum import Enum

from pydantic import BaseModel, Field, model_validator


class LogLevel(str, Enum):
    """Logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogFormat(str, Enum):
    """Log output formats."""

    JSON = "json"
    KEY_VALUE = "key-value"


class MatchingConfig(BaseModel):
    """Tunable constants of the scoring algorithm."""

    budget_flexibility: float = Field(
        0.10,
        ge=0.0,
        le=1.0,
        description="Decay window above max budget, as a fraction of max budget",
    )
    area_room_window: float = Field(
        0.10,
        ge=0.0,
        le=1.0,
        description="Decay window outside area/room ranges, as a fraction of the range width",
    )
    state_match_score: int = Field(
        50, ge=0, le=100, description="Location score for a same-state/region match"
    )
    postal_code_proximity: int = Field(
        50,
        ge=0,
        le=99999,
        description="Max numeric distance between postal codes scored as the same region",
    )
    type_weight: float = Field(
        0.05,
        ge=0.0,
        lt=1.0,
        description="Fixed internal weight of the type category in the aggregate score",
    )
    reverse_budget_window: float = Field(
        0.10,
        ge=0.0,
        le=1.0,
        description="Half-width of the budget window derived from a property's price",
    )
    max_workers: int = Field(
        1, ge=1, le=64, description="Thread pool size for scoring (1 = sequential)"
    )
    parallel_threshold: int = Field(
        200, ge=1, description="Minimum candidate count before scoring fans out to the pool"
    )


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: LogLevel = Field(LogLevel.INFO, description="Log level")
    format: LogFormat = Field(
        LogFormat.KEY_VALUE, description="Log output format (json or key-value)"
    )

    model_config = {"use_enum_values": True}


class AppConfig(BaseModel):
    """Root configuration object for the matching service."""

    matching: MatchingConfig = Field(
        default_factory=MatchingConfig, description="Scoring algorithm settings"
    )
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig, description="Logging configuration"
    )

    @model_validator(mode="after")
    def validate_parallelism(self):
        """A pool larger than one worker only makes sense with a reachable threshold."""
        if self.matching.max_workers > 1 and self.matching.parallel_threshold < 2:
            raise ValueError(
                "matching.parallel_threshold must be at least 2 when max_workers > 1"
            )
        return self
