"""Pydantic configuration models for carefeed."""

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from care.generator import Horizons


class PathsConfig(BaseModel):
    """File paths configuration."""

    people_file: Path = Path("~/carefeed/people.yaml")
    relationships_file: Path = Path("~/carefeed/relationships.yaml")
    state_db: Path = Path("~/carefeed/state.db")

    @model_validator(mode="after")
    def expand_paths(self):
        """Expand ~ in all paths."""
        self.people_file = self.people_file.expanduser()
        self.relationships_file = self.relationships_file.expanduser()
        self.state_db = self.state_db.expanduser()
        return self


class HorizonsConfig(BaseModel):
    """How far ahead (days) each kind of card is surfaced."""

    moments: int = 21
    kids: int = 21
    holidays: int = 21
    school: int = 60
    calendar_scan: int = 370

    @field_validator("moments", "kids", "holidays", "school")
    @classmethod
    def validate_horizon(cls, v: int) -> int:
        if v < 0:
            raise ValueError(f"Horizon must be >= 0, got {v}")
        return v

    @field_validator("calendar_scan")
    @classmethod
    def validate_scan(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"calendar_scan must be >= 1, got {v}")
        return v


class FeedConfig(BaseModel):
    """Visible feed behaviour."""

    question_cooldown_days: int = 7
    default_snooze_days: int = 3

    @field_validator("question_cooldown_days", "default_snooze_days")
    @classmethod
    def validate_days(cls, v: int) -> int:
        if v < 0:
            raise ValueError(f"Day count must be >= 0, got {v}")
        return v


VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    json_mode: bool = Field(default=False, alias="json")

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        v_upper = v.upper()
        if v_upper not in VALID_LOG_LEVELS:
            raise ValueError(f"Invalid log level: {v}. Must be one of {VALID_LOG_LEVELS}")
        return v_upper


class CareConfig(BaseModel):
    """Main configuration model."""

    paths: PathsConfig = Field(default_factory=PathsConfig)
    horizons: HorizonsConfig = Field(default_factory=HorizonsConfig)
    feed: FeedConfig = Field(default_factory=FeedConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    templates: dict[str, list[str]] = Field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict) -> "CareConfig":
        """Create config from a parsed YAML dict."""
        data = dict(data or {})
        if "paths" in data and isinstance(data["paths"], dict):
            data["paths"] = {
                k: Path(v) if isinstance(v, str) else v for k, v in data["paths"].items()
            }
        return cls.model_validate(data)

    def to_dict(self) -> dict:
        return self.model_dump(mode="python", by_alias=True)

    def to_horizons(self) -> Horizons:
        return Horizons(**self.horizons.model_dump())
