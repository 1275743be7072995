import os
from datetime import timedelta, tzinfo
from enum import StrEnum
from typing import Final
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError, field_validator


class LogLevel(StrEnum):
    CRITICAL = "CRITICAL"
    ERROR = "ERROR"
    WARNING = "WARNING"
    INFO = "INFO"
    DEBUG = "DEBUG"


DEFAULT_TRUSTED_SOURCE_PREFIX: Final[str] = "com.apple.health"


def check_timezone(value: str) -> str:
    try:
        ZoneInfo(value)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ValueError(f"unknown timezone: {value}") from e
    return value


class Settings(BaseModel):
    gap_tolerance_minutes: float = Field(default=30, ge=0, validation_alias="GAP_TOLERANCE_MINUTES")
    min_sleep_duration_minutes: float = Field(default=30, ge=0, validation_alias="MIN_SLEEP_DURATION_MINUTES")
    # Empty prefix disables source filtering
    trusted_source_prefix: str = Field(
        default=DEFAULT_TRUSTED_SOURCE_PREFIX, validation_alias="TRUSTED_SOURCE_PREFIX"
    )
    timezone: str = Field(default="UTC", validation_alias="TIMEZONE")

    log_level: LogLevel = Field(default=LogLevel.INFO, validation_alias="LOG_LEVEL")

    @field_validator("timezone")
    @classmethod
    def _known_timezone(cls, value: str) -> str:
        return check_timezone(value)

    @property
    def gap_tolerance(self) -> timedelta:
        return timedelta(minutes=self.gap_tolerance_minutes)

    @property
    def min_sleep_duration(self) -> timedelta:
        return timedelta(minutes=self.min_sleep_duration_minutes)

    @property
    def tz(self) -> tzinfo:
        return ZoneInfo(self.timezone)


ENV_KEYS: Final[tuple[str, ...]] = (
    "GAP_TOLERANCE_MINUTES",
    "MIN_SLEEP_DURATION_MINUTES",
    "TRUSTED_SOURCE_PREFIX",
    "TIMEZONE",
    "LOG_LEVEL",
)


def load_settings() -> Settings:
    # Load .env if present (does nothing if file missing)
    load_dotenv()
    data: dict[str, str] = {}
    for key in ENV_KEYS:
        if key in os.environ:
            data[key] = os.environ[key]

    if "LOG_LEVEL" in data:
        data["LOG_LEVEL"] = data["LOG_LEVEL"].upper()

    try:
        return Settings.model_validate(data)
    except ValidationError as e:
        bad = sorted({str(err["loc"][0]) for err in e.errors() if err.get("loc")})
        raise RuntimeError(f"Invalid configuration: {', '.join(bad)}") from e
