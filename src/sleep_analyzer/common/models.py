from collections.abc import Iterable
from datetime import UTC, date, datetime
from enum import StrEnum
from typing import Final

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator

from .errors import InvalidSampleError


class SleepStage(StrEnum):
    IN_BED = "InBed"
    ASLEEP_CORE = "AsleepCore"
    ASLEEP_DEEP = "AsleepDeep"
    ASLEEP_REM = "AsleepREM"
    AWAKE = "Awake"
    UNKNOWN = "Unknown"


class EfficiencyBand(StrEnum):
    LOW = "low"
    FAIR = "fair"
    GOOD = "good"
    EXCELLENT = "excellent"


STAGE_LABELS: Final[dict[SleepStage, str]] = {
    SleepStage.IN_BED: "In Bed",
    SleepStage.ASLEEP_CORE: "Core Sleep",
    SleepStage.ASLEEP_DEEP: "Deep Sleep",
    SleepStage.ASLEEP_REM: "REM Sleep",
    SleepStage.AWAKE: "Awake",
    SleepStage.UNKNOWN: "Unknown",
}


def stage_label(stage: SleepStage) -> str:
    return STAGE_LABELS.get(stage, STAGE_LABELS[SleepStage.UNKNOWN])


def _assume_utc(value: datetime) -> datetime:
    # Naive instants are read as UTC so every instant stays comparable
    return value.replace(tzinfo=UTC) if value.tzinfo is None else value


class SampleModel(BaseModel):
    """One raw interval with a sleep-stage label. ``end`` is exclusive."""

    model_config = ConfigDict(frozen=True)

    start: datetime
    end: datetime
    stage: SleepStage
    source_id: str = Field(default="", validation_alias=AliasChoices("source_id", "sourceId"))

    @field_validator("start", "end")
    @classmethod
    def _aware_bounds(cls, value: datetime) -> datetime:
        return _assume_utc(value)

    @property
    def duration_s(self) -> float:
        return (self.end - self.start).total_seconds()


def validate_samples(samples: Iterable[SampleModel]) -> None:
    for sample in samples:
        if sample.end < sample.start:
            raise InvalidSampleError(
                f"sample ends before it starts: {sample.start.isoformat()} > {sample.end.isoformat()}",
                sample=sample,
            )


class SleepPeriodModel(BaseModel):
    model_config = ConfigDict(frozen=True)

    start: datetime
    end: datetime
    # Stage of the sample that opened the period
    stage: SleepStage

    @field_validator("start", "end")
    @classmethod
    def _aware_bounds(cls, value: datetime) -> datetime:
        return _assume_utc(value)

    @property
    def duration_s(self) -> float:
        return (self.end - self.start).total_seconds()


class SleepSummaryModel(BaseModel):
    """Sleep start / wake time pair. Both are set, or neither is."""

    model_config = ConfigDict(frozen=True)

    sleep_start: datetime | None = None
    wake_time: datetime | None = None

    @model_validator(mode="after")
    def _both_or_neither(self) -> "SleepSummaryModel":
        if (self.sleep_start is None) != (self.wake_time is None):
            raise ValueError("sleep_start and wake_time must both be set or both be empty")
        return self

    @classmethod
    def empty(cls) -> "SleepSummaryModel":
        return cls()

    @classmethod
    def spanning(cls, sleep_start: datetime, wake_time: datetime) -> "SleepSummaryModel":
        return cls(sleep_start=sleep_start, wake_time=wake_time)

    @property
    def present(self) -> bool:
        return self.sleep_start is not None and self.wake_time is not None


class StageTotalsModel(BaseModel):
    """Seconds accumulated per stage bucket plus the number of awake samples."""

    in_bed: float = 0.0
    core: float = 0.0
    deep: float = 0.0
    rem: float = 0.0
    awake: float = 0.0
    awakenings: int = 0

    def as_mapping(self) -> dict[SleepStage, float]:
        return {
            SleepStage.IN_BED: self.in_bed,
            SleepStage.ASLEEP_CORE: self.core,
            SleepStage.ASLEEP_DEEP: self.deep,
            SleepStage.ASLEEP_REM: self.rem,
            SleepStage.AWAKE: self.awake,
        }


class DailySleepReportModel(BaseModel):
    day: date
    sleep_start: datetime | None = None
    wake_time: datetime | None = None
    periods: list[SleepPeriodModel] = Field(default_factory=list)
    totals: StageTotalsModel
    total_sleep_s: float
    total_sleep_hours: float
    efficiency: float | None = None
    efficiency_band: EfficiencyBand | None = None
    durations: dict[str, str] = Field(default_factory=dict)
