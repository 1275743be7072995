from collections.abc import Iterable, Mapping
from datetime import date, tzinfo
from typing import Any, Final

from aws_lambda_powertools import Logger

from sleep_analyzer.common.errors import InvalidSampleError
from sleep_analyzer.common.models import SampleModel, SleepStage
from sleep_analyzer.common.timeutil import day_window, parse_time_utc

logger = Logger()

# HKCategoryValueSleepAnalysis raw values
HEALTHKIT_VALUE_TO_STAGE: Final[dict[int, SleepStage]] = {
    0: SleepStage.IN_BED,
    1: SleepStage.UNKNOWN,  # asleepUnspecified
    2: SleepStage.AWAKE,
    3: SleepStage.ASLEEP_CORE,
    4: SleepStage.ASLEEP_DEEP,
    5: SleepStage.ASLEEP_REM,
}

HEALTHKIT_IDENTIFIER_PREFIX: Final[str] = "HKCategoryValueSleepAnalysis"

_NAME_TO_STAGE: Final[dict[str, SleepStage]] = {
    **{stage.value.lower(): stage for stage in SleepStage},
    "asleepunspecified": SleepStage.UNKNOWN,
    "asleep": SleepStage.UNKNOWN,
}

START_KEYS: Final[tuple[str, ...]] = ("start", "startDate", "start_date")
END_KEYS: Final[tuple[str, ...]] = ("end", "endDate", "end_date")
STAGE_KEYS: Final[tuple[str, ...]] = ("stage", "value")
SOURCE_KEYS: Final[tuple[str, ...]] = ("sourceId", "source_id", "bundleIdentifier", "source")


def stage_from_raw(raw: Any) -> SleepStage:
    """Map a raw stage value (HealthKit code, identifier or stage name) to a SleepStage."""
    if isinstance(raw, SleepStage):
        return raw
    if isinstance(raw, int) and not isinstance(raw, bool):
        stage = HEALTHKIT_VALUE_TO_STAGE.get(raw)
    elif isinstance(raw, str):
        name = raw.strip()
        if name.isdigit():
            return stage_from_raw(int(name))
        name = name.removeprefix(HEALTHKIT_IDENTIFIER_PREFIX)
        stage = _NAME_TO_STAGE.get(name.lower())
    else:
        stage = None

    if stage is None:
        logger.warning("unmapped sleep stage value", value=repr(raw))
        return SleepStage.UNKNOWN
    return stage


def _first(record: Mapping[str, Any], keys: tuple[str, ...]) -> Any:
    for key in keys:
        if record.get(key) is not None:
            return record[key]
    return None


def sample_from_record(record: Mapping[str, Any]) -> SampleModel:
    raw_start = _first(record, START_KEYS)
    raw_end = _first(record, END_KEYS)
    if raw_start is None or raw_end is None:
        raise InvalidSampleError("record is missing a start or end time", sample=dict(record))
    try:
        start = parse_time_utc(raw_start)
        end = parse_time_utc(raw_end)
    except (TypeError, ValueError) as e:
        raise InvalidSampleError(f"record has an unparseable time: {e}", sample=dict(record)) from e

    if end < start:
        raise InvalidSampleError(
            f"sample ends before it starts: {start.isoformat()} > {end.isoformat()}",
            sample=dict(record),
        )

    source = _first(record, SOURCE_KEYS)
    return SampleModel(
        start=start,
        end=end,
        stage=stage_from_raw(_first(record, STAGE_KEYS)),
        source_id="" if source is None else str(source),
    )


def samples_from_records(records: Iterable[Mapping[str, Any]]) -> list[SampleModel]:
    return [sample_from_record(r) for r in records]


def samples_for_day(samples: Iterable[SampleModel], day: date, tz: tzinfo) -> list[SampleModel]:
    """Samples starting within ``day`` in the given local timezone."""
    window_start, window_end = day_window(day, tz)
    return [s for s in samples if window_start <= s.start < window_end]
