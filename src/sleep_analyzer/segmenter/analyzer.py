"""
Sleep period segmentation.

Raw samples arrive as short stage-labelled intervals with no gaps while the
subject sleeps. Adjacent samples are merged into one period until the silence
between two samples exceeds the gap tolerance; stage changes inside a session
never split it.
"""

from collections.abc import Sequence
from datetime import datetime, timedelta

from aws_lambda_powertools import Logger

from sleep_analyzer.common.models import (
    SampleModel,
    SleepPeriodModel,
    SleepStage,
    SleepSummaryModel,
    validate_samples,
)

logger = Logger()

DEFAULT_GAP_TOLERANCE = timedelta(minutes=30)
DEFAULT_MIN_SLEEP_DURATION = timedelta(minutes=30)


def analyze_sleep_periods(
    samples: Sequence[SampleModel],
    gap_tolerance: timedelta = DEFAULT_GAP_TOLERANCE,
    min_sleep_duration: timedelta = DEFAULT_MIN_SLEEP_DURATION,
) -> list[SleepPeriodModel]:
    """Merge samples into sleep periods.

    Samples are stably sorted by start. A period closes at a sample's end when
    the next sample starts more than ``gap_tolerance`` later, and at the last
    sample's end otherwise. Periods shorter than ``min_sleep_duration`` are
    dropped. Each period keeps the stage of the sample that opened it.
    """
    validate_samples(samples)
    ordered = sorted(samples, key=lambda s: s.start)

    periods: list[SleepPeriodModel] = []
    current: tuple[datetime, SleepStage] | None = None

    for index, sample in enumerate(ordered):
        if current is None:
            current = (sample.start, sample.stage)

        is_last = index == len(ordered) - 1
        gap = timedelta(0) if is_last else ordered[index + 1].start - sample.end

        if gap > gap_tolerance:
            _close_period(periods, current, sample.end, min_sleep_duration)
            current = None

    if current is not None:
        _close_period(periods, current, ordered[-1].end, min_sleep_duration)

    return periods


def _close_period(
    periods: list[SleepPeriodModel],
    opened: tuple[datetime, SleepStage],
    end: datetime,
    min_sleep_duration: timedelta,
) -> None:
    start, stage = opened
    if end > start and end - start >= min_sleep_duration:
        periods.append(SleepPeriodModel(start=start, end=end, stage=stage))
        return
    logger.debug(
        "sleep period below minimum duration dropped",
        start=start.isoformat(),
        duration_s=(end - start).total_seconds(),
    )


def get_sleep_summary(periods: Sequence[SleepPeriodModel]) -> SleepSummaryModel:
    """Earliest period start and the end of the latest-starting period."""
    if not periods:
        return SleepSummaryModel.empty()

    ordered = sorted(periods, key=lambda p: p.start)
    return SleepSummaryModel.spanning(ordered[0].start, ordered[-1].end)
