from collections.abc import Sequence
from datetime import date

from aws_lambda_powertools import Logger

from sleep_analyzer.aggregator.stages import (
    accept_all,
    aggregate_stages,
    efficiency_band,
    sleep_efficiency_percent,
    source_prefix_filter,
    total_sleep_seconds,
)
from sleep_analyzer.common.config import Settings
from sleep_analyzer.common.models import DailySleepReportModel, SampleModel, stage_label
from sleep_analyzer.common.timeutil import format_duration
from sleep_analyzer.ingest.records import samples_for_day
from sleep_analyzer.segmenter.analyzer import analyze_sleep_periods, get_sleep_summary

logger = Logger()


def build_daily_report(
    samples: Sequence[SampleModel],
    day: date,
    settings: Settings,
    source_prefix: str | None = None,
) -> DailySleepReportModel:
    """Aggregate and segment one day of samples into a report.

    Stage totals use only samples from the trusted source prefix so that
    overlapping devices are not double counted; periods are built from every
    sample of the day.
    """
    prefix = settings.trusted_source_prefix if source_prefix is None else source_prefix
    day_samples = samples_for_day(samples, day, settings.tz)

    totals = aggregate_stages(day_samples, source_prefix_filter(prefix) if prefix else accept_all)
    periods = analyze_sleep_periods(
        day_samples,
        gap_tolerance=settings.gap_tolerance,
        min_sleep_duration=settings.min_sleep_duration,
    )
    summary = get_sleep_summary(periods)

    total_s = total_sleep_seconds(totals)
    efficiency = sleep_efficiency_percent(totals)

    durations = {stage_label(stage): format_duration(seconds) for stage, seconds in totals.as_mapping().items()}
    durations["Total Sleep"] = format_duration(total_s)

    logger.info(
        "daily sleep report built",
        day=day.isoformat(),
        samples=len(day_samples),
        periods=len(periods),
        awakenings=totals.awakenings,
    )

    return DailySleepReportModel(
        day=day,
        sleep_start=summary.sleep_start,
        wake_time=summary.wake_time,
        periods=periods,
        totals=totals,
        total_sleep_s=total_s,
        total_sleep_hours=round(total_s / 3600, 1),
        efficiency=None if efficiency is None else round(efficiency, 1),
        efficiency_band=None if efficiency is None else efficiency_band(efficiency),
        durations=durations,
    )
