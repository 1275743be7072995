"""
Time-in-stage aggregation over raw samples, and the metrics derived from it.

Totals are computed from raw samples, never from merged periods, so an
interval is counted once in exactly one bucket.
"""

from collections.abc import Callable, Iterable

from aws_lambda_powertools import Logger

from sleep_analyzer.common.models import (
    EfficiencyBand,
    SampleModel,
    SleepStage,
    StageTotalsModel,
    validate_samples,
)

logger = Logger()

SourceFilter = Callable[[SampleModel], bool]

STAGE_TO_BUCKET: dict[SleepStage, str] = {
    SleepStage.IN_BED: "in_bed",
    SleepStage.ASLEEP_CORE: "core",
    SleepStage.ASLEEP_DEEP: "deep",
    SleepStage.ASLEEP_REM: "rem",
    SleepStage.AWAKE: "awake",
}

# Lower bounds, highest first; a boundary value belongs to the higher band
EFFICIENCY_BANDS: tuple[tuple[float, EfficiencyBand], ...] = (
    (90.0, EfficiencyBand.EXCELLENT),
    (80.0, EfficiencyBand.GOOD),
    (65.0, EfficiencyBand.FAIR),
)


def accept_all(_sample: SampleModel) -> bool:
    return True


def source_prefix_filter(prefix: str) -> SourceFilter:
    """Keep only samples whose source identifier starts with ``prefix``."""

    def _filter(sample: SampleModel) -> bool:
        return sample.source_id.startswith(prefix)

    return _filter


def aggregate_stages(samples: Iterable[SampleModel], source_filter: SourceFilter = accept_all) -> StageTotalsModel:
    samples = list(samples)
    validate_samples(samples)

    buckets: dict[str, float] = dict.fromkeys(STAGE_TO_BUCKET.values(), 0.0)
    awakenings = 0
    skipped = 0

    for sample in samples:
        if not source_filter(sample):
            skipped += 1
            continue
        bucket = STAGE_TO_BUCKET.get(sample.stage)
        if bucket is None:
            continue
        buckets[bucket] += sample.duration_s
        if sample.stage == SleepStage.AWAKE:
            awakenings += 1

    if skipped:
        logger.debug("samples excluded by source filter", skipped=skipped, total=len(samples))

    return StageTotalsModel(**buckets, awakenings=awakenings)


def total_sleep_seconds(totals: StageTotalsModel) -> float:
    # In-bed and awake time are not sleep
    return totals.rem + totals.deep + totals.core


def sleep_efficiency_percent(totals: StageTotalsModel) -> float | None:
    if totals.in_bed == 0:
        return None
    return 100 * total_sleep_seconds(totals) / totals.in_bed


def efficiency_band(percent: float) -> EfficiencyBand:
    for lower, band in EFFICIENCY_BANDS:
        if percent >= lower:
            return band
    return EfficiencyBand.LOW
