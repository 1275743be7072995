from datetime import date
from typing import Any

from aws_lambda_powertools import Logger
from pydantic import BaseModel, Field, field_validator

from sleep_analyzer.common.config import check_timezone, load_settings
from sleep_analyzer.ingest.records import samples_from_records
from sleep_analyzer.report.builder import build_daily_report

logger = Logger()


class DailyReportEvent(BaseModel):
    day: date
    records: list[dict[str, Any]] = Field(default_factory=list)
    timezone: str | None = None
    source_prefix: str | None = None

    @field_validator("timezone")
    @classmethod
    def _known_timezone(cls, value: str | None) -> str | None:
        return check_timezone(value) if value else value


@logger.inject_lambda_context
def lambda_handler(event: dict[str, Any], context: Any) -> dict[str, Any]:
    try:
        settings = load_settings()
        logger.setLevel(settings.log_level.value)

        request = DailyReportEvent.model_validate(event)
        if request.timezone:
            settings = settings.model_copy(update={"timezone": request.timezone})
        samples = samples_from_records(request.records)
        report = build_daily_report(samples, request.day, settings, source_prefix=request.source_prefix)
        return {"ok": True, "report": report.model_dump(mode="json")}
    except Exception as exc:
        logger.exception("daily_report_failed")
        raise exc
