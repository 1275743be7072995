from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from sleep_analyzer.common.models import SampleModel

# Every scenario happens on the night of 2025-01-01 (UTC)
BASE_DAY = datetime(2025, 1, 1, tzinfo=UTC)


def at(hour: int, minute: int = 0, day_offset: int = 0) -> datetime:
    return BASE_DAY + timedelta(days=day_offset, hours=hour, minutes=minute)


SampleFactory = Callable[..., SampleModel]


@dataclass
class FakeLambdaContext:
    function_name: str = "daily-sleep-report"
    memory_limit_in_mb: int = 128
    invoked_function_arn: str = "arn:aws:lambda:us-east-1:123456789012:function:daily-sleep-report"
    aws_request_id: str = "00000000-0000-0000-0000-000000000000"
    tenant_id: str | None = None

    def get_remaining_time_in_millis(self) -> int:
        return 30_000
