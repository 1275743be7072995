import os
from datetime import datetime

import pytest

from sleep_analyzer.common.config import ENV_KEYS
from sleep_analyzer.common.models import SampleModel, SleepStage

from utils import SampleFactory

os.environ.setdefault("POWERTOOLS_SERVICE_NAME", "sleep-analyzer")


@pytest.fixture(autouse=True)
def clean_config_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def make_sample() -> SampleFactory:
    def _make(
        start: datetime,
        end: datetime,
        stage: SleepStage = SleepStage.ASLEEP_CORE,
        source_id: str = "com.apple.health.ABCD",
    ) -> SampleModel:
        return SampleModel(start=start, end=end, stage=stage, source_id=source_id)

    return _make
