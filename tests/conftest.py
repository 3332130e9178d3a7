from pathlib import Path
import sys

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "src"))

from pdf4me_connector.config import Pdf4meSettings, PollPolicy


@pytest.fixture
def fast_settings() -> Pdf4meSettings:
    return Pdf4meSettings(
        api_key="test-api-key",
        base_url="https://api.test.local",
        poll=PollPolicy(initial_delay_seconds=0.01, max_delay_seconds=0.05, max_attempts=5),
    )
