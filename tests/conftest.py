from datetime import datetime, timezone

import pytest

from src.hris.hris.common.datetime_utils import business_tz


@pytest.fixture
def tz():
    return business_tz(7)


@pytest.fixture
def fixed_now():
    # 2025-03-10 08:30 in UTC+7
    return datetime(2025, 3, 10, 1, 30, tzinfo=timezone.utc)


@pytest.fixture
def local_time(tz):
    """Build an aware UTC datetime from a wall-clock time in the business timezone."""

    def _make(year, month, day, hour=0, minute=0, second=0):
        return datetime(year, month, day, hour, minute, second, tzinfo=tz).astimezone(timezone.utc)

    return _make


