from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, time

from .strategies.base import CheckInStrategy
from .strategies.late_strategy import LateStrategy
from .strategies.normal_strategy import OnTimeStrategy


@dataclass
class CheckInStrategyFactory:
    """Factory Pattern: choose the check-in strategy for the local wall-clock time.

    Compared at minute granularity: 09:00:59 against a 09:00 start is still on time.
    """

    def for_checkin(self, *, local_now: datetime, start_time: time) -> CheckInStrategy:
        if (local_now.hour, local_now.minute) > (start_time.hour, start_time.minute):
            return LateStrategy()
        return OnTimeStrategy()
