from __future__ import annotations

from datetime import datetime, time

from ...core.enums import CheckInStatus
from .base import CheckInStrategy, StatusDecision


class LateStrategy(CheckInStrategy):
    def decide_checkin(self, *, local_now: datetime, start_time: time) -> StatusDecision:
        minutes_late = (local_now.hour * 60 + local_now.minute) - (start_time.hour * 60 + start_time.minute)
        return StatusDecision(check_in_status=CheckInStatus.LATE, note=f"{minutes_late} minutes late")
