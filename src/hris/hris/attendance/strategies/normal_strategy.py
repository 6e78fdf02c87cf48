from __future__ import annotations

from datetime import datetime, time

from ...core.enums import CheckInStatus
from .base import CheckInStrategy, StatusDecision


class OnTimeStrategy(CheckInStrategy):
    """Check-in at or before the office start minute."""

    def decide_checkin(self, *, local_now: datetime, start_time: time) -> StatusDecision:
        return StatusDecision(check_in_status=CheckInStatus.ONTIME)
