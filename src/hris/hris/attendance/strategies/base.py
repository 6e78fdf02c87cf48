from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, time
from typing import Optional

from ...core.enums import CheckInStatus


@dataclass(frozen=True)
class StatusDecision:
    check_in_status: CheckInStatus
    note: Optional[str] = None


class CheckInStrategy(ABC):
    """Strategy Pattern: encapsulate how a check-in is classified."""

    @abstractmethod
    def decide_checkin(self, *, local_now: datetime, start_time: time) -> StatusDecision:
        raise NotImplementedError
