from __future__ import annotations

import logging
from datetime import date, datetime, time, timezone, tzinfo
from typing import Iterable

from ..core.enums import CheckOutType
from .model import AttendanceRecord
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


def checkout_boundary(work_date: date, end_time: time, tz: tzinfo) -> datetime:
    """Office end time on the record's local date, as UTC."""
    return datetime.combine(work_date, end_time, tzinfo=tz).astimezone(timezone.utc)


def due_for_auto_checkout(
    records: Iterable[AttendanceRecord], *, now: datetime, end_time: time, tz: tzinfo
) -> list[tuple[AttendanceRecord, datetime]]:
    due = []
    for record in records:
        if not record.is_open:
            continue
        boundary = checkout_boundary(record.work_date, end_time, tz)
        if now > boundary:
            due.append((record, boundary))
    return due


class AutoCheckout:
    """Closes forgotten check-ins at the office end time.

    There is no scheduler: the sweep runs whenever the employee checks in or
    opens their history. Records are closed with ``check_out = boundary`` (not
    ``now``), so re-running the sweep finds nothing left to do.
    """

    def __init__(self, attendance: AttendanceRepository, *, tz: tzinfo):
        self._attendance = attendance
        self._tz = tz

    def sweep(self, employee_id: int, *, now: datetime, end_time: time) -> int:
        open_records = self._attendance.list_open_for_employee(employee_id)
        closed = 0
        for record, boundary in due_for_auto_checkout(open_records, now=now, end_time=end_time, tz=self._tz):
            if self._attendance.close(record.id, check_out=boundary, check_out_type=CheckOutType.AUTO):
                closed += 1
        if closed:
            logger.info("Auto checkout closed %s record(s) for employee %s", closed, employee_id)
        return closed
