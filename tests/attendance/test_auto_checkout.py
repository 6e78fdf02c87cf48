from datetime import date, datetime, time, timedelta, timezone

from src.hris.hris.attendance.auto_checkout import AutoCheckout, checkout_boundary, due_for_auto_checkout
from src.hris.hris.attendance.model import AttendanceRecord
from src.hris.hris.core.enums import CheckOutType

from tests.fakes import InMemoryAttendance


def _open_record(record_id, work_date, check_in):
    return AttendanceRecord(id=record_id, employee_id=1, company_id=1, work_date=work_date, check_in=check_in)


def test_boundary_is_local_end_time_in_utc(tz):
    boundary = checkout_boundary(date(2025, 3, 10), time(17, 0), tz)

    assert boundary == datetime(2025, 3, 10, 10, 0, tzinfo=timezone.utc)


def test_record_is_due_only_strictly_after_boundary(tz):
    record = _open_record(1, date(2025, 3, 10), datetime(2025, 3, 10, 2, 0, tzinfo=timezone.utc))
    boundary = checkout_boundary(record.work_date, time(17, 0), tz)

    assert due_for_auto_checkout([record], now=boundary, end_time=time(17, 0), tz=tz) == []
    due = due_for_auto_checkout([record], now=boundary + timedelta(seconds=1), end_time=time(17, 0), tz=tz)
    assert due == [(record, boundary)]


def test_sweep_closes_at_boundary_and_second_sweep_is_noop(tz, local_time):
    repo = InMemoryAttendance()
    repo.add(_open_record(1, date(2025, 3, 8), local_time(2025, 3, 8, 9, 0)))
    repo.add(_open_record(2, date(2025, 3, 9), local_time(2025, 3, 9, 9, 0)))
    sweeper = AutoCheckout(repo, tz=tz)
    now = local_time(2025, 3, 10, 8, 0)

    assert sweeper.sweep(1, now=now, end_time=time(17, 0)) == 2
    first = repo.get_by_id(1)
    assert first.check_out == local_time(2025, 3, 8, 17, 0)
    assert first.check_out_type == CheckOutType.AUTO

    assert sweeper.sweep(1, now=now + timedelta(hours=1), end_time=time(17, 0)) == 0
    assert repo.get_by_id(1).check_out == first.check_out


def test_sweep_leaves_today_open_before_end_time(tz, local_time):
    repo = InMemoryAttendance()
    repo.add(_open_record(1, date(2025, 3, 10), local_time(2025, 3, 10, 9, 0)))

    assert AutoCheckout(repo, tz=tz).sweep(1, now=local_time(2025, 3, 10, 16, 59), end_time=time(17, 0)) == 0
    assert repo.get_by_id(1).is_open


def test_check_in_after_end_time_is_closed_at_the_earlier_boundary(tz, local_time):
    repo = InMemoryAttendance()
    repo.add(_open_record(1, date(2025, 3, 10), local_time(2025, 3, 10, 18, 0)))

    assert AutoCheckout(repo, tz=tz).sweep(1, now=local_time(2025, 3, 10, 18, 30), end_time=time(17, 0)) == 1

    record = repo.get_by_id(1)
    assert record.check_out == datetime(2025, 3, 10, 10, 0, tzinfo=timezone.utc)
    assert record.check_in == datetime(2025, 3, 10, 11, 0, tzinfo=timezone.utc)
    assert record.check_out < record.check_in
    assert record.check_out_type == CheckOutType.AUTO
