from datetime import datetime, time

from src.hris.hris.attendance.factory import CheckInStrategyFactory
from src.hris.hris.attendance.strategies.late_strategy import LateStrategy
from src.hris.hris.attendance.strategies.normal_strategy import OnTimeStrategy
from src.hris.hris.core.enums import CheckInStatus


def test_factory_checkin_on_time_within_start_minute():
    factory = CheckInStrategyFactory()
    strategy = factory.for_checkin(local_now=datetime(2025, 1, 1, 9, 0, 59), start_time=time(9, 0))

    assert isinstance(strategy, OnTimeStrategy)


def test_factory_checkin_late_from_next_minute():
    factory = CheckInStrategyFactory()
    strategy = factory.for_checkin(local_now=datetime(2025, 1, 1, 9, 1, 0), start_time=time(9, 0))

    assert isinstance(strategy, LateStrategy)


def test_late_strategy_reports_minutes_late():
    decision = LateStrategy().decide_checkin(local_now=datetime(2025, 1, 1, 9, 17, 30), start_time=time(9, 0))

    assert decision.check_in_status == CheckInStatus.LATE
    assert decision.note == "17 minutes late"
