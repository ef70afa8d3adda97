from datetime import datetime, time, timedelta
from decimal import Decimal

from src.attendance_leave.attendance_leave.attendance.factory import AttendanceStrategyFactory
from src.attendance_leave.attendance_leave.attendance.strategies.half_day_strategy import HalfDayStrategy
from src.attendance_leave.attendance_leave.attendance.strategies.late_strategy import LateStrategy
from src.attendance_leave.attendance_leave.attendance.strategies.on_time_strategy import OnTimeStrategy
from src.attendance_leave.attendance_leave.core.enums import AttendanceStatus


def test_factory_checkin_on_time_before_threshold():
    factory = AttendanceStrategyFactory()
    strategy = factory.for_checkin(now=datetime(2026, 1, 5, 9, 29, 59))

    assert isinstance(strategy, OnTimeStrategy)
    assert strategy.decide_checkin(now=datetime(2026, 1, 5, 9, 29, 59)).status == AttendanceStatus.PRESENT


def test_factory_checkin_late_at_threshold():
    factory = AttendanceStrategyFactory()
    strategy = factory.for_checkin(now=datetime(2026, 1, 5, 9, 30, 0))

    assert isinstance(strategy, LateStrategy)
    assert strategy.decide_checkin(now=datetime(2026, 1, 5, 9, 30, 0)).status == AttendanceStatus.LATE


def test_factory_uses_configured_threshold():
    factory = AttendanceStrategyFactory(late_threshold=time(8, 0))

    assert isinstance(factory.for_checkin(now=datetime(2026, 1, 5, 8, 15)), LateStrategy)


def test_factory_checkout_short_day_is_half_day():
    factory = AttendanceStrategyFactory()
    strategy = factory.for_checkout(worked=timedelta(hours=3, minutes=59, seconds=50))

    assert isinstance(strategy, HalfDayStrategy)
    decision = strategy.decide_checkout(total_hours=Decimal("3.99"), current=AttendanceStatus.LATE)
    assert decision.status == AttendanceStatus.HALF_DAY


def test_factory_checkout_full_day_keeps_status():
    factory = AttendanceStrategyFactory()
    strategy = factory.for_checkout(worked=timedelta(hours=4))

    assert isinstance(strategy, OnTimeStrategy)
    assert strategy.decide_checkout(total_hours=Decimal("4.00"), current=AttendanceStatus.LATE).status == AttendanceStatus.LATE


def test_factory_checkout_uses_configured_hours():
    factory = AttendanceStrategyFactory(half_day_hours=Decimal("5"))

    assert isinstance(factory.for_checkout(worked=timedelta(hours=4, minutes=30)), HalfDayStrategy)
    assert isinstance(factory.for_checkout(worked=timedelta(hours=5)), OnTimeStrategy)
