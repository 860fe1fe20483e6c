# app/utils/dates.py

"""
재고 이동 일자를 영업일 시간대(settings.STOCK_TIMEZONE, 기본 Asia/Jakarta) 기준으로
정규화하는 유틸리티 모듈입니다.

원장(StockMovement.date)에는 항상 '해당 영업일 자정(현지 시각)'이 timezone-aware 값으로 저장됩니다.
따라서 같은 영업일의 이동은 같은 date 값을 가지며, 같은 날 안의 순서는 created_at으로 결정됩니다.
"""

import calendar
from datetime import date, datetime, time, timedelta
from typing import Tuple, Union
from zoneinfo import ZoneInfo

from app.core.config import settings


def business_tz() -> ZoneInfo:
    return ZoneInfo(settings.STOCK_TIMEZONE)


def business_day_of(value: Union[date, datetime]) -> date:
    """datetime/date 값을 영업일 시간대의 달력 날짜로 변환합니다."""
    if isinstance(value, datetime):
        if value.tzinfo is None:
            # naive datetime은 이미 영업일 현지 시각으로 간주합니다.
            return value.date()
        return value.astimezone(business_tz()).date()
    return value


def start_of_business_day(value: Union[date, datetime]) -> datetime:
    """해당 영업일의 자정(현지 시각)을 timezone-aware datetime으로 반환합니다."""
    day = business_day_of(value)
    return datetime.combine(day, time.min, tzinfo=business_tz())


def business_day_range(value: Union[date, datetime]) -> Tuple[datetime, datetime]:
    """[해당 영업일 자정, 다음 영업일 자정) 구간을 반환합니다."""
    start = start_of_business_day(value)
    return start, start_of_business_day(business_day_of(value) + timedelta(days=1))


def business_today() -> date:
    return datetime.now(business_tz()).date()


def month_bounds(year: int, month: int) -> Tuple[date, date]:
    """해당 월의 첫날과 마지막 날을 반환합니다."""
    days_in_month = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, days_in_month)


def add_months(day: date, months: int) -> date:
    """월 단위로 이동한 '해당 월 1일'을 반환합니다."""
    index = day.year * 12 + (day.month - 1) + months
    return date(index // 12, index % 12 + 1, 1)
