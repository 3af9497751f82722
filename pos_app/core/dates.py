"""
Reporting-timezone helpers.

Orders are stamped and grouped by calendar day in a fixed timezone
(Europe/Madrid by default), never in the device's local zone.
"""

from datetime import date, datetime
from typing import Optional
from zoneinfo import ZoneInfo

from pos_app.core.config import get_settings


def reporting_tz() -> ZoneInfo:
    return get_settings().tzinfo


def reporting_now() -> datetime:
    """Current time as an aware datetime in the reporting timezone."""
    return datetime.now(reporting_tz())


def to_reporting_tz(moment: datetime) -> datetime:
    """
    ``moment`` as an aware datetime in the reporting timezone.

    Naive datetimes are assumed to already be in the reporting timezone,
    never in the host's local zone.
    """
    tz = reporting_tz()
    if moment.tzinfo is None:
        return moment.replace(tzinfo=tz)
    return moment.astimezone(tz)


def reporting_day(moment: datetime) -> date:
    """Calendar day of ``moment`` in the reporting timezone."""
    return to_reporting_tz(moment).date()


def reporting_day_string(moment: datetime) -> str:
    """YYYY-MM-DD in the reporting timezone."""
    return reporting_day(moment).isoformat()


def is_same_reporting_day(first: datetime, second: datetime) -> bool:
    return reporting_day(first) == reporting_day(second)


def today_in_reporting_tz(now: Optional[datetime] = None) -> date:
    return reporting_day(now or reporting_now())
