from datetime import date, datetime, timedelta, timezone, tzinfo
from typing import Optional


class DateHelper:
    """Helper functions for date operations"""

    @staticmethod
    def utc_now() -> datetime:
        return datetime.now(timezone.utc)

    @staticmethod
    def add_days(start: datetime, days: int) -> datetime:
        """Shift a timestamp by whole calendar days"""
        return start + timedelta(days=days)

    @staticmethod
    def day_of(moment: datetime, tz: Optional[tzinfo] = None) -> date:
        """Normalize a timestamp to its calendar day (midnight), in tz when given"""
        if tz is not None and moment.tzinfo is not None:
            moment = moment.astimezone(tz)
        return moment.date()

    @staticmethod
    def days_between(later: date, earlier: date) -> int:
        """Whole days from earlier to later (negative if reversed)"""
        return (later - earlier).days

