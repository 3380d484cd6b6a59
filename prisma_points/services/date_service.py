"""
Date calculation service.
Handles calendar helpers, mission period keys and the action logging lock.
"""
import math
from datetime import datetime, date
from typing import Optional

from prisma_points.models import AdminSettings
from prisma_points.constants import MISSION_DAILY, MISSION_WEEKLY, MISSION_MONTHLY
from prisma_points.exceptions import ValidationException


class DateService:
    """Service for date-related operations"""

    @staticmethod
    def today() -> date:
        """Current local calendar date"""
        return datetime.now().date()

    @staticmethod
    def month_key(target_date: Optional[date] = None) -> str:
        """Month key in YYYY-MM format"""
        target_date = target_date or DateService.today()
        return target_date.strftime("%Y-%m")

    @staticmethod
    def week_number(target_date: date) -> int:
        """
        Week of year with weeks starting on Sunday.

        week = ceil((day_of_year + offset) / 7), where day_of_year is 1-based
        and offset is the weekday of January 1st counted from Sunday = 0.
        Week 1 is the (possibly partial) week holding January 1st, so the
        last days of December can land in week 53 while the first days of
        January restart at week 1.
        """
        first_day = date(target_date.year, 1, 1)
        day_of_year = target_date.timetuple().tm_yday
        offset = first_day.isoweekday() % 7  # Sunday -> 0, Saturday -> 6
        return math.ceil((day_of_year + offset) / 7)

    @staticmethod
    def get_mission_period(mission_type: str, target_date: Optional[date] = None) -> str:
        """
        Get the canonical period key for a mission cadence.

        Progress stored under an older key is simply never matched again,
        which is how missions reset between periods.

        Args:
            mission_type: "daily", "weekly" or "monthly"
            target_date: Date to resolve (defaults to today)

        Returns:
            "YYYY-MM-DD", "YYYY-Www" or "YYYY-MM"
        """
        target_date = target_date or DateService.today()

        if mission_type == MISSION_DAILY:
            return target_date.isoformat()
        if mission_type == MISSION_WEEKLY:
            week = DateService.week_number(target_date)
            return f"{target_date.year}-W{week:02d}"
        if mission_type == MISSION_MONTHLY:
            return DateService.month_key(target_date)

        raise ValidationException("mission_type", f"unknown cadence '{mission_type}'")

    @staticmethod
    def is_actions_locked(settings: AdminSettings, target_date: Optional[date] = None) -> bool:
        """Logging is closed once target_date is past actions_locked_until"""
        if not settings.actions_locked_until:
            return False
        target_date = target_date or DateService.today()
        return target_date > settings.actions_locked_until
