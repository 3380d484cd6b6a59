"""
Tests for DateService.

Tests cover:
1. Mission period keys per cadence
2. Week numbering around year boundaries
3. Action logging lock
"""
import pytest
from datetime import date

from prisma_points.services.date_service import DateService
from prisma_points.models import AdminSettings
from prisma_points.exceptions import ValidationException


class TestMissionPeriod:
    """Tests for get_mission_period function"""

    def test_daily_key(self, today):
        """Daily key is the ISO date"""
        assert DateService.get_mission_period("daily", today) == "2024-07-26"

    def test_weekly_key(self, today):
        """Weekly key is year plus zero-padded week"""
        assert DateService.get_mission_period("weekly", today) == "2024-W30"

    def test_monthly_key(self, today):
        """Monthly key is YYYY-MM"""
        assert DateService.get_mission_period("monthly", today) == "2024-07"

    def test_daily_key_is_stable_within_a_day(self, today):
        """Calling twice on the same day gives the same key"""
        first = DateService.get_mission_period("daily", today)
        second = DateService.get_mission_period("daily", today)
        assert first == second

    def test_daily_key_changes_next_day(self, today, yesterday):
        """A new day means a new daily period"""
        assert DateService.get_mission_period("daily", today) != DateService.get_mission_period("daily", yesterday)

    def test_unknown_cadence_raises(self, today):
        """Unknown mission types are rejected"""
        with pytest.raises(ValidationException):
            DateService.get_mission_period("hourly", today)


class TestWeekNumber:
    """Tests for week_number function"""

    def test_january_first_is_week_one(self):
        """The week holding January 1st is week 1"""
        assert DateService.week_number(date(2024, 1, 1)) == 1
        assert DateService.week_number(date(2023, 1, 1)) == 1

    def test_week_starts_on_sunday(self):
        """Saturday and the following Sunday fall in different weeks"""
        # 2024-01-06 is a Saturday, 2024-01-07 a Sunday
        assert DateService.week_number(date(2024, 1, 6)) == 1
        assert DateService.week_number(date(2024, 1, 7)) == 2

    def test_same_week_monday_to_saturday(self, today):
        """Days of one Sunday-based week share the key"""
        # 2024-07-21 is a Sunday, 2024-07-27 a Saturday
        keys = {
            DateService.get_mission_period("weekly", date(2024, 7, day))
            for day in range(21, 28)
        }
        assert keys == {"2024-W30"}

    def test_year_end_rolls_to_week_one(self):
        """Late December can be week 53, early January restarts at 1"""
        assert DateService.week_number(date(2023, 12, 31)) == 53
        assert DateService.week_number(date(2024, 1, 1)) == 1


class TestActionsLock:
    """Tests for is_actions_locked function"""

    def test_unset_lock_is_open(self, today):
        """No lock date means logging is open"""
        assert DateService.is_actions_locked(AdminSettings(actions_locked_until=None), today) is False

    def test_lock_date_itself_is_open(self, today):
        """Logging stays open on the lock date"""
        assert DateService.is_actions_locked(AdminSettings(actions_locked_until=today), today) is False

    def test_after_lock_date_is_closed(self, today, yesterday):
        """Logging closes once today is past the lock date"""
        assert DateService.is_actions_locked(AdminSettings(actions_locked_until=yesterday), today) is True
