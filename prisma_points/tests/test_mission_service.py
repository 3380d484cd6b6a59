"""
Tests for MissionService.

Tests cover:
1. Progress tracking for matching global missions
2. Completion and reward claims
3. Period resets
4. User mission view
"""
import pytest
from datetime import timedelta

from prisma_points.services.mission_service import MissionService
from prisma_points.services.validation_service import ValidationService
from prisma_points.models import Mission, Notification
from prisma_points.constants import (
    ACTION_STATUS_VALIDATED, MISSION_STATUS_IN_PROGRESS, MISSION_STATUS_COMPLETED,
    MISSION_STATUS_CLAIMED, MISSION_DAILY, NOTIFICATION_MISSION_COMPLETED
)
from prisma_points.exceptions import MissionNotClaimableException, NotFoundException


def _validate(db_session, user, action, target_date):
    service = ValidationService(db_session)
    log = service.submit(user.id, action.id, target_date=target_date)
    return service.resolve(log.id, ACTION_STATUS_VALIDATED, target_date=target_date)


class TestRecordValidatedAction:
    """Tests for progress tracking on validation"""

    def test_first_action_starts_progress(self, db_session, default_settings, analyst, collaboration_action, weekly_mission, today):
        """One matching action gives 1/2 in progress"""
        _validate(db_session, analyst, collaboration_action, today)

        entry = MissionService(db_session).progress_repo.get(db_session, analyst.id, weekly_mission.id, "2024-W30")
        assert entry.progress == 1
        assert entry.status == MISSION_STATUS_IN_PROGRESS

    def test_reaching_goal_completes(self, db_session, default_settings, analyst, collaboration_action, weekly_mission, today):
        """The second matching action completes the mission and notifies"""
        _validate(db_session, analyst, collaboration_action, today)
        result = _validate(db_session, analyst, collaboration_action, today)

        assert result.completed_missions == [weekly_mission.id]
        entry = MissionService(db_session).progress_repo.get(db_session, analyst.id, weekly_mission.id, "2024-W30")
        assert entry.progress == 2
        assert entry.status == MISSION_STATUS_COMPLETED
        assert entry.completed_at is not None

        notes = db_session.query(Notification).filter(Notification.kind == NOTIFICATION_MISSION_COMPLETED).all()
        assert len(notes) == 1

    def test_other_category_ignored(self, db_session, default_settings, analyst, innovation_action, weekly_mission, today):
        """Actions outside the goal category leave the mission alone"""
        _validate(db_session, analyst, innovation_action, today)

        entry = MissionService(db_session).progress_repo.get(db_session, analyst.id, weekly_mission.id, "2024-W30")
        assert entry is None

    def test_non_global_mission_ignored(self, db_session, default_settings, analyst, collaboration_action, weekly_mission, today):
        """Only global missions are tracked"""
        weekly_mission.is_global = False
        db_session.commit()

        result = _validate(db_session, analyst, collaboration_action, today)
        _validate(db_session, analyst, collaboration_action, today)

        assert result.completed_missions == []
        assert MissionService(db_session).progress_repo.get_for_user(db_session, analyst.id) == []

    def test_new_week_resets(self, db_session, default_settings, analyst, collaboration_action, weekly_mission, today):
        """Progress from last week does not carry over"""
        _validate(db_session, analyst, collaboration_action, today - timedelta(days=7))
        _validate(db_session, analyst, collaboration_action, today)

        repo = MissionService(db_session).progress_repo
        assert repo.get(db_session, analyst.id, weekly_mission.id, "2024-W29").progress == 1
        assert repo.get(db_session, analyst.id, weekly_mission.id, "2024-W30").progress == 1

    def test_daily_mission_uses_date_key(self, db_session, default_settings, analyst, innovation_action, today):
        """Daily missions are keyed by the ISO date"""
        mission = Mission(
            title="Ideia do dia", mission_type=MISSION_DAILY, goal_category="Inovação",
            goal_count=1, reward_points=10, is_global=True
        )
        db_session.add(mission)
        db_session.commit()

        result = _validate(db_session, analyst, innovation_action, today)

        assert result.completed_missions == [mission.id]
        entry = MissionService(db_session).progress_repo.get(db_session, analyst.id, mission.id, "2024-07-26")
        assert entry.status == MISSION_STATUS_COMPLETED


class TestClaimReward:
    """Tests for claim_reward function"""

    def test_weekly_mission_lifecycle(self, db_session, default_settings, analyst, collaboration_action, weekly_mission, today):
        """1/2, 2/2 completed, claim credits the reward, a third action changes nothing"""
        service = MissionService(db_session)

        _validate(db_session, analyst, collaboration_action, today)
        _validate(db_session, analyst, collaboration_action, today)
        db_session.refresh(analyst)
        assert analyst.points == 200

        entry = service.claim_reward(analyst.id, weekly_mission.id, target_date=today)
        db_session.refresh(analyst)
        assert entry.status == MISSION_STATUS_CLAIMED
        assert entry.claimed_at is not None
        assert analyst.points == 250

        result = _validate(db_session, analyst, collaboration_action, today)
        db_session.refresh(analyst)
        db_session.refresh(entry)
        assert result.completed_missions == []
        assert entry.progress == 2
        assert entry.status == MISSION_STATUS_CLAIMED
        assert analyst.points == 350

    def test_repeat_claim_refused(self, db_session, default_settings, analyst, collaboration_action, weekly_mission, today):
        """The reward is paid exactly once"""
        service = MissionService(db_session)
        _validate(db_session, analyst, collaboration_action, today)
        _validate(db_session, analyst, collaboration_action, today)
        service.claim_reward(analyst.id, weekly_mission.id, target_date=today)
        db_session.refresh(analyst)
        balance = analyst.points

        with pytest.raises(MissionNotClaimableException):
            service.claim_reward(analyst.id, weekly_mission.id, target_date=today)

        db_session.refresh(analyst)
        assert analyst.points == balance

    def test_in_progress_refused(self, db_session, default_settings, analyst, collaboration_action, weekly_mission, today):
        """Unfinished missions cannot be claimed"""
        _validate(db_session, analyst, collaboration_action, today)

        with pytest.raises(MissionNotClaimableException) as exc_info:
            MissionService(db_session).claim_reward(analyst.id, weekly_mission.id, target_date=today)
        assert exc_info.value.status == MISSION_STATUS_IN_PROGRESS

    def test_no_progress_refused(self, db_session, default_settings, analyst, weekly_mission, today):
        """A mission never started cannot be claimed"""
        with pytest.raises(MissionNotClaimableException):
            MissionService(db_session).claim_reward(analyst.id, weekly_mission.id, target_date=today)

    def test_explicit_period(self, db_session, default_settings, analyst, collaboration_action, weekly_mission, today):
        """A completed past period can still be claimed by key"""
        last_week = today - timedelta(days=7)
        _validate(db_session, analyst, collaboration_action, last_week)
        _validate(db_session, analyst, collaboration_action, last_week)

        entry = MissionService(db_session).claim_reward(analyst.id, weekly_mission.id, period="2024-W29", target_date=today)
        assert entry.status == MISSION_STATUS_CLAIMED

    def test_unknown_mission(self, db_session, analyst):
        """Unknown missions are refused"""
        with pytest.raises(NotFoundException):
            MissionService(db_session).claim_reward(analyst.id, 999)


class TestUserMissions:
    """Tests for get_user_missions function"""

    def test_untouched_mission_shows_zero(self, db_session, analyst, weekly_mission, today):
        """Missions without progress show 0 and in progress"""
        missions = MissionService(db_session).get_user_missions(analyst.id, today)

        assert len(missions) == 1
        assert missions[0].mission.id == weekly_mission.id
        assert missions[0].period == "2024-W30"
        assert missions[0].progress == 0
        assert missions[0].status == MISSION_STATUS_IN_PROGRESS

    def test_shows_current_progress(self, db_session, default_settings, analyst, collaboration_action, weekly_mission, today):
        """Current-period progress is reported"""
        _validate(db_session, analyst, collaboration_action, today)

        missions = MissionService(db_session).get_user_missions(analyst.id, today)
        assert missions[0].progress == 1
