"""
Mission progress service.
Tracks per-user, per-mission, per-period counters and reward claims.
"""
import logging
from datetime import datetime, date
from typing import List, Optional
from sqlalchemy.orm import Session

from prisma_points.models import Action, Mission, UserMissionProgress
from prisma_points.repositories.catalog_repository import MissionRepository
from prisma_points.repositories.activity_repository import MissionProgressRepository
from prisma_points.repositories.user_repository import UserRepository
from prisma_points.services.date_service import DateService
from prisma_points.services.ledger_service import LedgerService
from prisma_points.services.notification_service import NotificationService
from prisma_points.schemas import MissionResponse, UserMissionResponse
from prisma_points.constants import (
    GOAL_LOG_ACTION_CATEGORY,
    MISSION_STATUS_IN_PROGRESS,
    MISSION_STATUS_COMPLETED,
    MISSION_STATUS_CLAIMED,
    NOTIFICATION_MISSION_COMPLETED,
)
from prisma_points.exceptions import NotFoundException, MissionNotClaimableException

logger = logging.getLogger("prisma_points.missions")


def _matches_action_category(mission: Mission, action: Action) -> bool:
    return mission.goal_category == action.category


# Goal type -> predicate(mission, validated action)
GOAL_MATCHERS = {
    GOAL_LOG_ACTION_CATEGORY: _matches_action_category,
}


class MissionService:
    """Service for mission progress and rewards"""

    def __init__(self, db: Session):
        self.db = db
        self.mission_repo = MissionRepository()
        self.progress_repo = MissionProgressRepository()
        self.user_repo = UserRepository()
        self.ledger = LedgerService(db)
        self.notifications = NotificationService(db)

    def get_matching_missions(self, action: Action) -> List[Mission]:
        """Global missions whose goal counts the given action"""
        matching = []
        for mission in self.mission_repo.get_all(self.db, global_only=True):
            matcher = GOAL_MATCHERS.get(mission.goal_type)
            if matcher and matcher(mission, action):
                matching.append(mission)
        return matching

    def record_validated_action(
        self,
        user_id: int,
        action: Action,
        target_date: Optional[date] = None
    ) -> List[int]:
        """
        Advance every matching mission for a newly validated action.

        Tuples for the current period are created on first use. Only
        in-progress tuples move; completed or claimed ones stay as they are.
        Changes are staged, the caller commits.

        Args:
            user_id: Owner of the validated action
            action: Catalog action that was validated
            target_date: Date used to resolve periods (defaults to today)

        Returns:
            IDs of missions completed by this action
        """
        completed = []

        for mission in self.get_matching_missions(action):
            period = DateService.get_mission_period(mission.mission_type, target_date)
            entry = self.progress_repo.get(self.db, user_id, mission.id, period)

            if entry is None:
                entry = self.progress_repo.add(self.db, UserMissionProgress(
                    user_id=user_id,
                    mission_id=mission.id,
                    period=period,
                    progress=0,
                    status=MISSION_STATUS_IN_PROGRESS
                ))

            if entry.status != MISSION_STATUS_IN_PROGRESS:
                continue

            entry.progress = (entry.progress or 0) + 1
            logger.info(
                f"Mission {mission.id} progress for user {user_id} [{period}]: "
                f"{entry.progress}/{mission.goal_count}"
            )

            if entry.progress >= mission.goal_count:
                entry.status = MISSION_STATUS_COMPLETED
                entry.completed_at = datetime.now()
                completed.append(mission.id)
                self.notifications.push(
                    user_id,
                    f'Mission completed: "{mission.title}"! Claim your reward on the missions page.',
                    kind=NOTIFICATION_MISSION_COMPLETED
                )

        return completed

    def claim_reward(
        self,
        user_id: int,
        mission_id: int,
        period: Optional[str] = None,
        target_date: Optional[date] = None
    ) -> UserMissionProgress:
        """
        Claim the reward of a completed mission.

        Credits reward_points once and moves the tuple to claimed.

        Raises:
            NotFoundException: unknown user or mission
            MissionNotClaimableException: tuple missing, in progress or already claimed
        """
        if not self.user_repo.get_by_id(self.db, user_id):
            raise NotFoundException("User", user_id)
        mission = self.mission_repo.get_by_id(self.db, mission_id)
        if not mission:
            raise NotFoundException("Mission", mission_id)

        period = period or DateService.get_mission_period(mission.mission_type, target_date)
        entry = self.progress_repo.get(self.db, user_id, mission_id, period)

        if entry is None or entry.status != MISSION_STATUS_COMPLETED:
            status = entry.status if entry else MISSION_STATUS_IN_PROGRESS
            logger.warning(f"Refused claim of mission {mission_id} by user {user_id} [{period}]: {status}")
            raise MissionNotClaimableException(mission_id, period, status)

        try:
            entry.status = MISSION_STATUS_CLAIMED
            entry.claimed_at = datetime.now()
            self.ledger.credit(user_id, mission.reward_points, f"mission {mission_id} reward [{period}]")
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(entry)
        return entry

    def get_user_missions(self, user_id: int, target_date: Optional[date] = None) -> List[UserMissionResponse]:
        """Global missions with the user's progress for each current period"""
        if not self.user_repo.get_by_id(self.db, user_id):
            raise NotFoundException("User", user_id)

        result = []
        for mission in self.mission_repo.get_all(self.db, global_only=True):
            period = DateService.get_mission_period(mission.mission_type, target_date)
            entry = self.progress_repo.get(self.db, user_id, mission.id, period)
            result.append(UserMissionResponse(
                mission=MissionResponse.model_validate(mission),
                period=period,
                progress=entry.progress if entry else 0,
                status=entry.status if entry else MISSION_STATUS_IN_PROGRESS
            ))
        return result
