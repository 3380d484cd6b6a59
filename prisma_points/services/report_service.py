"""
Report service.
Read-only aggregations: leaderboard, monthly history and medal progress.
Everything is re-aggregated from validated logs and approved redemptions;
no separate balance is cached here.
"""
from collections import defaultdict
from datetime import date
from typing import Dict, List, Optional
from sqlalchemy.orm import Session

from prisma_points.models import Action, LoggedAction, Prize
from prisma_points.repositories.activity_repository import (
    LoggedActionRepository, RedemptionRepository
)
from prisma_points.repositories.catalog_repository import ActionRepository, PrizeRepository
from prisma_points.repositories.user_repository import UserRepository
from prisma_points.services.date_service import DateService
from prisma_points.services.medal_service import MedalService
from prisma_points.schemas import HistoryEntry, LeaderboardEntry, MedalProgress
from prisma_points.constants import (
    ACTION_STATUS_VALIDATED, REDEMPTION_STATUS_APPROVED, ROLE_ANALYST
)
from prisma_points.exceptions import NotFoundException


class ReportService:
    """Service for derived, read-only views"""

    def __init__(self, db: Session):
        self.db = db
        self.user_repo = UserRepository()
        self.log_repo = LoggedActionRepository()
        self.redemption_repo = RedemptionRepository()
        self.action_repo = ActionRepository()
        self.prize_repo = PrizeRepository()

    def get_leaderboard(self, target_date: Optional[date] = None) -> List[LeaderboardEntry]:
        """Analysts ranked by validated base points of the current month"""
        month = DateService.month_key(target_date)
        rows = []
        for user in self.user_repo.get_all(self.db, role=ROLE_ANALYST):
            monthly = self.log_repo.get_monthly_base_points(self.db, user.id, month)
            rows.append((user, monthly))

        # Stable sort keeps name order among ties
        rows.sort(key=lambda row: row[1], reverse=True)

        return [
            LeaderboardEntry(
                rank=index + 1,
                user_id=user.id,
                name=user.name,
                monthly_points=monthly,
                medal=MedalService.get_medal(monthly),
                points=user.points
            )
            for index, (user, monthly) in enumerate(rows)
        ]

    def get_medal_progress(self, user_id: int, target_date: Optional[date] = None) -> MedalProgress:
        """Current-month medal and progress of a user"""
        self._check_user(user_id)
        monthly = self.log_repo.get_monthly_base_points(
            self.db, user_id, DateService.month_key(target_date)
        )
        return MedalService.get_progress(monthly)

    def get_user_history(self, user_id: int) -> List[HistoryEntry]:
        """
        Month-by-month history of a user.

        earned: base points of validated logs of that month
        redeemed: cost of approved redemptions requested that month
        """
        self._check_user(user_id)
        actions = {a.id: a for a in self.action_repo.get_all(self.db)}
        logs = self.log_repo.get_for_user(self.db, user_id)
        redemptions = self.redemption_repo.get_for_user(self.db, user_id)

        earned: Dict[str, int] = defaultdict(int)
        redeemed: Dict[str, int] = defaultdict(int)
        months = set()

        for log in logs:
            months.add(log.month)
            if log.status == ACTION_STATUS_VALIDATED and log.action_id in actions:
                earned[log.month] += actions[log.action_id].points

        for redemption in redemptions:
            month = DateService.month_key(redemption.request_date)
            months.add(month)
            if redemption.status == REDEMPTION_STATUS_APPROVED:
                redeemed[month] += redemption.points_spent

        return [
            HistoryEntry(
                month=month,
                points_earned=earned[month],
                points_redeemed=redeemed[month],
                medal=MedalService.get_medal(earned[month])
            )
            for month in sorted(months)
        ]

    def get_pending_by_user(self) -> Dict[int, List[LoggedAction]]:
        """Validation queue grouped by user ID"""
        grouped: Dict[int, List[LoggedAction]] = defaultdict(list)
        for log in self.log_repo.get_pending(self.db):
            grouped[log.user_id].append(log)
        return dict(grouped)

    def get_actions_by_category(self) -> Dict[str, List[Action]]:
        """Action catalog grouped by category"""
        grouped: Dict[str, List[Action]] = defaultdict(list)
        for action in self.action_repo.get_all(self.db):
            grouped[action.category].append(action)
        return dict(grouped)

    def get_prizes_by_category(self) -> Dict[str, List[Prize]]:
        """Prize catalog grouped by category"""
        grouped: Dict[str, List[Prize]] = defaultdict(list)
        for prize in self.prize_repo.get_all(self.db):
            grouped[prize.category].append(prize)
        return dict(grouped)

    def _check_user(self, user_id: int) -> None:
        if not self.user_repo.get_by_id(self.db, user_id):
            raise NotFoundException("User", user_id)
