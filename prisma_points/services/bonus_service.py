"""
Bonus rules service.
Computes extra points granted by special events.
"""
from datetime import date
from typing import Optional
from sqlalchemy.orm import Session

from prisma_points.models import Action, SpecialEvent
from prisma_points.repositories.catalog_repository import SpecialEventRepository
from prisma_points.services.date_service import DateService
from prisma_points.constants import EVENT_DOUBLE_POINTS_CATEGORY


def _double_points_for_category(event: SpecialEvent, action: Action) -> int:
    """Bonus equal to the base points, so the action pays twice"""
    if event.category == action.category:
        return action.points
    return 0


# Event type -> bonus rule(event, action) -> bonus points
EVENT_RULES = {
    EVENT_DOUBLE_POINTS_CATEGORY: _double_points_for_category,
}


class BonusService:
    """Service for special event bonuses"""

    def __init__(self, db: Session):
        self.db = db
        self.event_repo = SpecialEventRepository()

    def get_active_event(self, target_date: Optional[date] = None) -> Optional[SpecialEvent]:
        """
        Get the special event in force on target_date.

        When several events overlap, the lowest ID wins and is the only one
        consulted.
        """
        target_date = target_date or DateService.today()
        active = self.event_repo.get_active(self.db, target_date)
        return active[0] if active else None

    def get_bonus_points(self, action: Action, target_date: Optional[date] = None) -> int:
        """Extra points for validating action on target_date (0 if no rule applies)"""
        event = self.get_active_event(target_date)
        if not event:
            return 0

        rule = EVENT_RULES.get(event.event_type)
        if rule is None:
            return 0
        return rule(event, action)
