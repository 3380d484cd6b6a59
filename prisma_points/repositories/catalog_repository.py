"""
Catalog repository - Data access layer for admin-managed catalogs.
Handles actions, prizes, missions and special events.
"""
from datetime import date
from typing import List, Optional
from sqlalchemy.orm import Session

from prisma_points.models import Action, Prize, Mission, SpecialEvent


class ActionRepository:
    """Repository for Action data access"""

    @staticmethod
    def get_all(db: Session) -> List[Action]:
        """Get all actions ordered by category"""
        return db.query(Action).order_by(Action.category, Action.id).all()

    @staticmethod
    def get_by_id(db: Session, action_id: int) -> Optional[Action]:
        """Get action by ID"""
        return db.query(Action).filter(Action.id == action_id).first()

    @staticmethod
    def create(db: Session, action: Action) -> Action:
        """Create new action"""
        db.add(action)
        db.commit()
        db.refresh(action)
        return action

    @staticmethod
    def update(db: Session, action: Action) -> Action:
        """Update existing action"""
        db.commit()
        db.refresh(action)
        return action

    @staticmethod
    def delete(db: Session, action: Action) -> None:
        """Delete an action"""
        db.delete(action)
        db.commit()


class PrizeRepository:
    """Repository for Prize data access"""

    @staticmethod
    def get_all(db: Session) -> List[Prize]:
        """Get all prizes ordered by cost"""
        return db.query(Prize).order_by(Prize.cost, Prize.id).all()

    @staticmethod
    def get_by_id(db: Session, prize_id: int) -> Optional[Prize]:
        """Get prize by ID"""
        return db.query(Prize).filter(Prize.id == prize_id).first()

    @staticmethod
    def create(db: Session, prize: Prize) -> Prize:
        """Create new prize"""
        db.add(prize)
        db.commit()
        db.refresh(prize)
        return prize

    @staticmethod
    def update(db: Session, prize: Prize) -> Prize:
        """Update existing prize"""
        db.commit()
        db.refresh(prize)
        return prize

    @staticmethod
    def delete(db: Session, prize: Prize) -> None:
        """Delete a prize"""
        db.delete(prize)
        db.commit()


class MissionRepository:
    """Repository for Mission data access"""

    @staticmethod
    def get_all(db: Session, global_only: bool = False) -> List[Mission]:
        """Get all missions"""
        query = db.query(Mission)
        if global_only:
            query = query.filter(Mission.is_global == True)
        return query.order_by(Mission.id).all()

    @staticmethod
    def get_by_id(db: Session, mission_id: int) -> Optional[Mission]:
        """Get mission by ID"""
        return db.query(Mission).filter(Mission.id == mission_id).first()

    @staticmethod
    def create(db: Session, mission: Mission) -> Mission:
        """Create new mission"""
        db.add(mission)
        db.commit()
        db.refresh(mission)
        return mission

    @staticmethod
    def update(db: Session, mission: Mission) -> Mission:
        """Update existing mission"""
        db.commit()
        db.refresh(mission)
        return mission

    @staticmethod
    def delete(db: Session, mission: Mission) -> None:
        """Delete a mission"""
        db.delete(mission)
        db.commit()


class SpecialEventRepository:
    """Repository for SpecialEvent data access"""

    @staticmethod
    def get_all(db: Session) -> List[SpecialEvent]:
        """Get all special events in catalog order"""
        return db.query(SpecialEvent).order_by(SpecialEvent.id).all()

    @staticmethod
    def get_active(db: Session, target_date: date) -> List[SpecialEvent]:
        """Get events whose inclusive date range contains target_date, lowest ID first"""
        return db.query(SpecialEvent).filter(
            SpecialEvent.start_date <= target_date,
            SpecialEvent.end_date >= target_date
        ).order_by(SpecialEvent.id).all()

    @staticmethod
    def get_by_id(db: Session, event_id: int) -> Optional[SpecialEvent]:
        """Get special event by ID"""
        return db.query(SpecialEvent).filter(SpecialEvent.id == event_id).first()

    @staticmethod
    def create(db: Session, event: SpecialEvent) -> SpecialEvent:
        """Create new special event"""
        db.add(event)
        db.commit()
        db.refresh(event)
        return event

    @staticmethod
    def update(db: Session, event: SpecialEvent) -> SpecialEvent:
        """Update existing special event"""
        db.commit()
        db.refresh(event)
        return event

    @staticmethod
    def delete(db: Session, event: SpecialEvent) -> None:
        """Delete a special event"""
        db.delete(event)
        db.commit()
