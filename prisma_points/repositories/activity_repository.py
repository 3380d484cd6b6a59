"""
Activity repository - Data access layer for user activity.
Handles logged actions, redemptions, mission progress and notifications.

The add() helpers only flush; the calling service owns the commit so that an
engine operation is written as a single unit.
"""
from typing import List, Optional
from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from prisma_points.models import (
    Action, LoggedAction, Redemption, UserMissionProgress, Notification
)
from prisma_points.constants import (
    ACTION_STATUS_PENDING, ACTION_STATUS_VALIDATED, REDEMPTION_STATUS_PENDING
)


class LoggedActionRepository:
    """Repository for LoggedAction data access"""

    @staticmethod
    def get_by_id(db: Session, log_id: int) -> Optional[LoggedAction]:
        """Get logged action by ID"""
        return db.query(LoggedAction).filter(LoggedAction.id == log_id).first()

    @staticmethod
    def get_for_user(db: Session, user_id: int) -> List[LoggedAction]:
        """Get all logs of a user, newest first"""
        return db.query(LoggedAction).filter(
            LoggedAction.user_id == user_id
        ).order_by(LoggedAction.id.desc()).all()

    @staticmethod
    def get_pending(db: Session, user_id: Optional[int] = None) -> List[LoggedAction]:
        """Get logs awaiting validation, oldest first"""
        query = db.query(LoggedAction).filter(LoggedAction.status == ACTION_STATUS_PENDING)
        if user_id is not None:
            query = query.filter(LoggedAction.user_id == user_id)
        return query.order_by(LoggedAction.id).all()

    @staticmethod
    def get_monthly_base_points(db: Session, user_id: int, month: str) -> int:
        """Sum of base action points of a user's validated logs for a month"""
        total = db.query(func.coalesce(func.sum(Action.points), 0)).select_from(Action).join(
            LoggedAction, LoggedAction.action_id == Action.id
        ).filter(
            LoggedAction.user_id == user_id,
            LoggedAction.month == month,
            LoggedAction.status == ACTION_STATUS_VALIDATED
        ).scalar()
        return int(total or 0)

    @staticmethod
    def count_for_action(db: Session, action_id: int) -> int:
        """Count logs referencing an action"""
        return db.query(LoggedAction).filter(LoggedAction.action_id == action_id).count()

    @staticmethod
    def add(db: Session, log: LoggedAction) -> LoggedAction:
        """Stage a new logged action"""
        db.add(log)
        db.flush()
        return log


class RedemptionRepository:
    """Repository for Redemption data access"""

    @staticmethod
    def get_by_id(db: Session, redemption_id: int) -> Optional[Redemption]:
        """Get redemption by ID"""
        return db.query(Redemption).filter(Redemption.id == redemption_id).first()

    @staticmethod
    def get_for_user(db: Session, user_id: int) -> List[Redemption]:
        """Get all redemptions of a user, newest first"""
        return db.query(Redemption).filter(
            Redemption.user_id == user_id
        ).order_by(Redemption.id.desc()).all()

    @staticmethod
    def get_pending(db: Session) -> List[Redemption]:
        """Get redemptions awaiting approval"""
        return db.query(Redemption).filter(
            Redemption.status == REDEMPTION_STATUS_PENDING
        ).order_by(Redemption.id).all()

    @staticmethod
    def count_for_prize(db: Session, prize_id: int) -> int:
        """Count redemptions referencing a prize"""
        return db.query(Redemption).filter(Redemption.prize_id == prize_id).count()

    @staticmethod
    def add(db: Session, redemption: Redemption) -> Redemption:
        """Stage a new redemption"""
        db.add(redemption)
        db.flush()
        return redemption


class MissionProgressRepository:
    """Repository for UserMissionProgress data access"""

    @staticmethod
    def get(db: Session, user_id: int, mission_id: int, period: str) -> Optional[UserMissionProgress]:
        """Get progress tuple for (user, mission, period)"""
        return db.query(UserMissionProgress).filter(
            UserMissionProgress.user_id == user_id,
            UserMissionProgress.mission_id == mission_id,
            UserMissionProgress.period == period
        ).first()

    @staticmethod
    def get_for_user(db: Session, user_id: int) -> List[UserMissionProgress]:
        """Get every progress tuple of a user, including past periods"""
        return db.query(UserMissionProgress).filter(
            UserMissionProgress.user_id == user_id
        ).order_by(UserMissionProgress.period.desc()).all()

    @staticmethod
    def count_for_mission(db: Session, mission_id: int) -> int:
        """Count progress tuples referencing a mission"""
        return db.query(UserMissionProgress).filter(
            UserMissionProgress.mission_id == mission_id
        ).count()

    @staticmethod
    def add(db: Session, progress: UserMissionProgress) -> UserMissionProgress:
        """Stage a new progress tuple"""
        db.add(progress)
        db.flush()
        return progress


class NotificationRepository:
    """Repository for Notification data access"""

    @staticmethod
    def get_for_user(db: Session, user_id: int, limit: int = 50) -> List[Notification]:
        """Get notifications addressed to a user or broadcast to everyone"""
        return db.query(Notification).filter(
            or_(Notification.recipient_id == user_id, Notification.recipient_id == None)
        ).order_by(Notification.id.desc()).limit(limit).all()

    @staticmethod
    def count_unread(db: Session, user_id: int) -> int:
        """Count unread notifications visible to a user"""
        return db.query(Notification).filter(
            or_(Notification.recipient_id == user_id, Notification.recipient_id == None),
            Notification.read == False
        ).count()

    @staticmethod
    def add(db: Session, notification: Notification) -> Notification:
        """Stage a new notification"""
        db.add(notification)
        db.flush()
        return notification
