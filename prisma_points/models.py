from sqlalchemy import (
    Column, Integer, String, Boolean, DateTime, Date, ForeignKey, UniqueConstraint
)
from datetime import datetime

from prisma_points.database import Base
from prisma_points.constants import (
    ROLE_ANALYST,
    ACTION_STATUS_PENDING,
    REDEMPTION_STATUS_PENDING,
    GOAL_LOG_ACTION_CATEGORY,
    MISSION_STATUS_IN_PROGRESS,
    EVENT_DOUBLE_POINTS_CATEGORY,
    NOTIFICATION_MESSAGE,
)


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    username = Column(String, nullable=False, unique=True, index=True)
    role = Column(String, default=ROLE_ANALYST)  # Analyst, Admin
    # Running balance; only LedgerService writes this
    points = Column(Integer, default=0)
    created_at = Column(DateTime, default=datetime.now)


class Action(Base):
    __tablename__ = "actions"

    id = Column(Integer, primary_key=True, index=True)
    category = Column(String, nullable=False, index=True)
    description = Column(String, nullable=False)
    points = Column(Integer, nullable=False)  # Base points, bonus excluded
    validator = Column(String, nullable=True)  # Role label, e.g. "Liderança"


class Prize(Base):
    __tablename__ = "prizes"

    id = Column(Integer, primary_key=True, index=True)
    category = Column(String, nullable=False)
    description = Column(String, nullable=False)
    cost = Column(Integer, nullable=False)
    benefit = Column(String, nullable=True)
    icon = Column(String, nullable=True)


class LoggedAction(Base):
    __tablename__ = "logged_actions"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    action_id = Column(Integer, ForeignKey("actions.id"), nullable=False)
    month = Column(String, nullable=False, index=True)  # YYYY-MM
    notes = Column(String, default="")
    status = Column(String, default=ACTION_STATUS_PENDING, index=True)
    validation_date = Column(Date, nullable=True)
    validator_id = Column(Integer, ForeignKey("users.id"), nullable=True)

    # Recorded on validation (base + bonus credited to the ledger)
    points_awarded = Column(Integer, default=0)
    bonus_points = Column(Integer, default=0)

    created_at = Column(DateTime, default=datetime.now)


class Redemption(Base):
    __tablename__ = "redemptions"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    prize_id = Column(Integer, ForeignKey("prizes.id"), nullable=False)
    request_date = Column(Date, nullable=False)
    status = Column(String, default=REDEMPTION_STATUS_PENDING, index=True)
    approval_date = Column(Date, nullable=True)
    # Cost snapshot taken at request time; refunds use this value
    points_spent = Column(Integer, nullable=False)


class Mission(Base):
    __tablename__ = "missions"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, nullable=False)
    description = Column(String, nullable=True)
    mission_type = Column(String, nullable=False)  # daily, weekly, monthly

    # Goal
    goal_type = Column(String, default=GOAL_LOG_ACTION_CATEGORY)
    goal_category = Column(String, nullable=True)  # For log_action_category goals
    goal_count = Column(Integer, nullable=False, default=1)

    reward_points = Column(Integer, nullable=False, default=0)
    is_global = Column(Boolean, default=True)


class UserMissionProgress(Base):
    __tablename__ = "user_mission_progress"
    __table_args__ = (
        UniqueConstraint("user_id", "mission_id", "period", name="uq_user_mission_period"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    mission_id = Column(Integer, ForeignKey("missions.id"), nullable=False)
    period = Column(String, nullable=False)  # 2024-07-26, 2024-W30 or 2024-07
    progress = Column(Integer, default=0)
    status = Column(String, default=MISSION_STATUS_IN_PROGRESS)
    completed_at = Column(DateTime, nullable=True)
    claimed_at = Column(DateTime, nullable=True)


class SpecialEvent(Base):
    __tablename__ = "special_events"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    description = Column(String, nullable=True)
    event_type = Column(String, default=EVENT_DOUBLE_POINTS_CATEGORY)
    category = Column(String, nullable=True)  # Config for double_points_category
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)  # Inclusive


class AdminSettings(Base):
    __tablename__ = "admin_settings"

    id = Column(Integer, primary_key=True, index=True)
    actions_locked_until = Column(Date, nullable=True)  # Logging refused once today is past this date
    prizes_locked = Column(Boolean, default=False)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)


class Notification(Base):
    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, index=True)
    sender_id = Column(Integer, ForeignKey("users.id"), nullable=True)  # None = system
    recipient_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)  # None = everyone
    kind = Column(String, default=NOTIFICATION_MESSAGE)
    message = Column(String, nullable=False)
    read = Column(Boolean, default=False)
    created_at = Column(DateTime, default=datetime.now)
