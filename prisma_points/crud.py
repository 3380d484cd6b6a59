"""
Admin catalog management.
Plain create/read/update/delete for users, catalogs and admin settings.
"""
from sqlalchemy.orm import Session
from typing import List, Optional

from prisma_points.models import (
    User, Action, Prize, Mission, SpecialEvent, AdminSettings, LoggedAction, Redemption
)
from prisma_points.schemas import (
    UserCreate, UserUpdate,
    ActionCreate, ActionUpdate,
    PrizeCreate, PrizeUpdate,
    MissionCreate, MissionUpdate,
    SpecialEventCreate, SpecialEventUpdate,
    SettingsUpdate,
)
from prisma_points.repositories.user_repository import UserRepository
from prisma_points.repositories.catalog_repository import (
    ActionRepository, PrizeRepository, MissionRepository, SpecialEventRepository
)
from prisma_points.repositories.activity_repository import (
    LoggedActionRepository, RedemptionRepository, MissionProgressRepository
)
from prisma_points.repositories.settings_repository import SettingsRepository
from prisma_points.constants import GOAL_LOG_ACTION_CATEGORY, EVENT_DOUBLE_POINTS_CATEGORY
from prisma_points.exceptions import (
    CatalogItemInUseException, NotFoundException, ValidationException
)


# ===== USERS =====

def get_users(db: Session, role: Optional[str] = None) -> List[User]:
    return UserRepository.get_all(db, role)


def get_user(db: Session, user_id: int) -> User:
    user = UserRepository.get_by_id(db, user_id)
    if not user:
        raise NotFoundException("User", user_id)
    return user


def create_user(db: Session, user_data: UserCreate) -> User:
    if UserRepository.get_by_username(db, user_data.username):
        raise ValidationException("username", f"'{user_data.username}' is already taken")
    return UserRepository.create(db, User(**user_data.model_dump(), points=0))


def update_user(db: Session, user_id: int, user_update: UserUpdate) -> User:
    """Update profile fields. The point balance is never editable here."""
    user = get_user(db, user_id)
    update_data = user_update.model_dump(exclude_unset=True)

    username = update_data.get("username")
    if username and username != user.username and UserRepository.get_by_username(db, username):
        raise ValidationException("username", f"'{username}' is already taken")

    for key, value in update_data.items():
        setattr(user, key, value)
    return UserRepository.update(db, user)


def delete_user(db: Session, user_id: int) -> None:
    user = get_user(db, user_id)
    has_activity = (
        db.query(LoggedAction).filter(LoggedAction.user_id == user_id).count()
        or db.query(Redemption).filter(Redemption.user_id == user_id).count()
    )
    if has_activity:
        raise CatalogItemInUseException("User", user_id)
    UserRepository.delete(db, user)


# ===== ACTIONS =====

def get_actions(db: Session) -> List[Action]:
    return ActionRepository.get_all(db)


def get_action(db: Session, action_id: int) -> Action:
    action = ActionRepository.get_by_id(db, action_id)
    if not action:
        raise NotFoundException("Action", action_id)
    return action


def create_action(db: Session, action_data: ActionCreate) -> Action:
    return ActionRepository.create(db, Action(**action_data.model_dump()))


def update_action(db: Session, action_id: int, action_update: ActionUpdate) -> Action:
    action = get_action(db, action_id)
    for key, value in action_update.model_dump(exclude_unset=True).items():
        setattr(action, key, value)
    return ActionRepository.update(db, action)


def delete_action(db: Session, action_id: int) -> None:
    action = get_action(db, action_id)
    if LoggedActionRepository.count_for_action(db, action_id):
        raise CatalogItemInUseException("Action", action_id)
    ActionRepository.delete(db, action)


# ===== PRIZES =====

def get_prizes(db: Session) -> List[Prize]:
    return PrizeRepository.get_all(db)


def get_prize(db: Session, prize_id: int) -> Prize:
    prize = PrizeRepository.get_by_id(db, prize_id)
    if not prize:
        raise NotFoundException("Prize", prize_id)
    return prize


def create_prize(db: Session, prize_data: PrizeCreate) -> Prize:
    return PrizeRepository.create(db, Prize(**prize_data.model_dump()))


def update_prize(db: Session, prize_id: int, prize_update: PrizeUpdate) -> Prize:
    prize = get_prize(db, prize_id)
    for key, value in prize_update.model_dump(exclude_unset=True).items():
        setattr(prize, key, value)
    return PrizeRepository.update(db, prize)


def delete_prize(db: Session, prize_id: int) -> None:
    prize = get_prize(db, prize_id)
    if RedemptionRepository.count_for_prize(db, prize_id):
        raise CatalogItemInUseException("Prize", prize_id)
    PrizeRepository.delete(db, prize)


# ===== MISSIONS =====

def get_missions(db: Session) -> List[Mission]:
    return MissionRepository.get_all(db)


def get_mission(db: Session, mission_id: int) -> Mission:
    mission = MissionRepository.get_by_id(db, mission_id)
    if not mission:
        raise NotFoundException("Mission", mission_id)
    return mission


def _check_mission(mission: Mission) -> None:
    if mission.goal_type == GOAL_LOG_ACTION_CATEGORY and not mission.goal_category:
        raise ValidationException("goal_category", "required for log_action_category goals")


def create_mission(db: Session, mission_data: MissionCreate) -> Mission:
    mission = Mission(**mission_data.model_dump())
    _check_mission(mission)
    return MissionRepository.create(db, mission)


def update_mission(db: Session, mission_id: int, mission_update: MissionUpdate) -> Mission:
    mission = get_mission(db, mission_id)
    for key, value in mission_update.model_dump(exclude_unset=True).items():
        setattr(mission, key, value)
    try:
        _check_mission(mission)
    except ValidationException:
        db.rollback()
        raise
    return MissionRepository.update(db, mission)


def delete_mission(db: Session, mission_id: int) -> None:
    """Missions with recorded progress are kept; set is_global=False to retire them."""
    mission = get_mission(db, mission_id)
    if MissionProgressRepository.count_for_mission(db, mission_id):
        raise CatalogItemInUseException("Mission", mission_id)
    MissionRepository.delete(db, mission)


# ===== SPECIAL EVENTS =====

def get_events(db: Session) -> List[SpecialEvent]:
    return SpecialEventRepository.get_all(db)


def get_event(db: Session, event_id: int) -> SpecialEvent:
    event = SpecialEventRepository.get_by_id(db, event_id)
    if not event:
        raise NotFoundException("SpecialEvent", event_id)
    return event


def _check_event(event: SpecialEvent) -> None:
    if event.end_date < event.start_date:
        raise ValidationException("end_date", "must not be before start_date")
    if event.event_type == EVENT_DOUBLE_POINTS_CATEGORY and not event.category:
        raise ValidationException("category", "required for double_points_category events")


def create_event(db: Session, event_data: SpecialEventCreate) -> SpecialEvent:
    event = SpecialEvent(**event_data.model_dump())
    _check_event(event)
    return SpecialEventRepository.create(db, event)


def update_event(db: Session, event_id: int, event_update: SpecialEventUpdate) -> SpecialEvent:
    event = get_event(db, event_id)
    for key, value in event_update.model_dump(exclude_unset=True).items():
        setattr(event, key, value)
    try:
        _check_event(event)
    except ValidationException:
        db.rollback()
        raise
    return SpecialEventRepository.update(db, event)


def delete_event(db: Session, event_id: int) -> None:
    SpecialEventRepository.delete(db, get_event(db, event_id))


# ===== SETTINGS =====

def get_settings(db: Session) -> AdminSettings:
    return SettingsRepository.get(db)


def update_settings(db: Session, settings_update: SettingsUpdate) -> AdminSettings:
    """Update admin switches. Sending actions_locked_until=null clears the lock."""
    return SettingsRepository.apply(db, settings_update.model_dump(exclude_unset=True))
