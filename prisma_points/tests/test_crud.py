"""
Tests for catalog management and default seeding.

Tests cover:
1. User, action, prize, mission and event CRUD rules
2. Deletion of referenced catalog entries
3. Admin settings
4. Default catalog seeding
"""
import pytest
from datetime import timedelta

from prisma_points import crud
from prisma_points.seed import seed_defaults, DEFAULT_ACTIONS, DEFAULT_PRIZES, DEFAULT_MISSIONS
from prisma_points.schemas import (
    UserCreate, UserUpdate, ActionCreate, ActionUpdate, MissionCreate, MissionUpdate,
    SpecialEventCreate, SpecialEventUpdate, SettingsUpdate
)
from prisma_points.services.redemption_service import RedemptionService
from prisma_points.services.validation_service import ValidationService
from prisma_points.models import Action, Mission, Prize, User
from prisma_points.exceptions import (
    CatalogItemInUseException, NotFoundException, ValidationException
)


class TestUsers:
    """Tests for user management"""

    def test_new_user_starts_at_zero(self, db_session):
        """Created users have no points"""
        user = crud.create_user(db_session, UserCreate(name="Ana Souza", username="ana"))
        assert user.points == 0
        assert user.role == "Analyst"

    def test_duplicate_username(self, db_session, analyst):
        """Usernames are unique"""
        with pytest.raises(ValidationException):
            crud.create_user(db_session, UserCreate(name="Outra Ana", username="ana"))

    def test_update_profile(self, db_session, analyst):
        """Profile fields can change"""
        user = crud.update_user(db_session, analyst.id, UserUpdate(name="Ana S."))
        assert user.name == "Ana S."
        assert user.username == "ana"

    def test_delete_user_with_activity(self, db_session, default_settings, analyst, innovation_action, today):
        """Users with logs are kept"""
        ValidationService(db_session).submit(analyst.id, innovation_action.id, target_date=today)

        with pytest.raises(CatalogItemInUseException):
            crud.delete_user(db_session, analyst.id)

    def test_get_missing_user(self, db_session):
        """Unknown IDs raise not found"""
        with pytest.raises(NotFoundException):
            crud.get_user(db_session, 999)


class TestCatalog:
    """Tests for action, prize and mission management"""

    def test_update_action(self, db_session, innovation_action):
        """Partial updates leave other fields alone"""
        action = crud.update_action(db_session, innovation_action.id, ActionUpdate(points=95))
        assert action.points == 95
        assert action.category == "Inovação"

    def test_delete_unused_action(self, db_session):
        """Unreferenced actions can be deleted"""
        action = crud.create_action(db_session, ActionCreate(category="Inovação", description="Nova", points=10))
        crud.delete_action(db_session, action.id)

        with pytest.raises(NotFoundException):
            crud.get_action(db_session, action.id)

    def test_delete_logged_action_refused(self, db_session, default_settings, analyst, innovation_action, today):
        """Actions with logs are kept"""
        ValidationService(db_session).submit(analyst.id, innovation_action.id, target_date=today)

        with pytest.raises(CatalogItemInUseException):
            crud.delete_action(db_session, innovation_action.id)

    def test_delete_redeemed_prize_refused(self, db_session, default_settings, make_user, prize, today):
        """Prizes with redemptions are kept"""
        user = make_user(points=300)
        RedemptionService(db_session).request(user.id, prize.id, today)

        with pytest.raises(CatalogItemInUseException):
            crud.delete_prize(db_session, prize.id)

    def test_mission_requires_category(self, db_session):
        """Category goals need a category"""
        with pytest.raises(ValidationException):
            crud.create_mission(db_session, MissionCreate(title="Sem categoria", mission_type="daily"))

    def test_update_cannot_clear_category(self, db_session, weekly_mission):
        """Removing the goal category is refused and the stored mission is unchanged"""
        with pytest.raises(ValidationException):
            crud.update_mission(db_session, weekly_mission.id, MissionUpdate(goal_category=None))

        assert crud.get_mission(db_session, weekly_mission.id).goal_category == "Colaboração e Desenvolvimento"


class TestEvents:
    """Tests for special event management"""

    def test_end_before_start_refused(self, db_session, today):
        """An event cannot end before it starts"""
        with pytest.raises(ValidationException):
            crud.create_event(db_session, SpecialEventCreate(
                name="Invertido", category="Inovação",
                start_date=today, end_date=today - timedelta(days=1)
            ))

    def test_double_points_requires_category(self, db_session, today):
        """Double points events need a category"""
        with pytest.raises(ValidationException):
            crud.create_event(db_session, SpecialEventCreate(name="Sem categoria", start_date=today, end_date=today))

    def test_invalid_update_is_discarded(self, db_session, make_event, today):
        """A refused update leaves the stored event unchanged"""
        event = make_event(start_date=today, end_date=today)

        with pytest.raises(ValidationException):
            crud.update_event(db_session, event.id, SpecialEventUpdate(end_date=today - timedelta(days=1)))

        assert crud.get_event(db_session, event.id).end_date == today


class TestSettings:
    """Tests for admin settings"""

    def test_defaults(self, db_session):
        """Everything is open by default"""
        settings = crud.get_settings(db_session)
        assert settings.actions_locked_until is None
        assert settings.prizes_locked is False

    def test_lock_and_clear(self, db_session, today):
        """Setting and clearing the logging lock"""
        crud.update_settings(db_session, SettingsUpdate(actions_locked_until=today, prizes_locked=True))
        settings = crud.update_settings(db_session, SettingsUpdate(actions_locked_until=None))

        assert settings.actions_locked_until is None
        assert settings.prizes_locked is True


class TestSeed:
    """Tests for seed_defaults function"""

    def test_seeds_empty_database(self, db_session):
        """Empty catalogs receive the defaults and an admin user"""
        inserted = seed_defaults(db_session)

        assert inserted["actions"] == len(DEFAULT_ACTIONS)
        assert db_session.query(Action).count() == len(DEFAULT_ACTIONS)
        assert db_session.query(Prize).count() == len(DEFAULT_PRIZES)
        assert db_session.query(Mission).count() == len(DEFAULT_MISSIONS)
        assert db_session.query(User).filter(User.role == "Admin").count() == 1

    def test_second_run_is_noop(self, db_session):
        """Seeding twice inserts nothing the second time"""
        seed_defaults(db_session)
        inserted = seed_defaults(db_session)

        assert not any(inserted.values())
        assert db_session.query(Action).count() == len(DEFAULT_ACTIONS)

    def test_existing_catalog_untouched(self, db_session, innovation_action):
        """A catalog with rows is not seeded"""
        inserted = seed_defaults(db_session)

        assert inserted["actions"] == 0
        assert db_session.query(Action).count() == 1
