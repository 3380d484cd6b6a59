"""
Shared fixtures for the engine tests.

Every test gets a fresh in-memory SQLite database. Dates are pinned to a
fixed Friday so period keys and month keys are deterministic.
"""
import os

# Keep the app module away from the real database and /var/log
os.environ.setdefault("PRISMA_POINTS_DATABASE_URL", "sqlite://")
os.environ.setdefault("PRISMA_POINTS_LOG_DIR", "./logs")

import pytest
from datetime import date, timedelta
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from prisma_points.database import Base
from prisma_points.models import Action, Mission, Prize, SpecialEvent, User
from prisma_points.repositories.settings_repository import SettingsRepository
from prisma_points.constants import (
    ROLE_ADMIN, ROLE_ANALYST, MISSION_WEEKLY, GOAL_LOG_ACTION_CATEGORY,
    EVENT_DOUBLE_POINTS_CATEGORY
)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db_session(engine):
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def default_settings(db_session):
    return SettingsRepository.get(db_session)


@pytest.fixture
def today():
    return date(2024, 7, 26)  # Friday, week 30


@pytest.fixture
def yesterday(today):
    return today - timedelta(days=1)


@pytest.fixture
def make_user(db_session):
    def _make_user(name="Ana Souza", username="ana", role=ROLE_ANALYST, points=0):
        user = User(name=name, username=username, role=role, points=points)
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user
    return _make_user


@pytest.fixture
def analyst(make_user):
    return make_user()


@pytest.fixture
def admin(make_user):
    return make_user(name="Carla Lima", username="carla", role=ROLE_ADMIN)


@pytest.fixture
def make_action(db_session):
    def _make_action(category="Inovação", points=90, description="Solução alternativa"):
        action = Action(category=category, description=description, points=points, validator="Liderança")
        db_session.add(action)
        db_session.commit()
        db_session.refresh(action)
        return action
    return _make_action


@pytest.fixture
def innovation_action(make_action):
    return make_action(category="Inovação", points=90, description="Criação de soluções alternativas")


@pytest.fixture
def collaboration_action(make_action):
    return make_action(
        category="Colaboração e Desenvolvimento", points=100, description="Mentoria de colegas"
    )


@pytest.fixture
def prize(db_session):
    prize = Prize(category="Folgas", description="Meio período de folga", cost=300, benefit="4 horas")
    db_session.add(prize)
    db_session.commit()
    db_session.refresh(prize)
    return prize


@pytest.fixture
def weekly_mission(db_session):
    mission = Mission(
        title="Colaborador da Semana",
        mission_type=MISSION_WEEKLY,
        goal_type=GOAL_LOG_ACTION_CATEGORY,
        goal_category="Colaboração e Desenvolvimento",
        goal_count=2,
        reward_points=50,
        is_global=True
    )
    db_session.add(mission)
    db_session.commit()
    db_session.refresh(mission)
    return mission


@pytest.fixture
def make_event(db_session):
    def _make_event(category="Inovação", start_date=None, end_date=None, name="Semana da Inovação"):
        event = SpecialEvent(
            name=name,
            event_type=EVENT_DOUBLE_POINTS_CATEGORY,
            category=category,
            start_date=start_date,
            end_date=end_date
        )
        db_session.add(event)
        db_session.commit()
        db_session.refresh(event)
        return event
    return _make_event
