"""Core test fixtures for survival needs tests."""

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from survival_needs.adapters.protocols import CharacterRef
from survival_needs.config import Settings
from survival_needs.database.models.base import Base
from survival_needs.database.models.characters import Character
from survival_needs.schemas.loader import ConfigSnapshot
from survival_needs.service import NeedsService
from tests.factories import create_character, enable_sqlite_savepoints


@pytest.fixture(scope="session")
def engine():
    """Create SQLite in-memory engine for fast tests."""
    engine = create_engine(
        "sqlite:///:memory:",
        echo=False,
        connect_args={"check_same_thread": False},
    )
    enable_sqlite_savepoints(engine)

    # Import all models to ensure they're registered with Base
    from survival_needs.database.models import characters, world  # noqa: F401

    # Create all tables
    Base.metadata.create_all(bind=engine)
    return engine


@pytest.fixture(scope="function")
def db_session(engine) -> Session:
    """Create a fresh database session for each test.

    Uses a transaction that rolls back after each test for isolation.
    """
    connection = engine.connect()
    transaction = connection.begin()
    session_factory = sessionmaker(bind=connection)
    session = session_factory()

    yield session

    session.close()
    transaction.rollback()
    connection.close()


@pytest.fixture
def settings() -> Settings:
    """Settings with no debounce delay and no database side effects."""
    return Settings(
        database_url="sqlite:///:memory:",
        reconcile_debounce_seconds=0.0,
        inter_character_delay_seconds=0.0,
        tracker_config_path=None,
        consumption_config_path=None,
    )


@pytest.fixture
def config() -> ConfigSnapshot:
    """Snapshot of the built-in defaults (4 hour interval)."""
    return ConfigSnapshot.defaults()


@pytest.fixture
def character(db_session: Session) -> Character:
    """Create a player character with empty flags."""
    return create_character(db_session, name="Valeros")


@pytest.fixture
def npc(db_session: Session) -> Character:
    """Create an NPC character with empty flags."""
    return create_character(db_session, name="Bartender Joe", npc=True)


@pytest.fixture
def service(db_session: Session, config: ConfigSnapshot, settings: Settings) -> NeedsService:
    """NeedsService wired to the SQL adapters on the test session."""
    return NeedsService.from_session(db_session, config=config, settings=settings)


@pytest.fixture
def character_ref(character: Character) -> CharacterRef:
    """Engine-side handle on the character fixture."""
    return CharacterRef(id=character.id, name=character.name)
