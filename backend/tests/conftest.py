"""
Pytest configuration and fixtures for backend tests.

Provides shared fixtures for:
- Test database sessions (in-memory SQLite)
- Users, events and tasks factories
- Request identities and bearer-token headers
- FastAPI test client with the database dependency overridden
"""

import os
import pytest
from datetime import datetime, timedelta
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

TEST_JWT_SECRET = "test-jwt-secret-key-for-eventflow-unit-tests-0123456789"

# Set test environment variables before importing app modules
os.environ['EVENTFLOW_DB_URL'] = 'sqlite:///:memory:'
os.environ['EVENTFLOW_ENV'] = 'test'
os.environ['JWT_SECRET_KEY'] = TEST_JWT_SECRET
os.environ.pop('SESSION_SECRET_KEY', None)
os.environ.pop('CRON_SECRET', None)

from backend.src.config.settings import get_settings  # noqa: E402
from backend.src.middleware.identity import Identity  # noqa: E402
from backend.src.models import (  # noqa: E402
    Base,
    Event,
    EventStatus,
    Task,
    TaskCategory,
    TaskStatus,
    User,
    UserRole,
)
from backend.src.services.token_service import TokenService  # noqa: E402

get_settings.cache_clear()


# ============================================================================
# Database Fixtures
# ============================================================================

@pytest.fixture(scope='function')
def test_db_engine():
    """Create an in-memory SQLite database engine for testing."""
    from sqlalchemy import event

    engine = create_engine(
        'sqlite:///:memory:',
        connect_args={'check_same_thread': False},
        poolclass=StaticPool,
    )

    # Enable foreign key constraints for SQLite
    def _fk_pragma_on_connect(dbapi_con, con_record):
        dbapi_con.execute('pragma foreign_keys=ON')

    event.listen(engine, 'connect', _fk_pragma_on_connect)

    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture(scope='function')
def test_db_session(test_db_engine):
    """Create a test database session."""
    TestingSessionLocal = sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=test_db_engine
    )
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


# ============================================================================
# Sample Data Factories
# ============================================================================

@pytest.fixture
def sample_user(test_db_session):
    """Factory for creating User models in the database."""
    counter = {'n': 0}

    def _create(role=UserRole.CORE_MEMBER, email=None, name=None, is_active=True):
        counter['n'] += 1
        user = User(
            email=email or f"user{counter['n']}@example.com",
            name=name or f"User {counter['n']}",
            role=role,
            is_active=is_active,
        )
        test_db_session.add(user)
        test_db_session.commit()
        test_db_session.refresh(user)
        return user
    return _create


@pytest.fixture
def organizer(sample_user):
    return sample_user(role=UserRole.ORGANIZER, email="lead@example.com", name="Event Lead")


@pytest.fixture
def member(sample_user):
    return sample_user(role=UserRole.CORE_MEMBER, email="member@example.com", name="Core Member")


@pytest.fixture
def other_member(sample_user):
    return sample_user(role=UserRole.CORE_MEMBER, email="other@example.com", name="Other Member")


@pytest.fixture
def sample_event(test_db_session):
    """Factory for creating Event models in the database."""
    def _create(
        name='Launch Night',
        date=None,
        status=EventStatus.PLANNING,
        is_template=False,
        city=None,
        parent=None,
        created_by=None,
    ):
        event = Event(
            name=name,
            date=date or datetime(2026, 12, 1, 18, 0),
            status=status,
            is_template=is_template,
            city=city,
            parent_event_id=parent.id if parent else None,
            created_by_user_id=created_by.id if created_by else None,
        )
        test_db_session.add(event)
        test_db_session.commit()
        test_db_session.refresh(event)
        return event
    return _create


@pytest.fixture
def sample_task(test_db_session):
    """Factory for creating Task models in the database."""
    def _create(
        event,
        owner,
        category=TaskCategory.GRAPHICS,
        title='Design poster',
        deadline=None,
        status=TaskStatus.PENDING,
        blocker_note=None,
        status_changed_at=None,
    ):
        task = Task(
            event_id=event.id,
            owner_id=owner.id,
            category=category,
            title=title,
            deadline=deadline or datetime.utcnow() + timedelta(days=7),
            status=status,
            blocker_note=blocker_note,
            status_changed_at=status_changed_at or datetime.utcnow(),
        )
        test_db_session.add(task)
        test_db_session.commit()
        test_db_session.refresh(task)
        return task
    return _create


# ============================================================================
# Identity Fixtures
# ============================================================================

@pytest.fixture
def identity_for():
    """Build the request Identity of a user."""
    def _create(user, auth_method='token'):
        return Identity.from_user(user, auth_method=auth_method)
    return _create


@pytest.fixture
def token_service(test_db_session):
    return TokenService(test_db_session, TEST_JWT_SECRET)


@pytest.fixture
def auth_headers(token_service):
    """Build Authorization headers carrying a real token for a user."""
    def _create(user):
        return {"Authorization": f"Bearer {token_service.issue_token(user)}"}
    return _create


# ============================================================================
# FastAPI Test Client Fixture
# ============================================================================

@pytest.fixture
def test_client(test_db_session):
    """Create a test client for FastAPI application."""
    from fastapi.testclient import TestClient
    from backend.src.main import app
    from backend.src.db.database import get_db

    def get_test_db():
        try:
            yield test_db_session
        finally:
            pass

    app.dependency_overrides[get_db] = get_test_db

    with TestClient(app) as client:
        yield client

    app.dependency_overrides.clear()
