"""
Pytest fixtures for DevConnector tests.

Each test gets a fresh SQLite database file, so separate sessions get
separate connections and real transactions (needed by the write-conflict
tests).
"""

import os

# Must be set before the application settings are first loaded
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-that-is-long-enough-for-hs256")
os.environ.setdefault("ENV", "test")

import pytest  # noqa: E402
from sqlalchemy import create_engine, event  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402

from devconnector.db import Base  # noqa: E402
from devconnector.models import Profile, User  # noqa: E402


@pytest.fixture(scope="function")
def test_db(tmp_path):
    """Create a fresh test database for each test."""
    db_url = f"sqlite:///{tmp_path / 'devconnector_test.db'}"
    engine = create_engine(db_url, connect_args={"check_same_thread": False})

    @event.listens_for(engine, "connect")
    def set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    Base.metadata.create_all(bind=engine)

    TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)

    yield db_url, TestingSessionLocal, engine

    engine.dispose()


@pytest.fixture
def test_session(test_db):
    """Get a test session from the test database."""
    _, TestingSessionLocal, _ = test_db
    session = TestingSessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


@pytest.fixture
def owner_id(test_db) -> int:
    """ID of a committed, active user account with no profile."""
    _, TestingSessionLocal, _ = test_db
    session = TestingSessionLocal()
    user = User(
        name="Ada Lovelace",
        email="ada@example.com",
        password="not-a-real-hash",
        avatar="https://www.gravatar.com/avatar/abc?s=200&r=pg&d=mm",
        is_active=True,
    )
    session.add(user)
    session.commit()
    user_id = user.id
    session.close()
    return user_id


@pytest.fixture
def sample_profile_fields():
    """A complete create-or-update payload."""
    return {
        "company": "Analytical Engines Ltd",
        "website": "https://ada.dev",
        "location": "London",
        "bio": "First programmer",
        "status": "Developer",
        "github_username": "ada",
        "skills": "Python, Rust ,TS",
        "twitter": "https://twitter.com/ada",
        "linkedin": "https://linkedin.com/in/ada",
    }


@pytest.fixture
def blank_profile():
    """An unsaved profile with empty collections, for the pure profile rules."""
    return Profile(
        user_id=1,
        status="Developer",
        skills=["Python"],
        social={},
        experience=[],
        education=[],
    )
