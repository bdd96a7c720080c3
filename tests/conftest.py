"""Pytest configuration and shared fixtures.

This module provides fixtures and configuration used across all tests.
"""

import os
from typing import Callable, Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

# Set required environment variables for tests BEFORE importing app modules
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("SECRET_KEY", "test_secret_key_for_testing_only_0123456789")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("ENVIRONMENT", "development")

from formly.main import app
from formly.models.database import Base, enable_sqlite_foreign_keys, get_db
from formly.models.user import User
from formly.schemas.form import QuestionIn, QuestionType
from formly.services.form_repository import FormRepository
from formly.services.passwords import PasswordHasher

TEST_PASSWORD = "correct-horse"


@pytest.fixture(scope="function")
def db_engine():
    """Create a test database engine with SQLite in-memory database.

    Yields:
        Engine: SQLAlchemy engine for testing

    Note:
        StaticPool keeps one connection so every session, including the
        ones opened by API requests, sees the same in-memory database.
    """
    engine = create_engine(
        "sqlite:///:memory:",
        echo=False,  # Set to True for SQL debugging
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    # Enable foreign key support for SQLite
    enable_sqlite_foreign_keys(engine)

    # Create all tables
    Base.metadata.create_all(engine)

    yield engine

    # Drop all tables after test
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture(scope="function")
def session_factory(db_engine) -> sessionmaker:
    return sessionmaker(
        bind=db_engine,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
    )


@pytest.fixture(scope="function")
def db_session(session_factory) -> Generator[Session, None, None]:
    """Create a test database session.

    Yields:
        Session: SQLAlchemy session for testing

    Note:
        Session is rolled back after each test to ensure isolation.
    """
    session = session_factory()

    yield session

    # Rollback any uncommitted changes
    session.rollback()
    session.close()


@pytest.fixture
def client(session_factory) -> Generator[TestClient, None, None]:
    """TestClient whose requests use the test database."""

    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db_session) -> Callable[..., User]:
    """Factory creating users whose password is TEST_PASSWORD."""

    def _make_user(email: str = "alice@example.com", name: str = "Alice") -> User:
        user = User(
            name=name,
            email=email,
            password_hash=PasswordHasher.hash_password(TEST_PASSWORD),
        )
        db_session.add(user)
        db_session.commit()
        return user

    return _make_user


@pytest.fixture
def make_form(db_session):
    """Factory creating forms through the repository."""

    def _make_form(owner, title="Feedback", questions=None, published=True):
        if questions is None:
            questions = [
                QuestionIn(text="Your name", type=QuestionType.TEXT, required=True),
                QuestionIn(
                    text="Favourite colour",
                    type=QuestionType.MULTIPLE_CHOICE,
                    options=["Red", "Blue"],
                ),
            ]
        return FormRepository(db_session).create(
            owner_id=owner.id,
            title=title,
            description=None,
            questions=questions,
            published=published,
        )

    return _make_form


@pytest.fixture
def sign_in() -> Callable:
    """Sign a TestClient in; the client keeps the session cookie."""

    def _sign_in(client: TestClient, email: str, password: str = TEST_PASSWORD):
        return client.post("/api/auth/signin", json={"email": email, "password": password})

    return _sign_in


@pytest.fixture
def alice(make_user) -> User:
    return make_user("alice@example.com", "Alice")


@pytest.fixture
def bob(make_user) -> User:
    return make_user("bob@example.com", "Bob")


@pytest.fixture
def alice_client(client, alice, sign_in) -> TestClient:
    """Client signed in as alice."""
    response = sign_in(client, alice.email)
    assert response.status_code == 200
    return client
