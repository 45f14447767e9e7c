"""
Root test configuration and fixtures.

Every test gets its own in-memory SQLite database with the full schema.
Set DATABASE_URL to run against PostgreSQL instead.
"""

import os
from typing import Callable, Generator, Optional

import pytest
from sqlalchemy import create_engine, text
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

from orgsync.config.settings import normalize_database_url
from orgsync.db_base import Base
import orgsync.models  # noqa: F401 - registers all tables on Base.metadata
from orgsync.models import MemberRole, Organization, OrganizationMember, User
from orgsync.repositories import (
    OrganizationMemberRepository,
    OrganizationRepository,
    UserRepository,
)

# Set test environment
os.environ.setdefault("ENV", "test")


def _get_test_database_url() -> str:
    """Get database URL for tests."""
    database_url = normalize_database_url(os.getenv("DATABASE_URL"))
    if database_url:
        return database_url

    # Default to SQLite for unit tests if no PostgreSQL available
    return "sqlite:///:memory:"


def _is_postgres() -> bool:
    """Check if using PostgreSQL."""
    return _get_test_database_url().startswith("postgresql")


@pytest.fixture(scope="function")
def db_engine():
    """
    Create database engine with a fresh schema.

    Uses PostgreSQL if DATABASE_URL is set, otherwise SQLite in-memory.
    """
    database_url = _get_test_database_url()

    if _is_postgres():
        try:
            engine = create_engine(database_url, pool_pre_ping=True)
            with engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except Exception as e:
            pytest.skip(
                f"PostgreSQL not available. Set DATABASE_URL or use SQLite. Error: {e}"
            )
    else:
        # StaticPool keeps one connection so the in-memory database survives
        # across sessions and threads (FastAPI runs sync routes in a pool).
        engine = create_engine(
            database_url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )

    Base.metadata.create_all(bind=engine)

    yield engine

    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db_session(db_engine) -> Generator[Session, None, None]:
    """
    Create a database session.

    Code under test commits for real; isolation comes from the per-test schema.
    """
    SessionLocal = sessionmaker(autoflush=False, bind=db_engine)
    session = SessionLocal()

    yield session

    session.close()


# =============================================================================
# Data factories
# =============================================================================

@pytest.fixture
def make_user(db_session) -> Callable[..., User]:
    """Factory that upserts and commits a user."""
    def _make(
        clerk_user_id: str = "user_clerk_123",
        email: str = "test@example.com",
        first_name: Optional[str] = "John",
        last_name: Optional[str] = "Doe",
    ) -> User:
        user = UserRepository(db_session).upsert(
            clerk_user_id=clerk_user_id,
            email=email,
            first_name=first_name,
            last_name=last_name,
        )
        db_session.commit()
        return user
    return _make


@pytest.fixture
def make_org(db_session) -> Callable[..., Organization]:
    """Factory that upserts and commits an organization."""
    def _make(
        clerk_org_id: str = "org_clerk_123",
        name: str = "Test Organization",
        slug: str = "test-org",
    ) -> Organization:
        org = OrganizationRepository(db_session).upsert(
            clerk_org_id=clerk_org_id,
            name=name,
            slug=slug,
        )
        db_session.commit()
        return org
    return _make


@pytest.fixture
def add_member(db_session) -> Callable[..., OrganizationMember]:
    """Factory that links a user to an organization and commits."""
    def _add(organization_id: str, user_id: str, role: MemberRole = MemberRole.MEMBER):
        members = OrganizationMemberRepository(db_session)
        members.create_if_absent(organization_id=organization_id, user_id=user_id, role=role)
        db_session.commit()
        return members.get_member(organization_id, user_id)
    return _add


# =============================================================================
# Markers
# =============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "security: mark test as security-focused")
