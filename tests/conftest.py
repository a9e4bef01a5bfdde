"""Test fixtures for API, database and async store."""

from __future__ import annotations

import os
from pathlib import Path

TEST_DB_PATH = Path("test_scribe.db")

# Set DATABASE_URL *before* importing scribe modules so the engines are built
# against the throwaway test database.
os.environ.setdefault("DATABASE_URL", f"sqlite:///{TEST_DB_PATH}")
os.environ.setdefault("SECRET_KEY", "test-secret")
os.environ.setdefault("ENVIRONMENT", "test")

import uuid  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from fastapi_users.password import PasswordHelper  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import Session, sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from scribe.auth import issue_token  # noqa: E402
from scribe.database import Base, get_async_session  # noqa: E402
from scribe.main import app  # noqa: E402
from scribe.models.category import Category  # noqa: E402
from scribe.models.post import Post  # noqa: E402
from scribe.models.user import User, UserRole  # noqa: E402
from scribe.security.access import Identity  # noqa: E402
from scribe.security.rate_limit import limiter  # noqa: E402
from scribe.services.store import Store  # noqa: E402

# Disable rate limiting in tests to prevent cross-test 429 flakes
limiter.enabled = False

_password_helper = PasswordHelper()
TEST_PASSWORD = "password123"
TEST_PASSWORD_HASH = _password_helper.hash(TEST_PASSWORD)

sync_engine = create_engine(
    f"sqlite:///{TEST_DB_PATH}", connect_args={"check_same_thread": False}
)
TestingSession = sessionmaker(bind=sync_engine, expire_on_commit=False)


@pytest.fixture(scope="session", autouse=True)
def _schema():
    if TEST_DB_PATH.exists():
        TEST_DB_PATH.unlink()
    Base.metadata.create_all(bind=sync_engine)
    yield
    sync_engine.dispose()
    if TEST_DB_PATH.exists():
        TEST_DB_PATH.unlink()


@pytest.fixture(scope="session")
def client(_schema):
    test_async_engine = create_async_engine(f"sqlite+aiosqlite:///{TEST_DB_PATH}")
    factory = async_sessionmaker(bind=test_async_engine, expire_on_commit=False)

    async def override_get_async_session():
        async with factory() as session:
            yield session

    app.dependency_overrides[get_async_session] = override_get_async_session
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.pop(get_async_session, None)


@pytest.fixture
def db_session(_schema):
    session = TestingSession()
    try:
        yield session
    finally:
        # Ensure database state is isolated between tests
        session.rollback()
        for table in reversed(Base.metadata.sorted_tables):
            session.execute(table.delete())
        session.commit()
        session.close()


def make_user(
    session: Session, email: str, name: str = "Test User", role: str = "user"
) -> User:
    user = User(
        email=email,
        hashed_password=TEST_PASSWORD_HASH,
        name=name,
        role=role,
        is_active=True,
        is_superuser=False,
        is_verified=True,
    )
    session.add(user)
    session.commit()
    return user


def bearer(user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {issue_token(user.id)}"}


@pytest.fixture
def author(db_session: Session) -> User:
    return make_user(db_session, "author@example.com", name="Ada Author")


@pytest.fixture
def other_user(db_session: Session) -> User:
    return make_user(db_session, "other@example.com", name="Otto Other")


@pytest.fixture
def admin_user(db_session: Session) -> User:
    return make_user(
        db_session, "admin@example.com", name="Ann Admin", role=UserRole.ADMIN.value
    )


@pytest.fixture
def category(db_session: Session) -> Category:
    category = Category(name="Test Category", slug="test-category")
    db_session.add(category)
    db_session.commit()
    return category


@pytest.fixture
def post(db_session: Session, author: User, category: Category) -> Post:
    post = Post(
        title="Test Post",
        slug="test-post",
        content="This is a test post content",
        excerpt="This is a test post content...",
        author_id=author.id,
        category_id=category.id,
        tags=["test"],
    )
    db_session.add(post)
    db_session.commit()
    return post


# ── Async store on a private in-memory database ───────────────


@pytest_asyncio.fixture
async def store():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    factory = async_sessionmaker(bind=engine, expire_on_commit=False)
    async with factory() as session:
        yield Store(session)
    await engine.dispose()


@pytest_asyncio.fixture
async def store_user(store: Store) -> User:
    return await store.insert(
        User(
            email=f"{uuid.uuid4().hex[:8]}@example.com",
            hashed_password=TEST_PASSWORD_HASH,
            name="Store User",
        )
    )


@pytest_asyncio.fixture
async def store_category(store: Store) -> Category:
    return await store.insert(Category(name="General", slug="general"))


class StaticVerifier:
    """Credential verifier that knows a fixed token -> identity table."""

    def __init__(self, identities: dict[str, Identity] | None = None) -> None:
        self.identities = identities or {}
        self.calls: list[str] = []

    async def verify(self, token: str) -> Identity | None:
        self.calls.append(token)
        return self.identities.get(token)


@pytest.fixture
def static_verifier() -> StaticVerifier:
    return StaticVerifier()


@pytest.fixture
def auth_headers():
    """Build an Authorization header for a user."""
    return bearer


@pytest.fixture
def user_factory(db_session: Session):
    def _make(email: str, name: str = "Test User", role: str = "user") -> User:
        return make_user(db_session, email, name=name, role=role)

    return _make


@pytest.fixture
def make_verifier():
    """Build a ``StaticVerifier`` from a token -> identity mapping."""
    return StaticVerifier


@pytest_asyncio.fixture
async def inactive_store_user(store: Store) -> User:
    return await store.insert(
        User(
            email="gone@example.com",
            hashed_password=TEST_PASSWORD_HASH,
            name="Gone",
            is_active=False,
        )
    )


@pytest.fixture
def user_password() -> str:
    return TEST_PASSWORD
