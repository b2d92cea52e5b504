"""
Pytest fixtures for thesis tracker tests.

HTTP tests drive the app in-process against a temp file SQLite database, so
every connection (fixtures and app) sees the same data.
"""

import os
import tempfile
import uuid
from typing import AsyncGenerator, Callable, Optional

# Use file-based SQLite so all connections share the same DB (in-memory is per-connection)
_tmp = tempfile.NamedTemporaryFile(suffix=".db", delete=False)
_tmp.close()
TEST_DB_PATH = _tmp.name
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{TEST_DB_PATH}"
os.environ["SECRET_KEY"] = "test-secret-key-for-testing-only-0123456789"
os.environ["DEADLINE_TIMEZONE"] = "UTC"

# Force config reload so app uses test DB
from thesis_tracker.config import get_settings
get_settings.cache_clear()

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import NullPool

from thesis_tracker.database import get_db
from thesis_tracker.kernel.identity.jwt import create_access_token
from thesis_tracker.kernel.identity.password import hash_password
from thesis_tracker.kernel.models import Account, AccountRole, Base, Thesis, ThesisStatus
from thesis_tracker.main import app

PASSWORD = "CorrectHorse123"

TEST_ENGINE = create_async_engine(
    f"sqlite+aiosqlite:///{TEST_DB_PATH}",
    echo=False,
    connect_args={"check_same_thread": False},
    poolclass=NullPool,
)
TEST_SESSION_MAKER = async_sessionmaker(
    TEST_ENGINE,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)


async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
    async with TEST_SESSION_MAKER() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


def pytest_sessionfinish(session, exitstatus):
    """Clean up temp DB file after test run."""
    try:
        if os.path.exists(TEST_DB_PATH):
            os.unlink(TEST_DB_PATH)
    except OSError:
        pass


@pytest_asyncio.fixture
async def db_schema():
    """Fresh tables for each test."""
    async with TEST_ENGINE.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with TEST_ENGINE.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest_asyncio.fixture
async def db_session(db_schema) -> AsyncGenerator[AsyncSession, None]:
    """Session for service-level tests; committed explicitly by the test."""
    async with TEST_SESSION_MAKER() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture
async def client(db_schema):
    """Async client bound to the test DB."""
    app.dependency_overrides[get_db] = override_get_db
    try:
        async with AsyncClient(
            transport=ASGITransport(app=app),
            base_url="http://test",
        ) as ac:
            yield ac
    finally:
        app.dependency_overrides.pop(get_db, None)


@pytest.fixture
def make_account(db_schema) -> Callable:
    """Factory that persists an account and returns it."""

    async def _make(
        role: AccountRole = AccountRole.STUDENT,
        last_name: str = "Dela Cruz",
        first_name: str = "Juan",
        middle_name: Optional[str] = None,
        is_active: bool = True,
    ) -> Account:
        async with TEST_SESSION_MAKER() as session:
            account = Account(
                id=uuid.uuid4(),
                email=f"{role.value}-{uuid.uuid4().hex[:8]}@example.edu",
                password_hash=hash_password(PASSWORD, rounds=4),
                last_name=last_name,
                first_name=first_name,
                middle_name=middle_name,
                role=role,
                is_active=is_active,
            )
            session.add(account)
            await session.commit()
            return account

    return _make


@pytest.fixture
def make_thesis(db_schema) -> Callable:
    """Factory that persists a thesis directly, bypassing the API."""

    async def _make(
        authors,
        advisers,
        panelists=(),
        title: str = "Crop Yield Forecasting",
        phase: int = 1,
        status: ThesisStatus = ThesisStatus.NEW,
        approved: Optional[bool] = True,
        locked: bool = False,
    ) -> Thesis:
        async with TEST_SESSION_MAKER() as session:
            thesis = Thesis(
                id=uuid.uuid4(),
                title=title,
                description="",
                authors=[str(a.id) for a in authors],
                advisers=[str(a.id) for a in advisers],
                panelists=[str(a.id) for a in panelists],
                phase=phase,
                status=status,
                approved=approved,
                locked=locked,
                inactive=False,
            )
            session.add(thesis)
            await session.commit()
            return thesis

    return _make


@pytest.fixture
def fetch_thesis() -> Callable:
    """Read a thesis straight from the DB."""

    async def _fetch(thesis_id: uuid.UUID) -> Thesis:
        async with TEST_SESSION_MAKER() as session:
            return await session.get(Thesis, thesis_id)

    return _fetch


@pytest.fixture
def auth() -> Callable:
    """Bearer header builder for an account."""

    def _auth(account: Account) -> dict:
        token, _, _ = create_access_token(account.id, AccountRole(account.role).value)
        return {"Authorization": f"Bearer {token}"}

    return _auth
