"""
Pytest fixtures for taskboard tests.

Tests that touch storage get three fresh file-backed SQLite stores
through the `stores` fixture.
"""

import os
import tempfile
import uuid
from typing import AsyncGenerator

_TEST_DIR = tempfile.mkdtemp(prefix="taskboard-tests-")

# Settings are read once on first import; configure the stores before that.
os.environ["SECRET_KEY"] = "test-secret-key-for-testing-only-0123456789"
os.environ["USER_DATABASE_URL"] = f"sqlite+aiosqlite:///{_TEST_DIR}/users.db"
os.environ["BOARD_DATABASE_URL"] = f"sqlite+aiosqlite:///{_TEST_DIR}/boards.db"
os.environ["TASK_DATABASE_URL"] = f"sqlite+aiosqlite:///{_TEST_DIR}/tasks.db"
os.environ["OUTBOX_RELAY_ENABLED"] = "false"
os.environ.pop("MEMBERSHIP_SERVICE_URL", None)

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.config import get_settings

get_settings.cache_clear()

from taskboard.database import (
    board_session_maker,
    drop_db,
    init_db,
    task_session_maker,
    user_session_maker,
)
from taskboard.kernel.boards.board_registry import BoardRegistry
from taskboard.kernel.events.outbox import OutboxRelay
from taskboard.kernel.events.topic import board_deleted_topic
from taskboard.kernel.identity.tokens import TokenManager
from taskboard.kernel.models.board import Board, BoardRole
from taskboard.kernel.permissions.membership_checker import LedgerMembershipChecker
from taskboard.kernel.permissions.membership_ledger import MembershipLedger
from taskboard.kernel.tasks.cascade import SUBSCRIPTION_NAME, register_task_subscriptions


@pytest_asyncio.fixture
async def stores() -> AsyncGenerator[None, None]:
    """Create every store's tables for one test, then drop them."""
    await init_db()
    yield
    await drop_db()


@pytest_asyncio.fixture
async def user_session(stores) -> AsyncGenerator[AsyncSession, None]:
    async with user_session_maker() as session:
        yield session


@pytest_asyncio.fixture
async def board_session(stores) -> AsyncGenerator[AsyncSession, None]:
    async with board_session_maker() as session:
        yield session


@pytest_asyncio.fixture
async def task_session(stores) -> AsyncGenerator[AsyncSession, None]:
    async with task_session_maker() as session:
        yield session


@pytest.fixture
def token_manager() -> TokenManager:
    """Create a token manager for tests."""
    return TokenManager(
        secret_key="test-secret-key-for-testing-only-0123456789",
        algorithm="HS256",
        expire_minutes=30,
    )


@pytest.fixture
def cascade_subscription():
    """The task store's board-deleted subscription, removed after the test."""
    register_task_subscriptions(board_deleted_topic, task_session_maker)
    yield board_deleted_topic
    board_deleted_topic.unsubscribe(SUBSCRIPTION_NAME)


@pytest.fixture
def relay(stores, cascade_subscription) -> OutboxRelay:
    return OutboxRelay(
        board_session_maker,
        {board_deleted_topic.name: board_deleted_topic},
        max_attempts=3,
        batch_size=10,
        poll_interval=0.01,
    )


@pytest.fixture
def membership_checker(stores) -> LedgerMembershipChecker:
    return LedgerMembershipChecker(board_session_maker)


@pytest.fixture
def admin_id() -> uuid.UUID:
    return uuid.uuid4()


@pytest.fixture
def member_id() -> uuid.UUID:
    return uuid.uuid4()


@pytest.fixture
def viewer_id() -> uuid.UUID:
    return uuid.uuid4()


@pytest_asyncio.fixture
async def board(
    board_session: AsyncSession,
    admin_id: uuid.UUID,
    member_id: uuid.UUID,
    viewer_id: uuid.UUID,
) -> Board:
    """A board with one Admin, one Member and one Viewer."""
    registry = BoardRegistry(board_session)
    created = await registry.create("Roadmap", "Q3 planning", creator_id=admin_id)

    ledger = MembershipLedger(board_session)
    await ledger.add_member(created.id, member_id, BoardRole.MEMBER)
    await ledger.add_member(created.id, viewer_id, BoardRole.VIEWER)
    await board_session.commit()
    return created


@pytest_asyncio.fixture
async def client(relay: OutboxRelay) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client bound to the application."""
    from taskboard.api.deps import get_relay
    from taskboard.main import app

    app.dependency_overrides[get_relay] = lambda: relay
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()
