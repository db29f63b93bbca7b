from collections.abc import AsyncIterator, Iterator
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlmodel import SQLModel

from familyhub.core.db import get_session
from familyhub.main import app
from familyhub.models import account as _account  # noqa: F401
from familyhub.models import auth_session as _auth_session  # noqa: F401
from familyhub.models import calendar_event as _calendar_event  # noqa: F401
from familyhub.models import family as _family  # noqa: F401
from familyhub.models import member as _member  # noqa: F401
from familyhub.models import message as _message  # noqa: F401
from familyhub.models import place as _place  # noqa: F401
from familyhub.models import task as _task  # noqa: F401
from familyhub.services.realtime import MessageBroker, get_message_broker


@pytest.fixture
async def client() -> AsyncIterator[AsyncClient]:
    engine = create_async_engine("sqlite+aiosqlite:///:memory:")
    session_maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    async def override_get_session() -> AsyncIterator[AsyncSession]:
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as test_client:
        yield test_client

    app.dependency_overrides.clear()
    await engine.dispose()


@pytest.fixture
def broker(client: AsyncClient) -> MessageBroker:
    fresh = MessageBroker()
    app.dependency_overrides[get_message_broker] = lambda: fresh
    return fresh


@pytest.fixture
def live_broker() -> MessageBroker:
    return MessageBroker(send_timeout=2)


@pytest.fixture
def ws_client(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    live_broker: MessageBroker,
) -> Iterator[TestClient]:
    # File-backed and limited to one pooled connection.
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'family_hub.db'}",
        pool_size=1,
        max_overflow=0,
        pool_timeout=2,
    )
    session_maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async def create_tables() -> None:
        async with engine.begin() as conn:
            await conn.run_sync(SQLModel.metadata.create_all)

    async def override_get_session() -> AsyncIterator[AsyncSession]:
        async with session_maker() as session:
            yield session

    monkeypatch.setattr("familyhub.main.init_db", create_tables)
    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_message_broker] = lambda: live_broker

    with TestClient(app) as test_client:
        yield test_client
        test_client.portal.call(engine.dispose)

    app.dependency_overrides.clear()
