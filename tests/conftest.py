"""
Pytest fixtures shared across the test suite.

- A fixed clock in the reference timezone (Wednesday, Oct 14 2026, 10:30)
- A user directory backed by a mocked Slack lookup
- A repository over a throwaway SQLite file
"""
from datetime import datetime
from unittest.mock import AsyncMock
from zoneinfo import ZoneInfo

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from standup_assistant.database import init_models
from standup_assistant.integrations.slack_client import SlackUser
from standup_assistant.services.standup_repository import StandupRepository
from standup_assistant.services.user_directory import UserDirectory

CAIRO = ZoneInfo("Africa/Cairo")

USERS = {
    "U1ALICE": SlackUser(id="U1ALICE", name="alice", real_name="Alice", email="alice@example.com"),
    "U2BOB": SlackUser(id="U2BOB", name="bob", real_name="Bob"),
    "U3CAROL": SlackUser(id="U3CAROL", name="carol", real_name="Carol", email="carol@example.com"),
}


@pytest.fixture
def now():
    return datetime(2026, 10, 14, 10, 30, tzinfo=CAIRO)


@pytest.fixture
def clock(now):
    return lambda: now


@pytest.fixture
def slack_lookup():
    async def lookup(user_id):
        return USERS.get(user_id) or SlackUser(id=user_id, name=user_id.lower())
    return AsyncMock(side_effect=lookup)


@pytest.fixture
def directory(slack_lookup):
    return UserDirectory(slack_lookup)


@pytest_asyncio.fixture
async def session_factory(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'standup.db'}")
    await init_models(engine)
    yield async_sessionmaker(engine, expire_on_commit=False)
    await engine.dispose()


@pytest.fixture
def repository(session_factory):
    return StandupRepository(session_factory)
