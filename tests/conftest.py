"""
Shared pytest fixtures.

The database URL and channel settings are forced through the environment
before any labnotify module is imported, so the module-level engine points
at a throwaway SQLite file and no real provider credentials are picked up.
"""

import asyncio
import os
import tempfile

_TEST_DIR = tempfile.mkdtemp(prefix="labnotify-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{os.path.join(_TEST_DIR, 'test.db')}"
os.environ["LOG_LEVEL"] = "INFO"
os.environ["SMS_PROVIDER"] = "reve"
os.environ["SMS_API_KEY"] = ""
os.environ["SMS_SENDER_ID"] = ""
os.environ["SMS_API_URL"] = ""
os.environ["WHATSAPP_ACCESS_TOKEN"] = ""
os.environ["WHATSAPP_PHONE_NUMBER_ID"] = ""
os.environ["CHANNEL_RETRY_BACKOFF_SECONDS"] = "0"

import pytest
import pytest_asyncio
from sqlalchemy import select, func

from labnotify.database import async_session_factory, drop_database, engine, init_database
from labnotify.models import Channel, NotificationSetting, Profile
from labnotify.services.channel_client import ChannelClient, ChannelResult
from labnotify.services.settings_seeder import seed_default_settings


# ============================================================================
# DATABASE FIXTURES
# ============================================================================


@pytest_asyncio.fixture
async def db():
    """Fresh schema per test; pooled connections are dropped afterwards."""
    await init_database()
    yield
    await drop_database()
    await engine.dispose()


@pytest_asyncio.fixture
async def session(db):
    async with async_session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def seeded(db):
    """Default settings rows: in-app only for every event type."""
    await seed_default_settings()


# ============================================================================
# PROFILE FIXTURES
# ============================================================================


@pytest_asyncio.fixture
async def patient(session) -> Profile:
    profile = Profile(id="patient-1", full_name="Rahim Uddin", phone="01712345678", role="patient")
    session.add(profile)
    await session.commit()
    return profile


@pytest_asyncio.fixture
async def patient_without_phone(session) -> Profile:
    profile = Profile(id="patient-2", full_name="Karim Ali", phone=None, email="karim@example.com", role="patient")
    session.add(profile)
    await session.commit()
    return profile


@pytest_asyncio.fixture
async def admin(session) -> Profile:
    profile = Profile(id="admin-1", full_name="Lab Admin", role="admin")
    session.add(profile)
    await session.commit()
    return profile


# ============================================================================
# HELPERS
# ============================================================================


@pytest.fixture
def set_channels(session):
    """Set channel flags for one event type directly in the database."""

    async def _set(notification_type: str, **flags) -> NotificationSetting:
        result = await session.execute(
            select(NotificationSetting).where(NotificationSetting.notification_type == notification_type)
        )
        setting = result.scalar_one()
        for key, value in flags.items():
            setattr(setting, key, value)
        await session.commit()
        return setting

    return _set


@pytest.fixture
def count_rows(session):
    async def _count(model) -> int:
        return await session.scalar(select(func.count()).select_from(model)) or 0

    return _count


class FakeChannelClient(ChannelClient):
    """Records sends and replays canned results (last one repeats)."""

    def __init__(self, channel: Channel, results=None, delay: float = 0):
        self.channel = channel
        self.results = list(results or [ChannelResult(success=True, response={"id": "msg-1"}, provider="fake")])
        self.delay = delay
        self.calls = []

    async def send(self, destination, message, **options):
        self.calls.append({"destination": destination, "message": message, "options": options})
        if self.delay:
            await asyncio.sleep(self.delay)
        if len(self.results) > 1:
            return self.results.pop(0)
        return self.results[0]


@pytest.fixture
def fake_client():
    return FakeChannelClient
