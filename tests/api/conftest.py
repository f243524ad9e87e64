import httpx
import pytest_asyncio

from labnotify.main import app


@pytest_asyncio.fixture
async def client(seeded):
    """HTTP client bound to the app; the schema and default settings exist."""
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
