import httpx
import pytest
from httpx import ASGITransport


@pytest.fixture
def mock_env(monkeypatch):
    # Empty key keeps the app on the algorithmic path
    monkeypatch.setenv("ANTHROPIC_API_KEY", "")
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")
    monkeypatch.setenv("MAX_PAGES_PER_SITE", "4")


@pytest.fixture
async def client(mock_env):
    from profile_extractor.main import app, lifespan

    async with lifespan(app):
        async with httpx.AsyncClient(
            transport=ASGITransport(app=app),
            base_url="http://test",
        ) as c:
            yield c
