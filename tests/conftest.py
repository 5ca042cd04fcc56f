import pytest

from app.config import Settings
from app.main import app

TEST_SETTINGS = Settings(
    netlify_auth_token="test-token",
    netlify_site_id="site-123",
    openai_api_key="sk-test",
)


@pytest.fixture(autouse=True)
def app_settings():
    """Install test settings and clear rate limits / overrides around every test."""
    app.state.settings = TEST_SETTINGS
    app.state.limiter._storage.reset()
    yield TEST_SETTINGS
    app.dependency_overrides.clear()
