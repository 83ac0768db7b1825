"""Shared fixtures for the Bad Idea API tests."""

from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from api.deps import get_auth_verifier, get_settings
from backend.main import create_app
from backend.settings import Settings
from tests.fakes import FakeClock, InMemoryDailyIdeaRepository, InMemoryUsageEventRepository
from tests.fakes.builders import T0, make_bad_idea


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        environment="test",
        supabase_url="https://test.supabase.co",
        supabase_service_role_key="test-key",
        anthropic_api_key="test-anthropic-key",
        internal_api_key="internal-secret",
        _env_file=None,
    )


@pytest.fixture
def app(test_settings):
    application = create_app(settings=test_settings)
    application.dependency_overrides[get_settings] = lambda: test_settings
    application.dependency_overrides[get_auth_verifier] = lambda: None
    yield application
    application.dependency_overrides.clear()


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(T0)


@pytest.fixture
def idea_repo() -> InMemoryDailyIdeaRepository:
    return InMemoryDailyIdeaRepository()


@pytest.fixture
def usage_repo() -> InMemoryUsageEventRepository:
    return InMemoryUsageEventRepository()


@pytest.fixture
def mock_generator():
    """IdeaGenerator stand-in returning a fresh idea per call."""
    generator = MagicMock()
    counter = {"n": 0}

    def _generate(target_date, previous=None):
        counter["n"] += 1
        return make_bad_idea(100 + counter["n"])

    generator.generate_daily_idea.side_effect = _generate
    return generator
