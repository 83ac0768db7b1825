"""Tests for backend.settings.Settings."""

from datetime import timedelta

import pytest
from pydantic import ValidationError

from backend.settings import Settings


def _settings(**kwargs) -> Settings:
    return Settings(_env_file=None, **kwargs)


class TestDefaults:
    def test_rate_limits(self, monkeypatch):
        for name in ("ROAST_RATE_LIMIT", "ADVISOR_CHAT_RATE_LIMIT", "RATE_LIMIT_WINDOW_HOURS"):
            monkeypatch.delenv(name, raising=False)

        settings = _settings()

        assert settings.roast_rate_limit == 3
        assert settings.advisor_chat_rate_limit == 5
        assert settings.rate_limit_window == timedelta(hours=24)

    def test_allowed_origins_fall_back_to_local_dev(self):
        assert _settings(allowed_origins=[]).allowed_origins_list == [
            "http://localhost:3000",
            "http://localhost:5173",
        ]

    def test_supabase_key_is_service_role(self):
        assert _settings(supabase_service_role_key="svc").supabase_key == "svc"


class TestAllowedOrigins:
    @pytest.mark.parametrize(
        "raw,expected",
        [
            ('["https://a.example", "https://b.example"]', ["https://a.example", "https://b.example"]),
            ("https://a.example, https://b.example,", ["https://a.example", "https://b.example"]),
            (["https://a.example"], ["https://a.example"]),
            ("   ", []),
        ],
    )
    def test_parsing(self, raw, expected):
        assert _settings(allowed_origins=raw).allowed_origins == expected


class TestEnvironment:
    def test_normalized_to_lowercase(self):
        settings = _settings(environment="Production")

        assert settings.environment == "production"

    def test_invalid_rejected(self):
        with pytest.raises(ValidationError):
            _settings(environment="moon")


class TestLimits:
    @pytest.mark.parametrize(
        "field", ["roast_rate_limit", "advisor_chat_rate_limit", "rate_limit_window_hours"]
    )
    def test_must_be_positive(self, field):
        with pytest.raises(ValidationError):
            _settings(**{field: 0})

    def test_custom_window(self):
        assert _settings(rate_limit_window_hours=1).rate_limit_window == timedelta(hours=1)
