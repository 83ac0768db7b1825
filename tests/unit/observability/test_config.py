"""
Unit tests for backend/observability/config.py

Provider installation and auto-instrumentation are patched out so the
tests never change process-wide OpenTelemetry state.
"""

from unittest.mock import patch

import pytest

from backend.observability import config
from backend.observability.config import (
    _normalize_protocol,
    configure_observability,
    shutdown_observability,
)
from backend.settings import Settings


@pytest.fixture
def patched_globals():
    with patch("backend.observability.config.trace.set_tracer_provider") as set_tracer, patch(
        "backend.observability.config.metrics.set_meter_provider"
    ) as set_meter, patch(
        "backend.observability.config._configure_auto_instrumentation"
    ) as auto:
        yield set_tracer, set_meter, auto


class TestConfigureObservability:
    def test_disabled_via_settings(self, reset_otel_state, patched_globals):
        configure_observability(Settings(_env_file=None, otel_enabled=False))

        assert config._initialized is False
        patched_globals[0].assert_not_called()

    def test_enabled_installs_providers(self, reset_otel_state, patched_globals):
        set_tracer, set_meter, auto = patched_globals

        configure_observability(Settings(_env_file=None, otel_enabled=True))

        assert config._initialized is True
        set_tracer.assert_called_once()
        set_meter.assert_called_once()
        auto.assert_called_once_with(True)

    def test_idempotent(self, reset_otel_state, patched_globals):
        settings = Settings(_env_file=None, otel_enabled=True)

        configure_observability(settings)
        configure_observability(settings)

        patched_globals[0].assert_called_once()

    def test_log_correlation_flag_forwarded(self, reset_otel_state, patched_globals):
        configure_observability(
            Settings(_env_file=None, otel_enabled=True, otel_log_correlation=False)
        )

        patched_globals[2].assert_called_once_with(False)


class TestNormalizeProtocol:
    @pytest.mark.parametrize(
        "value,expected",
        [("grpc", "grpc"), ("HTTP", "http"), (None, "http"), ("carrier-pigeon", "http")],
    )
    def test_values(self, value, expected):
        assert _normalize_protocol(value) == expected


def test_shutdown_resets_state(reset_otel_state):
    config._initialized = True
    with patch("backend.observability.config.trace.get_tracer_provider"), patch(
        "backend.observability.config.metrics.get_meter_provider"
    ):
        shutdown_observability()

    assert config._initialized is False


def test_shutdown_when_not_initialized_is_noop(reset_otel_state):
    shutdown_observability()
    assert config._initialized is False
