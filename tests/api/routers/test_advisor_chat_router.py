"""Integration tests for POST /advisor-chat SSE stream."""

import json
from datetime import timedelta
from unittest.mock import MagicMock

import pytest

from api.deps import get_current_user, get_stream_advisor_chat_use_case
from application.exceptions import GenerationError
from application.models import Feature, FeaturePolicy
from application.use_cases.rate_limited_action import RateLimitedActionGateway
from application.use_cases.stream_advisor_chat import StreamAdvisorChatUseCase
from backend.services.usage_ledger import UsageLedger
from tests.fakes.builders import T0, TEST_USER_ID

POLICY = FeaturePolicy(Feature.ADVISOR_CHAT, 5, timedelta(hours=24))


def _parse_sse_data(response_text: str) -> list:
    """Parse SSE response text into a list of data payloads."""
    frames = []
    for line in response_text.splitlines():
        line = line.strip()
        if line.startswith("data:"):
            raw = line[len("data:"):].strip()
            frames.append(raw if raw == "[DONE]" else json.loads(raw))
    return frames


@pytest.fixture
def generator():
    return MagicMock()


@pytest.fixture
def authed(app, usage_repo, clock, generator):
    gateway = RateLimitedActionGateway(UsageLedger(usage_repo, now=clock))
    use_case = StreamAdvisorChatUseCase(gateway, generator, POLICY)
    app.dependency_overrides[get_current_user] = lambda: TEST_USER_ID
    app.dependency_overrides[get_stream_advisor_chat_use_case] = lambda: use_case
    return use_case


def test_streams_text_quota_and_done(client, authed, generator):
    generator.stream_advisor_reply.return_value = iter(["Who ", "pays?"])

    response = client.post(
        "/advisor-chat",
        json={"history": [{"role": "user", "text": "Idea"}, {"role": "model", "text": "Bad"}], "message": "Why?"},
    )

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/event-stream")
    assert response.headers["x-accel-buffering"] == "no"
    assert _parse_sse_data(response.text) == [
        {"text": "Who "},
        {"text": "pays?"},
        {"done": True, "remaining": 4, "resetAt": (T0 + timedelta(hours=24)).isoformat()},
        "[DONE]",
    ]


def test_upstream_failure_sends_error_frame(client, authed, generator):
    def failing():
        yield "Partial"
        raise GenerationError("AI service error. Please try again.")

    generator.stream_advisor_reply.return_value = failing()

    response = client.post("/advisor-chat", json={"message": "Hi"})

    frames = _parse_sse_data(response.text)
    assert frames[-1]["code"] == "UPSTREAM_GENERATION_FAILED"
    assert "[DONE]" not in frames
    assert not any(isinstance(f, dict) and f.get("done") for f in frames)


def test_rate_limited_is_plain_429(client, authed, generator, usage_repo):
    for _ in range(5):
        usage_repo.append(TEST_USER_ID, Feature.ADVISOR_CHAT, T0)

    response = client.post("/advisor-chat", json={"message": "Hi"})

    assert response.status_code == 429
    assert response.json()["code"] == "RATE_LIMITED"
    generator.stream_advisor_reply.assert_not_called()


def test_missing_token_is_401(client):
    response = client.post("/advisor-chat", json={"message": "Hi"})

    assert response.status_code == 401
    assert response.json()["code"] == "AUTH_REQUIRED"


def test_invalid_role_is_422(client, authed):
    response = client.post(
        "/advisor-chat", json={"history": [{"role": "system", "text": "x"}], "message": "Hi"}
    )

    assert response.status_code == 422
