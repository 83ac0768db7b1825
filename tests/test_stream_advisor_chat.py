"""Tests for StreamAdvisorChatUseCase: frame order, errors and disconnects."""

import json
from datetime import timedelta
from unittest.mock import MagicMock

import pytest

from application.exceptions import AuthRequiredError, GenerationError, RateLimitedError
from application.models import Feature, FeaturePolicy
from application.use_cases.rate_limited_action import RateLimitedActionGateway
from application.use_cases.stream_advisor_chat import DONE_MARKER, StreamAdvisorChatUseCase
from backend.services.usage_ledger import UsageLedger
from tests.fakes.builders import T0

POLICY = FeaturePolicy(Feature.ADVISOR_CHAT, 5, timedelta(hours=24))


def _fragments(*texts, fail=False):
    for text in texts:
        yield text
    if fail:
        raise GenerationError("AI service error. Please try again.")


@pytest.fixture
def generator():
    return MagicMock()


@pytest.fixture
def use_case(usage_repo, clock, generator):
    gateway = RateLimitedActionGateway(UsageLedger(usage_repo, now=clock))
    return StreamAdvisorChatUseCase(gateway, generator, POLICY)


def _decode(frames):
    return [f.data if f.data == DONE_MARKER else json.loads(f.data) for f in frames]


class TestFrames:
    def test_text_then_quota_then_done(self, use_case, generator):
        generator.stream_advisor_reply.return_value = _fragments("Your ", "TAM ", "is tiny.")

        frames = _decode(use_case.execute("user-1", [], "Hi"))

        assert frames == [
            {"text": "Your "},
            {"text": "TAM "},
            {"text": "is tiny."},
            {"done": True, "remaining": 4, "resetAt": (T0 + POLICY.window).isoformat()},
            DONE_MARKER,
        ]

    def test_frames_have_no_event_name(self, use_case, generator):
        generator.stream_advisor_reply.return_value = _fragments("x")

        assert all(f.event is None for f in use_case.execute("user-1", [], "Hi"))

    def test_upstream_error_sends_error_frame_only(self, use_case, generator):
        generator.stream_advisor_reply.return_value = _fragments("Partial", fail=True)

        frames = _decode(use_case.execute("user-1", [], "Hi"))

        assert frames == [
            {"text": "Partial"},
            {"error": "AI service error. Please try again.", "code": "UPSTREAM_GENERATION_FAILED"},
        ]

    def test_history_and_message_forwarded(self, use_case, generator):
        generator.stream_advisor_reply.return_value = _fragments()
        history = [{"role": "user", "text": "Idea"}, {"role": "model", "text": "Bad"}]

        list(use_case.execute("user-1", history, "Why?"))

        generator.stream_advisor_reply.assert_called_once_with(history, "Why?")


class TestQuota:
    def test_usage_charged_before_first_frame(self, use_case, generator, usage_repo):
        generator.stream_advisor_reply.return_value = _fragments("x")

        use_case.execute("user-1", [], "Hi")

        assert usage_repo.count("user-1", Feature.ADVISOR_CHAT) == 1

    def test_rate_limit_raised_before_streaming(self, use_case, generator, usage_repo):
        for _ in range(5):
            usage_repo.append("user-1", Feature.ADVISOR_CHAT, T0)

        with pytest.raises(RateLimitedError):
            use_case.execute("user-1", [], "Hi")
        generator.stream_advisor_reply.assert_not_called()

    def test_auth_required_raised_before_streaming(self, use_case, generator):
        with pytest.raises(AuthRequiredError):
            use_case.execute(None, [], "Hi")
        generator.stream_advisor_reply.assert_not_called()


class TestDisconnect:
    def test_close_stops_upstream_and_keeps_usage(self, use_case, generator, usage_repo):
        upstream_closed = []

        def fragments():
            try:
                yield "one"
                yield "two"
                yield "three"
            finally:
                upstream_closed.append(True)

        generator.stream_advisor_reply.return_value = fragments()
        frames = use_case.execute("user-1", [], "Hi")

        assert json.loads(next(frames).data) == {"text": "one"}
        frames.close()

        assert upstream_closed == [True]
        assert usage_repo.count("user-1", Feature.ADVISOR_CHAT) == 1
