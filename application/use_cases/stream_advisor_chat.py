"""Use case: Stream a Devil's Advocate reply via SSE (quota-limited).

Orchestrates: gateway (auth -> quota -> record usage) -> lazy upstream
stream -> SSE frames.

Frame sequence on success:
    data: {"text": "..."}            one per upstream fragment, in order
    data: {"done": true, "remaining": n, "resetAt": "..."}
    data: [DONE]

On an upstream failure a single {"error", "code"} frame is sent and the
stream ends with no quota frame and no [DONE].
"""

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Generator, Iterator, List, Optional

from application.exceptions import ErrorCode, GenerationError
from application.models import FeaturePolicy, QuotaStatus
from application.use_cases.rate_limited_action import RateLimitedActionGateway
from backend.services.idea_generator import IdeaGenerator

logger = logging.getLogger(__name__)

DONE_MARKER = "[DONE]"


@dataclass
class SSEEvent:
    """An SSE frame to be yielded to the client."""

    data: str  # JSON string, or the literal [DONE]
    event: Optional[str] = None


def _sse(data: Any) -> SSEEvent:
    """Helper to create an SSE frame with JSON-serialized data."""
    return SSEEvent(data=json.dumps(data))


class StreamAdvisorChatUseCase:
    """Relays the advisor stream and appends the post-call quota."""

    def __init__(
        self,
        gateway: RateLimitedActionGateway,
        generator: IdeaGenerator,
        policy: FeaturePolicy,
    ) -> None:
        self._gateway = gateway
        self._generator = generator
        self._policy = policy

    def execute(
        self,
        user_id: Optional[str],
        history: List[Dict[str, str]],
        message: str,
    ) -> Generator[SSEEvent, None, None]:
        """Charge one advisor turn and return the frame generator.

        Not itself a generator: auth and quota are settled here, so
        AuthRequiredError and RateLimitedError raise to the caller before
        any frame is produced.
        """
        outcome = self._gateway.perform_policy(
            user_id,
            self._policy,
            lambda: self._generator.stream_advisor_reply(history, message),
        )
        return self._relay(outcome.result, outcome.quota, user_id)

    def _relay(
        self, fragments: Iterator[str], quota: QuotaStatus, user_id: Optional[str]
    ) -> Generator[SSEEvent, None, None]:
        count = 0
        try:
            for fragment in fragments:
                count += 1
                yield _sse({"text": fragment})
        except GenerationError as e:
            logger.error("Advisor stream failed for user %s: %s", user_id, e)
            yield _sse({"error": e.message, "code": ErrorCode.UPSTREAM_GENERATION_FAILED.value})
            return
        except GeneratorExit:
            logger.info(
                "Client disconnected from advisor stream after %d fragments", count
            )
            close = getattr(fragments, "close", None)
            if close is not None:
                close()
            raise

        yield _sse(
            {
                "done": True,
                "remaining": quota.remaining,
                "resetAt": quota.reset_at.isoformat() if quota.reset_at else None,
            }
        )
        yield SSEEvent(data=DONE_MARKER)
