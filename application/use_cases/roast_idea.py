"""Use case: Roast a user-submitted startup idea (quota-limited)."""

import logging
from typing import Optional

from application.models import FeaturePolicy
from application.use_cases.rate_limited_action import GatewayResult, RateLimitedActionGateway
from backend.observability import set_span_attributes, traced
from backend.services.idea_generator import IdeaGenerator

logger = logging.getLogger(__name__)


class RoastIdeaUseCase:
    def __init__(
        self,
        gateway: RateLimitedActionGateway,
        generator: IdeaGenerator,
        policy: FeaturePolicy,
    ) -> None:
        self._gateway = gateway
        self._generator = generator
        self._policy = policy

    @traced(name="roast.execute")
    def execute(self, user_id: Optional[str], idea: str) -> GatewayResult[str]:
        """Roast ``idea`` for ``user_id``.

        Raises:
            AuthRequiredError, RateLimitedError: Before any generation.
            GenerationError: The roast failed; the unit stays charged.
        """
        set_span_attributes({"roast.idea_length": len(idea)})
        result = self._gateway.perform_policy(
            user_id, self._policy, lambda: self._generator.roast_idea(idea)
        )
        logger.info(
            "Roast delivered for user %s, %d remaining", user_id, result.quota.remaining
        )
        return result
