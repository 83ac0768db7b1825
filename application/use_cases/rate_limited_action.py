"""Use case: Run an expensive action under a per-user rolling quota.

Order is fixed: authenticate -> check quota -> record usage -> run action.
Usage is recorded before the action runs, so a failed or abandoned action
still consumes a unit. This keeps a slow upstream from being hammered by
retries that never count.
"""

import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import TYPE_CHECKING, Callable, Dict, Generic, Optional, TypeVar

from application.exceptions import AuthRequiredError, RateLimitedError
from application.models import Feature, FeaturePolicy, QuotaStatus
from backend.observability import IdeaMetrics
from backend.services.usage_ledger import UsageLedger

if TYPE_CHECKING:
    from backend.settings import Settings

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class GatewayResult(Generic[T]):
    """Action result plus the quota left after this call."""

    result: T
    quota: QuotaStatus


def policies_from_settings(settings: "Settings") -> Dict[Feature, FeaturePolicy]:
    """Build the per-feature limits from configuration."""
    window = settings.rate_limit_window
    return {
        Feature.ROAST: FeaturePolicy(Feature.ROAST, settings.roast_rate_limit, window),
        Feature.ADVISOR_CHAT: FeaturePolicy(
            Feature.ADVISOR_CHAT, settings.advisor_chat_rate_limit, window
        ),
    }


class RateLimitedActionGateway:
    """Wraps an action with authentication and quota enforcement."""

    def __init__(self, ledger: UsageLedger) -> None:
        self._ledger = ledger

    def perform(
        self,
        user_id: Optional[str],
        feature: Feature,
        limit: int,
        window: timedelta,
        action: Callable[[], T],
    ) -> GatewayResult[T]:
        """Charge one unit of ``feature`` and run ``action``.

        Raises:
            AuthRequiredError: No user id; the ledger is not touched.
            RateLimitedError: Quota exhausted; the action is not run.
            Exception: Whatever ``action`` raises, after usage is recorded.
        """
        quota = self.quota(user_id, feature, limit, window)
        if quota.exhausted:
            logger.info("Rate limit hit for user %s feature %s", user_id, feature.value)
            IdeaMetrics.rate_limit_hits_total().add(1, {"feature": feature.value})
            raise RateLimitedError(quota)

        self._ledger.record_usage(user_id, feature)

        reset_at = quota.reset_at
        if reset_at is None:
            reset_at = self._ledger.now() + window
        after = QuotaStatus(remaining=quota.remaining - 1, limit=limit, reset_at=reset_at)

        return GatewayResult(result=action(), quota=after)

    def perform_policy(
        self, user_id: Optional[str], policy: FeaturePolicy, action: Callable[[], T]
    ) -> GatewayResult[T]:
        return self.perform(user_id, policy.feature, policy.limit, policy.window, action)

    def quota(
        self, user_id: Optional[str], feature: Feature, limit: int, window: timedelta
    ) -> QuotaStatus:
        """Current quota for an authenticated user, without charging."""
        if not user_id:
            raise AuthRequiredError()
        return self._ledger.check_quota(user_id, feature, limit, window)
