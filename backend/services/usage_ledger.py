"""Sliding-window usage ledger for rate-limited AI features.

Quota is derived from the append-only ``usage_events`` history: every event
newer than ``now - window`` counts against the limit, and the quota resets
one unit at a time as each event ages out. No counters, no cleanup job.

Enforcement is soft. Check and record are separate store calls, so a burst
of concurrent requests can all pass the same check and briefly exceed the
limit. Strict enforcement would need a conditional increment in the store.
"""

import logging
from datetime import datetime, timedelta
from typing import Callable, Optional

from application.models import Feature, QuotaStatus
from application.ports.usage_event_repository import UsageEventRepository
from backend.observability import IdeaMetrics
from backend.services.idea_calendar import utc_now

logger = logging.getLogger(__name__)


class UsageLedger:
    """Per-user, per-feature usage ledger over a rolling window."""

    def __init__(
        self,
        repo: UsageEventRepository,
        now: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._repo = repo
        self._now = now or utc_now

    def now(self) -> datetime:
        return self._now()

    def check_quota(
        self, user_id: str, feature: Feature, limit: int, window: timedelta
    ) -> QuotaStatus:
        """Compute the user's quota without consuming any.

        Fails open: if the ledger cannot be read the full limit is reported,
        favouring availability over exact accounting.
        """
        now = self._now()
        try:
            timestamps = self._repo.list_timestamps_since(user_id, feature, now - window)
        except Exception as e:
            logger.warning(
                "Usage check failed for user %s feature %s, failing open: %s",
                user_id,
                feature.value,
                e,
            )
            IdeaMetrics.ledger_errors_total().add(1, {"operation": "read"})
            return QuotaStatus(remaining=limit, limit=limit, reset_at=None)

        # Only events at or after the window start count, whatever the store returned.
        in_window = sorted(ts for ts in timestamps if ts >= now - window)
        reset_at = in_window[0] + window if in_window else None
        return QuotaStatus(
            remaining=max(0, limit - len(in_window)),
            limit=limit,
            reset_at=reset_at,
        )

    def record_usage(self, user_id: str, feature: Feature) -> Optional[datetime]:
        """Append one usage event stamped now.

        Write failures are logged and swallowed: usage may be under-counted,
        never over-counted.

        Returns:
            The event timestamp, or None if the write failed.
        """
        now = self._now()
        try:
            self._repo.append(user_id, feature, now)
        except Exception as e:
            logger.error(
                "Failed to record usage for user %s feature %s: %s",
                user_id,
                feature.value,
                e,
            )
            IdeaMetrics.ledger_errors_total().add(1, {"operation": "write"})
            return None
        IdeaMetrics.usage_recorded_total().add(1, {"feature": feature.value})
        return now
