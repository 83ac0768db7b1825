"""Usage ledger models: features, quota policies and derived quota status."""

from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Dict, Optional


class Feature(str, Enum):
    """Rate-limited features. Values mirror the ``usage_events.feature`` CHECK."""

    ROAST = "roast"
    ADVISOR_CHAT = "advisor-chat"


@dataclass(frozen=True)
class FeaturePolicy:
    """Limit and rolling window for one feature."""

    feature: Feature
    limit: int
    window: timedelta


@dataclass(frozen=True)
class QuotaStatus:
    """Quota derived from the usage events inside the window.

    reset_at is when the oldest event in the window ages out, or None when
    the window is empty.
    """

    remaining: int
    limit: int
    reset_at: Optional[datetime] = None

    @property
    def exhausted(self) -> bool:
        return self.remaining <= 0

    def to_payload(self) -> Dict[str, Any]:
        return {
            "remaining": self.remaining,
            "limit": self.limit,
            "resetAt": self.reset_at.isoformat() if self.reset_at else None,
        }
