"""Port interface for the append-only usage ledger."""

from datetime import datetime
from typing import List, Protocol

from application.models import Feature


class UsageEventRepository(Protocol):
    """Repository protocol for ``usage_events`` rows."""

    def list_timestamps_since(
        self, user_id: str, feature: Feature, since: datetime
    ) -> List[datetime]:
        """Get event timestamps at or after ``since``, oldest first."""
        ...

    def append(self, user_id: str, feature: Feature, created_at: datetime) -> None:
        """Append one usage event."""
        ...
