"""Supabase implementation of UsageEventRepository."""

from datetime import datetime
from typing import List

from dateutil.parser import isoparse
from supabase import Client

from application.models import Feature


class SupabaseUsageEventRepository:
    """Supabase-backed usage ledger.

    Append-only rows in ``usage_events``; quota is derived from the rows
    inside the rolling window, so nothing is ever updated or deleted here.
    """

    TABLE = "usage_events"

    def __init__(self, client: Client) -> None:
        self._client = client

    def list_timestamps_since(
        self, user_id: str, feature: Feature, since: datetime
    ) -> List[datetime]:
        result = (
            self._client.table(self.TABLE)
            .select("created_at")
            .eq("user_id", user_id)
            .eq("feature", feature.value)
            .gte("created_at", since.isoformat())
            .order("created_at")
            .execute()
        )
        return [isoparse(row["created_at"]) for row in (result.data or [])]

    def append(self, user_id: str, feature: Feature, created_at: datetime) -> None:
        self._client.table(self.TABLE).insert(
            {
                "user_id": user_id,
                "feature": feature.value,
                "created_at": created_at.isoformat(),
            }
        ).execute()
