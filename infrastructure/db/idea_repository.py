"""Supabase implementation of DailyIdeaRepository."""

import logging
from datetime import date
from typing import List, Optional

from supabase import Client

from application.models import DailyIdea

logger = logging.getLogger(__name__)


class SupabaseDailyIdeaRepository:
    """Supabase-backed daily idea repository.

    One row per calendar date. The UNIQUE constraint on ``date`` is the only
    guard against concurrent generators; inserts use
    ``ON CONFLICT (date) DO NOTHING`` via PostgREST upsert.
    """

    TABLE = "daily_ideas"

    def __init__(self, client: Client) -> None:
        self._client = client

    def get_by_date(self, target_date: date) -> Optional[DailyIdea]:
        result = (
            self._client.table(self.TABLE)
            .select("*")
            .eq("date", target_date.isoformat())
            .limit(1)
            .execute()
        )
        return DailyIdea.from_row(result.data[0]) if result.data else None

    def get_latest_before(self, target_date: date) -> Optional[DailyIdea]:
        result = (
            self._client.table(self.TABLE)
            .select("*")
            .lt("date", target_date.isoformat())
            .order("date", desc=True)
            .limit(1)
            .execute()
        )
        return DailyIdea.from_row(result.data[0]) if result.data else None

    def insert_if_absent(self, idea: DailyIdea) -> bool:
        # ignore_duplicates turns the upsert into ON CONFLICT DO NOTHING;
        # an empty representation means another writer owns the date.
        result = (
            self._client.table(self.TABLE)
            .upsert(idea.to_row(), on_conflict="date", ignore_duplicates=True)
            .execute()
        )
        created = bool(result.data)
        if not created:
            logger.info("Idea for %s already stored by another request", idea.date)
        return created

    def list_recent(self, limit: int = 30, offset: int = 0) -> List[DailyIdea]:
        result = (
            self._client.table(self.TABLE)
            .select("*")
            .order("issue_number", desc=True)
            .range(offset, offset + limit - 1)
            .execute()
        )
        return [DailyIdea.from_row(row) for row in (result.data or [])]

    def count_all(self) -> int:
        # Exact count comes back alongside the single-row page.
        result = (
            self._client.table(self.TABLE)
            .select("date", count="exact")
            .limit(1)
            .execute()
        )
        return result.count or 0

    def list_dates(self) -> List[date]:
        result = (
            self._client.table(self.TABLE)
            .select("date")
            .order("date", desc=True)
            .execute()
        )
        return [date.fromisoformat(row["date"]) for row in (result.data or [])]
