"""Port interface for daily idea storage."""

from datetime import date
from typing import List, Optional, Protocol

from application.models import DailyIdea


class DailyIdeaRepository(Protocol):
    """Repository protocol for the write-once ``daily_ideas`` table."""

    def get_by_date(self, target_date: date) -> Optional[DailyIdea]:
        """Get the idea stored for an exact calendar date."""
        ...

    def get_latest_before(self, target_date: date) -> Optional[DailyIdea]:
        """Get the most recent idea with a date strictly before target_date."""
        ...

    def insert_if_absent(self, idea: DailyIdea) -> bool:
        """Insert the idea unless a row for its date already exists.

        Returns:
            True if this call created the row, False on a date conflict.
            Conflicts never raise.
        """
        ...

    def list_recent(self, limit: int = 30, offset: int = 0) -> List[DailyIdea]:
        """List ideas ordered by issue number, newest first."""
        ...

    def count_all(self) -> int:
        """Total number of stored ideas."""
        ...

    def list_dates(self) -> List[date]:
        """Dates that have a stored idea, newest first."""
        ...
