"""Unit tests for SupabaseDailyIdeaRepository."""

from datetime import date
from unittest.mock import MagicMock

import pytest

from application.models import DailyIdea
from infrastructure.db.idea_repository import SupabaseDailyIdeaRepository

ROW = {
    "date": "2025-03-10",
    "issue_number": 7,
    "seed": 20250310,
    "title": "Uber for Umbrellas",
    "pitch": "On-demand umbrellas delivered in minutes.",
    "fatal_flaw": "Rain arrives faster than couriers.",
    "verdict": "Soaked.",
    "created_at": "2025-03-10T00:00:05+00:00",
}


@pytest.fixture
def mock_supabase_client():
    """Create a mock Supabase client."""
    return MagicMock()


@pytest.fixture
def repo(mock_supabase_client):
    return SupabaseDailyIdeaRepository(mock_supabase_client)


class TestGetByDate:
    def test_returns_idea_when_found(self, repo, mock_supabase_client):
        chain = mock_supabase_client.table.return_value.select.return_value.eq.return_value
        chain.limit.return_value.execute.return_value.data = [ROW]

        idea = repo.get_by_date(date(2025, 3, 10))

        mock_supabase_client.table.assert_called_once_with("daily_ideas")
        mock_supabase_client.table.return_value.select.return_value.eq.assert_called_once_with(
            "date", "2025-03-10"
        )
        assert isinstance(idea, DailyIdea)
        assert idea.issue_number == 7
        assert idea.fatal_flaw == "Rain arrives faster than couriers."
        assert idea.placeholder is False

    def test_returns_none_when_missing(self, repo, mock_supabase_client):
        chain = mock_supabase_client.table.return_value.select.return_value.eq.return_value
        chain.limit.return_value.execute.return_value.data = []

        assert repo.get_by_date(date(2025, 3, 10)) is None


class TestGetLatestBefore:
    def test_queries_strictly_earlier_dates_newest_first(self, repo, mock_supabase_client):
        lt = mock_supabase_client.table.return_value.select.return_value.lt
        lt.return_value.order.return_value.limit.return_value.execute.return_value.data = [ROW]

        idea = repo.get_latest_before(date(2025, 3, 11))

        lt.assert_called_once_with("date", "2025-03-11")
        lt.return_value.order.assert_called_once_with("date", desc=True)
        lt.return_value.order.return_value.limit.assert_called_once_with(1)
        assert idea.date == date(2025, 3, 10)

    def test_returns_none_for_first_issue(self, repo, mock_supabase_client):
        lt = mock_supabase_client.table.return_value.select.return_value.lt
        lt.return_value.order.return_value.limit.return_value.execute.return_value.data = []

        assert repo.get_latest_before(date(2025, 3, 11)) is None


class TestInsertIfAbsent:
    def _idea(self):
        return DailyIdea.from_row(ROW)

    def test_upserts_with_ignore_duplicates_on_date(self, repo, mock_supabase_client):
        upsert = mock_supabase_client.table.return_value.upsert
        upsert.return_value.execute.return_value.data = [ROW]

        assert repo.insert_if_absent(self._idea()) is True

        args, kwargs = upsert.call_args
        assert args[0]["date"] == "2025-03-10"
        assert "created_at" not in args[0]
        assert kwargs == {"on_conflict": "date", "ignore_duplicates": True}

    def test_conflict_returns_false(self, repo, mock_supabase_client):
        upsert = mock_supabase_client.table.return_value.upsert
        upsert.return_value.execute.return_value.data = []

        assert repo.insert_if_absent(self._idea()) is False

    def test_store_error_propagates(self, repo, mock_supabase_client):
        upsert = mock_supabase_client.table.return_value.upsert
        upsert.return_value.execute.side_effect = ConnectionError("down")

        with pytest.raises(ConnectionError):
            repo.insert_if_absent(self._idea())


class TestListRecent:
    def test_orders_by_issue_number_desc_with_range(self, repo, mock_supabase_client):
        order = mock_supabase_client.table.return_value.select.return_value.order
        order.return_value.range.return_value.execute.return_value.data = [ROW]

        ideas = repo.list_recent(limit=10, offset=20)

        order.assert_called_once_with("issue_number", desc=True)
        order.return_value.range.assert_called_once_with(20, 29)
        assert [i.issue_number for i in ideas] == [7]

    def test_empty_result(self, repo, mock_supabase_client):
        order = mock_supabase_client.table.return_value.select.return_value.order
        order.return_value.range.return_value.execute.return_value.data = None

        assert repo.list_recent() == []


class TestCountAll:
    def test_returns_exact_count(self, repo, mock_supabase_client):
        select = mock_supabase_client.table.return_value.select
        select.return_value.limit.return_value.execute.return_value.count = 42

        assert repo.count_all() == 42
        select.assert_called_once_with("date", count="exact")

    def test_missing_count_is_zero(self, repo, mock_supabase_client):
        select = mock_supabase_client.table.return_value.select
        select.return_value.limit.return_value.execute.return_value.count = None

        assert repo.count_all() == 0


class TestListDates:
    def test_dates_newest_first(self, repo, mock_supabase_client):
        select = mock_supabase_client.table.return_value.select
        order = select.return_value.order
        order.return_value.execute.return_value.data = [
            {"date": "2025-03-10"},
            {"date": "2025-03-08"},
        ]

        dates = repo.list_dates()

        select.assert_called_once_with("date")
        order.assert_called_once_with("date", desc=True)
        assert dates == [date(2025, 3, 10), date(2025, 3, 8)]
