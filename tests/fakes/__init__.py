"""In-memory fakes for repository ports."""

from tests.fakes.idea_repository import InMemoryDailyIdeaRepository
from tests.fakes.usage_event_repository import InMemoryUsageEventRepository
from tests.fakes.clock import FakeClock

__all__ = [
    "InMemoryDailyIdeaRepository",
    "InMemoryUsageEventRepository",
    "FakeClock",
]
