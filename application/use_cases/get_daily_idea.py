"""Use case: Get (or lazily create) the Daily Bad Idea for a date.

Orchestrates: store lookup -> sequence from the previous record ->
generate with a novelty constraint -> write-once insert.

Concurrency relies entirely on the UNIQUE(date) constraint. Two cold
requests for the same date may both call the generator, but only one insert
wins; the loser re-reads and returns the winner's row. No locks are taken,
since requests can land on different processes.
"""

import logging
from datetime import date
from typing import List, Optional, Tuple

from application.exceptions import GenerationError, StoreUnavailableError
from application.models import PLACEHOLDER_IDEA, ArchivePage, DailyIdea, DailyIdeaResult
from application.ports.idea_repository import DailyIdeaRepository
from backend.observability import IdeaMetrics, set_span_attributes, traced
from backend.services.idea_calendar import seed_for_date
from backend.services.idea_generator import IdeaGenerator

logger = logging.getLogger(__name__)


def placeholder_for(target_date: date) -> DailyIdea:
    """Fixed sentinel idea for a date. Never persisted."""
    return DailyIdea(
        date=target_date,
        issue_number=None,
        seed=seed_for_date(target_date),
        title=PLACEHOLDER_IDEA.title,
        pitch=PLACEHOLDER_IDEA.pitch,
        fatal_flaw=PLACEHOLDER_IDEA.fatal_flaw,
        verdict=PLACEHOLDER_IDEA.verdict,
        placeholder=True,
    )


class GetDailyIdeaUseCase:
    """Idea cache and issue sequencer."""

    def __init__(self, idea_repo: DailyIdeaRepository, generator: IdeaGenerator) -> None:
        self._idea_repo = idea_repo
        self._generator = generator

    @traced(name="ideas.get_or_create")
    def execute(self, target_date: date) -> DailyIdeaResult:
        """Return the stored idea for ``target_date``, generating it on a miss.

        Args:
            target_date: UTC calendar date (already normalized).

        Returns:
            DailyIdeaResult. On generator failure the idea is the placeholder
            and nothing is written.
        """
        set_span_attributes({"idea.date": target_date.isoformat()})

        # 1. Cache lookup
        existing = self._lookup(target_date)
        if existing is not None:
            IdeaMetrics.idea_lookups_total().add(1, {"outcome": "hit"})
            return DailyIdeaResult(idea=existing, cached=True)

        # 2. Sequence from the most recent earlier record
        previous, sequenced = self._previous(target_date)
        issue_number: Optional[int] = None
        if sequenced:
            issue_number = previous.issue_number + 1 if previous and previous.issue_number else 1
        if previous is not None and (target_date - previous.date).days > 1:
            logger.warning(
                "No idea stored for the day before %s; numbering from %s (issue %s)",
                target_date,
                previous.date,
                previous.issue_number,
            )

        # 3. Generate with the previous idea as novelty constraint
        logger.info(
            "Idea not found for %s, generating issue %s with seed %d",
            target_date,
            issue_number,
            seed_for_date(target_date),
        )
        try:
            generated = self._generator.generate_daily_idea(
                target_date, previous.as_bad_idea() if previous else None
            )
        except GenerationError as e:
            logger.error("Idea generation failed for %s: %s", target_date, e)
            IdeaMetrics.idea_lookups_total().add(1, {"outcome": "placeholder"})
            return DailyIdeaResult(idea=placeholder_for(target_date), cached=False)

        idea = DailyIdea.from_generated(
            target_date, issue_number, seed_for_date(target_date), generated
        )

        if not sequenced:
            # Issue number is unknown; keep the date open for the next request.
            IdeaMetrics.idea_lookups_total().add(1, {"outcome": "generated_unsaved"})
            return DailyIdeaResult(idea=idea, cached=False)

        # 4. Write-once insert; a conflict means another request won the date
        try:
            created = self._idea_repo.insert_if_absent(idea)
        except Exception as e:
            logger.error("Failed to persist idea for %s: %s", target_date, e)
            IdeaMetrics.idea_lookups_total().add(1, {"outcome": "generated_unsaved"})
            return DailyIdeaResult(idea=idea, cached=False)

        if created:
            IdeaMetrics.idea_lookups_total().add(1, {"outcome": "generated"})
            set_span_attributes({"idea.issue_number": issue_number})
            return DailyIdeaResult(idea=idea, cached=False, created=True)

        winner = self._lookup(target_date)
        IdeaMetrics.idea_lookups_total().add(1, {"outcome": "conflict"})
        if winner is None:
            # Re-read failed; the generated copy is still displayable.
            return DailyIdeaResult(idea=idea, cached=False)
        return DailyIdeaResult(idea=winner, cached=True)

    def pregenerate(self, target_date: date) -> DailyIdeaResult:
        """Warm the cache for a date ahead of the first reader.

        Same path as ``execute``; ``result.created`` tells the scheduler
        whether this call wrote the record.
        """
        result = self.execute(target_date)
        if result.idea.placeholder:
            logger.warning("Pre-generation for %s fell back to the placeholder", target_date)
        elif result.created:
            logger.info(
                "Pre-generated issue %s for %s", result.idea.issue_number, target_date
            )
        return result

    def list_archive(self, limit: int = 30, offset: int = 0) -> ArchivePage:
        """One page of stored ideas, newest issue first, with the total count.

        Raises:
            StoreUnavailableError: The archive could not be read.
        """
        try:
            ideas = self._idea_repo.list_recent(limit=limit, offset=offset)
            total = self._idea_repo.count_all()
        except Exception as e:
            logger.error("Failed to list idea archive: %s", e)
            raise StoreUnavailableError() from e
        return ArchivePage(ideas=ideas, total=total)

    def list_dates(self) -> List[date]:
        """Every date with a stored idea, newest first.

        Raises:
            StoreUnavailableError: The dates could not be read.
        """
        try:
            return self._idea_repo.list_dates()
        except Exception as e:
            logger.error("Failed to list idea dates: %s", e)
            raise StoreUnavailableError() from e

    def _lookup(self, target_date: date) -> Optional[DailyIdea]:
        try:
            return self._idea_repo.get_by_date(target_date)
        except Exception as e:
            logger.warning("Idea lookup failed for %s, treating as miss: %s", target_date, e)
            return None

    def _previous(self, target_date: date) -> Tuple[Optional[DailyIdea], bool]:
        """Most recent earlier record, and whether the read succeeded."""
        try:
            return self._idea_repo.get_latest_before(target_date), True
        except Exception as e:
            logger.warning(
                "Previous idea lookup failed for %s, idea will not be stored: %s",
                target_date,
                e,
            )
            return None, False
