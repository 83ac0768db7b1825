"""Domain models for the Daily Bad Idea.

Matches the schema defined in:
  supabase/migrations/20250101000000_create_daily_ideas_and_usage_events.sql
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date as date_type, datetime
from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class BadIdea(BaseModel):
    """Raw generator output: the four text fields of an idea."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    title: str
    pitch: str
    fatal_flaw: str = Field(validation_alias=AliasChoices("fatal_flaw", "fatalFlaw"))
    verdict: str

    @field_validator("title", "pitch", "fatal_flaw", "verdict")
    @classmethod
    def not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v


class DailyIdea(BaseModel):
    """One persisted idea per calendar date (row in ``daily_ideas``)."""

    model_config = ConfigDict(frozen=True)

    date: date_type
    issue_number: Optional[int] = Field(default=None, ge=1)
    seed: int
    title: str
    pitch: str
    fatal_flaw: str
    verdict: str
    created_at: Optional[datetime] = None
    placeholder: bool = False

    @classmethod
    def from_generated(
        cls, target_date: date_type, issue_number: Optional[int], seed: int, idea: BadIdea
    ) -> "DailyIdea":
        return cls(
            date=target_date,
            issue_number=issue_number,
            seed=seed,
            title=idea.title,
            pitch=idea.pitch,
            fatal_flaw=idea.fatal_flaw,
            verdict=idea.verdict,
        )

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "DailyIdea":
        return cls(
            date=row["date"],
            issue_number=row["issue_number"],
            seed=row["seed"],
            title=row["title"],
            pitch=row["pitch"],
            fatal_flaw=row["fatal_flaw"],
            verdict=row["verdict"],
            created_at=row.get("created_at"),
        )

    def to_row(self) -> Dict[str, Any]:
        """Insert payload. ``created_at`` is filled by the database default."""
        return {
            "date": self.date.isoformat(),
            "issue_number": self.issue_number,
            "seed": self.seed,
            "title": self.title,
            "pitch": self.pitch,
            "fatal_flaw": self.fatal_flaw,
            "verdict": self.verdict,
        }

    def as_bad_idea(self) -> BadIdea:
        return BadIdea(
            title=self.title,
            pitch=self.pitch,
            fatal_flaw=self.fatal_flaw,
            verdict=self.verdict,
        )


# Shown when generation fails. Never written to the store so the date
# stays open for the next request.
PLACEHOLDER_IDEA = BadIdea(
    title="Error 404: Idea Not Found",
    pitch="A service that promises to find ideas but fails due to API errors.",
    fatal_flaw="Reliability is key.",
    verdict="Try refreshing.",
)


@dataclass(frozen=True)
class DailyIdeaResult:
    """Outcome of a cache lookup.

    cached: served from the store without generating.
    created: this call inserted the row.
    """

    idea: DailyIdea
    cached: bool
    created: bool = False


@dataclass(frozen=True)
class ArchivePage:
    """One page of the archive plus the total number of stored ideas."""

    ideas: List[DailyIdea]
    total: int
