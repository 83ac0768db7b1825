"""Daily Bad Idea endpoints.

GET /idea returns the idea for a date, generating it on first read.
GET /ideas returns a page of the archive with the total count.
GET /ideas/dates lists every date that has an idea.
"""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from api.deps import get_daily_idea_use_case
from application.models import DailyIdea
from application.use_cases.get_daily_idea import GetDailyIdeaUseCase
from backend.services.idea_calendar import date_key_str, to_date_key

router = APIRouter(tags=["ideas"])


def idea_to_payload(idea: DailyIdea) -> Dict[str, Any]:
    """Public JSON shape of a daily idea."""
    return {
        "title": idea.title,
        "pitch": idea.pitch,
        "fatalFlaw": idea.fatal_flaw,
        "verdict": idea.verdict,
        "date": date_key_str(idea.date),
        "issueNumber": idea.issue_number,
        "placeholder": idea.placeholder,
    }


@router.get("/idea")
def get_idea(
    date: Optional[str] = Query(None, description="YYYY-MM-DD or ISO timestamp; defaults to today (UTC)"),
    use_case: GetDailyIdeaUseCase = Depends(get_daily_idea_use_case),
) -> Dict[str, Any]:
    """Return the Daily Bad Idea for a date.

    Never fails because of the AI backend: a generation failure returns the
    placeholder idea with ``placeholder: true``.
    """
    try:
        target_date = to_date_key(date)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Invalid date: {date}")

    result = use_case.execute(target_date)
    payload = idea_to_payload(result.idea)
    payload["cached"] = result.cached
    return payload


@router.get("/ideas")
def list_ideas(
    limit: int = Query(30, ge=1, le=100),
    offset: int = Query(0, ge=0),
    use_case: GetDailyIdeaUseCase = Depends(get_daily_idea_use_case),
) -> Dict[str, Any]:
    """One archive page, newest issue first, with the total for pagination."""
    page = use_case.list_archive(limit=limit, offset=offset)
    return {"ideas": [idea_to_payload(idea) for idea in page.ideas], "total": page.total}


@router.get("/ideas/dates")
def list_idea_dates(
    use_case: GetDailyIdeaUseCase = Depends(get_daily_idea_use_case),
) -> List[str]:
    """Dates that have an idea, newest first, for the calendar picker."""
    return [date_key_str(d) for d in use_case.list_dates()]
