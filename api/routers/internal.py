"""Internal idea pre-generation endpoint.

Called by the daily scheduler shortly after midnight UTC so the first
reader of the day does not wait on generation. Secured by X-Internal-Key
header. No user auth required.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException
from pydantic import BaseModel

from api.deps import get_daily_idea_use_case, get_settings
from application.use_cases.get_daily_idea import GetDailyIdeaUseCase
from backend.services.idea_calendar import date_key_str, to_date_key
from backend.settings import Settings

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/internal/ideas", tags=["internal"])


# ---------------------------------------------------------------------------
# Request / Response models
# ---------------------------------------------------------------------------


class PregenerateRequest(BaseModel):
    """Request body for pre-generation. Date defaults to today (UTC)."""

    date: Optional[str] = None


class PregenerateResponse(BaseModel):
    """Outcome of pre-generation."""

    date: str
    issue_number: Optional[int]
    created: bool
    placeholder: bool


# ---------------------------------------------------------------------------
# Auth dependency
# ---------------------------------------------------------------------------


def _verify_internal_key(
    x_internal_key: str = Header(..., alias="X-Internal-Key"),
    settings: Settings = Depends(get_settings),
) -> None:
    """Verify the internal API key."""
    if not settings.internal_api_key:
        raise HTTPException(status_code=503, detail="Internal API key not configured")
    if x_internal_key != settings.internal_api_key:
        raise HTTPException(status_code=403, detail="Invalid internal API key")


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@router.post("/generate", response_model=PregenerateResponse)
def pregenerate_idea(
    body: Optional[PregenerateRequest] = None,
    _: None = Depends(_verify_internal_key),
    use_case: GetDailyIdeaUseCase = Depends(get_daily_idea_use_case),
) -> PregenerateResponse:
    """Generate and store the idea for a date if it does not exist yet."""
    raw_date = body.date if body else None
    try:
        target_date = to_date_key(raw_date)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Invalid date: {raw_date}")

    result = use_case.pregenerate(target_date)
    return PregenerateResponse(
        date=date_key_str(target_date),
        issue_number=result.idea.issue_number,
        created=result.created,
        placeholder=result.idea.placeholder,
    )
