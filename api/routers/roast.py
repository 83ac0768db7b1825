"""Idea Roaster endpoint.

POST /roast returns a VC-style roast of the submitted idea. Authenticated
and limited per user over a rolling window; over-limit requests get 429
with the time the next unit frees up.
"""

from typing import Any, Dict

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field, field_validator

from api.deps import get_current_user, get_roast_idea_use_case
from application.use_cases.roast_idea import RoastIdeaUseCase

router = APIRouter(tags=["roast"])


class RoastRequest(BaseModel):
    """Request body for a roast."""

    idea: str = Field(..., min_length=1, max_length=5000)

    @field_validator("idea")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("idea must not be blank")
        return v.strip()


@router.post("/roast")
def roast_idea(
    body: RoastRequest,
    user_id: str = Depends(get_current_user),
    use_case: RoastIdeaUseCase = Depends(get_roast_idea_use_case),
) -> Dict[str, Any]:
    outcome = use_case.execute(user_id, body.idea)
    quota = outcome.quota
    return {
        "roast": outcome.result,
        "remaining": quota.remaining,
        "resetAt": quota.reset_at.isoformat() if quota.reset_at else None,
    }
