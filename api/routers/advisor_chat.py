"""Devil's Advocate chat streaming endpoint.

POST /advisor-chat returns an SSE event stream via sse-starlette. Auth and
quota are settled before the response starts, so failures there come back
as plain 401/429 JSON rather than inside the stream.
"""

import logging
from typing import List, Literal

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sse_starlette.sse import EventSourceResponse

from api.deps import get_current_user, get_stream_advisor_chat_use_case
from application.use_cases.stream_advisor_chat import StreamAdvisorChatUseCase
from backend.sse import sse_connect, sse_disconnect

logger = logging.getLogger(__name__)

router = APIRouter(tags=["advisor-chat"])


class ChatTurn(BaseModel):
    """One prior turn of the conversation."""

    role: Literal["user", "model"]
    text: str = Field(..., max_length=10000)


class AdvisorChatRequest(BaseModel):
    """Request body for an advisor turn."""

    history: List[ChatTurn] = Field(default_factory=list, max_length=100)
    message: str = Field(..., min_length=1, max_length=10000)


@router.post("/advisor-chat")
def advisor_chat(
    body: AdvisorChatRequest,
    user_id: str = Depends(get_current_user),
    use_case: StreamAdvisorChatUseCase = Depends(get_stream_advisor_chat_use_case),
):
    """Stream one Devil's Advocate reply as Server-Sent Events.

    Frames:
    - {"text": ...}: incremental reply text
    - {"done": true, "remaining": n, "resetAt": ...}: quota after this turn
    - [DONE]: end of stream
    - {"error": ..., "code": "UPSTREAM_GENERATION_FAILED"}: upstream failure
    """
    frames = use_case.execute(
        user_id=user_id,
        history=[turn.model_dump() for turn in body.history],
        message=body.message,
    )

    def event_generator():
        sse_connect()
        try:
            for sse_event in frames:
                yield {"event": sse_event.event, "data": sse_event.data}
        finally:
            frames.close()
            sse_disconnect()

    return EventSourceResponse(event_generator())
