"""Content generator: daily ideas, roasts and Devil's Advocate replies.

Builds the prompts, calls Claude through AIClient and converts every
backend failure into GenerationError so callers decide how to degrade.
"""

import logging
from datetime import date
from typing import Any, Dict, Iterator, List, Optional

from pydantic import ValidationError

from application.exceptions import GenerationError
from application.models import BadIdea
from backend.observability import IdeaMetrics
from backend.services.ai_client import AIClient, AIClientError
from backend.services.idea_calendar import holiday_for_date, seed_for_date

logger = logging.getLogger(__name__)

IDEA_TOOL_NAME = "record_bad_idea"

IDEA_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "title": {"type": "string", "description": "A catchy startup name."},
        "pitch": {
            "type": "string",
            "description": "The elevator pitch that sounds good at first.",
        },
        "fatalFlaw": {
            "type": "string",
            "description": "A deep technical or economic analysis of why it will fail.",
        },
        "verdict": {"type": "string", "description": "A one-sentence snarky summary."},
    },
    "required": ["title", "pitch", "fatalFlaw", "verdict"],
}

IDEA_SYSTEM_PROMPT = (
    "You write the 'Bad Idea of the Day' for a satirical startup newsletter. "
    "Every idea is a trap: plausible and exciting at first glance, doomed on "
    "closer analysis."
)

ROAST_SYSTEM_PROMPT = """You are a ruthless venture capitalist who specializes in spotting failure.
Your goal is to deconstruct why this startup idea will fail. Look for market size issues, unit economics, technical impossibility, or competition.
Be harsh, witty, and deeply analytical."""

DEVILS_ADVOCATE_SYSTEM_PROMPT = """You are the Devil's Advocate, a cynical startup advisor who assumes every idea is doomed until proven otherwise.

Guidelines:
- Attack the weakest assumption first: market size, unit economics, distribution, regulation, or technical feasibility.
- Be dry, sarcastic and technically precise. Never cruel about the person, only the idea.
- When the founder answers an objection well, concede it briefly and move to the next risk.
- Keep replies under 300 words. Use short paragraphs or bullet points.
"""


def build_idea_prompt(target_date: date, previous: Optional[BadIdea] = None) -> str:
    """Prompt for one date's idea, holiday-themed when the date is a holiday."""
    holiday = holiday_for_date(target_date)
    if holiday:
        opening = (
            f"Today is {holiday}. Generate a {holiday}-themed startup idea that sounds "
            "revolutionary and profitable on the surface, but has a catastrophic logical, "
            "economic, or social flaw that makes it a terrible business."
        )
    else:
        opening = (
            "Generate a startup idea that sounds revolutionary and profitable on the "
            "surface, but has a catastrophic logical, economic, or social flaw that makes "
            "it a terrible business."
        )

    parts = [
        opening,
        "Do not make it obviously a joke; make it a 'trap' idea. Analyze the flaw deeply.",
        f"Idea seed: {seed_for_date(target_date)}.",
    ]
    if previous is not None:
        parts.append(
            f'Yesterday\'s idea was "{previous.title}": {previous.pitch} '
            "Pick a different industry, customer and failure mode."
        )
    parts.append(f"Respond by calling {IDEA_TOOL_NAME}.")
    return "\n\n".join(parts)


def to_anthropic_history(history: List[Dict[str, str]]) -> List[Dict[str, str]]:
    """Convert UI chat turns ({role: user|model, text}) to Anthropic messages.

    Consecutive turns from the same role are merged and leading assistant
    turns dropped, since the Messages API requires alternating roles that
    start with the user.
    """
    messages: List[Dict[str, str]] = []
    for turn in history:
        text = (turn.get("text") or "").strip()
        if not text:
            continue
        role = "assistant" if turn.get("role") in ("model", "assistant") else "user"
        if not messages and role == "assistant":
            continue
        if messages and messages[-1]["role"] == role:
            messages[-1]["content"] += "\n\n" + text
        else:
            messages.append({"role": role, "content": text})
    return messages


class IdeaGenerator:
    """Generates ideas, roasts and advisor replies with Claude."""

    def __init__(
        self,
        ai_client: Optional[AIClient],
        model: Optional[str] = None,
        advisor_max_tokens: int = 2048,
    ) -> None:
        self._ai_client = ai_client
        self._model = model
        self._advisor_max_tokens = advisor_max_tokens

    def _client(self) -> AIClient:
        if self._ai_client is None:
            raise GenerationError("AI service not configured")
        return self._ai_client

    def generate_daily_idea(
        self, target_date: date, previous: Optional[BadIdea] = None
    ) -> BadIdea:
        """Generate the idea for a date.

        Temperature 0 and the per-date seed in the prompt keep output stable
        for a date.

        Raises:
            GenerationError: On API failure or output that fails validation.
        """
        prompt = build_idea_prompt(target_date, previous)
        try:
            payload = self._client().generate_structured(
                prompt=prompt,
                system=IDEA_SYSTEM_PROMPT,
                tool_name=IDEA_TOOL_NAME,
                input_schema=IDEA_SCHEMA,
                model=self._model,
                temperature=0.0,
            )
            return BadIdea.model_validate(payload)
        except AIClientError as e:
            IdeaMetrics.generation_failures_total().add(1, {"kind": "daily_idea"})
            raise GenerationError(str(e)) from e
        except ValidationError as e:
            IdeaMetrics.generation_failures_total().add(1, {"kind": "daily_idea"})
            logger.error("Generated idea for %s failed validation: %s", target_date, e)
            raise GenerationError("Generated idea was malformed") from e

    def roast_idea(self, idea: str) -> str:
        """Roast a user's idea.

        Raises:
            GenerationError: On API failure or an empty roast.
        """
        try:
            return self._client().complete(
                messages=[{"role": "user", "content": f'Idea to analyze: "{idea}"'}],
                system=ROAST_SYSTEM_PROMPT,
                model=self._model,
            )
        except AIClientError as e:
            IdeaMetrics.generation_failures_total().add(1, {"kind": "roast"})
            raise GenerationError(str(e)) from e

    def stream_advisor_reply(
        self, history: List[Dict[str, str]], message: str
    ) -> Iterator[str]:
        """Stream one Devil's Advocate reply as text fragments.

        Lazy: nothing is sent upstream until the first fragment is requested.

        Raises:
            GenerationError: Mid-iteration, when the upstream stream fails.
        """
        messages = to_anthropic_history(history)
        if messages and messages[-1]["role"] == "user":
            messages[-1]["content"] += "\n\n" + message
        else:
            messages.append({"role": "user", "content": message})

        for event in self._client().stream_chat(
            messages=messages,
            system=DEVILS_ADVOCATE_SYSTEM_PROMPT,
            model=self._model,
            max_tokens=self._advisor_max_tokens,
        ):
            if event.event == "content_delta":
                text = event.data.get("text", "")
                if text:
                    yield text
            elif event.event == "error":
                IdeaMetrics.generation_failures_total().add(1, {"kind": "advisor_chat"})
                raise GenerationError(event.data.get("message"))
