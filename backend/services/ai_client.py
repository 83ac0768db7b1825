"""Anthropic client with optional Helicone proxy and streaming support."""

import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, Generator, List, Optional

import anthropic
from opentelemetry.trace import SpanKind

from backend.observability import IdeaMetrics, get_tracer

logger = logging.getLogger(__name__)

HELICONE_BASE_URL = "https://anthropic.helicone.ai"


@dataclass
class StreamEvent:
    """A single event from the AI stream."""

    event: str  # content_delta, message_end, error
    data: Dict[str, Any]


class AIClientError(Exception):
    """Raised by the non-streaming calls when the Anthropic request fails."""

    def __init__(self, error_type: str, message: str) -> None:
        super().__init__(message)
        self.error_type = error_type


class AIClient:
    """Wraps Anthropic SDK with optional Helicone proxy."""

    def __init__(
        self,
        api_key: str,
        helicone_api_key: Optional[str] = None,
        helicone_enabled: bool = False,
        default_model: str = "claude-sonnet-4-20250514",
    ) -> None:
        self._default_model = default_model

        kwargs: Dict[str, Any] = {"api_key": api_key}
        extra_headers: Dict[str, str] = {}

        if helicone_enabled and helicone_api_key:
            kwargs["base_url"] = HELICONE_BASE_URL
            extra_headers["Helicone-Auth"] = f"Bearer {helicone_api_key}"
            logger.info("AI client configured with Helicone proxy")

        if extra_headers:
            kwargs["default_headers"] = extra_headers

        self._client = anthropic.Anthropic(**kwargs)

    def stream_chat(
        self,
        messages: List[Dict[str, Any]],
        system: str,
        model: Optional[str] = None,
        max_tokens: int = 4096,
        temperature: Optional[float] = None,
    ) -> Generator[StreamEvent, None, None]:
        """Stream a completion from Claude.

        Yields content_delta events for each text fragment, then exactly one
        message_end, or a single error event if the request fails. Closing
        the generator early exits the SDK stream context, which closes the
        upstream connection.

        Args:
            messages: Anthropic-format message list.
            system: System prompt.
            model: Model override (defaults to default_model).
            max_tokens: Max output tokens.
            temperature: Optional sampling temperature.
        """
        model = model or self._default_model
        start_time = time.time()
        input_tokens = 0
        output_tokens = 0

        create_kwargs: Dict[str, Any] = {
            "model": model,
            "max_tokens": max_tokens,
            "system": system,
            "messages": messages,
        }
        if temperature is not None:
            create_kwargs["temperature"] = temperature

        with get_tracer().start_as_current_span(
            "anthropic.messages.stream",
            kind=SpanKind.CLIENT,
            attributes={"llm.model": model, "llm.max_tokens": max_tokens},
        ) as span:
            try:
                with self._client.messages.stream(**create_kwargs) as stream:
                    for event in stream:
                        if event.type == "message_start":
                            msg = getattr(event, "message", None)
                            if msg and hasattr(msg, "usage"):
                                input_tokens = getattr(msg.usage, "input_tokens", 0)

                        elif event.type == "content_block_delta":
                            delta = getattr(event, "delta", None)
                            text = getattr(delta, "text", None) if delta else None
                            if text:
                                yield StreamEvent(event="content_delta", data={"text": text})

                        elif event.type == "message_delta":
                            usage = getattr(
                                getattr(event, "usage", None), "output_tokens", 0
                            )
                            if usage:
                                output_tokens = usage

                    final_message = stream.get_final_message()
                    stop_reason = getattr(final_message, "stop_reason", "end_turn")

                total_seconds = time.time() - start_time
                IdeaMetrics.anthropic_total_seconds().record(
                    total_seconds, {"model": model, "call": "stream"}
                )
                span.set_attribute("llm.input_tokens", input_tokens)
                span.set_attribute("llm.output_tokens", output_tokens)

                yield StreamEvent(
                    event="message_end",
                    data={
                        "model": model,
                        "input_tokens": input_tokens,
                        "output_tokens": output_tokens,
                        "latency_ms": round(total_seconds * 1000),
                        "stop_reason": stop_reason,
                    },
                )

            except anthropic.RateLimitError as e:
                logger.warning("Anthropic rate limit: %s", e)
                span.set_attribute("error.type", "rate_limit")
                yield StreamEvent(
                    event="error",
                    data={"type": "rate_limit", "message": "AI service is busy. Please try again shortly."},
                )
            except anthropic.APIError as e:
                logger.error("Anthropic API error: %s", e)
                span.set_attribute("error.type", "api_error")
                span.record_exception(e)
                yield StreamEvent(
                    event="error",
                    data={"type": "api_error", "message": "AI service error. Please try again."},
                )
            except Exception as e:
                logger.error("Unexpected streaming error: %s", e)
                span.set_attribute("error.type", "internal_error")
                span.record_exception(e)
                yield StreamEvent(
                    event="error",
                    data={"type": "internal_error", "message": "An unexpected error occurred."},
                )

    def complete(
        self,
        messages: List[Dict[str, Any]],
        system: str,
        model: Optional[str] = None,
        max_tokens: int = 4096,
        temperature: Optional[float] = None,
    ) -> str:
        """Run a non-streaming completion and return the concatenated text.

        Raises:
            AIClientError: On API failure or an empty response.
        """
        message = self._create(
            "anthropic.messages.create",
            model=model or self._default_model,
            max_tokens=max_tokens,
            system=system,
            messages=messages,
            temperature=temperature,
        )
        text = "".join(
            block.text for block in message.content if getattr(block, "type", None) == "text"
        )
        if not text.strip():
            raise AIClientError("empty_response", "Model returned no text")
        return text

    def generate_structured(
        self,
        prompt: str,
        system: str,
        tool_name: str,
        input_schema: Dict[str, Any],
        model: Optional[str] = None,
        max_tokens: int = 4096,
        temperature: Optional[float] = 0.0,
    ) -> Dict[str, Any]:
        """Force a single tool call and return its input as structured output.

        The tool is never executed; its JSON schema is the response schema.

        Raises:
            AIClientError: On API failure or when no tool call comes back.
        """
        message = self._create(
            "anthropic.messages.structured",
            model=model or self._default_model,
            max_tokens=max_tokens,
            system=system,
            messages=[{"role": "user", "content": prompt}],
            temperature=temperature,
            tools=[
                {
                    "name": tool_name,
                    "description": "Record the structured response.",
                    "input_schema": input_schema,
                }
            ],
            tool_choice={"type": "tool", "name": tool_name},
        )
        for block in message.content:
            if getattr(block, "type", None) == "tool_use" and block.name == tool_name:
                return dict(block.input)
        raise AIClientError("missing_tool_call", f"Model did not call {tool_name}")

    def _create(self, span_name: str, temperature: Optional[float] = None, **kwargs: Any):
        if temperature is not None:
            kwargs["temperature"] = temperature
        model = kwargs["model"]
        start_time = time.time()

        with get_tracer().start_as_current_span(
            span_name,
            kind=SpanKind.CLIENT,
            attributes={"llm.model": model, "llm.max_tokens": kwargs["max_tokens"]},
        ) as span:
            try:
                message = self._client.messages.create(**kwargs)
            except anthropic.RateLimitError as e:
                logger.warning("Anthropic rate limit: %s", e)
                span.set_attribute("error.type", "rate_limit")
                raise AIClientError("rate_limit", "AI service is busy. Please try again shortly.") from e
            except anthropic.APIError as e:
                logger.error("Anthropic API error: %s", e)
                span.set_attribute("error.type", "api_error")
                span.record_exception(e)
                raise AIClientError("api_error", "AI service error. Please try again.") from e

            total_seconds = time.time() - start_time
            IdeaMetrics.anthropic_total_seconds().record(
                total_seconds, {"model": model, "call": "create"}
            )
            usage = getattr(message, "usage", None)
            if usage is not None:
                span.set_attribute("llm.input_tokens", getattr(usage, "input_tokens", 0))
                span.set_attribute("llm.output_tokens", getattr(usage, "output_tokens", 0))
            return message
