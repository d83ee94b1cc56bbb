"""LLM gateway: chat steps with tools, nested generations and image generation."""

import asyncio
import json
import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any, TypeVar

from anthropic import APIConnectionError, APIStatusError, AsyncAnthropic, RateLimitError
from openai import AsyncOpenAI
from pydantic import BaseModel, create_model

from app.config import Settings

logger = logging.getLogger(__name__)

SchemaT = TypeVar("SchemaT", bound=BaseModel)

# Transient error types that warrant retrying
_RETRYABLE_ERRORS = (APIConnectionError, RateLimitError)

_FINISH_REASONS = {
    "end_turn": "stop",
    "stop_sequence": "stop",
    "tool_use": "tool-calls",
    "max_tokens": "length",
}

_OBJECT_TOOL_NAME = "respond"


@dataclass(frozen=True)
class TextDelta:
    text: str


@dataclass(frozen=True)
class ToolCall:
    id: str
    name: str
    args: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class StepFinish:
    finish_reason: str


StepEvent = TextDelta | ToolCall | StepFinish


def _is_retryable(error: Exception) -> bool:
    if isinstance(error, _RETRYABLE_ERRORS):
        return True
    return isinstance(error, APIStatusError) and error.status_code == 529  # Overloaded


async def _retry_anthropic(
    coro_factory: Callable[[], Awaitable[Any]],
    *,
    max_attempts: int = 3,
    base_delay: float = 1.0,
) -> Any:
    """
    Retry an Anthropic API call with exponential backoff.

    Args:
        coro_factory: Callable that returns a new coroutine each invocation.
        max_attempts: Maximum number of attempts.
        base_delay: Base delay in seconds (doubles each retry).
    """
    for attempt in range(max_attempts):
        try:
            return await coro_factory()
        except Exception as e:
            if not _is_retryable(e) or attempt == max_attempts - 1:
                raise
            delay = base_delay * (2 ** attempt)
            logger.warning(
                "Anthropic API transient error (attempt %d/%d), retrying in %.1fs: %s",
                attempt + 1, max_attempts, delay, str(e),
            )
            await asyncio.sleep(delay)


def to_anthropic_messages(messages: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """
    Convert core messages to the Messages API format.

    Tool messages become user turns carrying ``tool_result`` blocks; messages
    with empty text are skipped.
    """
    converted = []
    for message in messages:
        role = message["role"]
        content = message["content"]

        if role == "tool":
            converted.append({
                "role": "user",
                "content": [
                    {
                        "type": "tool_result",
                        "tool_use_id": part["tool_call_id"],
                        "content": json.dumps(part.get("result"), default=str),
                    }
                    for part in content
                ],
            })
            continue

        if isinstance(content, str):
            if content:
                converted.append({"role": role, "content": content})
            continue

        blocks = []
        for part in content:
            if part["type"] == "text":
                if part["text"]:
                    blocks.append({"type": "text", "text": part["text"]})
            elif part["type"] == "tool-call":
                blocks.append({
                    "type": "tool_use",
                    "id": part["tool_call_id"],
                    "name": part["tool_name"],
                    "input": part.get("args") or {},
                })
        if blocks:
            converted.append({"role": role, "content": blocks})
    return converted


def _object_tool(schema: type[BaseModel]) -> dict[str, Any]:
    return {
        "name": _OBJECT_TOOL_NAME,
        "description": f"Return the result as a {schema.__name__} object.",
        "input_schema": schema.model_json_schema(),
    }


class LLMGateway:
    """Hosted model access for the chat route and the tool executors."""

    def __init__(self, settings: Settings):
        self.settings = settings
        self.client = AsyncAnthropic(api_key=settings.anthropic_api_key)
        self._image_client: AsyncOpenAI | None = None

    @property
    def image_client(self) -> AsyncOpenAI:
        # Created on first use so deployments without image support need no key
        if self._image_client is None:
            self._image_client = AsyncOpenAI(api_key=self.settings.openai_api_key)
        return self._image_client

    async def stream_step(
        self,
        *,
        model: str,
        system: str,
        messages: list[dict[str, Any]],
        tools: list[dict[str, Any]],
    ) -> AsyncIterator[StepEvent]:
        """
        Run one model step.

        Yields text deltas as they arrive, then every tool call of the step,
        then a single ``StepFinish``. Transient errors are retried only while
        nothing has been yielded yet.
        """
        max_attempts = 3
        for attempt in range(max_attempts):
            emitted = False
            try:
                async with self.client.messages.stream(
                    model=model,
                    max_tokens=self.settings.llm_max_tokens,
                    system=system,
                    messages=to_anthropic_messages(messages),
                    tools=tools,
                ) as stream:
                    async for event in stream:
                        if event.type == "text":
                            emitted = True
                            yield TextDelta(event.text)
                    final = await stream.get_final_message()

                for block in final.content:
                    if block.type == "tool_use":
                        yield ToolCall(id=block.id, name=block.name, args=dict(block.input or {}))
                yield StepFinish(_FINISH_REASONS.get(final.stop_reason, "other"))
                return

            except Exception as e:
                if emitted or not _is_retryable(e) or attempt == max_attempts - 1:
                    raise
                delay = 1.0 * (2 ** attempt)
                logger.warning(
                    "Anthropic stream transient error (attempt %d/%d), retrying in %.1fs: %s",
                    attempt + 1, max_attempts, delay, str(e),
                )
                await asyncio.sleep(delay)

    async def stream_text(self, *, model: str, system: str, prompt: str) -> AsyncIterator[str]:
        """Stream plain text for a single prompt."""
        async with self.client.messages.stream(
            model=model,
            max_tokens=self.settings.llm_max_tokens,
            system=system,
            messages=[{"role": "user", "content": prompt}],
        ) as stream:
            async for text in stream.text_stream:
                yield text

    async def stream_object(
        self,
        *,
        model: str,
        system: str,
        prompt: str,
        schema: type[BaseModel],
    ) -> AsyncIterator[dict[str, Any]]:
        """
        Stream partial snapshots of a structured object.

        The model is forced to answer through a single tool whose input schema
        is ``schema``; each yielded value is the partially parsed input so far.
        """
        async with self.client.messages.stream(
            model=model,
            max_tokens=self.settings.llm_max_tokens,
            system=system,
            messages=[{"role": "user", "content": prompt}],
            tools=[_object_tool(schema)],
            tool_choice={"type": "tool", "name": _OBJECT_TOOL_NAME},
        ) as stream:
            async for event in stream:
                if event.type == "input_json" and isinstance(event.snapshot, dict):
                    yield event.snapshot

    async def stream_elements(
        self,
        *,
        model: str,
        system: str,
        prompt: str,
        schema: type[SchemaT],
    ) -> AsyncIterator[SchemaT]:
        """
        Stream an array of ``schema`` objects, one element as soon as it is complete.

        An element is complete once the next one has started, or when the
        stream ends.
        """
        container = create_model(f"{schema.__name__}Array", elements=(list[schema], ...))
        emitted = 0
        snapshot: dict[str, Any] = {}
        async for snapshot in self.stream_object(
            model=model, system=system, prompt=prompt, schema=container
        ):
            elements = snapshot.get("elements") or []
            while emitted < len(elements) - 1:
                yield schema.model_validate(elements[emitted])
                emitted += 1

        for element in (snapshot.get("elements") or [])[emitted:]:
            yield schema.model_validate(element)

    async def generate_object(
        self,
        *,
        model: str,
        system: str,
        prompt: str,
        schema: type[SchemaT],
    ) -> SchemaT:
        """Generate one structured object and validate it against ``schema``."""
        message = await _retry_anthropic(
            lambda: self.client.messages.create(
                model=model,
                max_tokens=self.settings.llm_max_tokens,
                system=system,
                messages=[{"role": "user", "content": prompt}],
                tools=[_object_tool(schema)],
                tool_choice={"type": "tool", "name": _OBJECT_TOOL_NAME},
            )
        )
        for block in message.content:
            if block.type == "tool_use":
                return schema.model_validate(block.input)
        raise ValueError("Model returned no structured output")

    async def generate_text(
        self,
        *,
        model: str,
        system: str,
        prompt: str,
        max_tokens: int | None = None,
    ) -> str:
        """Generate a short non-streaming completion."""
        message = await _retry_anthropic(
            lambda: self.client.messages.create(
                model=model,
                max_tokens=max_tokens or self.settings.llm_max_tokens,
                system=system,
                messages=[{"role": "user", "content": prompt}],
            )
        )
        return "".join(block.text for block in message.content if block.type == "text")

    async def generate_image(self, *, prompt: str) -> str:
        """Generate one image and return it base64-encoded."""
        response = await self.image_client.images.generate(
            model=self.settings.image_model,
            prompt=prompt,
            n=1,
            size=self.settings.image_size,
            response_format="b64_json",
        )
        return response.data[0].b64_json
