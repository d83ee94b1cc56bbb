"""
Streaming client for the chat endpoint.

Posts one turn, parses the server-sent events and folds every ``data`` item
through ``StreamReducer``, so callers (scripts, tests, other services) see
the same state a browser would.
"""

import logging
from collections.abc import AsyncIterator
from dataclasses import dataclass, field
from typing import Any
from uuid import UUID

import httpx

from app.services.model_catalog import DEFAULT_MODEL_ID
from app.streaming.protocol import PartType, StreamPart
from app.streaming.reducer import ClientState, StreamReducer

logger = logging.getLogger(__name__)


@dataclass
class TurnOutcome:
    """Everything received for one turn."""

    state: ClientState
    text: str = ""
    data: list[dict[str, Any]] = field(default_factory=list)
    tool_calls: list[dict[str, Any]] = field(default_factory=list)
    tool_results: list[dict[str, Any]] = field(default_factory=list)
    annotations: list[dict[str, Any]] = field(default_factory=list)
    finish_reason: str | None = None
    error: str | None = None


async def iter_sse(response: httpx.Response) -> AsyncIterator[StreamPart]:
    """Parse a server-sent event stream into stream parts."""
    event = None
    data_lines: list[str] = []
    async for line in response.aiter_lines():
        if not line:
            if event is not None:
                yield StreamPart.from_sse(event, "\n".join(data_lines))
            event, data_lines = None, []
        elif line.startswith(":"):
            continue  # keep-alive comment
        elif line.startswith("event:"):
            event = line[len("event:"):].strip()
        elif line.startswith("data:"):
            data_lines.append(line[len("data:"):].lstrip())

    if event is not None:
        yield StreamPart.from_sse(event, "\n".join(data_lines))


class AmigoClient:
    def __init__(
        self,
        base_url: str,
        access_token: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = 120.0,
    ):
        headers = {"Authorization": f"Bearer {access_token}"} if access_token else {}
        self._client = httpx.AsyncClient(
            base_url=base_url, headers=headers, transport=transport, timeout=timeout
        )

    async def __aenter__(self) -> "AmigoClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def send(
        self,
        chat_id: UUID,
        messages: list[dict[str, Any]],
        *,
        model_id: str = DEFAULT_MODEL_ID,
        reducer: StreamReducer | None = None,
    ) -> TurnOutcome:
        """
        Run one turn and fold its events.

        Pass the same ``reducer`` across turns to keep client state (roadmap,
        suggestions, artifact panel) between them.
        """
        reducer = reducer or StreamReducer()
        # Indices are per turn
        reducer.state.last_processed_index = -1
        outcome = TurnOutcome(state=reducer.state)
        payload = {"id": str(chat_id), "messages": messages, "model_id": model_id}

        async with self._client.stream("POST", "/api/chat", json=payload) as response:
            if response.status_code != 200:
                await response.aread()
                response.raise_for_status()

            async for part in iter_sse(response):
                if part.type is PartType.TEXT:
                    outcome.text += part.value
                elif part.type is PartType.DATA:
                    outcome.data.append(part.value)
                    reducer.apply(outcome.data)
                elif part.type is PartType.TOOL_CALL:
                    outcome.tool_calls.append(part.value)
                elif part.type is PartType.TOOL_RESULT:
                    outcome.tool_results.append(part.value)
                elif part.type is PartType.MESSAGE_ANNOTATION:
                    outcome.annotations.append(part.value)
                elif part.type is PartType.FINISH_MESSAGE:
                    outcome.finish_reason = part.value.get("finish_reason")
                elif part.type is PartType.ERROR:
                    logger.warning("Turn for chat %s failed: %s", chat_id, part.value)
                    outcome.error = part.value

        reducer.tick()
        return outcome
