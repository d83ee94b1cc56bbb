"""
Single-writer ordered event log for one chat turn.

Model token deltas, tool lifecycle events and application events are all
written through one ``DataStreamWriter``. The turn runs as a single task, so
the order in which parts are written is the order the client receives them.
"""

import asyncio
import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from typing import Any

from app.config import sanitize_error
from app.streaming.protocol import DataType, PartType, StreamPart, data_item

logger = logging.getLogger(__name__)

_CLOSED = object()

# Turns keep running after a client disconnect so issued writes can complete
_running_turns: set[asyncio.Task] = set()


class DataStreamWriter:
    """Append-only writer; parts are drained in write order by the response."""

    def __init__(self) -> None:
        self._queue: asyncio.Queue[Any] = asyncio.Queue()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def write(self, part: StreamPart) -> None:
        if self._closed:
            logger.warning("Dropping %s part written after stream close", part.type.value)
            return
        self._queue.put_nowait(part)

    def write_text(self, delta: str) -> None:
        self.write(StreamPart(PartType.TEXT, delta))

    def write_data(self, type_: DataType, content: Any) -> None:
        self.write(StreamPart(PartType.DATA, data_item(type_, content)))

    def write_message_annotation(self, annotation: dict[str, Any]) -> None:
        self.write(StreamPart(PartType.MESSAGE_ANNOTATION, annotation))

    def write_tool_call(self, tool_call_id: str, tool_name: str, args: dict[str, Any]) -> None:
        self.write(
            StreamPart(
                PartType.TOOL_CALL,
                {"tool_call_id": tool_call_id, "tool_name": tool_name, "args": args},
            )
        )

    def write_tool_result(self, tool_call_id: str, tool_name: str, result: Any) -> None:
        self.write(
            StreamPart(
                PartType.TOOL_RESULT,
                {"tool_call_id": tool_call_id, "tool_name": tool_name, "result": result},
            )
        )

    def write_finish_step(self, finish_reason: str, *, is_continued: bool = False) -> None:
        self.write(
            StreamPart(
                PartType.FINISH_STEP,
                {"finish_reason": finish_reason, "is_continued": is_continued},
            )
        )

    def write_finish_message(self, finish_reason: str) -> None:
        self.write(StreamPart(PartType.FINISH_MESSAGE, {"finish_reason": finish_reason}))

    def write_error(self, message: str) -> None:
        self.write(StreamPart(PartType.ERROR, message))

    def close(self) -> None:
        if not self._closed:
            self._closed = True
            self._queue.put_nowait(_CLOSED)

    async def __aiter__(self) -> AsyncIterator[StreamPart]:
        while True:
            part = await self._queue.get()
            if part is _CLOSED:
                return
            yield part


@asynccontextmanager
async def artifact_generation(writer: DataStreamWriter, clear_content: str = ""):
    """
    Bound one artifact generation with ``clear`` ... ``finish``.

    ``finish`` is written even when the body raises, so the client panel
    always returns to idle.
    """
    writer.write_data(DataType.CLEAR, clear_content)
    try:
        yield writer
    finally:
        writer.write_data(DataType.FINISH, "")


async def create_data_stream(
    execute: Callable[[DataStreamWriter], Awaitable[None]],
    *,
    error_message: str = "An error occurred during chat.",
) -> AsyncIterator[StreamPart]:
    """
    Run ``execute`` as the stream's only writer and yield its parts in order.

    An exception escaping ``execute`` becomes a single ``error`` part.
    """
    writer = DataStreamWriter()

    async def _run() -> None:
        try:
            await execute(writer)
        except Exception as e:
            logger.exception("Error during chat streaming")
            writer.write_error(sanitize_error(e, generic_message=error_message))
        finally:
            writer.close()

    task = asyncio.create_task(_run())
    _running_turns.add(task)
    task.add_done_callback(_running_turns.discard)

    async for part in writer:
        yield part
