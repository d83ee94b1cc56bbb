"""
Multi-step chat turn.

Each step streams model text into the writer, then runs the step's tool
calls one after another. A step that ended with tool calls feeds the
results back to the model, up to ``max_steps`` steps.
"""

import logging
from typing import Any

from app.services.llm import StepFinish, TextDelta, ToolCall
from app.tools.base import ToolContext, ToolRegistry

logger = logging.getLogger(__name__)


async def run_chat_turn(
    *,
    ctx: ToolContext,
    registry: ToolRegistry,
    system: str,
    messages: list[dict[str, Any]],
    max_steps: int,
) -> tuple[list[dict[str, Any]], str]:
    """
    Run the turn; return the response messages in core form and the last
    finish reason.

    Writes ``finish-step`` after every step. ``finish-message`` is left to
    the caller, after the response messages are stored.
    """
    history = list(messages)
    response_messages: list[dict[str, Any]] = []
    finish_reason = "stop"

    for step in range(max_steps):
        text = ""
        tool_calls: list[ToolCall] = []

        async for event in ctx.gateway.stream_step(
            model=ctx.model,
            system=system,
            messages=history,
            tools=registry.declarations(),
        ):
            if isinstance(event, TextDelta):
                text += event.text
                ctx.writer.write_text(event.text)
            elif isinstance(event, ToolCall):
                tool_calls.append(event)
                ctx.writer.write_tool_call(event.id, event.name, event.args)
            elif isinstance(event, StepFinish):
                finish_reason = event.finish_reason

        content: list[dict[str, Any]] = []
        if text:
            content.append({"type": "text", "text": text})
        content.extend(
            {"type": "tool-call", "tool_call_id": call.id, "tool_name": call.name, "args": call.args}
            for call in tool_calls
        )
        assistant_message = {"role": "assistant", "content": content}
        history.append(assistant_message)
        response_messages.append(assistant_message)

        if not tool_calls:
            ctx.writer.write_finish_step(finish_reason)
            break

        results = []
        for call in tool_calls:
            logger.info("Step %d: running tool %s", step + 1, call.name)
            result = await registry.execute(call.name, call.args, ctx)
            ctx.writer.write_tool_result(call.id, call.name, result)
            results.append(
                {
                    "type": "tool-result",
                    "tool_call_id": call.id,
                    "tool_name": call.name,
                    "result": result,
                }
            )
        tool_message = {"role": "tool", "content": results}
        history.append(tool_message)
        response_messages.append(tool_message)

        is_continued = step + 1 < max_steps
        ctx.writer.write_finish_step(finish_reason, is_continued=is_continued)

    return response_messages, finish_reason
