"""
Conversions between UI messages, core messages and stored messages.

Core messages are plain dicts:
- ``{"role": "user" | "assistant", "content": str | list[part]}``
- ``{"role": "tool", "content": [tool-result part, ...]}``

with parts ``{"type": "text", "text"}``,
``{"type": "tool-call", "tool_call_id", "tool_name", "args"}`` and
``{"type": "tool-result", "tool_call_id", "tool_name", "result"}``.
"""

from collections.abc import Sequence
from typing import Any

from app.db.models import ChatMessage
from app.schemas.chat import ToolInvocation, UIMessage

CoreMessage = dict[str, Any]


def convert_to_core_messages(messages: Sequence[UIMessage]) -> list[CoreMessage]:
    """
    Convert the UI history sent by the browser into core messages.

    An assistant message with tool invocations becomes an assistant message
    with tool-call parts followed by a tool message holding the results.
    Invocations that never got a result are dropped, and so is an assistant
    message left with no text.
    """
    core: list[CoreMessage] = []
    for message in messages:
        if message.role == "user":
            core.append({"role": "user", "content": message.content})
            continue
        if message.role != "assistant":
            continue

        completed = [
            invocation
            for invocation in message.tool_invocations or []
            if invocation.state == "result"
        ]
        if not completed:
            if message.content:
                core.append({"role": "assistant", "content": message.content})
            continue

        parts: list[dict[str, Any]] = []
        if message.content:
            parts.append({"type": "text", "text": message.content})
        parts.extend(
            {
                "type": "tool-call",
                "tool_call_id": invocation.tool_call_id,
                "tool_name": invocation.tool_name,
                "args": invocation.args,
            }
            for invocation in completed
        )
        core.append({"role": "assistant", "content": parts})
        core.append({
            "role": "tool",
            "content": [
                {
                    "type": "tool-result",
                    "tool_call_id": invocation.tool_call_id,
                    "tool_name": invocation.tool_name,
                    "result": invocation.result,
                }
                for invocation in completed
            ],
        })
    return core


def get_most_recent_user_message(messages: Sequence[CoreMessage]) -> CoreMessage | None:
    user_messages = [message for message in messages if message["role"] == "user"]
    return user_messages[-1] if user_messages else None


def message_text(message: CoreMessage) -> str:
    """Concatenated text of a core message."""
    content = message["content"]
    if isinstance(content, str):
        return content
    return "".join(part.get("text", "") for part in content if part.get("type") == "text")


def sanitize_response_messages(messages: Sequence[CoreMessage]) -> list[CoreMessage]:
    """
    Drop tool calls that never got a result and empty text parts,
    then drop messages left without content.
    """
    tool_result_ids = {
        part["tool_call_id"]
        for message in messages
        if message["role"] == "tool"
        for part in message["content"]
        if part.get("type") == "tool-result"
    }

    sanitized = []
    for message in messages:
        content = message["content"]
        if message["role"] == "assistant" and not isinstance(content, str):
            content = [
                part
                for part in content
                if (part["type"] != "tool-call" or part["tool_call_id"] in tool_result_ids)
                and (part["type"] != "text" or part["text"])
            ]
            message = {**message, "content": content}
        if len(content) > 0:
            sanitized.append(message)
    return sanitized


def convert_to_ui_messages(messages: Sequence[ChatMessage]) -> list[UIMessage]:
    """Rebuild the UI history from stored messages, folding tool results into their calls."""
    ui_messages: list[UIMessage] = []
    for message in messages:
        if message.role == "tool":
            results = {
                part["tool_call_id"]: part.get("result")
                for part in message.content
                if part.get("type") == "tool-result"
            }
            for ui_message in ui_messages:
                for invocation in ui_message.tool_invocations or []:
                    if invocation.tool_call_id in results:
                        invocation.state = "result"
                        invocation.result = results[invocation.tool_call_id]
            continue

        text = ""
        invocations: list[ToolInvocation] = []
        if isinstance(message.content, str):
            text = message.content
        else:
            for part in message.content:
                if part.get("type") == "text":
                    text += part["text"]
                elif part.get("type") == "tool-call":
                    invocations.append(
                        ToolInvocation(
                            state="call",
                            tool_call_id=part["tool_call_id"],
                            tool_name=part["tool_name"],
                            args=part.get("args") or {},
                        )
                    )

        ui_messages.append(
            UIMessage(
                id=str(message.id),
                role=message.role,
                content=text,
                tool_invocations=invocations,
            )
        )
    return ui_messages
