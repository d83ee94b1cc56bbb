"""Tests for message conversion and sanitization."""

from datetime import datetime, timezone
from uuid import uuid4

from app.db.models import ChatMessage
from app.schemas.chat import UIMessage
from app.services.llm import to_anthropic_messages
from app.services.messages import (
    convert_to_core_messages,
    convert_to_ui_messages,
    get_most_recent_user_message,
    sanitize_response_messages,
)


def stored(role: str, content) -> ChatMessage:
    return ChatMessage(
        id=uuid4(), chat_id=uuid4(), role=role, content=content, created_at=datetime.now(timezone.utc)
    )


def test_assistant_tool_invocations_become_call_and_result_messages():
    ui = [
        UIMessage(role="user", content="Plan my week"),
        UIMessage(
            role="assistant",
            content="Here it is",
            tool_invocations=[
                {
                    "state": "result",
                    "tool_call_id": "c-1",
                    "tool_name": "create_roadmap",
                    "args": {"roadmap_events": []},
                    "result": {"success": True},
                },
                {"state": "call", "tool_call_id": "c-2", "tool_name": "get_weather"},
            ],
        ),
        UIMessage(role="user", content="Thanks"),
    ]

    core = convert_to_core_messages(ui)

    assert [message["role"] for message in core] == ["user", "assistant", "tool", "user"]
    assert [part["type"] for part in core[1]["content"]] == ["text", "tool-call"]
    assert core[2]["content"][0]["result"] == {"success": True}
    assert get_most_recent_user_message(core)["content"] == "Thanks"


def test_no_user_message():
    assert get_most_recent_user_message([{"role": "assistant", "content": "Hi"}]) is None


def test_sanitize_drops_unanswered_calls_and_empty_messages():
    messages = [
        {
            "role": "assistant",
            "content": [
                {"type": "text", "text": ""},
                {"type": "tool-call", "tool_call_id": "c-1", "tool_name": "a", "args": {}},
                {"type": "tool-call", "tool_call_id": "c-2", "tool_name": "b", "args": {}},
            ],
        },
        {
            "role": "tool",
            "content": [{"type": "tool-result", "tool_call_id": "c-1", "tool_name": "a", "result": 1}],
        },
        {"role": "assistant", "content": [{"type": "text", "text": ""}]},
    ]

    sanitized = sanitize_response_messages(messages)

    assert len(sanitized) == 2
    assert [part["tool_call_id"] for part in sanitized[0]["content"]] == ["c-1"]


def test_stored_tool_results_fold_into_invocations():
    messages = [
        stored("user", "Weather?"),
        stored(
            "assistant",
            [
                {"type": "text", "text": "Checking"},
                {"type": "tool-call", "tool_call_id": "c-1", "tool_name": "get_weather", "args": {"latitude": 1}},
            ],
        ),
        stored("tool", [{"type": "tool-result", "tool_call_id": "c-1", "tool_name": "get_weather", "result": {"t": 20}}]),
    ]

    ui = convert_to_ui_messages(messages)

    assert len(ui) == 2
    invocation = ui[1].tool_invocations[0]
    assert ui[1].content == "Checking"
    assert invocation.state == "result"
    assert invocation.result == {"t": 20}


def test_unfinished_reply_without_text_is_dropped():
    ui = [
        UIMessage(role="user", content="hi"),
        UIMessage(
            role="assistant",
            content="",
            tool_invocations=[{"state": "call", "tool_call_id": "c-1", "tool_name": "get_weather"}],
        ),
        UIMessage(role="user", content="again"),
    ]

    core = convert_to_core_messages(ui)

    assert [message["role"] for message in core] == ["user", "user"]
    assert all(message["content"] for message in core)


def test_empty_text_messages_are_not_sent_to_the_model():
    converted = to_anthropic_messages(
        [
            {"role": "user", "content": "hi"},
            {"role": "assistant", "content": ""},
            {"role": "assistant", "content": [{"type": "text", "text": ""}]},
            {"role": "user", "content": "again"},
        ]
    )

    assert [message["content"] for message in converted] == ["hi", "again"]
