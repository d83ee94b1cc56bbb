"""
Wire format of the chat data stream.

A turn is delivered as one ordered sequence of server-sent events. Each event
name is a ``PartType`` and each payload is JSON. ``data`` parts carry one
``{"type": DataType, "content": ...}`` item; the client accumulates them into
a list and folds that list through ``StreamReducer``.
"""

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any


class PartType(str, Enum):
    """Top-level stream part."""

    TEXT = "text"
    DATA = "data"
    MESSAGE_ANNOTATION = "message-annotation"
    TOOL_CALL = "tool-call"
    TOOL_RESULT = "tool-result"
    FINISH_STEP = "finish-step"
    FINISH_MESSAGE = "finish-message"
    ERROR = "error"


class DataType(str, Enum):
    """Type tag of a ``data`` part item."""

    # Token deltas
    TEXT_DELTA = "text-delta"
    CODE_DELTA = "code-delta"
    IMAGE_DELTA = "image-delta"

    # Structural markers bounding one artifact generation
    ID = "id"
    TITLE = "title"
    KIND = "kind"
    CLEAR = "clear"
    FINISH = "finish"

    # Application events
    SUGGESTION = "suggestion"
    ROADMAP_CREATION = "roadmap-creation"
    COURSE_PLAN_SAVE = "course-plan-save"

    USER_MESSAGE_ID = "user-message-id"


MESSAGE_ID_ANNOTATION = "messageIdFromServer"


def data_item(type_: DataType, content: Any) -> dict[str, Any]:
    """Build a ``data`` part item."""
    return {"type": type_.value, "content": content}


@dataclass(frozen=True)
class StreamPart:
    """One element of the ordered event log."""

    type: PartType
    value: Any

    def to_sse(self) -> dict[str, str]:
        """Render as an ``EventSourceResponse`` event dict."""
        return {"event": self.type.value, "data": json.dumps(self.value, default=str)}

    @classmethod
    def from_sse(cls, event: str, data: str) -> "StreamPart":
        """Parse an event received from the wire."""
        return cls(type=PartType(event), value=json.loads(data) if data else None)
