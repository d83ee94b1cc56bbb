"""
Client-side fold of the chat data stream.

The reducer consumes the accumulated list of ``data`` items of a turn and
applies only the items it has not seen yet, in arrival order. All UI state
lives in an explicit ``ClientState`` owned by the caller.

State machines:
- artifact panel: ``idle`` -> ``streaming`` on ``clear`` (or any artifact
  event), back to ``idle`` on ``finish``
- roadmap: set once a ``roadmap-creation`` arrives, never unset
- navigation: ``course-plan-save`` arms a one-shot redirect to ``/course``
  that becomes consumable after ``REDIRECT_DELAY_SECONDS``
"""

import logging
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Any, Literal

from app.streaming.protocol import DataType

logger = logging.getLogger(__name__)

REDIRECT_DELAY_SECONDS = 0.5
COURSE_URL = "/course"
GENERATED_ROADMAP_TITLE = "AI Generated Roadmap"


@dataclass
class BlockState:
    """Artifact side panel."""

    document_id: str = "init"
    title: str = ""
    kind: str = "text"
    content: str = ""
    is_visible: bool = False
    status: Literal["idle", "streaming"] = "idle"


@dataclass
class RoadmapState:
    title: str = "Generated Roadmap"
    events: list[dict[str, Any]] = field(default_factory=list)
    has_roadmap: bool = False


@dataclass
class PendingNavigation:
    url: str
    due_at: float


@dataclass
class ClientState:
    """Everything the stream can change on the client."""

    block: BlockState = field(default_factory=BlockState)
    roadmap: RoadmapState = field(default_factory=RoadmapState)
    user_message_id_from_server: str | None = None
    optimistic_suggestions: list[dict[str, Any]] = field(default_factory=list)
    deferred_suggestions: list[dict[str, Any]] = field(default_factory=list)
    pending_navigation: PendingNavigation | None = None
    last_processed_index: int = -1


class StreamReducer:
    """Idempotent, suffix-only reducer over a turn's data items."""

    def __init__(
        self,
        state: ClientState | None = None,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.state = state if state is not None else ClientState()
        self._clock = clock

    def apply(self, data: Sequence[dict[str, Any]]) -> ClientState:
        """
        Fold every item after ``last_processed_index``.

        Suggestions deferred by a previous call are flushed first: a call to
        ``apply`` always happens at least one tick after the previous one.
        """
        self.tick()
        if not data:
            return self.state

        start = self.state.last_processed_index + 1
        new_items = data[start:]
        self.state.last_processed_index = len(data) - 1

        for item in new_items:
            self._apply_item(item)
        return self.state

    def tick(self) -> None:
        """Move deferred suggestions into the optimistic list."""
        if self.state.deferred_suggestions:
            self.state.optimistic_suggestions.extend(self.state.deferred_suggestions)
            self.state.deferred_suggestions = []

    def consume_navigation(self) -> str | None:
        """Return the pending redirect once its delay has elapsed, at most once."""
        pending = self.state.pending_navigation
        if pending is None or self._clock() < pending.due_at:
            return None
        self.state.pending_navigation = None
        return pending.url

    def _apply_item(self, item: dict[str, Any]) -> None:
        try:
            type_ = DataType(item.get("type"))
        except ValueError:
            logger.debug("Ignoring unknown data item type %r", item.get("type"))
            return
        content = item.get("content")

        if type_ is DataType.USER_MESSAGE_ID:
            self.state.user_message_id_from_server = content
            return

        if type_ is DataType.ROADMAP_CREATION:
            roadmap = self.state.roadmap
            roadmap.title = GENERATED_ROADMAP_TITLE
            roadmap.events = list(content or [])
            roadmap.has_roadmap = True
            return

        if type_ is DataType.COURSE_PLAN_SAVE:
            self.state.pending_navigation = PendingNavigation(
                url=COURSE_URL, due_at=self._clock() + REDIRECT_DELAY_SECONDS
            )
            return

        if type_ is DataType.SUGGESTION:
            self.state.deferred_suggestions.append(content)
            return

        self._apply_to_block(type_, content)

    def _apply_to_block(self, type_: DataType, content: Any) -> None:
        block = self.state.block

        if type_ is DataType.ID:
            block.document_id = content
        elif type_ is DataType.TITLE:
            block.title = content
        elif type_ is DataType.KIND:
            block.kind = content
        elif type_ is DataType.TEXT_DELTA:
            if block.status == "streaming" and 400 < len(block.content) < 450:
                block.is_visible = True
            block.content += content
        elif type_ is DataType.CODE_DELTA:
            if block.status == "streaming" and 300 < len(block.content) < 310:
                block.is_visible = True
            block.content = content
        elif type_ is DataType.IMAGE_DELTA:
            block.content = content
            block.is_visible = True
        elif type_ is DataType.CLEAR:
            block.content = ""
        elif type_ is DataType.FINISH:
            block.status = "idle"
            return

        block.status = "streaming"
