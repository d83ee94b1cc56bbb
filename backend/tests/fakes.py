"""Test doubles: a scripted LLM gateway and a recording stream writer."""

from typing import Any

from app.services.llm import StepFinish, TextDelta, ToolCall
from app.streaming.data_stream import DataStreamWriter
from app.streaming.protocol import StreamPart


def _emit(item: Any) -> Any:
    if isinstance(item, Exception):
        raise item
    return item


class FakeGateway:
    """
    Replays canned model output.

    ``steps`` is a list of event lists, one per model step. Any scripted item
    that is an exception is raised at that point of the stream.
    """

    def __init__(self) -> None:
        self.steps: list[list[Any]] = []
        self.text_chunks: list[Any] = ["Hello ", "world"]
        self.object_snapshots: list[Any] = [{"code": "print("}, {"code": "print('hi')"}]
        self.elements: list[Any] = []
        self.generated_object: Any = None
        self.image = "aW1hZ2U="
        self.title: Any = "Learning plan chat"
        self.step_messages: list[list[dict]] = []

    def script(self, *steps: list[Any]) -> None:
        self.steps = list(steps)

    async def stream_step(self, *, model, system, messages, tools):
        self.step_messages.append(list(messages))
        events = self.steps.pop(0) if self.steps else [TextDelta("Done."), StepFinish("stop")]
        for event in events:
            yield _emit(event)

    async def stream_text(self, *, model, system, prompt):
        for chunk in self.text_chunks:
            yield _emit(chunk)

    async def stream_object(self, *, model, system, prompt, schema):
        for snapshot in self.object_snapshots:
            yield _emit(snapshot)

    async def stream_elements(self, *, model, system, prompt, schema):
        for element in self.elements:
            yield schema.model_validate(_emit(element))

    async def generate_object(self, *, model, system, prompt, schema):
        return schema.model_validate(_emit(self.generated_object))

    async def generate_text(self, *, model, system, prompt, max_tokens=None):
        return _emit(self.title)

    async def generate_image(self, *, prompt):
        return _emit(self.image)


def tool_step(name: str, args: dict, call_id: str = "call-1") -> list[Any]:
    """A model step that calls one tool."""
    return [ToolCall(id=call_id, name=name, args=args), StepFinish("tool-calls")]


def text_step(text: str) -> list[Any]:
    return [TextDelta(text), StepFinish("stop")]


def course_plan_payload(title: str = "Python Foundations", modules: int = 2) -> dict:
    return {
        "title": title,
        "description": "A structured path into Python.",
        "learning_objectives": ["Write scripts", "Use the standard library"],
        "total_estimated_time": "4 weeks",
        "modules": [
            {
                "id": f"module-{index}",
                "title": f"Module {index}",
                "description": "Core concepts",
                "estimated_time": "1 week",
                "topics": [
                    {"id": f"topic-{index}-1", "title": "Basics", "estimated_time": "2 hours"},
                    {"id": f"topic-{index}-2", "title": "Practice", "estimated_time": "3 hours"},
                ],
                "resources": [
                    {"type": "video", "title": "Intro video", "duration": "10 min"},
                    {"type": "quiz", "title": "Check yourself", "questions": 5},
                ],
            }
            for index in range(1, modules + 1)
        ],
    }


class RecordingWriter(DataStreamWriter):
    """Writer that also keeps every accepted part in ``parts``."""

    def __init__(self) -> None:
        super().__init__()
        self.parts: list[StreamPart] = []

    def write(self, part: StreamPart) -> None:
        if not self.closed:
            self.parts.append(part)
        super().write(part)


class UntouchedSession:
    """Session stand-in that records, then rejects, any use."""

    def __init__(self) -> None:
        self.used: list[str] = []

    def __getattr__(self, name: str) -> Any:
        self.used.append(name)
        raise AssertionError(f"Database session used: {name}")
