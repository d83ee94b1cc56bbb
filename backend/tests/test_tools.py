"""Tests for the tool executors."""

import json

import httpx
import pytest
from sqlalchemy import func, select

from app.db.models import CoursePlan, Document, Suggestion, UserProfile
from app.streaming.protocol import PartType
from app.tools import ToolRegistry
from app.tools.course_plans import GenerateInitialCoursePlanTool, SaveCoursePlanTool
from app.tools.documents import CreateDocumentTool, UpdateDocumentTool
from app.tools.profile import GenerateUserProfileTool
from app.tools.roadmap import CreateRoadmapTool
from app.tools.suggestions import RequestSuggestionsTool
from app.tools.weather import WeatherTool

from tests.fakes import course_plan_payload


def data_items(writer) -> list[dict]:
    return [part.value for part in writer.parts if part.type is PartType.DATA]


def data_types(writer) -> list[str]:
    return [item["type"] for item in data_items(writer)]


async def count(db, model) -> int:
    result = await db.execute(select(func.count()).select_from(model))
    return result.scalar_one()


class ExplodingTool(CreateRoadmapTool):
    name = "explode"

    async def execute(self, args, ctx):
        raise RuntimeError("boom")


# =============================================================================
# REGISTRY
# =============================================================================


async def test_invalid_arguments_return_error_result(registry, make_context):
    result = await registry.execute("get_weather", {"latitude": "north"}, make_context())

    assert "error" in result
    assert "get_weather" in result["error"]


async def test_tool_exception_returns_serializable_error(make_context):
    registry = ToolRegistry([ExplodingTool()])

    result = await registry.execute("explode", {"roadmap_events": []}, make_context())

    assert result == {"error": "boom"}
    json.dumps(result)


async def test_unknown_tool_returns_error(registry, make_context):
    result = await registry.execute("launch_rocket", {}, make_context())

    assert result == {"error": "Unknown tool: launch_rocket"}


# =============================================================================
# WEATHER
# =============================================================================


async def test_weather_fetches_open_meteo_once(make_context):
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json={"current": {"temperature_2m": 21.5}})

    registry = ToolRegistry([WeatherTool(transport=httpx.MockTransport(handler))])
    result = await registry.execute(
        "get_weather", {"latitude": 52.52, "longitude": 13.41}, make_context()
    )

    assert result == {"current": {"temperature_2m": 21.5}}
    assert len(requests) == 1
    assert requests[0].url.params["daily"] == "sunrise,sunset"
    assert requests[0].url.params["timezone"] == "auto"


async def test_weather_rejects_out_of_range_coordinates(registry, make_context):
    result = await registry.execute(
        "get_weather", {"latitude": 123.0, "longitude": 0.0}, make_context()
    )

    assert "error" in result


# =============================================================================
# DOCUMENTS
# =============================================================================


async def test_create_text_document_streams_and_persists(db, user, writer, make_context):
    result = await CreateDocumentTool().execute(
        CreateDocumentTool.parameters(title="Study notes", kind="text"),
        make_context(user_id=user.id),
    )

    assert data_types(writer) == ["id", "title", "kind", "clear", "text-delta", "text-delta", "finish"]
    assert result["content"] == "A document was created and is now visible to the user."
    document = (await db.execute(select(Document))).scalar_one()
    assert document.content == "Hello world"
    assert str(document.id) == data_items(writer)[0]["content"]


async def test_create_code_document_sends_snapshots(writer, gateway, make_context):
    await CreateDocumentTool().execute(
        CreateDocumentTool.parameters(title="Fizzbuzz", kind="code"), make_context()
    )

    items = data_items(writer)
    assert [i["content"] for i in items if i["type"] == "code-delta"] == ["print(", "print('hi')"]
    assert data_types(writer)[-1] == "finish"


async def test_create_image_document_sends_single_delta(writer, make_context):
    await CreateDocumentTool().execute(
        CreateDocumentTool.parameters(title="A cat", kind="image"), make_context()
    )

    assert data_types(writer)[3:] == ["clear", "image-delta", "finish"]


@pytest.mark.parametrize(
    "kind, attribute, script",
    [
        ("text", "text_chunks", ["Start", RuntimeError("provider down")]),
        ("code", "object_snapshots", [{"code": "print("}, RuntimeError("provider down")]),
        ("image", "image", RuntimeError("provider down")),
    ],
)
async def test_failed_generation_still_finishes_artifact(
    registry, writer, gateway, make_context, kind, attribute, script
):
    setattr(gateway, attribute, script)

    result = await registry.execute(
        "create_document", {"title": "Essay", "kind": kind}, make_context()
    )

    assert result == {"error": "provider down"}
    types = data_types(writer)
    assert types.count("clear") == types.count("finish") == 1
    assert types.index("clear") < types.index("finish")
    assert types[-1] == "finish"


async def test_update_document_adds_version(db, user, writer, gateway, make_context):
    ctx = make_context(user_id=user.id)
    created = await CreateDocumentTool().execute(
        CreateDocumentTool.parameters(title="Notes", kind="text"), ctx
    )
    gateway.text_chunks = ["Better notes"]

    result = await UpdateDocumentTool().execute(
        UpdateDocumentTool.parameters(id=str(created["id"]), description="Improve it"), ctx
    )

    assert result["content"] == "The document has been updated successfully."
    assert await count(db, Document) == 2
    clears = [i for i in data_items(writer) if i["type"] == "clear"]
    assert clears[-1]["content"] == "Notes"


async def test_update_missing_document(make_context):
    result = await UpdateDocumentTool().execute(
        UpdateDocumentTool.parameters(id="not-a-uuid", description="x"), make_context()
    )

    assert result == {"error": "Document not found"}


# =============================================================================
# SUGGESTIONS
# =============================================================================


async def test_suggestions_stream_one_event_each_and_persist(db, user, writer, gateway, make_context):
    ctx = make_context(user_id=user.id)
    created = await CreateDocumentTool().execute(
        CreateDocumentTool.parameters(title="Essay", kind="text"), ctx
    )
    gateway.elements = [
        {
            "original_sentence": f"Sentence {i}.",
            "suggested_sentence": f"Better sentence {i}.",
            "description": "Clearer",
        }
        for i in range(7)
    ]

    result = await RequestSuggestionsTool().execute(
        RequestSuggestionsTool.parameters(document_id=str(created["id"])), ctx
    )

    assert result["count"] == 5
    assert data_types(writer).count("suggestion") == 5
    assert await count(db, Suggestion) == 5


# =============================================================================
# ROADMAP
# =============================================================================


async def test_roadmap_emits_single_event(writer, make_context):
    events = [{"id": "week-1", "title": "Setup"}, {"id": "week-2", "title": "Basics"}]

    result = await CreateRoadmapTool().execute(
        CreateRoadmapTool.parameters(roadmap_events=events), make_context()
    )

    assert data_items(writer) == [{"type": "roadmap-creation", "content": events}]
    assert result["success"] is True
    assert "2 event(s)" in result["message"]


# =============================================================================
# PROFILE
# =============================================================================


PROFILE_ARGS = {
    "name": "ada",
    "education": "BSc Mathematics",
    "learning_goals": "Become a data scientist",
    "current_goal": "Learn pandas",
}


async def test_profile_is_saved_to_both_stores(db, user, profile_cache, make_context):
    result = await GenerateUserProfileTool().execute(
        GenerateUserProfileTool.parameters(**PROFILE_ARGS), make_context(user_id=user.id)
    )

    assert result["success"] is True
    assert "warning" not in result
    assert result["profile"]["user_profile"]["avatar_fallback"] == "A"
    assert result["profile"]["user_profile"]["past_experience"] == ""
    profile = (await db.execute(select(UserProfile))).scalar_one()
    assert profile.current_goal == "Learn pandas"
    assert (await profile_cache.get_profile(user.id))["name"] == "ada"
    activity = await profile_cache.get_activity(user.id)
    assert sum(day.get("profile-create", 0) for day in activity.values()) == 1


async def test_profile_secondary_failure_adds_warning(user, profile_cache, make_context):
    async def broken_save(*args, **kwargs):
        raise OSError("disk full")

    profile_cache.save_profile = broken_save

    result = await GenerateUserProfileTool().execute(
        GenerateUserProfileTool.parameters(**PROFILE_ARGS), make_context(user_id=user.id)
    )

    assert result["success"] is True
    assert result["warning"]


async def test_profile_upsert_keeps_one_row(db, user, make_context):
    tool = GenerateUserProfileTool()
    ctx = make_context(user_id=user.id)
    await tool.execute(tool.parameters(**PROFILE_ARGS), ctx)
    await tool.execute(tool.parameters(**{**PROFILE_ARGS, "current_goal": "Learn SQL"}), ctx)

    assert await count(db, UserProfile) == 1


# =============================================================================
# COURSE PLANS
# =============================================================================


async def test_generate_course_plan_does_not_persist(db, gateway, make_context):
    gateway.generated_object = course_plan_payload()

    result = await GenerateInitialCoursePlanTool().execute(
        GenerateInitialCoursePlanTool.parameters(
            learning_goals="Data science", current_goal="Python"
        ),
        make_context(),
    )

    assert result["success"] is True
    assert result["course_url"] == "/course"
    assert len(result["course_plan"]["modules"]) == 2
    assert await count(db, CoursePlan) == 0


@pytest.mark.parametrize(
    "generated",
    [RuntimeError("model unavailable"), course_plan_payload(modules=6)],
    ids=["provider-error", "too-many-modules"],
)
async def test_generate_course_plan_failure(gateway, make_context, generated):
    gateway.generated_object = generated

    result = await GenerateInitialCoursePlanTool().execute(
        GenerateInitialCoursePlanTool.parameters(learning_goals="x", current_goal="y"),
        make_context(),
    )

    assert result["success"] is False
    assert result["message"]


async def test_second_save_replaces_first(db, user, writer, make_context):
    tool = SaveCoursePlanTool()
    ctx = make_context(user_id=user.id)

    await tool.execute(tool.parameters(**course_plan_payload(title="Plan A")), ctx)
    result = await tool.execute(tool.parameters(**course_plan_payload(title="Plan B")), ctx)

    assert result["success"] is True
    plans = (await db.execute(select(CoursePlan))).scalars().all()
    assert [plan.title for plan in plans] == ["Plan B"]
    assert data_items(writer)[-1] == {"type": "course-plan-save", "content": {"course_id": str(user.id)}}


async def test_save_course_plan_requires_identity(db, writer, make_context):
    tool = SaveCoursePlanTool()

    result = await tool.execute(tool.parameters(**course_plan_payload()), make_context())

    assert result["success"] is False
    assert data_items(writer) == []
    assert await count(db, CoursePlan) == 0
