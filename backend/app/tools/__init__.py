"""Tools the chat model can call during a turn."""

from app.tools.base import Tool, ToolContext, ToolRegistry
from app.tools.course_plans import GenerateInitialCoursePlanTool, SaveCoursePlanTool
from app.tools.documents import CreateDocumentTool, UpdateDocumentTool
from app.tools.profile import GenerateUserProfileTool
from app.tools.roadmap import CreateRoadmapTool
from app.tools.suggestions import RequestSuggestionsTool
from app.tools.weather import WeatherTool


def default_registry() -> ToolRegistry:
    """Every tool offered on a chat turn."""
    return ToolRegistry(
        [
            WeatherTool(),
            CreateDocumentTool(),
            UpdateDocumentTool(),
            RequestSuggestionsTool(),
            CreateRoadmapTool(),
            GenerateUserProfileTool(),
            GenerateInitialCoursePlanTool(),
            SaveCoursePlanTool(),
        ]
    )


__all__ = [
    "Tool",
    "ToolContext",
    "ToolRegistry",
    "default_registry",
]
