"""Roadmap display tool."""

import logging

from pydantic import BaseModel, Field

from app.streaming.protocol import DataType
from app.tools.base import Tool, ToolContext

logger = logging.getLogger(__name__)


class RoadmapEvent(BaseModel):
    id: str = Field(
        ...,
        description='A unique identifier for the roadmap event (e.g., "topic-1", "week-1-react").',
    )
    title: str = Field(
        ...,
        description='The display name of the roadmap event (e.g., "Week 1: Setup").',
    )


class CreateRoadmapArgs(BaseModel):
    roadmap_events: list[RoadmapEvent] = Field(
        ..., description="The steps or stages of the roadmap, in order."
    )


class CreateRoadmapTool(Tool):
    name = "create_roadmap"
    description = (
        "Creates a learning plan or roadmap with a list of steps or events. Use this "
        "when the user asks for a plan, schedule, or roadmap."
    )
    parameters = CreateRoadmapArgs

    async def execute(self, args: CreateRoadmapArgs, ctx: ToolContext) -> dict:
        events = [event.model_dump() for event in args.roadmap_events]
        logger.info("Creating roadmap with %d event(s)", len(events))
        ctx.writer.write_data(DataType.ROADMAP_CREATION, events)
        return {
            "success": True,
            "message": f"Roadmap created with {len(events)} event(s). The roadmap is being displayed.",
        }
