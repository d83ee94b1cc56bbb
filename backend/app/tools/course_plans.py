"""Course plan tools: generate a plan for review, then save the approved one."""

import logging

from pydantic import BaseModel, Field

from app.db import queries
from app.schemas.course_plans import MAX_COURSE_MODULES, CoursePlanSave, GeneratedCoursePlan
from app.services import prompts
from app.streaming.protocol import DataType
from app.tools.base import Tool, ToolContext

logger = logging.getLogger(__name__)

COURSE_URL = "/course"


class GenerateCoursePlanArgs(BaseModel):
    learning_goals: str = Field(..., description="User's learning objectives and aspirations.")
    prior_knowledge: str | None = Field(
        None, description="The user's prior knowledge level in the subject area."
    )
    daily_time_commitment: str | None = Field(
        None, description="How much time the user can dedicate daily to learning."
    )
    current_goal: str = Field(
        ..., description="The specific current learning goal for the user to focus on."
    )


class GenerateInitialCoursePlanTool(Tool):
    """One structured generation; nothing is persisted until the user approves."""

    name = "generate_initial_course_plan"
    description = (
        "Generates an initial detailed course plan structure based on the user's profile "
        "and learning goals. Use this after the user confirms they want a detailed plan."
    )
    parameters = GenerateCoursePlanArgs

    async def execute(self, args: GenerateCoursePlanArgs, ctx: ToolContext) -> dict:
        logger.info("Generating course plan for goal: %s", args.current_goal)
        try:
            plan = await ctx.gateway.generate_object(
                model=ctx.model,
                system=prompts.COURSE_PLAN_PROMPT.format(max_modules=MAX_COURSE_MODULES),
                prompt=prompts.course_plan_request(
                    learning_goals=args.learning_goals,
                    current_goal=args.current_goal,
                    prior_knowledge=args.prior_knowledge,
                    daily_time_commitment=args.daily_time_commitment,
                    max_modules=MAX_COURSE_MODULES,
                ),
                schema=GeneratedCoursePlan,
            )
        except Exception:
            logger.exception("Error generating course plan")
            return {
                "success": False,
                "message": "There was an error generating your course plan. Please try again.",
            }

        return {
            "success": True,
            "message": (
                "Your course plan has been generated successfully. "
                "Click below to view your course plan."
            ),
            "show_course_button": True,
            "course_url": COURSE_URL,
            "course_plan": plan.model_dump(),
        }


class SaveCoursePlanTool(Tool):
    name = "save_course_plan"
    description = (
        "Saves the finalized course plan to the user's profile after they have "
        "reviewed and approved it."
    )
    parameters = CoursePlanSave

    async def execute(self, args: CoursePlanSave, ctx: ToolContext) -> dict:
        if ctx.user_id is None:
            return {"success": False, "message": "You must be logged in to save a course plan."}

        logger.info("Saving course plan: %s", args.title)
        try:
            await queries.save_course_plan(
                ctx.db,
                ctx.user_id,
                title=args.title,
                description=args.description,
                learning_objectives=args.learning_objectives,
                total_estimated_time=args.total_estimated_time,
                modules=[module.model_dump() for module in args.modules],
            )
            await ctx.db.commit()
        except Exception:
            logger.exception("Error saving course plan")
            await ctx.db.rollback()
            return {
                "success": False,
                "message": "There was an error saving your course plan. Please try again.",
            }

        try:
            await ctx.profile_cache.record_activity(ctx.user_id, "course-plan-create")
        except Exception:
            logger.exception("Failed to record course plan activity")

        ctx.writer.write_data(DataType.COURSE_PLAN_SAVE, {"course_id": str(ctx.user_id)})
        return {
            "success": True,
            "message": (
                "Your course plan has been saved successfully. "
                "You can access it from your dashboard or view it now."
            ),
            "show_course_button": True,
            "course_url": COURSE_URL,
        }
