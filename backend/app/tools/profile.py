"""Learner profile tool: saves what the conversation learned about the user."""

import logging

from app.db import queries
from app.schemas.profile import ProfileCard, ProfileInput, avatar_fallback_for
from app.tools.base import Tool, ToolContext

logger = logging.getLogger(__name__)

DASHBOARD_URL = "/dashboard"
STORAGE_WARNING = (
    "Your profile information was processed but there was an issue with storage. "
    "Your profile data may not persist between sessions."
)


class GenerateUserProfileTool(Tool):
    """
    Dual write: the relational profile row first, then the local cache.

    The tool always reports success so the conversation can continue; a
    failure in either store adds a ``warning`` to the result.
    """

    name = "generate_user_profile"
    description = (
        "Generates a user profile for the dashboard based on conversation data "
        "collected from the user."
    )
    parameters = ProfileInput

    async def execute(self, args: ProfileInput, ctx: ToolContext) -> dict:
        card = ProfileCard.from_input(args)
        storage_failed = False

        if ctx.user_id is not None:
            try:
                await queries.upsert_user_profile(
                    ctx.db,
                    ctx.user_id,
                    name=args.name,
                    education=args.education,
                    past_experience=args.past_experience,
                    learning_goals=args.learning_goals,
                    current_goal=args.current_goal,
                    daily_time_commitment=args.daily_time_commitment,
                    prior_knowledge=args.prior_knowledge,
                    avatar_fallback=avatar_fallback_for(args.name),
                )
                await ctx.db.commit()
                logger.info("Profile for user %s saved to database", ctx.user_id)
            except Exception:
                logger.exception("Error saving user profile to database")
                await ctx.db.rollback()
                storage_failed = True

        try:
            await ctx.profile_cache.save_profile(
                ctx.user_id, {**card.model_dump(), "current_goal": args.current_goal}
            )
            await ctx.profile_cache.record_activity(ctx.user_id, "profile-create")
        except Exception:
            logger.exception("Error saving user profile to local cache")
            storage_failed = True

        result = {
            "success": True,
            "message": (
                f"Profile created for {args.name}! You can now view your complete profile "
                "and learning activity on the dashboard."
            ),
            "show_dashboard_button": True,
            "dashboard_url": DASHBOARD_URL,
            "profile": {"user_profile": card.model_dump(), "current_goal": args.current_goal},
        }
        if storage_failed:
            result["message"] = f"Profile processed for {args.name}. You can view it on the dashboard."
            result["warning"] = STORAGE_WARNING
        return result
