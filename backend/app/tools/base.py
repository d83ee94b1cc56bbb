"""Tool declaration and execution for the chat turn."""

import logging
from dataclasses import dataclass
from typing import Any, ClassVar
from uuid import UUID

from fastapi.encoders import jsonable_encoder
from pydantic import BaseModel, ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import Settings, sanitize_error
from app.services.llm import LLMGateway
from app.services.profile_cache import LocalProfileCache
from app.streaming.data_stream import DataStreamWriter

logger = logging.getLogger(__name__)


@dataclass
class ToolContext:
    """Everything a tool may touch during one turn."""

    db: AsyncSession
    writer: DataStreamWriter
    gateway: LLMGateway
    model: str
    user_id: UUID | None
    profile_cache: LocalProfileCache
    settings: Settings


class Tool:
    """
    Base class for tools offered to the model.

    Subclasses set ``name``, ``description`` and ``parameters`` and implement
    ``execute``. Arguments arrive already validated against ``parameters``.
    """

    name: ClassVar[str]
    description: ClassVar[str]
    parameters: ClassVar[type[BaseModel]]

    def declaration(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "input_schema": self.parameters.model_json_schema(),
        }

    async def execute(self, args: BaseModel, ctx: ToolContext) -> Any:
        raise NotImplementedError


class ToolRegistry:
    """Looks up tools by name and turns every failure into a structured result."""

    def __init__(self, tools: list[Tool]):
        self._tools = {tool.name: tool for tool in tools}

    def __contains__(self, name: str) -> bool:
        return name in self._tools

    def declarations(self) -> list[dict[str, Any]]:
        return [tool.declaration() for tool in self._tools.values()]

    async def execute(self, name: str, raw_args: dict[str, Any], ctx: ToolContext) -> Any:
        """Run a tool; the result is always JSON-serializable."""
        tool = self._tools.get(name)
        if tool is None:
            return {"error": f"Unknown tool: {name}"}

        try:
            args = tool.parameters.model_validate(raw_args)
        except ValidationError as e:
            logger.warning("Invalid arguments for tool %s: %s", name, e)
            return {"error": f"Invalid arguments for {name}: {e.error_count()} validation error(s)"}

        try:
            result = await tool.execute(args, ctx)
        except Exception as e:
            logger.exception("Tool %s failed", name)
            await ctx.db.rollback()
            return {"error": sanitize_error(e, generic_message=f"The {name} tool failed.")}

        return jsonable_encoder(result)
