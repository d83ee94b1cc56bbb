"""Writing suggestions for an existing document."""

import logging
from contextlib import aclosing
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from app.db import queries
from app.db.models import Suggestion
from app.services import prompts
from app.streaming.protocol import DataType
from app.tools.base import Tool, ToolContext
from app.tools.documents import DOCUMENT_NOT_FOUND

logger = logging.getLogger(__name__)


class SuggestionOutput(BaseModel):
    original_sentence: str = Field(..., description="The original sentence")
    suggested_sentence: str = Field(..., description="The suggested sentence")
    description: str = Field(..., description="The description of the suggestion")


class RequestSuggestionsArgs(BaseModel):
    document_id: str = Field(..., description="The ID of the document to request edits")


class RequestSuggestionsTool(Tool):
    name = "request_suggestions"
    description = "Request suggestions for a document"
    parameters = RequestSuggestionsArgs

    async def execute(self, args: RequestSuggestionsArgs, ctx: ToolContext) -> dict:
        try:
            document_id = UUID(args.document_id)
        except ValueError:
            return DOCUMENT_NOT_FOUND

        document = await queries.get_document_by_id(ctx.db, document_id)
        if document is None or not document.content:
            return DOCUMENT_NOT_FOUND

        max_suggestions = ctx.settings.max_suggestions
        suggestions = []
        elements = ctx.gateway.stream_elements(
            model=ctx.model,
            system=prompts.SUGGESTIONS_PROMPT.format(max_suggestions=max_suggestions),
            prompt=document.content,
            schema=SuggestionOutput,
        )
        async with aclosing(elements):
            async for element in elements:
                suggestion = {
                    "id": str(uuid4()),
                    "document_id": str(document_id),
                    "original_text": element.original_sentence,
                    "suggested_text": element.suggested_sentence,
                    "description": element.description,
                    "is_resolved": False,
                }
                ctx.writer.write_data(DataType.SUGGESTION, suggestion)
                suggestions.append(suggestion)
                if len(suggestions) >= max_suggestions:
                    break

        if ctx.user_id is not None and suggestions:
            await queries.save_suggestions(
                ctx.db,
                [
                    Suggestion(
                        id=UUID(suggestion["id"]),
                        document_id=document_id,
                        document_created_at=document.created_at,
                        original_text=suggestion["original_text"],
                        suggested_text=suggestion["suggested_text"],
                        description=suggestion["description"],
                        is_resolved=False,
                        user_id=ctx.user_id,
                    )
                    for suggestion in suggestions
                ],
            )
            await ctx.db.commit()

        logger.info("Added %d suggestion(s) to document %s", len(suggestions), document_id)
        return {
            "id": document_id,
            "title": document.title,
            "kind": document.kind,
            "message": "Suggestions have been added to the document",
            "count": len(suggestions),
        }
