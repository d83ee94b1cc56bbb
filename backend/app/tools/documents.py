"""
Artifact tools: create and update text, code and image documents.

Each generation is bounded by ``clear`` ... ``finish`` on the data stream and
its deltas are streamed into the client panel as they arrive. The tool
result only confirms the operation; the content itself travels on the stream.
"""

import logging
from typing import Literal
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from app.db import queries
from app.services import prompts
from app.streaming.data_stream import artifact_generation
from app.streaming.protocol import DataType
from app.tools.base import Tool, ToolContext

logger = logging.getLogger(__name__)

DOCUMENT_NOT_FOUND = {"error": "Document not found"}


class CodeOutput(BaseModel):
    code: str


async def generate_content(ctx: ToolContext, *, kind: str, system: str, prompt: str) -> str:
    """Stream one generation of ``kind`` into the panel and return the final content."""
    draft = ""

    if kind == "text":
        async for delta in ctx.gateway.stream_text(model=ctx.model, system=system, prompt=prompt):
            draft += delta
            ctx.writer.write_data(DataType.TEXT_DELTA, delta)

    elif kind == "code":
        async for snapshot in ctx.gateway.stream_object(
            model=ctx.model, system=system, prompt=prompt, schema=CodeOutput
        ):
            code = snapshot.get("code")
            if code:
                ctx.writer.write_data(DataType.CODE_DELTA, code)
                draft = code

    elif kind == "image":
        draft = await ctx.gateway.generate_image(prompt=prompt)
        ctx.writer.write_data(DataType.IMAGE_DELTA, draft)

    return draft


def _parse_document_id(value: str) -> UUID | None:
    try:
        return UUID(value)
    except ValueError:
        return None


class CreateDocumentArgs(BaseModel):
    title: str
    kind: Literal["text", "code", "image"]


class CreateDocumentTool(Tool):
    name = "create_document"
    description = (
        "Create a document for writing or content creation activities like image "
        "generation. The content is generated from the title and kind."
    )
    parameters = CreateDocumentArgs

    async def execute(self, args: CreateDocumentArgs, ctx: ToolContext) -> dict:
        document_id = uuid4()
        ctx.writer.write_data(DataType.ID, str(document_id))
        ctx.writer.write_data(DataType.TITLE, args.title)
        ctx.writer.write_data(DataType.KIND, args.kind)

        system = (
            prompts.CODE_DOCUMENT_PROMPT if args.kind == "code" else prompts.TEXT_DOCUMENT_PROMPT
        )
        async with artifact_generation(ctx.writer):
            content = await generate_content(ctx, kind=args.kind, system=system, prompt=args.title)

        if ctx.user_id is not None:
            await queries.save_document(
                ctx.db,
                document_id=document_id,
                title=args.title,
                kind=args.kind,
                content=content,
                user_id=ctx.user_id,
            )
            await ctx.db.commit()

        logger.info("Created %s document %s", args.kind, document_id)
        return {
            "id": document_id,
            "title": args.title,
            "kind": args.kind,
            "content": "A document was created and is now visible to the user.",
        }


class UpdateDocumentArgs(BaseModel):
    id: str = Field(..., description="The ID of the document to update")
    description: str = Field(..., description="The description of changes that need to be made")


class UpdateDocumentTool(Tool):
    name = "update_document"
    description = "Update a document with the given description."
    parameters = UpdateDocumentArgs

    async def execute(self, args: UpdateDocumentArgs, ctx: ToolContext) -> dict:
        document_id = _parse_document_id(args.id)
        document = await queries.get_document_by_id(ctx.db, document_id) if document_id else None
        if document is None:
            return DOCUMENT_NOT_FOUND

        title, kind = document.title, document.kind
        async with artifact_generation(ctx.writer, clear_content=title):
            content = await generate_content(
                ctx,
                kind=kind,
                system=prompts.update_document_prompt(document.content, kind),
                prompt=args.description,
            )

        if ctx.user_id is not None:
            await queries.save_document(
                ctx.db,
                document_id=document_id,
                title=title,
                kind=kind,
                content=content,
                user_id=ctx.user_id,
            )
            await ctx.db.commit()

        return {
            "id": document_id,
            "title": title,
            "kind": kind,
            "content": "The document has been updated successfully.",
        }
