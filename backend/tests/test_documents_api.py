"""Tests for document versions and suggestions."""

from datetime import timedelta
from uuid import uuid4

from app.api.deps import create_access_token
from app.db import queries
from app.db.models import Document, Suggestion
from app.tools import default_registry


async def save_version(client, headers, document_id, content, title="Notes"):
    response = await client.post(
        f"/api/document?id={document_id}",
        json={"title": title, "content": content, "kind": "text"},
        headers=headers,
    )
    assert response.status_code == 201
    return response.json()


async def test_versions_are_listed_oldest_first(client, auth_headers):
    document_id = uuid4()
    await save_version(client, auth_headers, document_id, "v1")
    await save_version(client, auth_headers, document_id, "v2")

    response = await client.get(f"/api/document?id={document_id}", headers=auth_headers)

    assert response.status_code == 200
    assert [d["content"] for d in response.json()] == ["v1", "v2"]


async def test_unknown_document_is_404(client, auth_headers):
    response = await client.get(f"/api/document?id={uuid4()}", headers=auth_headers)

    assert response.status_code == 404


async def test_other_user_cannot_save_version(client, auth_headers, other_user):
    document_id = uuid4()
    await save_version(client, auth_headers, document_id, "mine")

    headers = {"Authorization": f"Bearer {create_access_token(other_user.id)}"}
    response = await client.post(
        f"/api/document?id={document_id}",
        json={"title": "Notes", "content": "theirs"},
        headers=headers,
    )

    assert response.status_code == 403


async def test_delete_versions_after_timestamp(client, auth_headers):
    document_id = uuid4()
    first = await save_version(client, auth_headers, document_id, "v1")
    await save_version(client, auth_headers, document_id, "v2")
    await save_version(client, auth_headers, document_id, "v3")

    response = await client.patch(
        f"/api/document?id={document_id}",
        json={"timestamp": first["created_at"]},
        headers=auth_headers,
    )
    assert response.status_code == 204

    versions = (await client.get(f"/api/document?id={document_id}", headers=auth_headers)).json()
    assert [d["content"] for d in versions] == ["v1"]


async def test_suggestions_for_document(client, auth_headers, db, user, other_user, make_context, gateway):
    ctx = make_context(user_id=user.id)
    registry = default_registry()
    created = await registry.execute("create_document", {"title": "Essay", "kind": "text"}, ctx)
    gateway.elements = [
        {"original_sentence": "Hello world", "suggested_sentence": "Hello, world", "description": "Comma"}
    ]
    await registry.execute("request_suggestions", {"document_id": created["id"]}, ctx)

    response = await client.get(f"/api/suggestions?document_id={created['id']}", headers=auth_headers)
    assert response.status_code == 200
    suggestions = response.json()
    assert [s["suggested_text"] for s in suggestions] == ["Hello, world"]

    headers = {"Authorization": f"Bearer {create_access_token(other_user.id)}"}
    response = await client.get(f"/api/suggestions?document_id={created['id']}", headers=headers)
    assert response.status_code == 401


async def test_no_suggestions_is_empty_list(client, auth_headers):
    response = await client.get(f"/api/suggestions?document_id={uuid4()}", headers=auth_headers)

    assert response.status_code == 200
    assert response.json() == []


async def test_dropped_versions_take_their_suggestions(db, user, session_factory):
    document_id = uuid4()
    first = await queries.save_document(
        db, document_id=document_id, title="Notes", kind="text", content="v1", user_id=user.id
    )
    second = Document(
        id=document_id,
        created_at=first.created_at + timedelta(seconds=1),
        title="Notes",
        kind="text",
        content="v2",
        user_id=user.id,
    )
    db.add(second)
    db.add(
        Suggestion(
            document_id=document_id,
            document_created_at=second.created_at,
            original_text="v2",
            suggested_text="v2!",
            user_id=user.id,
        )
    )
    await db.commit()
    cutoff = first.created_at

    async with session_factory() as session:
        # Rows loaded from the database sit in the session during the delete
        await queries.get_documents_by_id(session, document_id)
        await queries.delete_documents_by_id_after_timestamp(session, document_id, cutoff)
        await session.commit()

        versions = await queries.get_documents_by_id(session, document_id)
        suggestions = await queries.get_suggestions_by_document_id(session, document_id)

    assert [version.content for version in versions] == ["v1"]
    assert suggestions == []
