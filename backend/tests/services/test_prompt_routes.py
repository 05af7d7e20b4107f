"""Prompt Routes — register, read, update, versions and delete.

Invariants:
    - Register creates version 1 (CREATE, "Initial version") with tags and variables
    - Update appends a version only when content, variables or status change
    - Only the author may update or delete (403); deleted prompts answer 404
    - PRIVATE prompts are invisible (404) to anyone but the author
"""

from uuid import uuid4

from tests.services.api_helpers import create_prompt


# --- Register ---

async def test_register_returns_version_one(client, prompt, category):
    assert prompt["version_number"] == 1
    assert prompt["category_id"] == category.id
    assert prompt["tags"] == ["review", "python"]
    assert [v["name"] for v in prompt["input_variables"]] == ["language", "code"]
    assert prompt["visibility"] == "PUBLIC"
    assert prompt["status"] == "PUBLISHED"


async def test_register_defaults_to_private_draft(client, auth_headers, category):
    created = await create_prompt(
        client, auth_headers, category.id, visibility=None, status="nonsense",
    )
    assert created["visibility"] == "PRIVATE"
    assert created["status"] == "DRAFT"


async def test_register_requires_auth(client, category):
    res = await client.post("/api/v1/prompts", json={
        "title": "t", "description": "d", "content": "c", "category_id": category.id,
    })
    assert res.status_code == 401


async def test_register_unknown_category_returns_404(client, auth_headers):
    res = await client.post("/api/v1/prompts", headers=auth_headers, json={
        "title": "t", "description": "d", "content": "c", "category_id": 999,
    })
    assert res.status_code == 404


async def test_register_duplicate_variable_names_returns_400(client, auth_headers, category):
    res = await client.post("/api/v1/prompts", headers=auth_headers, json={
        "title": "t", "description": "d", "content": "c", "category_id": category.id,
        "input_variables": [{"name": "x"}, {"name": "x"}],
    })
    assert res.status_code == 400


async def test_register_blank_title_returns_400(client, auth_headers, category):
    res = await client.post("/api/v1/prompts", headers=auth_headers, json={
        "title": "   ", "description": "d", "content": "c", "category_id": category.id,
    })
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "VALIDATION_ERROR"


# --- Read ---

async def test_detail_visible_to_anonymous_when_public(client, prompt):
    res = await client.get(f"/api/v1/prompts/{prompt['uuid']}")
    assert res.status_code == 200
    data = res.json()
    assert data["content"].startswith("Review the following")
    assert data["author"]["name"] == "Author"
    assert data["category"]["name"] == "development"
    assert data["stats"] == {"view_count": 0, "favorite_count": 0, "like_count": 0}
    assert data["is_favorite"] is False
    assert data["is_liked"] is False


async def test_private_prompt_hidden_from_others(
    client, auth_headers, other_headers, category,
):
    created = await create_prompt(client, auth_headers, category.id, visibility="PRIVATE")
    url = f"/api/v1/prompts/{created['uuid']}"
    assert (await client.get(url)).status_code == 404
    assert (await client.get(url, headers=other_headers)).status_code == 404
    assert (await client.get(url, headers=auth_headers)).status_code == 200


async def test_unknown_prompt_returns_404(client):
    res = await client.get(f"/api/v1/prompts/{uuid4()}")
    assert res.status_code == 404
    assert res.json()["error"]["code"] == "RESOURCE_NOT_FOUND"


async def test_malformed_uuid_returns_400(client):
    res = await client.get("/api/v1/prompts/not-a-uuid")
    assert res.status_code == 400


# --- Update & versions ---

def _update_body(prompt, **overrides):
    body = {
        "title": prompt["title"],
        "description": prompt["description"],
        "content": prompt["content"],
        "category_id": prompt["category_id"],
        "visibility": prompt["visibility"],
        "status": prompt["status"],
        "tags": prompt["tags"],
        "input_variables": prompt["input_variables"],
    }
    body.update(overrides)
    return body


async def test_content_change_appends_edit_version(client, auth_headers, prompt):
    res = await client.put(
        f"/api/v1/prompts/{prompt['uuid']}", headers=auth_headers,
        json=_update_body(prompt, content="Review this {{language}} diff:\n{{code}}"),
    )
    assert res.status_code == 200
    assert res.json()["version_number"] == 2

    versions = (await client.get(f"/api/v1/prompts/{prompt['uuid']}/versions")).json()
    assert [v["version_number"] for v in versions] == [2, 1]
    assert versions[0]["action_type"] == "EDIT"
    assert versions[1]["action_type"] == "CREATE"
    assert versions[1]["changes"] == "Initial version"


async def test_metadata_only_change_keeps_version(client, auth_headers, prompt):
    res = await client.put(
        f"/api/v1/prompts/{prompt['uuid']}", headers=auth_headers,
        json=_update_body(prompt, title="Renamed reviewer", tags=["review"]),
    )
    assert res.status_code == 200
    data = res.json()
    assert data["version_number"] == 1
    assert data["title"] == "Renamed reviewer"
    assert data["tags"] == ["review"]


async def test_status_change_records_archive_action(client, auth_headers, prompt):
    await client.put(
        f"/api/v1/prompts/{prompt['uuid']}", headers=auth_headers,
        json=_update_body(prompt, status="ARCHIVED"),
    )
    res = await client.get(f"/api/v1/prompts/{prompt['uuid']}/versions/2")
    assert res.status_code == 200
    assert res.json()["action_type"] == "ARCHIVE"


async def test_publish_from_draft_records_publish_action(client, auth_headers, category):
    draft = await create_prompt(client, auth_headers, category.id, status="DRAFT")
    await client.put(
        f"/api/v1/prompts/{draft['uuid']}", headers=auth_headers,
        json=_update_body(draft, status="PUBLISHED"),
    )
    res = await client.get(
        f"/api/v1/prompts/{draft['uuid']}/versions/2", headers=auth_headers,
    )
    assert res.json()["action_type"] == "PUBLISH"


async def test_unknown_version_returns_404(client, prompt):
    res = await client.get(f"/api/v1/prompts/{prompt['uuid']}/versions/7")
    assert res.status_code == 404


async def test_update_by_other_user_returns_403(client, other_headers, prompt):
    res = await client.put(
        f"/api/v1/prompts/{prompt['uuid']}", headers=other_headers,
        json=_update_body(prompt, title="Hijacked"),
    )
    assert res.status_code == 403
    assert res.json()["error"]["code"] == "PERMISSION_DENIED"


async def test_update_with_invalid_status_returns_400(client, auth_headers, prompt):
    res = await client.put(
        f"/api/v1/prompts/{prompt['uuid']}", headers=auth_headers,
        json=_update_body(prompt, status="LIVE"),
    )
    assert res.status_code == 400


# --- Delete ---

async def test_delete_hides_prompt(client, auth_headers, prompt):
    res = await client.delete(f"/api/v1/prompts/{prompt['uuid']}", headers=auth_headers)
    assert res.status_code == 200
    data = res.json()
    assert data["previous_status"] == "PUBLISHED"
    assert data["deleted_at"]

    assert (await client.get(f"/api/v1/prompts/{prompt['uuid']}")).status_code == 404
    res = await client.delete(f"/api/v1/prompts/{prompt['uuid']}", headers=auth_headers)
    assert res.status_code == 404


async def test_delete_by_other_user_returns_403(client, other_headers, prompt):
    res = await client.delete(f"/api/v1/prompts/{prompt['uuid']}", headers=other_headers)
    assert res.status_code == 403
