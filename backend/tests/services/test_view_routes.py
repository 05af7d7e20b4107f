"""View Routes — view recording, de-duplication and counts.

Invariants:
    - Logged-in viewers are keyed by user id, guests by anonymous_id (body or cookie)
    - A guest without anonymous_id → 400
    - The same viewer is counted once inside the de-duplication window
    - Views on deleted or unknown prompts → 404
"""

from uuid import uuid4

from sqlalchemy import select

from promptserver.models.prompt_view import PromptViewLog


async def test_logged_in_view_counted_once(client, other_headers, prompt):
    url = f"/api/v1/prompts/{prompt['uuid']}/view"
    first = await client.post(url, headers=other_headers)
    assert first.status_code == 200
    assert first.json() == {
        "prompt_uuid": prompt["uuid"], "total_view_count": 1, "counted": True,
    }

    second = await client.post(url, headers=other_headers)
    assert second.json()["counted"] is False
    assert second.json()["total_view_count"] == 1


async def test_guest_view_with_body_anonymous_id(client, prompt):
    url = f"/api/v1/prompts/{prompt['uuid']}/view"
    res = await client.post(url, json={"anonymous_id": "guest-1"})
    assert res.json()["counted"] is True
    res = await client.post(url, json={"anonymous_id": "guest-2"})
    assert res.json()["total_view_count"] == 2


async def test_guest_view_with_cookie(client, prompt, test_db):
    url = f"/api/v1/prompts/{prompt['uuid']}/view"
    res = await client.post(url, headers={"Cookie": "anonymous_id=cookie-guest"})
    assert res.json()["counted"] is True
    row = await test_db.scalar(select(PromptViewLog))
    assert row.anonymous_id == "cookie-guest"
    assert row.viewer_key.startswith("view:anon:cookie-guest:prompt:")


async def test_guest_without_anonymous_id_returns_400(client, prompt):
    res = await client.post(f"/api/v1/prompts/{prompt['uuid']}/view")
    assert res.status_code == 400
    assert res.json()["error"]["message"] == "Either userId or anonymousId must be provided"


async def test_view_count_endpoint(client, other_headers, prompt):
    await client.post(f"/api/v1/prompts/{prompt['uuid']}/view", headers=other_headers)
    res = await client.get(f"/api/v1/prompts/{prompt['uuid']}/view-count")
    assert res.json() == {"prompt_uuid": prompt["uuid"], "total_view_count": 1}


async def test_view_count_shown_in_detail(client, other_headers, prompt):
    await client.post(f"/api/v1/prompts/{prompt['uuid']}/view", headers=other_headers)
    detail = (await client.get(f"/api/v1/prompts/{prompt['uuid']}")).json()
    assert detail["stats"]["view_count"] == 1


async def test_view_on_unknown_prompt_returns_404(client, other_headers):
    res = await client.post(f"/api/v1/prompts/{uuid4()}/view", headers=other_headers)
    assert res.status_code == 404


async def test_view_on_deleted_prompt_returns_404(client, auth_headers, other_headers, prompt):
    await client.delete(f"/api/v1/prompts/{prompt['uuid']}", headers=auth_headers)
    res = await client.post(f"/api/v1/prompts/{prompt['uuid']}/view", headers=other_headers)
    assert res.status_code == 404
