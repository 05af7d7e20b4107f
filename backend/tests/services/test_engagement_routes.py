"""Engagement Routes — favorites and likes.

Invariants:
    - One favorite / like per (user, prompt): repeats → 409
    - Removing a missing favorite / like → 404
    - Responses carry the prompt's count after the change
    - like-status works anonymously; /liked is routed before /{prompt_uuid}
"""

from tests.services.api_helpers import create_prompt


# --- Favorites ---

async def test_add_favorite_returns_201_with_count(client, other_headers, prompt):
    res = await client.post(f"/api/v1/prompts/{prompt['uuid']}/favorite", headers=other_headers)
    assert res.status_code == 201
    assert res.json() == {
        "prompt_uuid": prompt["uuid"], "favorited": True, "favorite_count": 1,
    }


async def test_duplicate_favorite_returns_409(client, other_headers, prompt):
    url = f"/api/v1/prompts/{prompt['uuid']}/favorite"
    await client.post(url, headers=other_headers)
    res = await client.post(url, headers=other_headers)
    assert res.status_code == 409


async def test_remove_favorite(client, other_headers, prompt):
    url = f"/api/v1/prompts/{prompt['uuid']}/favorite"
    await client.post(url, headers=other_headers)
    res = await client.delete(url, headers=other_headers)
    assert res.status_code == 200
    assert res.json()["favorited"] is False
    assert res.json()["favorite_count"] == 0
    assert (await client.delete(url, headers=other_headers)).status_code == 404


async def test_favorite_reflected_in_detail(client, other_headers, prompt):
    await client.post(f"/api/v1/prompts/{prompt['uuid']}/favorite", headers=other_headers)
    detail = (await client.get(f"/api/v1/prompts/{prompt['uuid']}", headers=other_headers)).json()
    assert detail["is_favorite"] is True
    assert detail["stats"]["favorite_count"] == 1


async def test_cannot_favorite_hidden_prompt(client, auth_headers, other_headers, category):
    hidden = await create_prompt(client, auth_headers, category.id, visibility="PRIVATE")
    res = await client.post(f"/api/v1/prompts/{hidden['uuid']}/favorite", headers=other_headers)
    assert res.status_code == 404


async def test_favorite_requires_auth(client, prompt):
    res = await client.post(f"/api/v1/prompts/{prompt['uuid']}/favorite")
    assert res.status_code == 401


# --- Likes ---

async def test_like_and_status(client, other_headers, prompt):
    url = f"/api/v1/prompts/{prompt['uuid']}"
    res = await client.post(f"{url}/like", headers=other_headers)
    assert res.status_code == 200
    assert res.json()["liked"] is True
    assert res.json()["like_count"] == 1

    mine = (await client.get(f"{url}/like-status", headers=other_headers)).json()
    assert mine["liked"] is True
    anonymous = (await client.get(f"{url}/like-status")).json()
    assert anonymous == {"prompt_uuid": prompt["uuid"], "liked": False, "like_count": 1}


async def test_duplicate_like_returns_409(client, other_headers, prompt):
    url = f"/api/v1/prompts/{prompt['uuid']}/like"
    await client.post(url, headers=other_headers)
    res = await client.post(url, headers=other_headers)
    assert res.status_code == 409
    assert res.json()["error"]["code"] == "DUPLICATE_RESOURCE"


async def test_unlike(client, other_headers, prompt):
    url = f"/api/v1/prompts/{prompt['uuid']}/like"
    await client.post(url, headers=other_headers)
    res = await client.delete(url, headers=other_headers)
    assert res.json() == {"prompt_uuid": prompt["uuid"], "liked": False, "like_count": 0}
    assert (await client.delete(url, headers=other_headers)).status_code == 404


async def test_invalid_token_on_like_status_treated_as_anonymous(client, prompt):
    res = await client.get(
        f"/api/v1/prompts/{prompt['uuid']}/like-status",
        headers={"Authorization": "Bearer garbage"},
    )
    assert res.status_code == 200
    assert res.json()["liked"] is False


async def test_liked_prompts_newest_first(client, auth_headers, other_headers, category):
    first = await create_prompt(client, auth_headers, category.id, title="First")
    second = await create_prompt(client, auth_headers, category.id, title="Second")
    await client.post(f"/api/v1/prompts/{first['uuid']}/like", headers=other_headers)
    await client.post(f"/api/v1/prompts/{second['uuid']}/like", headers=other_headers)

    res = await client.get("/api/v1/prompts/liked", headers=other_headers)
    assert res.status_code == 200
    page = res.json()
    assert page["total_elements"] == 2
    assert [p["title"] for p in page["content"]] == ["Second", "First"]


async def test_liked_prompts_skip_deleted(client, auth_headers, other_headers, prompt):
    await client.post(f"/api/v1/prompts/{prompt['uuid']}/like", headers=other_headers)
    await client.delete(f"/api/v1/prompts/{prompt['uuid']}", headers=auth_headers)
    res = await client.get("/api/v1/prompts/liked", headers=other_headers)
    assert res.json()["total_elements"] == 0
