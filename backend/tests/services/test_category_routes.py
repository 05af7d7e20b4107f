"""Category Routes — CRUD, hierarchy listing and cycle protection.

Invariants:
    - Writes require authentication; reads are public
    - Duplicate names → 409; missing parent → 404
    - Self-parenting and cycles → 400 CIRCULAR_REFERENCE
    - Deleting a category detaches its prompts and children
"""

from sqlalchemy import select

from promptserver.models.category import Category
from promptserver.models.prompt_template import PromptTemplate
from promptserver.services.category_service import CategoryService, SYSTEM_CATEGORIES


async def _create(client, headers, name, parent=None):
    res = await client.post("/api/v1/categories", headers=headers, json={
        "name": name, "display_name": name.title(), "parent_category_id": parent,
    })
    assert res.status_code == 201, res.text
    return res.json()


# --- Create ---

async def test_create_requires_auth(client):
    res = await client.post("/api/v1/categories", json={"name": "ai", "display_name": "AI"})
    assert res.status_code == 401


async def test_create_and_get(client, auth_headers):
    created = await _create(client, auth_headers, "writing")
    assert created["is_system"] is False
    res = await client.get(f"/api/v1/categories/{created['id']}")
    assert res.status_code == 200
    assert res.json()["display_name"] == "Writing"


async def test_duplicate_name_returns_409(client, auth_headers):
    await _create(client, auth_headers, "writing")
    res = await client.post("/api/v1/categories", headers=auth_headers, json={
        "name": "writing", "display_name": "Again",
    })
    assert res.status_code == 409


async def test_missing_parent_returns_404(client, auth_headers):
    res = await client.post("/api/v1/categories", headers=auth_headers, json={
        "name": "orphan", "display_name": "Orphan", "parent_category_id": 999,
    })
    assert res.status_code == 404


# --- Hierarchy ---

async def test_roots_and_subcategories(client, auth_headers):
    root = await _create(client, auth_headers, "data")
    child = await _create(client, auth_headers, "ml", parent=root["id"])

    roots = (await client.get("/api/v1/categories/roots")).json()
    assert [c["id"] for c in roots] == [root["id"]]

    subs = (await client.get(f"/api/v1/categories/{root['id']}/subcategories")).json()
    assert [c["id"] for c in subs] == [child["id"]]

    everything = (await client.get("/api/v1/categories")).json()
    assert len(everything) == 2


async def test_subcategories_of_missing_category_returns_404(client):
    res = await client.get("/api/v1/categories/12345/subcategories")
    assert res.status_code == 404


# --- Update ---

async def test_update_changes_display_name(client, auth_headers):
    created = await _create(client, auth_headers, "writing")
    res = await client.put(f"/api/v1/categories/{created['id']}", headers=auth_headers, json={
        "display_name": "Creative Writing", "description": "Stories",
    })
    assert res.status_code == 200
    assert res.json()["display_name"] == "Creative Writing"


async def test_self_parent_rejected(client, auth_headers):
    created = await _create(client, auth_headers, "writing")
    res = await client.put(f"/api/v1/categories/{created['id']}", headers=auth_headers, json={
        "display_name": "Writing", "parent_category_id": created["id"],
    })
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "CIRCULAR_REFERENCE"


async def test_cycle_through_child_rejected(client, auth_headers):
    root = await _create(client, auth_headers, "data")
    child = await _create(client, auth_headers, "ml", parent=root["id"])
    res = await client.put(f"/api/v1/categories/{root['id']}", headers=auth_headers, json={
        "display_name": "Data", "parent_category_id": child["id"],
    })
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "CIRCULAR_REFERENCE"


# --- Delete ---

async def test_delete_detaches_prompts_and_children(
    client, auth_headers, category, prompt, test_db,
):
    res = await client.delete(f"/api/v1/categories/{category.id}", headers=auth_headers)
    assert res.status_code == 204

    assert (await client.get(f"/api/v1/categories/{category.id}")).status_code == 404
    template = await test_db.scalar(
        select(PromptTemplate).where(PromptTemplate.title == prompt["title"]),
    )
    assert template.category_id is None
    child = await test_db.scalar(
        select(Category)
        .where(Category.name == "backend")
        .execution_options(populate_existing=True),
    )
    assert child.parent_category_id is None


# --- Seeding ---

async def test_seed_system_categories_is_idempotent(test_db):
    service = CategoryService(test_db)
    expected = sum(1 + len(children) for *_, children in SYSTEM_CATEGORIES)
    assert await service.seed_system_categories() == expected
    assert await service.seed_system_categories() == 0

    roots = await service.list_roots()
    assert {c.name for c in roots} == {name for name, *_ in SYSTEM_CATEGORIES}
    assert all(c.is_system for c in roots)
