"""Prompt schemas — request validation and stored-variable mapping.

Invariants:
    - Create accepts free-form visibility/status strings
    - Update requires valid Visibility and PromptStatus values
    - Stored input variables map back to InputVariableSchema with defaults filled
"""

import pytest
from pydantic import ValidationError

from promptserver.core.domain_types import PromptStatus, Visibility
from promptserver.core.pagination import Page
from promptserver.schemas.common import PageResponse
from promptserver.schemas.prompt import (
    InputVariableSchema, PromptCreateRequest, PromptUpdateRequest,
)
from promptserver.schemas.view import RecordViewRequest


# --- PromptCreateRequest ------------------------------------------------------

def test_create_request_strips_title():
    req = PromptCreateRequest(
        title="  Title ", description=" Desc ", content="c", category_id=1,
        visibility="whatever",
    )
    assert req.title == "Title"
    assert req.description == "Desc"
    assert req.visibility == "whatever"


def test_create_request_rejects_whitespace_title():
    with pytest.raises(ValidationError):
        PromptCreateRequest(title="   ", description="d", content="c", category_id=1)


def test_create_request_rejects_oversized_content():
    with pytest.raises(ValidationError):
        PromptCreateRequest(title="t", description="d", content="x" * 20_001, category_id=1)


# --- PromptUpdateRequest ------------------------------------------------------

def test_update_request_parses_enums():
    req = PromptUpdateRequest(
        title="t", content="c", category_id=1, visibility="TEAM", status="ARCHIVED",
    )
    assert req.visibility == Visibility.TEAM
    assert req.status == PromptStatus.ARCHIVED


def test_update_request_rejects_unknown_status():
    with pytest.raises(ValidationError):
        PromptUpdateRequest(
            title="t", content="c", category_id=1, visibility="PUBLIC", status="LIVE",
        )


# --- Input variables ----------------------------------------------------------

def test_input_variable_from_stored_fills_defaults():
    schema = InputVariableSchema.from_stored({"name": "lang"})
    assert schema.type == "string"
    assert schema.required is False
    assert schema.to_domain().name == "lang"


# --- Misc ---------------------------------------------------------------------

def test_record_view_request_body_optional_fields():
    assert RecordViewRequest().anonymous_id is None


def test_page_response_from_page_converts_items():
    resp = PageResponse[int].from_page(Page([1, 2], 0, 2, 3), lambda x: x + 1)
    assert resp.content == [2, 3]
    assert resp.total_pages == 2
    assert resp.last is False
