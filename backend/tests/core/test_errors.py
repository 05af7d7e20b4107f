"""Error Hierarchy — status codes, codes and the REST envelope."""

from promptserver.core.errors import (
    InvalidCommandError, AuthenticationError, PermissionDeniedError,
    ResourceNotFoundError, DuplicateResourceError, DatabaseError, ErrorCategory,
)


def test_http_status_per_error_type():
    assert InvalidCommandError("bad").http_status == 400
    assert AuthenticationError().http_status == 401
    assert PermissionDeniedError("no").http_status == 403
    assert ResourceNotFoundError("Prompt", "x").http_status == 404
    assert DuplicateResourceError("Like", "dup").http_status == 409
    assert DatabaseError("down", "execute").http_status == 503


def test_not_found_envelope_carries_resource():
    body = ResourceNotFoundError("Prompt", "abc").to_response()["error"]
    assert body["code"] == "RESOURCE_NOT_FOUND"
    assert body["category"] == ErrorCategory.RESOURCE_NOT_FOUND.value
    assert body["message"] == "Prompt 'abc' not found"
    assert body["context"]["resource_type"] == "Prompt"
    assert body["context"]["resource_id"] == "abc"
    assert body["timestamp"]


def test_invalid_command_envelope_carries_field():
    err = InvalidCommandError("Title must not be blank", "title")
    assert err.to_response()["error"]["context"]["field"] == "title"
    assert err.code == "INVALID_COMMAND"
