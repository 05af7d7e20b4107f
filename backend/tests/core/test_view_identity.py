"""View Identity — verifies viewer precedence and duplication key formats.

Tests:
    - user id > anonymous id > IP address
    - IP keys are sanitized (IPv6 colons become underscores)
    - view count keys parse back to prompt ids; malformed keys raise
"""

import pytest

from promptserver.core.domain_types import ViewerType
from promptserver.core.errors import InvalidCommandError
from promptserver.core.view_identity import (
    ViewIdentifier, duplication_key, safe_ip, view_count_key, extract_prompt_id,
)


def test_authenticated_user_takes_precedence():
    ident = ViewIdentifier(prompt_id=9, ip_address="1.2.3.4", user_id=5, anonymous_id="a")
    assert ident.viewer_type == ViewerType.AUTHENTICATED_USER
    assert ident.user_identifier == "user:5"
    assert duplication_key(ident) == "view:user:5:prompt:9"


def test_anonymous_id_used_without_user():
    ident = ViewIdentifier(prompt_id=9, ip_address="1.2.3.4", anonymous_id="abc")
    assert ident.viewer_type == ViewerType.ANONYMOUS_USER
    assert duplication_key(ident) == "view:anon:abc:prompt:9"


def test_ip_fallback_key_is_sanitized():
    ident = ViewIdentifier(prompt_id=9, ip_address="2001:db8::1")
    assert ident.viewer_type == ViewerType.IP_BASED_USER
    assert ident.user_identifier == "ip:2001:db8::1"
    assert duplication_key(ident) == "view:ip:2001_db8__1:prompt:9"


def test_safe_ip_keeps_dots_and_dashes():
    assert safe_ip("10.0.0.1") == "10.0.0.1"
    assert safe_ip("host-1 x") == "host-1_x"


def test_blank_ip_rejected():
    with pytest.raises(InvalidCommandError):
        ViewIdentifier(prompt_id=1, ip_address="  ")


def test_view_count_key_round_trip():
    assert view_count_key(42) == "viewcount:42"
    assert extract_prompt_id("viewcount:42") == 42


@pytest.mark.parametrize("key", ["", "views:42", "viewcount:", "viewcount:4x"])
def test_extract_prompt_id_rejects_malformed_keys(key):
    with pytest.raises(InvalidCommandError):
        extract_prompt_id(key)
