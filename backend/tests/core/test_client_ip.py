"""Client IP Extraction — header precedence and fallbacks."""

from promptserver.api.client_ip import extract_client_ip, LOCALHOST_IPV4


def test_forwarded_for_uses_first_entry():
    headers = {"x-forwarded-for": "203.0.113.7, 10.0.0.1"}
    assert extract_client_ip(headers, "10.0.0.9") == "203.0.113.7"


def test_unknown_and_loopback_values_skipped():
    headers = {"x-forwarded-for": "unknown", "x-real-ip": "127.0.0.1", "proxy-client-ip": "198.51.100.2"}
    assert extract_client_ip(headers, None) == "198.51.100.2"


def test_falls_back_to_remote_address():
    assert extract_client_ip({}, "192.0.2.10") == "192.0.2.10"


def test_falls_back_to_localhost():
    assert extract_client_ip({}, None) == LOCALHOST_IPV4
    assert extract_client_ip({}, "::1") == LOCALHOST_IPV4
