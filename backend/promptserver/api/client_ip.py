"""Client IP Extraction — resolve the caller's address behind proxies.

Invariants:
    - Forwarding headers are checked in a fixed order; X-Forwarded-For uses its first entry
    - "unknown" and loopback values are skipped
    - Falls back to the socket peer, then 127.0.0.1 (never returns an empty string)
"""

import logging
from typing import Mapping

logger = logging.getLogger(__name__)

IP_HEADER_CANDIDATES = (
    "x-forwarded-for",
    "x-real-ip",
    "proxy-client-ip",
    "wl-proxy-client-ip",
    "http_x_forwarded_for",
    "http_client_ip",
)
LOCALHOST_IPV4 = "127.0.0.1"
_LOOPBACK = {LOCALHOST_IPV4, "::1", "0:0:0:0:0:0:0:1"}


def _usable(value: str | None) -> bool:
    return bool(value and value.strip()) and value.strip().lower() != "unknown" \
        and value.strip() not in _LOOPBACK


def extract_client_ip(headers: Mapping[str, str], remote_addr: str | None) -> str:
    for header in IP_HEADER_CANDIDATES:
        value = headers.get(header)
        if value and header == "x-forwarded-for":
            value = value.split(",")[0]
        if _usable(value):
            return value.strip()
    if _usable(remote_addr):
        return remote_addr.strip()
    logger.debug("Unable to determine client IP, using localhost")
    return LOCALHOST_IPV4
