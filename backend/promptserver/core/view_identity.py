"""View Identity — who viewed a prompt, and the keys used to de-duplicate those views.

Invariants:
    - Viewer precedence: authenticated user > anonymous id > IP address
    - Duplication keys are stable strings: view:<kind>:<id>:prompt:<prompt_id>
    - IP keys replace every character outside [A-Za-z0-9.-] with "_" (IPv6 colons included)
    - view_count_key/extract_prompt_id are inverses; malformed keys raise

Design Decisions:
    - Same key format for Redis and DB-backed deduplicators (ADR: backends are swappable)
"""

import re
from dataclasses import dataclass

from promptserver.core.domain_types import ViewerType
from promptserver.core.errors import InvalidCommandError

VIEW_DUPLICATION_PREFIX = "view:"
VIEW_COUNT_PREFIX = "viewcount:"
_UNSAFE_IP_CHARS = re.compile(r"[^a-zA-Z0-9.-]")


@dataclass(frozen=True)
class ViewIdentifier:
    prompt_id: int
    ip_address: str
    user_id: int | None = None
    anonymous_id: str | None = None

    def __post_init__(self):
        if self.prompt_id is None:
            raise InvalidCommandError("Prompt id is required", "prompt_id")
        if not self.ip_address or not self.ip_address.strip():
            raise InvalidCommandError("IP address must not be blank", "ip_address")

    @property
    def viewer_type(self) -> ViewerType:
        if self.user_id is not None:
            return ViewerType.AUTHENTICATED_USER
        if self.anonymous_id and self.anonymous_id.strip():
            return ViewerType.ANONYMOUS_USER
        return ViewerType.IP_BASED_USER

    @property
    def user_identifier(self) -> str:
        viewer = self.viewer_type
        if viewer == ViewerType.AUTHENTICATED_USER:
            return f"user:{self.user_id}"
        if viewer == ViewerType.ANONYMOUS_USER:
            return f"anon:{self.anonymous_id}"
        return f"ip:{self.ip_address}"


def safe_ip(ip_address: str) -> str:
    return _UNSAFE_IP_CHARS.sub("_", ip_address)


def duplication_key(identifier: ViewIdentifier) -> str:
    """Key under which a view by this viewer is remembered for the dedup window."""
    viewer = identifier.viewer_type
    pid = identifier.prompt_id
    if viewer == ViewerType.AUTHENTICATED_USER:
        return f"{VIEW_DUPLICATION_PREFIX}user:{identifier.user_id}:prompt:{pid}"
    if viewer == ViewerType.ANONYMOUS_USER:
        return f"{VIEW_DUPLICATION_PREFIX}anon:{identifier.anonymous_id}:prompt:{pid}"
    return f"{VIEW_DUPLICATION_PREFIX}ip:{safe_ip(identifier.ip_address)}:prompt:{pid}"


def view_count_key(prompt_id: int) -> str:
    return f"{VIEW_COUNT_PREFIX}{prompt_id}"


def extract_prompt_id(key: str) -> int:
    """Inverse of view_count_key."""
    if not key or not key.startswith(VIEW_COUNT_PREFIX):
        raise InvalidCommandError(f"Not a view count key: {key!r}", "key")
    raw = key[len(VIEW_COUNT_PREFIX):]
    if not raw.isdigit():
        raise InvalidCommandError(f"Not a view count key: {key!r}", "key")
    return int(raw)
