"""Boundary Protocols — contracts between core and shell.

Invariants:
    - Core NEVER imports from shell — dependency arrows point inward only
    - Implementations provided by shell via dependency injection

Design Decisions:
    - Protocol over ABC: structural subtyping, no inheritance hierarchy
    - Async in Protocol: implementations do IO (Redis, DB); pure rules never await
"""

from typing import Protocol

from promptserver.core.view_identity import ViewIdentifier


class ViewDeduplicator(Protocol):
    """Decides whether a view is new within the deduplication window."""
    async def register_view(self, identifier: ViewIdentifier) -> bool: ...
