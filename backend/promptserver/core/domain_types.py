"""Domain Types — enums and field limits shared across the codebase.

Invariants:
    - Persisted enum values are the upper-case member names (stable across releases)
    - from_string() never raises: unknown or blank input falls back to the caller's default
    - Field limits live here only; schemas and commands import them

Design Decisions:
    - str Enums: serialize to JSON without custom encoders
"""

from enum import Enum


# ─── Field Limits ────────────────────────────────────────────────

TITLE_MAX_LENGTH = 200
DESCRIPTION_MAX_LENGTH = 1000
CONTENT_MAX_LENGTH = 20_000
TAG_NAME_MAX_LENGTH = 50
CATEGORY_NAME_MAX_LENGTH = 100
PASSWORD_MIN_LENGTH = 8
MAX_PAGE_SIZE = 100
DEFAULT_STATISTICS_LIMIT = 10
MAX_BATCH_PROMPTS = 100


# ─── Enums ───────────────────────────────────────────────────────

class _LenientEnum(str, Enum):
    """str Enum with a case-insensitive, non-raising parser."""

    @classmethod
    def from_string(cls, value: str | None, default=None):
        if value is None or not value.strip():
            return default
        try:
            return cls(value.strip().upper())
        except ValueError:
            return default


class Visibility(_LenientEnum):
    """Who may read a prompt template."""
    PUBLIC = "PUBLIC"
    TEAM = "TEAM"
    PRIVATE = "PRIVATE"


class PromptStatus(_LenientEnum):
    """Prompt template lifecycle — maps to DB `status` column."""
    DRAFT = "DRAFT"
    PUBLISHED = "PUBLISHED"
    ARCHIVED = "ARCHIVED"


class PromptVersionActionType(str, Enum):
    """Why a prompt version was created."""
    CREATE = "CREATE"
    EDIT = "EDIT"
    PUBLISH = "PUBLISH"
    ARCHIVE = "ARCHIVE"


class PromptSortType(_LenientEnum):
    """Listing order for prompt searches."""
    LATEST_MODIFIED = "LATEST_MODIFIED"
    TITLE = "TITLE"


class FavoriteSortField(_LenientEnum):
    """Listing order for a user's favorites."""
    CREATED_AT = "CREATED_AT"
    TITLE = "TITLE"


class SortOrder(_LenientEnum):
    ASC = "ASC"
    DESC = "DESC"


class LoginStatus(str, Enum):
    SUCCESS = "SUCCESS"
    FAILED = "FAILED"


class UserStatus(str, Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"


class TokenType(str, Enum):
    """JWT `type` claim — access tokens authorize requests, refresh tokens mint them."""
    ACCESS = "access"
    REFRESH = "refresh"


class ViewerType(str, Enum):
    """How a prompt viewer is identified, in priority order."""
    AUTHENTICATED_USER = "AUTHENTICATED_USER"
    ANONYMOUS_USER = "ANONYMOUS_USER"
    IP_BASED_USER = "IP_BASED_USER"
