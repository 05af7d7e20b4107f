"""Prompt Rules — pure validation and derivation rules for prompt templates and versions.

Invariants:
    - Title: non-blank, <= 200 chars. Content: non-blank, <= 20000 chars.
    - Description may be None but never exceeds 1000 chars
    - Input variable names are non-blank and unique within one version
    - Tag names are trimmed, de-duplicated (first occurrence wins) and <= 50 chars
    - Unknown visibility falls back to TEAM for team members, PRIVATE otherwise
    - Unknown status falls back to DRAFT

Design Decisions:
    - Functions raise InvalidCommandError directly: commands call them in __post_init__
      so an invalid command can never be constructed
    - Visibility check is a pure predicate over ids (ADR: routes and services share one rule)
"""

from dataclasses import dataclass

from promptserver.core.domain_types import (
    Visibility, PromptStatus, PromptVersionActionType,
    TITLE_MAX_LENGTH, DESCRIPTION_MAX_LENGTH, CONTENT_MAX_LENGTH,
    TAG_NAME_MAX_LENGTH,
)
from promptserver.core.errors import InvalidCommandError


# ─── Field rules ─────────────────────────────────────────────────

def validate_title(title: str | None) -> str:
    """Return the stripped title or raise."""
    if title is None or not title.strip():
        raise InvalidCommandError("Title must not be blank", "title")
    title = title.strip()
    if len(title) > TITLE_MAX_LENGTH:
        raise InvalidCommandError(
            f"Title must be at most {TITLE_MAX_LENGTH} characters", "title",
        )
    return title


def validate_description(description: str | None) -> str | None:
    if description is None:
        return None
    if len(description) > DESCRIPTION_MAX_LENGTH:
        raise InvalidCommandError(
            f"Description must be at most {DESCRIPTION_MAX_LENGTH} characters",
            "description",
        )
    return description


def validate_content(content: str | None) -> str:
    """Content is stored verbatim; only blank and oversize input is rejected."""
    if content is None or not content.strip():
        raise InvalidCommandError("Content must not be blank", "content")
    if len(content) > CONTENT_MAX_LENGTH:
        raise InvalidCommandError(
            f"Content must be at most {CONTENT_MAX_LENGTH} characters", "content",
        )
    return content


# ─── Input variables ─────────────────────────────────────────────

@dataclass(frozen=True)
class InputVariable:
    """Placeholder declared by a prompt version (e.g. {{language}})."""
    name: str
    type: str = "string"
    description: str | None = None
    required: bool = False
    default_value: str | None = None

    def to_schema(self) -> dict:
        """Schema fragment for this variable, keyed by the caller under `name`."""
        return {
            "type": self.type,
            "description": self.description,
            "required": self.required,
            "defaultValue": self.default_value,
        }

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "type": self.type,
            "description": self.description,
            "required": self.required,
            "default_value": self.default_value,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "InputVariable":
        return cls(
            name=data.get("name", ""),
            type=data.get("type") or "string",
            description=data.get("description"),
            required=bool(data.get("required", False)),
            default_value=data.get("default_value"),
        )


def validate_input_variables(
    variables: list[InputVariable] | tuple[InputVariable, ...] | None,
) -> tuple[InputVariable, ...]:
    """Reject blank or repeated variable names. Order is preserved."""
    if not variables:
        return ()
    seen: set[str] = set()
    for var in variables:
        if not var.name or not var.name.strip():
            raise InvalidCommandError(
                "Input variable name must not be blank", "input_variables",
            )
        if var.name in seen:
            raise InvalidCommandError(
                f"Duplicate input variable name: {var.name}", "input_variables",
            )
        seen.add(var.name)
    return tuple(variables)


def input_variables_schema(variables: tuple[InputVariable, ...]) -> dict:
    """Map of variable name -> schema fragment."""
    return {var.name: var.to_schema() for var in variables}


# ─── Tags ────────────────────────────────────────────────────────

def normalize_tag_names(names: list[str] | tuple[str, ...] | None) -> tuple[str, ...]:
    """Strip, drop blanks and de-duplicate tag names, keeping first-seen order."""
    if not names:
        return ()
    result: list[str] = []
    for raw in names:
        if raw is None:
            continue
        name = raw.strip()
        if not name or name in result:
            continue
        if len(name) > TAG_NAME_MAX_LENGTH:
            raise InvalidCommandError(
                f"Tag name must be at most {TAG_NAME_MAX_LENGTH} characters", "tags",
            )
        result.append(name)
    return tuple(result)


# ─── Visibility & status ─────────────────────────────────────────

def parse_visibility(value: str | None, has_team: bool) -> Visibility:
    """Parse visibility; team members default to TEAM, everyone else to PRIVATE."""
    default = Visibility.TEAM if has_team else Visibility.PRIVATE
    return Visibility.from_string(value, default)


def parse_status(value: str | None) -> PromptStatus:
    return PromptStatus.from_string(value, PromptStatus.DRAFT)


def resolve_version_action(
    previous: PromptStatus, current: PromptStatus,
) -> PromptVersionActionType:
    """Action recorded on a new version, derived from the status transition."""
    if current != previous and current == PromptStatus.PUBLISHED:
        return PromptVersionActionType.PUBLISH
    if current != previous and current == PromptStatus.ARCHIVED:
        return PromptVersionActionType.ARCHIVE
    return PromptVersionActionType.EDIT


def can_view_prompt(
    visibility: Visibility,
    owner_id: int,
    owner_team_id: int | None,
    viewer_id: int | None,
    viewer_team_id: int | None,
) -> bool:
    """PUBLIC: everyone. PRIVATE: owner only. TEAM: owner and same-team members."""
    if visibility == Visibility.PUBLIC:
        return True
    if viewer_id is None:
        return False
    if viewer_id == owner_id:
        return True
    if visibility == Visibility.TEAM:
        return owner_team_id is not None and owner_team_id == viewer_team_id
    return False
