"""ORM Models — SQLAlchemy declarative models for all domain entities.

Invariants:
    - All models inherit from Base (db/base.py)
    - PromptTemplate is the aggregate root for versions, tags, favorites, likes and views

Design Decisions:
    - One file per entity for locality
    - All models imported here so SQLAlchemy resolves string-based relationship()
      references before any query runs (ADR: standard SQLAlchemy pattern)
"""

from promptserver.models.team import Team  # noqa: F401
from promptserver.models.user import User  # noqa: F401
from promptserver.models.login_history import LoginHistory  # noqa: F401
from promptserver.models.auth_token import RefreshToken, TokenBlacklist  # noqa: F401
from promptserver.models.category import Category  # noqa: F401
from promptserver.models.tag import Tag, prompt_template_tags  # noqa: F401
from promptserver.models.prompt_template import PromptTemplate  # noqa: F401
from promptserver.models.prompt_version import PromptVersion  # noqa: F401
from promptserver.models.favorite import Favorite  # noqa: F401
from promptserver.models.prompt_like import PromptLike  # noqa: F401
from promptserver.models.prompt_view import PromptViewLog, PromptViewCount  # noqa: F401
