"""Commands & Queries — verifies construction-time validation and normalization.

Tests:
    - RecordViewCommand needs a user id or a non-blank anonymous id
    - Prompt commands strip titles, de-duplicate tags and reject blank content
    - Category commands reject self-parenting with CIRCULAR_REFERENCE
    - Paged queries enforce page/size bounds; statistics queries enforce start <= end
    - Statistics periods fill missing dates from today; batch queries cap and de-duplicate ids
"""

from datetime import date
from uuid import uuid4

import pytest

from promptserver.core.commands import (
    RecordViewCommand, RegisterPromptCommand, UpdatePromptCommand,
    DeletePromptCommand, CreateCategoryCommand, UpdateCategoryCommand,
    SignUpCommand, LoginCommand, PromptSearchQuery, MyPromptSearchQuery,
    FavoriteSearchQuery, ViewStatisticsQuery, StatisticsPeriod, PromptViewBatchQuery,
)
from promptserver.core.domain_types import (
    PromptStatus, PromptSortType, Visibility, DEFAULT_STATISTICS_LIMIT,
    CATEGORY_NAME_MAX_LENGTH, MAX_BATCH_PROMPTS,
)
from promptserver.core.errors import InvalidCommandError
from promptserver.core.prompt_rules import InputVariable


def _register(**overrides) -> RegisterPromptCommand:
    fields = dict(
        title="Summarizer", description="Summarizes text",
        content="Summarize: {{text}}", author_id=1, category_id=1,
    )
    fields.update(overrides)
    return RegisterPromptCommand(**fields)


# --- RecordViewCommand ---

def test_record_view_for_user_is_logged_in():
    cmd = RecordViewCommand.for_user(uuid4(), 7, "10.0.0.1")
    assert cmd.is_logged_in_user
    assert not cmd.is_anonymous_user


def test_record_view_for_guest_is_anonymous():
    cmd = RecordViewCommand.for_guest(uuid4(), "anon-123", "10.0.0.1")
    assert cmd.is_anonymous_user
    assert not cmd.is_logged_in_user


def test_record_view_requires_user_or_anonymous_id():
    with pytest.raises(InvalidCommandError) as exc:
        RecordViewCommand(prompt_uuid=uuid4(), ip_address="10.0.0.1")
    assert exc.value.message == "Either userId or anonymousId must be provided"
    assert exc.value.http_status == 400


def test_record_view_rejects_blank_anonymous_id():
    with pytest.raises(InvalidCommandError):
        RecordViewCommand.for_guest(uuid4(), "   ", "10.0.0.1")


def test_record_view_rejects_blank_ip():
    with pytest.raises(InvalidCommandError):
        RecordViewCommand.for_user(uuid4(), 1, " ")


def test_record_view_user_wins_over_anonymous_id():
    cmd = RecordViewCommand(
        prompt_uuid=uuid4(), ip_address="10.0.0.1", user_id=3, anonymous_id="anon",
    )
    assert cmd.is_logged_in_user
    assert not cmd.is_anonymous_user


# --- Prompt commands ---

def test_register_strips_title_and_normalizes_tags():
    cmd = _register(title="  Summarizer  ", tags=(" nlp", "nlp", "", "text "))
    assert cmd.title == "Summarizer"
    assert cmd.tags == ("nlp", "text")


def test_register_rejects_blank_description():
    with pytest.raises(InvalidCommandError) as exc:
        _register(description="  ")
    assert exc.value.field == "description"


def test_register_rejects_blank_content():
    with pytest.raises(InvalidCommandError):
        _register(content="\n\t")


def test_register_rejects_non_positive_category():
    with pytest.raises(InvalidCommandError):
        _register(category_id=0)


def test_register_rejects_duplicate_variable_names():
    with pytest.raises(InvalidCommandError):
        _register(input_variables=(InputVariable("text"), InputVariable("text")))


def test_register_keeps_raw_visibility_and_status():
    cmd = _register(visibility="public", status="bogus")
    assert cmd.visibility == "public"
    assert cmd.status == "bogus"


def test_update_requires_enum_visibility_and_status():
    with pytest.raises(InvalidCommandError):
        UpdatePromptCommand(
            prompt_uuid=uuid4(), editor_id=1, title="t", content="c",
            category_id=1, visibility="PUBLIC", status=PromptStatus.DRAFT,
        )


def test_update_allows_missing_description():
    cmd = UpdatePromptCommand(
        prompt_uuid=uuid4(), editor_id=1, title="t", content="c",
        category_id=1, visibility=Visibility.PRIVATE, status=PromptStatus.DRAFT,
    )
    assert cmd.description is None


def test_delete_requires_user():
    with pytest.raises(InvalidCommandError):
        DeletePromptCommand(prompt_uuid=uuid4(), user_id=None)


# --- Category commands ---

def test_create_category_strips_names():
    cmd = CreateCategoryCommand(name=" ai ", display_name=" AI ")
    assert cmd.name == "ai"
    assert cmd.display_name == "AI"


def test_create_category_rejects_blank_name():
    with pytest.raises(InvalidCommandError):
        CreateCategoryCommand(name="", display_name="AI")


def test_create_category_rejects_overlong_name():
    with pytest.raises(InvalidCommandError) as exc:
        CreateCategoryCommand(name="x" * (CATEGORY_NAME_MAX_LENGTH + 1), display_name="AI")
    assert exc.value.field == "name"


def test_update_category_rejects_self_parent():
    with pytest.raises(InvalidCommandError) as exc:
        UpdateCategoryCommand(category_id=4, display_name="AI", parent_category_id=4)
    assert exc.value.code == "CIRCULAR_REFERENCE"


# --- Auth commands ---

def test_sign_up_lowercases_email():
    cmd = SignUpCommand(email="Dev@Example.COM", password="abcd123!", name=" Dev ")
    assert cmd.email == "dev@example.com"
    assert cmd.name == "Dev"


def test_sign_up_rejects_weak_password():
    with pytest.raises(InvalidCommandError) as exc:
        SignUpCommand(email="dev@example.com", password="abcdefgh", name="Dev")
    assert exc.value.field == "password"


def test_login_rejects_empty_password():
    with pytest.raises(InvalidCommandError):
        LoginCommand(email="dev@example.com", password="")


# --- Queries ---

def test_search_query_defaults():
    query = PromptSearchQuery()
    assert query.status == PromptStatus.PUBLISHED
    assert query.sort_type == PromptSortType.LATEST_MODIFIED
    assert (query.page, query.size) == (0, 20)


@pytest.mark.parametrize("page,size", [(-1, 20), (0, 0), (0, 101)])
def test_paged_queries_reject_bad_paging(page, size):
    with pytest.raises(InvalidCommandError):
        PromptSearchQuery(page=page, size=size)
    with pytest.raises(InvalidCommandError):
        MyPromptSearchQuery(user_id=1, page=page, size=size)
    with pytest.raises(InvalidCommandError):
        FavoriteSearchQuery(user_id=1, page=page, size=size)


def test_statistics_query_rejects_inverted_period():
    with pytest.raises(InvalidCommandError):
        ViewStatisticsQuery(start=date(2026, 3, 10), end=date(2026, 3, 1))


def test_statistics_query_non_positive_limit_falls_back():
    query = ViewStatisticsQuery(start=date(2026, 3, 1), end=date(2026, 3, 1), limit=0)
    assert query.limit == DEFAULT_STATISTICS_LIMIT


# --- StatisticsPeriod / PromptViewBatchQuery ---

def test_period_resolve_fills_missing_dates():
    today = date(2026, 3, 14)
    assert StatisticsPeriod.resolve(None, None, today, 7) == StatisticsPeriod(
        date(2026, 3, 8), today,
    )
    period = StatisticsPeriod.resolve(None, date(2026, 2, 28), today, 30)
    assert period.start == date(2026, 1, 30)
    assert StatisticsPeriod.resolve(date(2026, 3, 1), None, today, 7).end == today


def test_period_resolve_rejects_start_after_today():
    with pytest.raises(InvalidCommandError):
        StatisticsPeriod.resolve(date(2026, 4, 1), None, date(2026, 3, 14), 7)


def test_batch_query_deduplicates_in_order():
    first, second = uuid4(), uuid4()
    query = PromptViewBatchQuery(prompt_uuids=(first, second, first))
    assert query.prompt_uuids == (first, second)
    assert query.period is None


def test_batch_query_limits():
    with pytest.raises(InvalidCommandError) as exc:
        PromptViewBatchQuery(prompt_uuids=())
    assert exc.value.field == "prompt_ids"
    with pytest.raises(InvalidCommandError):
        PromptViewBatchQuery(prompt_uuids=tuple(uuid4() for _ in range(MAX_BATCH_PROMPTS + 1)))


def test_batch_query_period_is_all_or_nothing():
    ids = (uuid4(),)
    with pytest.raises(InvalidCommandError):
        PromptViewBatchQuery(prompt_uuids=ids, start=date(2026, 3, 1))
    with pytest.raises(InvalidCommandError):
        PromptViewBatchQuery(prompt_uuids=ids, start=date(2026, 3, 9), end=date(2026, 3, 1))
    query = PromptViewBatchQuery(prompt_uuids=ids, start=date(2026, 3, 1), end=date(2026, 3, 9))
    assert query.period == StatisticsPeriod(date(2026, 3, 1), date(2026, 3, 9))
