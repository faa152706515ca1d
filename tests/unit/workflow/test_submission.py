"""
Unit tests for the submission handler.

Covers validation, schema-driven property mapping, the fatal/best-effort
split between creation and augmentation, and partial success.
"""

import asyncio

import httpx
import pytest

from push_to_notion.kernel.errors import NotionAPIError, UpstreamError
from push_to_notion.workflow.context import InteractionContext
from push_to_notion.workflow.models import FormState
from push_to_notion.workflow.submission import (
    DEFAULT_RECORD_TITLE,
    GENERIC_FAILURE_MESSAGE,
    MISSING_DATABASE_MESSAGE,
    PERMALINK_LABEL,
    SubmissionHandler,
    resolve_database_id,
)

pytestmark = pytest.mark.unit

PERMALINK = "https://acme.slack.com/archives/C123ABC/p1704067200000001"


@pytest.fixture
def context():
    return InteractionContext(
        channel_id="C123ABC",
        message_ts="1704067200.000001",
        message_text="Fix login bug",
    )


@pytest.fixture
def handler(mock_notion, mock_platform):
    return SubmissionHandler(mock_notion, mock_platform)


def _text(block):
    return "".join(item["text"]["content"] for item in block["paragraph"]["rich_text"])


# =============================================================================
# Validation
# =============================================================================


class TestValidation:
    def test_form_selection_wins_over_context(self):
        form = FormState(database_id="db-form")
        context = InteractionContext(selected_database_id="db-context")

        assert resolve_database_id(form, context) == "db-form"

    def test_context_selection_is_fallback(self):
        context = InteractionContext(selected_database_id="db-context")

        assert resolve_database_id(FormState(), context) == "db-context"

    @pytest.mark.asyncio
    async def test_missing_database_is_a_field_error(self, handler, mock_notion, context):
        outcome = await handler.submit(FormState(title="Fix login bug"), context)

        assert outcome.status == "invalid"
        assert outcome.field_errors == {"db_block": MISSING_DATABASE_MESSAGE}
        mock_notion.get_schema.assert_not_awaited()
        mock_notion.create_record.assert_not_awaited()


# =============================================================================
# Creation
# =============================================================================


class TestSubmit:
    @pytest.mark.asyncio
    async def test_creates_record_with_title_and_parent(self, handler, mock_notion, context, database_id):
        form = FormState(database_id=database_id, parent_id="page-parent", title="Fix login bug")

        outcome = await handler.submit(form, context)

        assert outcome.created
        assert outcome.record_id == "page_created_123"
        mock_notion.create_record.assert_awaited_once_with(
            database_id,
            {
                "Task name": {"title": [{"type": "text", "text": {"content": "Fix login bug"}}]},
                "Parent": {"relation": [{"id": "page-parent"}]},
            },
        )

    @pytest.mark.asyncio
    async def test_blank_title_becomes_default(self, handler, mock_notion, context, database_id):
        await handler.submit(FormState(database_id=database_id, title="   "), context)

        properties = mock_notion.create_record.await_args.args[1]
        assert properties == {
            "Task name": {"title": [{"type": "text", "text": {"content": DEFAULT_RECORD_TITLE}}]},
        }

    @pytest.mark.asyncio
    async def test_parent_dropped_without_self_relation(
        self, handler, mock_notion, notes_schema, context, database_id
    ):
        mock_notion.get_schema.return_value = notes_schema
        form = FormState(database_id=database_id, parent_id="page-parent", title="Fix login bug")

        outcome = await handler.submit(form, context)

        assert outcome.created
        properties = mock_notion.create_record.await_args.args[1]
        assert list(properties) == ["Name"]

    @pytest.mark.asyncio
    async def test_no_parent_selected(self, handler, mock_notion, context, database_id):
        await handler.submit(FormState(database_id=database_id, title="Fix login bug"), context)

        properties = mock_notion.create_record.await_args.args[1]
        assert "Parent" not in properties

    @pytest.mark.asyncio
    async def test_schema_without_title_fails(self, handler, mock_notion, context, database_id):
        mock_notion.get_schema.return_value = {"Status": {"type": "status"}}

        outcome = await handler.submit(FormState(database_id=database_id, title="x"), context)

        assert outcome.status == "failed"
        assert outcome.message == GENERIC_FAILURE_MESSAGE
        mock_notion.create_record.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_schema_lookup_error_fails(self, handler, mock_notion, context, database_id):
        mock_notion.get_schema.side_effect = httpx.ConnectTimeout("timed out")

        outcome = await handler.submit(FormState(database_id=database_id, title="x"), context)

        assert outcome.status == "failed"

    @pytest.mark.asyncio
    async def test_context_selection_is_used_when_form_has_none(self, handler, mock_notion, database_id):
        context = InteractionContext(channel_id="C1", message_ts="1.2", selected_database_id=database_id)

        outcome = await handler.submit(FormState(title="Fix login bug"), context)

        assert outcome.created
        assert mock_notion.create_record.await_args.args[0] == database_id

    @pytest.mark.asyncio
    async def test_slow_schema_lookup_fails_within_budget(self, mock_notion, mock_platform, context, database_id):
        async def stall(*args, **kwargs):
            await asyncio.sleep(30)

        mock_notion.get_schema.side_effect = stall
        handler = SubmissionHandler(mock_notion, mock_platform, schema_timeout=0.05)

        outcome = await handler.submit(FormState(database_id=database_id, title="x"), context)

        assert outcome.status == "failed"
        assert outcome.message == GENERIC_FAILURE_MESSAGE
        mock_notion.create_record.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_create_error_fails(self, handler, mock_notion, context, database_id):
        mock_notion.create_record.side_effect = NotionAPIError(
            status=400, notion_code="validation_error", message="bad property"
        )

        outcome = await handler.submit(FormState(database_id=database_id, title="x"), context)

        assert outcome.status == "failed"
        assert outcome.record_id is None


# =============================================================================
# Augmentation
# =============================================================================


class TestAugment:
    @pytest.mark.asyncio
    async def test_appends_notes_then_link(self, handler, mock_notion, mock_platform, context):
        result = await handler.augment("page_created_123", "Steps to reproduce", context)

        mock_platform.resolve_permalink.assert_awaited_once_with("C123ABC", "1704067200.000001")
        record_id, blocks = mock_notion.append_blocks.await_args.args
        assert record_id == "page_created_123"
        assert [_text(block) for block in blocks] == ["Steps to reproduce", PERMALINK_LABEL]
        assert blocks[1]["paragraph"]["rich_text"][0]["text"]["link"] == {"url": PERMALINK}
        assert result.complete
        assert result.blocks_appended == 2

    @pytest.mark.asyncio
    async def test_permalink_failure_keeps_notes(self, handler, mock_notion, mock_platform, context):
        mock_platform.resolve_permalink.side_effect = UpstreamError(code="slack.permalink_failed")

        result = await handler.augment("page_created_123", "Steps to reproduce", context)

        blocks = mock_notion.append_blocks.await_args.args[1]
        assert [_text(block) for block in blocks] == ["Steps to reproduce"]
        assert result.failures == ["permalink"]
        assert result.permalink == ""

    @pytest.mark.asyncio
    async def test_nothing_to_append(self, handler, mock_notion, mock_platform):
        result = await handler.augment("page_created_123", "  ", InteractionContext())

        mock_platform.resolve_permalink.assert_not_awaited()
        mock_notion.append_blocks.assert_not_awaited()
        assert result.complete
        assert result.blocks_appended == 0

    @pytest.mark.asyncio
    async def test_link_only(self, handler, mock_notion, context):
        await handler.augment("page_created_123", None, context)

        blocks = mock_notion.append_blocks.await_args.args[1]
        assert [_text(block) for block in blocks] == [PERMALINK_LABEL]

    @pytest.mark.asyncio
    async def test_append_failure_is_recorded(self, handler, mock_notion, context):
        mock_notion.append_blocks.side_effect = httpx.ReadTimeout("timed out")

        result = await handler.augment("page_created_123", "notes", context)

        assert result.failures == ["append_blocks"]
        assert result.blocks_appended == 0

    @pytest.mark.asyncio
    async def test_long_notes_are_split(self, handler, mock_notion):
        await handler.augment("page_created_123", "n" * 4500, InteractionContext())

        block = mock_notion.append_blocks.await_args.args[1][0]
        assert [len(item["text"]["content"]) for item in block["paragraph"]["rich_text"]] == [2000, 2000, 500]


# =============================================================================
# Full flow
# =============================================================================


class TestHandle:
    @pytest.mark.asyncio
    async def test_created_record_is_augmented(self, handler, mock_notion, context, database_id):
        form = FormState(database_id=database_id, title="Fix login bug", notes="details")

        outcome, augmentation = await handler.handle(form, context)

        assert outcome.created
        assert augmentation.record_id == "page_created_123"
        mock_notion.append_blocks.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_failed_record_is_not_augmented(self, handler, mock_notion, mock_platform, context):
        outcome, augmentation = await handler.handle(FormState(), context)

        assert outcome.status == "invalid"
        assert augmentation is None
        mock_platform.resolve_permalink.assert_not_awaited()
