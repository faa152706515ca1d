"""
Submission Handler

Turns a submitted form into a Notion page.

Two phases:
- `submit` validates, resolves the database schema and creates the page.
  Only this phase can fail the operation.
- `augment` appends the notes and a link back to the Slack message. Every
  failure here is logged and recorded, never raised; the page already
  exists.
"""

from __future__ import annotations

import asyncio

import httpx
import structlog

from push_to_notion.connectors.notion.blocks import link_paragraph_block, paragraph_block
from push_to_notion.connectors.notion.client import NotionClient
from push_to_notion.connectors.slack.client import SlackPlatform
from push_to_notion.kernel.errors import PushToNotionError, SchemaError, ValidationError
from push_to_notion.workflow.context import InteractionContext
from push_to_notion.workflow.form import DATABASE_BLOCK_ID
from push_to_notion.workflow.models import (
    AugmentationResult,
    FormState,
    RecordCreationRequest,
    SubmissionOutcome,
)
from push_to_notion.workflow.schema import SchemaResolver

logger = structlog.get_logger()

DEFAULT_RECORD_TITLE = "New Task"
MISSING_DATABASE_MESSAGE = "Please select a Notion database."
GENERIC_FAILURE_MESSAGE = "Something went wrong while creating the Notion page. Please try again."
PERMALINK_LABEL = "🔗 View original Slack message"


def resolve_database_id(form: FormState, context: InteractionContext) -> str:
    """The form's selection wins; the context's selection is the fallback."""
    database_id = form.database_id or context.selected_database_id
    if not database_id:
        raise ValidationError(field_errors={DATABASE_BLOCK_ID: MISSING_DATABASE_MESSAGE})
    return database_id


class SubmissionHandler:
    def __init__(
        self,
        notion: NotionClient,
        platform: SlackPlatform,
        resolver: SchemaResolver | None = None,
        *,
        schema_timeout: float | None = None,
    ):
        self._notion = notion
        self._platform = platform
        self._resolver = resolver or SchemaResolver(notion)
        # None waits as long as the client does
        self._schema_timeout = schema_timeout

    async def submit(self, form: FormState, context: InteractionContext) -> SubmissionOutcome:
        try:
            database_id = resolve_database_id(form, context)
        except ValidationError as e:
            return SubmissionOutcome(status="invalid", field_errors=e.field_errors)

        title = (form.title or "").strip() or DEFAULT_RECORD_TITLE
        parent_id = form.parent_id or None

        try:
            schema = await asyncio.wait_for(
                self._resolver.resolve(database_id),
                timeout=self._schema_timeout,
            )
        except SchemaError as e:
            logger.error("Database has no title property", database_id=database_id, error=e.message)
            return SubmissionOutcome(status="failed", message=GENERIC_FAILURE_MESSAGE)
        except asyncio.TimeoutError:
            logger.error(
                "Schema lookup timed out",
                database_id=database_id,
                timeout_seconds=self._schema_timeout,
            )
            return SubmissionOutcome(status="failed", message=GENERIC_FAILURE_MESSAGE)
        except (PushToNotionError, httpx.HTTPError) as e:
            logger.error("Schema lookup failed", database_id=database_id, error=str(e))
            return SubmissionOutcome(status="failed", message=GENERIC_FAILURE_MESSAGE)

        request = RecordCreationRequest.for_schema(schema, title=title, parent_id=parent_id)
        if parent_id and not request.links_parent:
            logger.info(
                "Parent selected but database has no self relation; creating without it",
                database_id=database_id,
                parent_id=parent_id,
            )

        try:
            record_id = await self._notion.create_record(request.database_id, request.properties())
        except (PushToNotionError, httpx.HTTPError) as e:
            logger.error(
                "Notion page creation failed",
                database_id=database_id,
                channel_id=context.channel_id,
                message_ts=context.message_ts,
                error=str(e),
            )
            return SubmissionOutcome(status="failed", message=GENERIC_FAILURE_MESSAGE)

        logger.info(
            "Pushed Slack message to Notion",
            database_id=database_id,
            page_id=record_id,
            linked_parent=request.links_parent,
        )
        return SubmissionOutcome(status="created", record_id=record_id)

    async def augment(
        self,
        record_id: str,
        notes: str | None,
        context: InteractionContext,
    ) -> AugmentationResult:
        result = AugmentationResult(record_id=record_id)

        if context.channel_id and context.message_ts:
            try:
                result.permalink = await self._platform.resolve_permalink(
                    context.channel_id, context.message_ts
                )
            except Exception as e:
                logger.warning(
                    "Permalink lookup failed; continuing without link",
                    channel_id=context.channel_id,
                    message_ts=context.message_ts,
                    error=str(e),
                )
                result.failures.append("permalink")

        children = []
        notes = (notes or "").strip()
        if notes:
            children.append(paragraph_block(notes))
        if result.permalink:
            children.append(link_paragraph_block(PERMALINK_LABEL, result.permalink))

        if not children:
            return result

        try:
            await self._notion.append_blocks(record_id, children)
            result.blocks_appended = len(children)
        except Exception as e:
            logger.warning("Appending blocks failed", page_id=record_id, error=str(e))
            result.failures.append("append_blocks")

        return result

    async def handle(
        self,
        form: FormState,
        context: InteractionContext,
    ) -> tuple[SubmissionOutcome, AugmentationResult | None]:
        outcome = await self.submit(form, context)
        if not outcome.created:
            return outcome, None
        augmentation = await self.augment(outcome.record_id, form.notes, context)
        return outcome, augmentation
