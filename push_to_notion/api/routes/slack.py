"""
Slack Interactivity Router

Single endpoint for Slack interactivity requests: the message shortcut,
typeahead queries, database selection and modal submission. Slack expects
an answer within three seconds, so anything that is not needed for the
answer runs as a background task after the response is sent.
"""

import asyncio
import json
from typing import Any
from urllib.parse import parse_qs

import httpx
import structlog
from fastapi import APIRouter, BackgroundTasks, Depends, Header, Request, Response

from push_to_notion.api.dependencies import get_notion_client, get_slack_platform
from push_to_notion.config import Settings, get_settings
from push_to_notion.connectors.notion.client import NotionClient
from push_to_notion.connectors.slack.client import SlackPlatform
from push_to_notion.connectors.slack.payloads import (
    find_action,
    parse_form_state,
    parse_shortcut,
    selected_option,
)
from push_to_notion.connectors.slack.signature import verify_slack_signature
from push_to_notion.kernel.errors import InvalidSignatureError, PushToNotionError, ValidationError
from push_to_notion.workflow.context import InteractionContext
from push_to_notion.workflow.form import (
    DATABASE_ACTION_ID,
    MODAL_CALLBACK_ID,
    PARENT_ACTION_ID,
    build_failure_view,
)
from push_to_notion.workflow.models import FormState, Option, ShortcutInvocation
from push_to_notion.workflow.options import DatabaseSearch, ParentRecordSearch
from push_to_notion.workflow.selection import DatabaseSelectionHandler
from push_to_notion.workflow.shortcut import SHORTCUT_CALLBACK_ID, ShortcutHandler
from push_to_notion.workflow.submission import SubmissionHandler

logger = structlog.get_logger()

router = APIRouter(prefix="/slack", tags=["Slack"])


def _invalid_payload(reason: str, message: str) -> ValidationError:
    return ValidationError(field_errors={"payload": reason}, message=message)


def _decode_payload(body: bytes, content_type: str | None) -> dict[str, Any]:
    """Slack posts interactivity as a form field `payload` holding JSON."""
    if content_type and content_type.startswith("application/json"):
        raw = body.decode("utf-8", errors="replace")
    else:
        fields = parse_qs(body.decode("utf-8", errors="replace"))
        values = fields.get("payload")
        if not values:
            raise _invalid_payload("missing", "Missing interactivity payload")
        raw = values[0]

    try:
        payload = json.loads(raw)
    except ValueError as e:
        raise _invalid_payload("malformed", "Interactivity payload is not valid JSON") from e
    if not isinstance(payload, dict):
        raise _invalid_payload("malformed", "Interactivity payload must be a JSON object")
    return payload


def _ack() -> Response:
    return Response(status_code=200)


@router.post("/events")
async def slack_events(
    request: Request,
    background_tasks: BackgroundTasks,
    x_slack_signature: str = Header(None, alias="X-Slack-Signature"),
    x_slack_request_timestamp: str = Header(None, alias="X-Slack-Request-Timestamp"),
    settings: Settings = Depends(get_settings),
    notion: NotionClient = Depends(get_notion_client),
    platform: SlackPlatform = Depends(get_slack_platform),
):
    """Receive Slack interactivity requests."""
    body = await request.body()

    if not verify_slack_signature(
        body,
        x_slack_signature,
        x_slack_request_timestamp,
        settings.slack_signing_secret,
    ):
        logger.warning("Invalid Slack signature")
        raise InvalidSignatureError()

    payload = _decode_payload(body, request.headers.get("content-type"))
    payload_type = payload.get("type")

    if payload_type == "url_verification":
        return {"challenge": payload.get("challenge")}

    logger.info(
        "Slack interaction received",
        interaction_type=payload_type,
        team_id=(payload.get("team") or {}).get("id"),
    )

    if payload_type == "message_action" and payload.get("callback_id") == SHORTCUT_CALLBACK_ID:
        background_tasks.add_task(_open_form, ShortcutHandler(platform), parse_shortcut(payload))
        return _ack()

    if payload_type == "block_suggestion":
        try:
            options = await asyncio.wait_for(
                _suggest(payload, notion, settings),
                timeout=settings.interactive_timeout_seconds,
            )
        except asyncio.TimeoutError:
            # Slack drops answers that arrive after its deadline
            logger.warning(
                "Option lookup timed out",
                action_id=payload.get("action_id"),
                timeout_seconds=settings.interactive_timeout_seconds,
            )
            options = []
        return {"options": [option.to_slack() for option in options]}

    if payload_type == "block_actions":
        action = find_action(payload, DATABASE_ACTION_ID)
        view = payload.get("view") or {}
        if action is not None and view.get("id"):
            database_id, label = selected_option(action)
            background_tasks.add_task(
                DatabaseSelectionHandler(platform).handle,
                view_id=view["id"],
                view_hash=view.get("hash"),
                context=InteractionContext.decode(view.get("private_metadata")),
                database_id=database_id,
                database_label=label,
            )
        return _ack()

    if payload_type == "view_submission":
        view = payload.get("view") or {}
        if view.get("callback_id") == MODAL_CALLBACK_ID:
            return await _submit(view, notion, platform, background_tasks, settings)

    return _ack()


async def _open_form(handler: ShortcutHandler, invocation: ShortcutInvocation) -> None:
    try:
        await handler.handle(invocation)
    except PushToNotionError as e:
        # Trigger ids are single use; the user has to run the shortcut again
        logger.error("Shortcut abandoned", code=e.code, error=e.message)


async def _suggest(
    payload: dict[str, Any],
    notion: NotionClient,
    settings: Settings,
) -> list[Option]:
    action_id = payload.get("action_id")
    query = payload.get("value")
    try:
        if action_id == DATABASE_ACTION_ID:
            return await DatabaseSearch(notion, settings.allowed_database_set).options(query)
        if action_id == PARENT_ACTION_ID:
            context = InteractionContext.decode((payload.get("view") or {}).get("private_metadata"))
            return await ParentRecordSearch(notion).options(query, context)
    except (PushToNotionError, httpx.HTTPError) as e:
        logger.warning("Option lookup failed", action_id=action_id, error=str(e))
        return []

    logger.debug("Unhandled block suggestion", action_id=action_id)
    return []


async def _submit(
    view: dict[str, Any],
    notion: NotionClient,
    platform: SlackPlatform,
    background_tasks: BackgroundTasks,
    settings: Settings,
):
    form: FormState = parse_form_state(view)
    context = InteractionContext.decode(view.get("private_metadata"))
    handler = SubmissionHandler(
        notion,
        platform,
        schema_timeout=settings.interactive_timeout_seconds,
    )

    outcome = await handler.submit(form, context)

    if outcome.status == "invalid":
        return {"response_action": "errors", "errors": outcome.field_errors}
    if outcome.status == "failed":
        return {"response_action": "update", "view": build_failure_view(outcome.message)}

    background_tasks.add_task(handler.augment, outcome.record_id, form.notes, context)
    return _ack()
