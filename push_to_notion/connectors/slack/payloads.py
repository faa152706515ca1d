"""Parsing of Slack interactivity payloads into workflow values."""

from __future__ import annotations

from typing import Any

from push_to_notion.kernel.errors import ValidationError
from push_to_notion.workflow.form import (
    DATABASE_ACTION_ID,
    DATABASE_BLOCK_ID,
    NOTES_ACTION_ID,
    NOTES_BLOCK_ID,
    PARENT_ACTION_ID,
    PARENT_BLOCK_ID,
    TITLE_ACTION_ID,
    TITLE_BLOCK_ID,
)
from push_to_notion.workflow.models import FormState, ShortcutInvocation


def parse_shortcut(payload: dict[str, Any]) -> ShortcutInvocation:
    """Read a `message_action` payload. Without a trigger id no form can open."""
    trigger_id = payload.get("trigger_id")
    if not trigger_id:
        raise ValidationError(
            field_errors={"trigger_id": "missing"},
            message="Shortcut payload has no trigger_id",
        )

    message = payload.get("message") or {}
    channel = payload.get("channel")
    channel_id = channel.get("id") if isinstance(channel, dict) else channel

    return ShortcutInvocation(
        channel_id=channel_id,
        message_ts=message.get("ts") or payload.get("message_ts"),
        message_text=message.get("text") or "",
        trigger_id=trigger_id,
    )


def _element(values: dict[str, Any], block_id: str, action_id: str) -> dict[str, Any]:
    return (values.get(block_id) or {}).get(action_id) or {}


def _selected_value(element: dict[str, Any]) -> str | None:
    option = element.get("selected_option") or {}
    return option.get("value") or None


def parse_form_state(view: dict[str, Any]) -> FormState:
    """Read the submitted values out of `view.state.values`."""
    values = (view.get("state") or {}).get("values") or {}

    return FormState(
        database_id=_selected_value(_element(values, DATABASE_BLOCK_ID, DATABASE_ACTION_ID)),
        parent_id=_selected_value(_element(values, PARENT_BLOCK_ID, PARENT_ACTION_ID)),
        title=_element(values, TITLE_BLOCK_ID, TITLE_ACTION_ID).get("value"),
        notes=_element(values, NOTES_BLOCK_ID, NOTES_ACTION_ID).get("value"),
    )


def find_action(payload: dict[str, Any], action_id: str) -> dict[str, Any] | None:
    for action in payload.get("actions") or []:
        if action.get("action_id") == action_id:
            return action
    return None


def selected_option(action: dict[str, Any]) -> tuple[str | None, str | None]:
    """(value, label) of an action's selected option."""
    option = action.get("selected_option") or {}
    label = (option.get("text") or {}).get("text")
    return option.get("value") or None, label
