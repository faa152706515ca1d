"""
Form Builder

Builds the "Push to Notion" modal. Pure construction: no network calls.
"""

from __future__ import annotations

from typing import Any

from push_to_notion.kernel.text import one_line, truncate
from push_to_notion.workflow.context import InteractionContext

MODAL_CALLBACK_ID = "push_to_notion_modal"

DATABASE_BLOCK_ID = "db_block"
DATABASE_ACTION_ID = "db_select"
PARENT_BLOCK_ID = "parent_block"
PARENT_ACTION_ID = "parent_select"
TITLE_BLOCK_ID = "title_block"
TITLE_ACTION_ID = "title_input"
NOTES_BLOCK_ID = "notes_block"
NOTES_ACTION_ID = "notes_input"

DEFAULT_TITLE_PLACEHOLDER = "New Task from Slack"
TITLE_MAX_LENGTH = 80
OPTION_LABEL_MAX_LENGTH = 75
# Slack limit for plain_text_input initial values
INPUT_MAX_LENGTH = 3000


def default_title(message_text: str | None) -> str:
    """Title pre-filled from the message: one line, at most 80 characters."""
    title = one_line(message_text or "")
    if not title:
        return DEFAULT_TITLE_PLACEHOLDER
    return truncate(title, TITLE_MAX_LENGTH)


def _plain_text(text: str) -> dict[str, Any]:
    return {"type": "plain_text", "text": text}


def build_form(
    *,
    message_text: str = "",
    channel_id: str | None = None,
    message_ts: str | None = None,
    selected_database_id: str | None = None,
    selected_database_label: str | None = None,
    context: InteractionContext | None = None,
) -> dict[str, Any]:
    """Build the modal view.

    Pass `context` to re-render an in-flight form; otherwise a new context is
    created from the message arguments.
    """
    if context is None:
        context = InteractionContext(
            channel_id=channel_id,
            message_ts=message_ts,
            message_text=message_text or "",
            selected_database_id=selected_database_id,
        )

    database_element: dict[str, Any] = {
        "type": "external_select",
        "action_id": DATABASE_ACTION_ID,
        "min_query_length": 0,
        "placeholder": _plain_text("Search a Notion database..."),
    }
    if context.selected_database_id:
        database_element["initial_option"] = {
            "text": _plain_text(truncate(selected_database_label or "Selected database", OPTION_LABEL_MAX_LENGTH)),
            "value": context.selected_database_id,
        }

    return {
        "type": "modal",
        "callback_id": MODAL_CALLBACK_ID,
        "private_metadata": context.encode(),
        "title": _plain_text("Push to Notion"),
        "submit": _plain_text("Create"),
        "close": _plain_text("Cancel"),
        "blocks": [
            {
                "type": "input",
                "block_id": DATABASE_BLOCK_ID,
                "dispatch_action": True,
                "label": _plain_text("Database"),
                "element": database_element,
            },
            {
                "type": "input",
                "optional": True,
                "block_id": PARENT_BLOCK_ID,
                "label": _plain_text("Parent task (optional)"),
                "element": {
                    "type": "external_select",
                    "action_id": PARENT_ACTION_ID,
                    "min_query_length": 0,
                    "placeholder": _plain_text("Search a parent task (after selecting DB)"),
                },
            },
            {
                "type": "input",
                "block_id": TITLE_BLOCK_ID,
                "label": _plain_text("Title"),
                "element": {
                    "type": "plain_text_input",
                    "action_id": TITLE_ACTION_ID,
                    "initial_value": default_title(context.message_text),
                },
            },
            {
                "type": "input",
                "optional": True,
                "block_id": NOTES_BLOCK_ID,
                "label": _plain_text("Notes / Description"),
                "element": {
                    "type": "plain_text_input",
                    "action_id": NOTES_ACTION_ID,
                    "multiline": True,
                    "initial_value": context.message_text[:INPUT_MAX_LENGTH],
                },
            },
        ],
    }


def build_failure_view(message: str) -> dict[str, Any]:
    """Non-submittable modal that replaces the form after a failed operation."""
    return {
        "type": "modal",
        "title": _plain_text("Push to Notion"),
        "close": _plain_text("Close"),
        "blocks": [
            {
                "type": "section",
                "text": {"type": "mrkdwn", "text": f":warning: {message}"},
            }
        ],
    }
