"""
Shortcut Handler

Entry point of the workflow: turns a message shortcut into an open form.
"""

from __future__ import annotations

import structlog

from push_to_notion.connectors.slack.client import SlackPlatform
from push_to_notion.workflow.form import build_form
from push_to_notion.workflow.models import ShortcutInvocation

logger = structlog.get_logger()

SHORTCUT_CALLBACK_ID = "push_to_notion"


class ShortcutHandler:
    def __init__(self, platform: SlackPlatform):
        self._platform = platform

    async def handle(self, invocation: ShortcutInvocation) -> None:
        """Open the form. An expired trigger fails here and is not retried."""
        view = build_form(
            message_text=invocation.message_text,
            channel_id=invocation.channel_id,
            message_ts=invocation.message_ts,
        )
        logger.info(
            "Opening push-to-Notion form",
            channel_id=invocation.channel_id,
            message_ts=invocation.message_ts,
        )
        await self._platform.open_form(invocation.trigger_id, view)
