"""
Database Selection Handler

The parent selector reads the selected database from the in-flight
context, so picking a database re-renders the form with the selection
recorded in its private_metadata.
"""

from __future__ import annotations

import structlog

from push_to_notion.connectors.slack.client import SlackPlatform
from push_to_notion.kernel.errors import UpstreamError
from push_to_notion.workflow.context import InteractionContext
from push_to_notion.workflow.form import build_form

logger = structlog.get_logger()


class DatabaseSelectionHandler:
    def __init__(self, platform: SlackPlatform):
        self._platform = platform

    async def handle(
        self,
        *,
        view_id: str,
        view_hash: str | None,
        context: InteractionContext,
        database_id: str | None,
        database_label: str | None = None,
    ) -> InteractionContext:
        updated = context.with_selected_database(database_id)
        if updated == context:
            return context

        view = build_form(context=updated, selected_database_label=database_label)
        try:
            await self._platform.update_form(view_id, view, view_hash)
        except UpstreamError as e:
            # hash_conflict means a newer version of the view already exists
            logger.warning(
                "Form update after database selection failed",
                view_id=view_id,
                database_id=database_id,
                slack_error=e.meta.get("slack_error"),
            )
        return updated
