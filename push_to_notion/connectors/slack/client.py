"""
Slack Platform Client

Opens and updates modals and resolves message permalinks using the Slack SDK.
"""

from __future__ import annotations

import asyncio
from typing import Any

import aiohttp
import structlog
from slack_sdk.errors import SlackApiError
from slack_sdk.web.async_client import AsyncWebClient

from push_to_notion.config import Settings
from push_to_notion.kernel.errors import FormOpenError, UpstreamError

logger = structlog.get_logger()

# Raised by the aiohttp transport under AsyncWebClient before Slack answers
TRANSPORT_ERRORS = (aiohttp.ClientError, asyncio.TimeoutError)


def _slack_error(exc: SlackApiError) -> str | None:
    response = getattr(exc, "response", None)
    if response is None:
        return None
    try:
        return response["error"]
    except (KeyError, TypeError):
        return None


class SlackPlatform:
    """
    Chat platform operations used by the workflow.

    Option queries and submissions arrive as inbound payloads, so only the
    outbound calls live here.
    """

    def __init__(self, client: AsyncWebClient):
        self._client = client

    @classmethod
    def from_settings(cls, settings: Settings) -> "SlackPlatform":
        return cls(AsyncWebClient(token=settings.slack_bot_token))

    async def open_form(self, trigger_id: str, view: dict[str, Any]) -> None:
        """Open a modal. Trigger ids are single-use and expire in seconds."""
        try:
            await self._client.views_open(trigger_id=trigger_id, view=view)
        except SlackApiError as e:
            slack_error = _slack_error(e)
            logger.error("Slack views.open failed", slack_error=slack_error)
            raise FormOpenError(slack_error=slack_error) from e
        except TRANSPORT_ERRORS as e:
            logger.error("Slack views.open unreachable", error=repr(e))
            raise FormOpenError(slack_error=None, message="Could not reach Slack to open the form") from e

        logger.info("Slack form opened", callback_id=view.get("callback_id"))

    async def update_form(
        self,
        view_id: str,
        view: dict[str, Any],
        view_hash: str | None = None,
    ) -> None:
        kwargs: dict[str, Any] = {"view_id": view_id, "view": view}
        if view_hash:
            kwargs["hash"] = view_hash
        try:
            await self._client.views_update(**kwargs)
        except SlackApiError as e:
            slack_error = _slack_error(e)
            raise UpstreamError(
                message="Could not update the form",
                code="slack.form_update_failed",
                meta={"slack_error": slack_error},
            ) from e
        except TRANSPORT_ERRORS as e:
            raise UpstreamError(
                message="Could not reach Slack to update the form",
                code="slack.form_update_failed",
                meta={"slack_error": None},
            ) from e

    async def resolve_permalink(self, channel_id: str, message_ts: str) -> str:
        try:
            response = await self._client.chat_getPermalink(channel=channel_id, message_ts=message_ts)
        except SlackApiError as e:
            raise UpstreamError(
                message="Could not resolve message permalink",
                code="slack.permalink_failed",
                meta={"slack_error": _slack_error(e)},
            ) from e
        except TRANSPORT_ERRORS as e:
            raise UpstreamError(
                message="Could not reach Slack to resolve the permalink",
                code="slack.permalink_failed",
                meta={"slack_error": None},
            ) from e
        return response.get("permalink") or ""
