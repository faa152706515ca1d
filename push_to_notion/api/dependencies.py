"""FastAPI dependencies wiring settings into the upstream clients."""

from fastapi import Depends

from push_to_notion.config import Settings, get_settings
from push_to_notion.connectors.notion.client import NotionClient
from push_to_notion.connectors.slack.client import SlackPlatform


def get_notion_client(settings: Settings = Depends(get_settings)) -> NotionClient:
    return NotionClient.from_settings(settings)


def get_slack_platform(settings: Settings = Depends(get_settings)) -> SlackPlatform:
    return SlackPlatform.from_settings(settings)
