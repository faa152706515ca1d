"""
Slack Platform

Outbound Slack Web API calls and inbound request verification.
"""

from push_to_notion.connectors.slack.client import SlackPlatform
from push_to_notion.connectors.slack.signature import verify_slack_signature

__all__ = ["SlackPlatform", "verify_slack_signature"]
