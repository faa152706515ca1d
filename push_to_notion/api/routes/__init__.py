"""API routes."""

from push_to_notion.api.routes import health, slack

__all__ = ["health", "slack"]
