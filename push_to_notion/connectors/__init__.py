"""Clients for the upstream Slack and Notion APIs."""
