"""Kernel utilities shared across the connectors, workflow and API layers.

Rules:
- Kernel code must not import from the API layer (FastAPI routes).
- Keep these helpers small and free of Slack/Notion business logic.
"""
