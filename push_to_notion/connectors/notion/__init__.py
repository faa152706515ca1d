"""
Notion Client

Reads database schemas and rows, creates pages and appends blocks.
"""

from push_to_notion.connectors.notion.client import NotionClient, NotionPageSummary, NotionSearchResult

__all__ = ["NotionClient", "NotionPageSummary", "NotionSearchResult"]
