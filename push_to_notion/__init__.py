"""Push to Notion: file Slack messages as pages in Notion databases."""

__version__ = "0.1.0"
