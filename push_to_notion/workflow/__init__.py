"""The push-to-Notion interaction: shortcut, form, typeahead and submission."""

from push_to_notion.workflow.context import InteractionContext
from push_to_notion.workflow.options import DatabaseSearch, ParentRecordSearch
from push_to_notion.workflow.schema import SchemaResolver
from push_to_notion.workflow.selection import DatabaseSelectionHandler
from push_to_notion.workflow.shortcut import ShortcutHandler
from push_to_notion.workflow.submission import SubmissionHandler

__all__ = [
    "DatabaseSearch",
    "DatabaseSelectionHandler",
    "InteractionContext",
    "ParentRecordSearch",
    "SchemaResolver",
    "ShortcutHandler",
    "SubmissionHandler",
]
